"""
Adapters layer - External integrations (Microsoft Graph API).
"""

from .graph_client import GraphClient
from .mock_graph_client import MockGraphClient

__all__ = ["GraphClient", "MockGraphClient"]
