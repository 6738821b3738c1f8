"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_finder import AvailabilityFinderService, CalendarClientProtocol

__all__ = ["AvailabilityFinderService", "CalendarClientProtocol"]
