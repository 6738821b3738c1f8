"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    AvailabilityError,
    CalendarAPIError,
    InvalidRequest,
    ParticipantDataUnavailable,
    SearchCancelled,
)
from .models import (
    AvailabilityRequest,
    BusyInterval,
    CandidateSlot,
    ParticipantCalendar,
    TimeRange,
)
from .scheduling_engine import EngineSettings, SchedulingEngine
from .scoring import ConfidenceScorer, ScoringWeights

__all__ = [
    "AvailabilityError",
    "AvailabilityRequest",
    "BusyInterval",
    "CalendarAPIError",
    "CandidateSlot",
    "ConfidenceScorer",
    "EngineSettings",
    "InvalidRequest",
    "ParticipantCalendar",
    "ParticipantDataUnavailable",
    "SchedulingEngine",
    "ScoringWeights",
    "SearchCancelled",
    "TimeRange",
]
