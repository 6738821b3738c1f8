"""
Domain-specific exception hierarchy for the availability finder.
"""


class AvailabilityError(Exception):
    """Base class for all application-level errors."""


class InvalidRequest(AvailabilityError):
    """Raised when an availability request violates its constraints."""


class ParticipantDataUnavailable(AvailabilityError):
    """
    Signals that busy data for a participant could not be obtained.

    Calendar clients return an instance of this error in place of a busy list
    so that unknown availability is never mistaken for a free calendar.
    """

    def __init__(self, participant_id: str, reason: str = "availability unknown"):
        super().__init__(f"Availability for '{participant_id}' is unknown: {reason}")
        self.participant_id = participant_id
        self.reason = reason


class SearchCancelled(AvailabilityError):
    """Raised when a caller cancels a running search."""


class CalendarAPIError(AvailabilityError):
    """Raised when calendar data cannot be fetched or parsed."""
