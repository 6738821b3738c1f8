"""
Application services for finding available time windows.

The service coordinates fetching busy times via a calendar client adapter and
delegates the actual availability calculation to the domain-level
``SchedulingEngine``. This keeps the CLI thin and improves testability by
allowing the calendar dependency to be mocked via a simple protocol.
"""

from __future__ import annotations

import inspect
import logging
from datetime import time
from typing import Awaitable, Dict, Iterable, List, Protocol, Sequence, Union

from pendulum import DateTime

from ..domain.exceptions import ParticipantDataUnavailable
from ..domain.models import (
    DEFAULT_DAYS_OF_WEEK,
    AvailabilityRequest,
    CandidateSlot,
    ParticipantCalendar,
    TimeRange,
)
from ..domain.scheduling_engine import CancellationSignal, SchedulingEngine

logger = logging.getLogger(__name__)

ScheduleResult = Dict[str, Union[List[TimeRange], ParticipantDataUnavailable]]


class CalendarClientProtocol(Protocol):
    """
    Protocol describing the calendar client behaviour needed by the service.

    Clients may be synchronous or asynchronous. For a participant whose data
    cannot be obtained the client returns a ``ParticipantDataUnavailable``
    instance instead of a busy list.
    """

    def get_schedule(
        self,
        emails: List[str],
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> Union[ScheduleResult, Awaitable[ScheduleResult]]:
        """Return busy time ranges per participant."""


class AvailabilityFinderService:
    """
    Orchestrates busy-time retrieval and the availability search.

    Dependency inversion toward a protocol makes it easy to plug in the real
    Microsoft Graph adapter or the mock implementation in tests.
    """

    def __init__(
        self,
        calendar_client: CalendarClientProtocol,
        engine: SchedulingEngine,
    ) -> None:
        self._calendar_client = calendar_client
        self._engine = engine

    async def find_availability(
        self,
        *,
        request: AvailabilityRequest,
        participants: Sequence[str],
        timezone: str,
        cancel: CancellationSignal | None = None,
    ) -> List[CandidateSlot]:
        """
        Retrieve busy data for the participants and search it.

        The request is validated before any calendar data is fetched.
        """
        self._engine.validate_request(request)

        calendars = await self.fetch_calendars(
            participants=participants,
            start_date=request.start_date,
            end_date=request.end_date,
            timezone=timezone,
        )

        return self._engine.find_availability(request, calendars, cancel=cancel)

    async def find_common_meeting_slots(
        self,
        *,
        participants: Sequence[str],
        duration_minutes: int,
        date_range: TimeRange,
        timezone: str,
        preferred_start: time = time(9, 0),
        preferred_end: time = time(17, 0),
        days_of_week: Iterable[int] = DEFAULT_DAYS_OF_WEEK,
    ) -> List[CandidateSlot]:
        """Single-day windows in which all participants are free."""
        request = self._engine.common_meeting_request(
            duration_minutes,
            date_range,
            preferred_start=preferred_start,
            preferred_end=preferred_end,
            days_of_week=days_of_week,
        )
        return await self.find_availability(
            request=request,
            participants=participants,
            timezone=timezone,
        )

    async def fetch_calendars(
        self,
        *,
        participants: Sequence[str],
        start_date: DateTime,
        end_date: DateTime,
        timezone: str,
    ) -> Dict[str, ParticipantCalendar]:
        """Fetch busy times for the requested participants."""
        participant_list = list(participants)

        schedule = self._calendar_client.get_schedule(
            emails=participant_list,
            start_time=start_date,
            end_time=end_date,
            timezone=timezone,
        )
        if inspect.isawaitable(schedule):
            schedule = await schedule

        return self._to_calendars(
            participant_list,
            schedule,
            TimeRange(start=start_date, end=end_date),
        )

    @staticmethod
    def _to_calendars(
        participants: Sequence[str],
        schedule: ScheduleResult,
        date_range: TimeRange,
    ) -> Dict[str, ParticipantCalendar]:
        """
        Build one calendar per requested participant.

        A participant missing from the response, or reported as unavailable,
        gets a calendar whose whole range is unknown. Unknown time blocks the
        search instead of silently counting as free.
        """
        calendars: Dict[str, ParticipantCalendar] = {}
        # Clients may report addresses in a different case than requested
        entries = {key.lower(): value for key, value in schedule.items()}

        for participant in participants:
            entry = entries.get(participant.lower())

            if entry is None:
                entry = ParticipantDataUnavailable(participant, "missing from calendar response")

            if isinstance(entry, ParticipantDataUnavailable):
                logger.warning("%s; treating the search range as busy", entry)
                calendars[participant] = ParticipantCalendar.unavailable(participant, date_range)
            else:
                calendars[participant] = ParticipantCalendar(
                    participant_id=participant,
                    busy_intervals=tuple(entry),
                )

        logger.info(
            "Fetched calendars for %d participant(s), %d with unknown availability",
            len(calendars),
            sum(1 for c in calendars.values() if c.has_unknown_data),
        )

        return calendars
