"""
Core business logic for finding available time windows.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import time
from typing import Iterable, List, Mapping, Protocol, Union

from .consecutive import ConsecutiveBlockAssembler
from .exceptions import InvalidRequest, SearchCancelled
from .free_windows import FreeWindowComputer
from .intersector import CombinedCalendar, MultiParticipantIntersector
from .models import (
    DEFAULT_DAYS_OF_WEEK,
    WEEKDAY_CODES,
    AvailabilityRequest,
    CandidateSlot,
    DayAvailability,
    ParticipantCalendar,
    TimeRange,
)
from .scoring import ConfidenceScorer, ScoringWeights

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class CancellationSignal(Protocol):
    """Anything with ``is_set()``, e.g. ``threading.Event`` or ``asyncio.Event``."""

    def is_set(self) -> bool:
        ...


Calendars = Union[Mapping[str, ParticipantCalendar], Iterable[ParticipantCalendar]]


@dataclass(frozen=True)
class EngineSettings:
    """Process-wide limits, set once at startup."""
    max_range_days: int = 366
    max_workers: int = 0  # 0 normalizes participants in the calling thread
    scoring: ScoringWeights = field(default_factory=ScoringWeights)


class SchedulingEngine:
    """
    Finds and ranks free time windows for one or more calendars.

    Algorithm:
    1. Validate the request
    2. Union the participants' busy times (single calendar: just normalize it)
    3. For each qualifying day, subtract busy time from the preferred window
    4. Assemble single-day or N-consecutive-day candidates
    5. Score candidates and sort by score, then by start

    The engine keeps no state between calls; identical inputs produce an
    identical ordered result.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        scorer: ConfidenceScorer | None = None
    ):
        self.settings = settings or EngineSettings()
        self.scorer = scorer or ConfidenceScorer(self.settings.scoring)

    def find_availability(
        self,
        request: AvailabilityRequest,
        calendars: Calendars,
        cancel: CancellationSignal | None = None
    ) -> List[CandidateSlot]:
        """
        Find all candidate slots matching the request.

        Args:
            request: Search constraints
            calendars: Participant calendars, as a mapping of participant id
                to calendar or as a plain sequence
            cancel: Optional signal checked between days

        Returns:
            Every candidate, best first. No truncation is applied.

        Raises:
            InvalidRequest: If the request or the calendar set is invalid
            SearchCancelled: If ``cancel`` is set while the search runs
        """
        calendar_list = _as_list(calendars)
        self.validate_request(request)

        if not calendar_list:
            raise InvalidRequest("At least one participant calendar is required")

        combined = self._combine(calendar_list)
        days = self._qualifying_days(request, combined, cancel)

        assembler = ConsecutiveBlockAssembler(
            consecutive_days_required=request.consecutive_days_required,
            participants=combined.participants,
        )
        assembled = assembler.assemble(days)

        slots: List[CandidateSlot] = []
        for candidate in assembled:
            candidate.slot.confidence_score = self.scorer.score_slot(
                candidate,
                requested_minutes=request.minimum_duration_minutes,
            )
            slots.append(candidate.slot)

        slots.sort(key=lambda s: (-s.confidence_score, s.start, s.end))

        logger.debug(
            "Found %d candidate slot(s) across %d qualifying day(s) for %d participant(s)",
            len(slots), len(days), len(calendar_list)
        )

        return slots

    def find_common_meeting_slots(
        self,
        calendars: Calendars,
        duration_minutes: int,
        date_range: TimeRange,
        *,
        preferred_start: time = time(9, 0),
        preferred_end: time = time(17, 0),
        days_of_week: Iterable[int] = DEFAULT_DAYS_OF_WEEK,
        cancel: CancellationSignal | None = None
    ) -> List[CandidateSlot]:
        """Find single-day windows in which every participant is free."""
        request = self.common_meeting_request(
            duration_minutes,
            date_range,
            preferred_start=preferred_start,
            preferred_end=preferred_end,
            days_of_week=days_of_week,
        )
        return self.find_availability(request, calendars, cancel=cancel)

    @staticmethod
    def common_meeting_request(
        duration_minutes: int,
        date_range: TimeRange,
        *,
        preferred_start: time = time(9, 0),
        preferred_end: time = time(17, 0),
        days_of_week: Iterable[int] = DEFAULT_DAYS_OF_WEEK
    ) -> AvailabilityRequest:
        """Request for a common meeting: single days only, whole free windows."""
        return AvailabilityRequest(
            start_date=date_range.start,
            end_date=date_range.end,
            minimum_duration_minutes=duration_minutes,
            preferred_start=preferred_start,
            preferred_end=preferred_end,
            consecutive_days_required=1,
            days_of_week=frozenset(days_of_week),
        )

    def validate_request(self, request: AvailabilityRequest) -> None:
        """Raise ``InvalidRequest`` if the search cannot be run as asked."""
        if request.start_date >= request.end_date:
            raise InvalidRequest("Start date must be before end date")

        if request.minimum_duration_minutes <= 0:
            raise InvalidRequest("Minimum duration must be greater than 0")

        if request.preferred_start >= request.preferred_end:
            raise InvalidRequest("Preferred start time must be before preferred end time")

        if not request.days_of_week:
            raise InvalidRequest("At least one day of the week is required")

        invalid_days = sorted(d for d in request.days_of_week if d not in WEEKDAY_CODES)
        if invalid_days:
            raise InvalidRequest(f"Days of week must be between 1 and 7, got {invalid_days}")

        if request.consecutive_days_required < 1:
            raise InvalidRequest("Consecutive days required must be at least 1")

        range_days = (request.end_date - request.start_date).total_seconds() / SECONDS_PER_DAY
        if range_days > self.settings.max_range_days:
            raise InvalidRequest(
                f"Date range of {range_days:.1f} days exceeds the maximum of "
                f"{self.settings.max_range_days} days"
            )

    def _combine(self, calendars: List[ParticipantCalendar]) -> CombinedCalendar:
        if len(calendars) == 1:
            return CombinedCalendar.single(calendars[0])

        if self.settings.max_workers > 0:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                return MultiParticipantIntersector(executor).combine(calendars)

        return MultiParticipantIntersector().combine(calendars)

    def _qualifying_days(
        self,
        request: AvailabilityRequest,
        combined: CombinedCalendar,
        cancel: CancellationSignal | None
    ) -> List[DayAvailability]:
        """Build the working data for each qualifying day, in date order."""
        computer = FreeWindowComputer(request)
        days: List[DayAvailability] = []

        current = request.start_date.start_of("day")

        while current < request.end_date:
            if cancel is not None and cancel.is_set():
                raise SearchCancelled(f"Search cancelled at {current.to_date_string()}")

            if request.is_qualifying_day(current):
                day = computer.for_day(
                    current,
                    combined.busy,
                    unknown=combined.has_unknown_on(current),
                )
                if day is not None:
                    days.append(day)

            current = current.add(days=1)

        return days


def _as_list(calendars: Calendars) -> List[ParticipantCalendar]:
    if isinstance(calendars, Mapping):
        return list(calendars.values())
    return list(calendars)
