"""
Domain models for busy intervals, availability requests and candidate slots.
"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import FrozenSet, List, Tuple

from pendulum import DateTime


WEEKDAY_CODES = range(1, 8)  # ISO: 1=Monday, 7=Sunday
DEFAULT_DAYS_OF_WEEK: FrozenSet[int] = frozenset({1, 2, 3, 4, 5})

WEEKDAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable, half-open time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        start = max(self.start, other.start)
        end = min(self.end, other.end)

        return TimeRange(start=start, end=end)

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


BusyInterval = TimeRange


@dataclass(frozen=True)
class ParticipantCalendar:
    """
    Busy data for one participant, owned by the caller for a single search.

    ``unknown_intervals`` are periods the calendar provider could not report
    on. They count as busy when free time is computed.
    """
    participant_id: str
    busy_intervals: Tuple[TimeRange, ...] = ()
    unknown_intervals: Tuple[TimeRange, ...] = ()

    def __post_init__(self):
        # Accept lists from callers but keep the instance immutable
        object.__setattr__(self, "busy_intervals", tuple(self.busy_intervals))
        object.__setattr__(self, "unknown_intervals", tuple(self.unknown_intervals))

    @classmethod
    def unavailable(cls, participant_id: str, date_range: TimeRange) -> "ParticipantCalendar":
        """Calendar for a participant whose whole search range is unknown."""
        return cls(participant_id=participant_id, unknown_intervals=(date_range,))

    @property
    def has_unknown_data(self) -> bool:
        return bool(self.unknown_intervals)

    def blocked_intervals(self) -> List[TimeRange]:
        """Busy and unknown intervals together, unordered."""
        return [*self.busy_intervals, *self.unknown_intervals]


@dataclass(frozen=True)
class AvailabilityRequest:
    """
    Constraints for an availability search.

    The range covers every calendar day whose start lies before ``end_date``;
    each day's preferred window is clipped to ``[start_date, end_date]``.
    Validation happens in the scheduling engine so that every violation is
    reported as ``InvalidRequest``.
    """
    start_date: DateTime
    end_date: DateTime
    minimum_duration_minutes: int
    preferred_start: time = time(9, 0)
    preferred_end: time = time(17, 0)
    consecutive_days_required: int = 1
    days_of_week: FrozenSet[int] = DEFAULT_DAYS_OF_WEEK

    def __post_init__(self):
        object.__setattr__(self, "days_of_week", frozenset(self.days_of_week))

    def is_qualifying_day(self, day: DateTime) -> bool:
        """Check whether a day's weekday is part of the request."""
        return day.isoweekday() in self.days_of_week


@dataclass(frozen=True)
class FreeWindow:
    """A single day's contiguous free gap inside the preferred envelope."""
    date: date
    start: DateTime
    end: DateTime
    envelope: TimeRange

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def covers_envelope(self) -> bool:
        """True when nothing on the calendar cuts into the day's envelope."""
        return self.start == self.envelope.start and self.end == self.envelope.end


@dataclass
class DayAvailability:
    """
    Working data for one qualifying day.

    ``busy`` holds the merged busy intervals touching the calendar day, which
    the scorer needs to measure buffers outside the envelope.
    """
    date: date
    envelope: TimeRange
    busy: List[TimeRange] = field(default_factory=list)
    windows: List[FreeWindow] = field(default_factory=list)
    unknown: bool = False

    def full_window(self) -> "FreeWindow | None":
        """Return the window spanning the whole envelope, if there is one."""
        for window in self.windows:
            if window.covers_envelope():
                return window
        return None


@dataclass
class CandidateSlot:
    """
    A found candidate time window.

    Invariant: duration_minutes equals the minutes between start and end.
    """
    start: DateTime
    end: DateTime
    duration_minutes: int
    confidence_score: int = 0
    is_multi_day: bool = False
    degraded_confidence: bool = False
    participants: Tuple[str, ...] = ()

    @classmethod
    def spanning(
        cls,
        start: DateTime,
        end: DateTime,
        *,
        is_multi_day: bool = False,
        participants: Tuple[str, ...] = (),
    ) -> "CandidateSlot":
        """Build a slot whose duration is derived from its bounds."""
        return cls(
            start=start,
            end=end,
            duration_minutes=TimeRange(start=start, end=end).duration_minutes(),
            is_multi_day=is_multi_day,
            participants=participants,
        )

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Weekday, YYYY-MM-DD | HH:MM - HH:MM
        """
        weekday = WEEKDAY_NAMES[self.start.isoweekday()]
        date_str = self.start.format("YYYY-MM-DD")

        if self.is_multi_day:
            end_weekday = WEEKDAY_NAMES[self.end.isoweekday()]
            time_str = (
                f"{self.start.format('HH:mm')} - "
                f"{end_weekday}, {self.end.format('YYYY-MM-DD HH:mm')}"
            )
        else:
            time_str = f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')}"

        return f"{weekday}, {date_str} | {time_str} ({self.duration_minutes} min)"
