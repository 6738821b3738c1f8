"""
Per-day free window computation.

Each qualifying day gets an envelope (the preferred time-of-day window placed
on that date and clipped to the searched range). Busy time is subtracted from
the envelope with a single sweep; what remains are the day's free windows.
"""

from typing import List

from pendulum import DateTime

from .intervals import BusyTimeline
from .models import AvailabilityRequest, DayAvailability, FreeWindow, TimeRange


class FreeWindowComputer:
    """
    Subtracts merged busy intervals from a day's preferred-time envelope.

    Example:
    Envelope: 09:00 - 17:00
    Busy: [10:00-11:00, 14:00-15:00]
    Result: [09:00-10:00, 11:00-14:00, 15:00-17:00]
    """

    def __init__(self, request: AvailabilityRequest):
        self.request = request
        self.minimum_duration_minutes = request.minimum_duration_minutes

    def envelope_for(self, day: DateTime) -> TimeRange | None:
        """
        Get the preferred-time envelope for a specific day.

        Returns None when clipping to the searched range leaves nothing.
        """
        preferred_start = self.request.preferred_start
        preferred_end = self.request.preferred_end

        start = day.set(
            hour=preferred_start.hour,
            minute=preferred_start.minute,
            second=preferred_start.second,
            microsecond=0
        )
        end = day.set(
            hour=preferred_end.hour,
            minute=preferred_end.minute,
            second=preferred_end.second,
            microsecond=0
        )

        # Clip to the search range
        clipped_start = max(start, self.request.start_date)
        clipped_end = min(end, self.request.end_date)

        if clipped_start >= clipped_end:
            return None

        return TimeRange(start=clipped_start, end=clipped_end)

    def compute(self, envelope: TimeRange, busy: List[TimeRange]) -> List[FreeWindow]:
        """
        Sweep the envelope with a cursor, emitting the gaps between busy ranges.

        ``busy`` must be normalized. Gaps shorter than the minimum duration are
        dropped immediately since no request could use them.
        """
        day = envelope.start.date()
        windows: List[FreeWindow] = []
        cursor = envelope.start

        for interval in busy:
            if interval.end <= cursor:
                continue
            if interval.start >= envelope.end:
                break

            # Free time before this busy period
            if interval.start > cursor:
                self._append_if_long_enough(windows, day, cursor, interval.start, envelope)

            cursor = max(cursor, interval.end)

        # Remaining free time after the last busy period
        if cursor < envelope.end:
            self._append_if_long_enough(windows, day, cursor, envelope.end, envelope)

        return windows

    def for_day(
        self,
        day: DateTime,
        timeline: BusyTimeline,
        unknown: bool = False
    ) -> DayAvailability | None:
        """
        Build the working data for one day from a calendar's busy timeline.

        Returns None if the day has no envelope inside the searched range.
        """
        envelope = self.envelope_for(day)

        if envelope is None:
            return None

        day_start = day.start_of("day")
        calendar_day = TimeRange(start=day_start, end=day_start.add(days=1))

        return DayAvailability(
            date=day_start.date(),
            envelope=envelope,
            busy=timeline.within(calendar_day),
            windows=self.compute(envelope, timeline.within(envelope)),
            unknown=unknown,
        )

    def _append_if_long_enough(
        self,
        windows: List[FreeWindow],
        day,
        start: DateTime,
        end: DateTime,
        envelope: TimeRange
    ) -> None:
        window = FreeWindow(date=day, start=start, end=end, envelope=envelope)
        if window.duration_minutes() >= self.minimum_duration_minutes:
            windows.append(window)
