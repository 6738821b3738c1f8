"""
Assembly of candidate slots from per-day free windows.
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Sequence, Tuple

from .models import CandidateSlot, DayAvailability, FreeWindow


@dataclass
class AssembledSlot:
    """A candidate slot together with the qualifying days it was built from."""
    slot: CandidateSlot
    days: Sequence[DayAvailability]

    @property
    def first_day(self) -> DayAvailability:
        return self.days[0]

    @property
    def last_day(self) -> DayAvailability:
        return self.days[-1]


class ConsecutiveBlockAssembler:
    """
    Turns qualifying days into candidate slots.

    Runs are counted over qualifying days only: the caller passes just the
    days whose weekday is requested, so a weekend between Friday and Monday
    neither extends nor breaks a weekday run. A day extends the run only if
    one free window spans its whole envelope; any other day resets it.
    """

    def __init__(self, consecutive_days_required: int, participants: Tuple[str, ...] = ()):
        self.consecutive_days_required = consecutive_days_required
        self.participants = participants

    def assemble(self, days: Iterable[DayAvailability]) -> List[AssembledSlot]:
        if self.consecutive_days_required == 1:
            return self._single_day_slots(days)
        return self._multi_day_slots(days)

    def _single_day_slots(self, days: Iterable[DayAvailability]) -> List[AssembledSlot]:
        assembled: List[AssembledSlot] = []

        for day in days:
            for window in day.windows:
                slot = CandidateSlot.spanning(
                    window.start,
                    window.end,
                    participants=self.participants,
                )
                slot.degraded_confidence = day.unknown
                assembled.append(AssembledSlot(slot=slot, days=[day]))

        return assembled

    def _multi_day_slots(self, days: Iterable[DayAvailability]) -> List[AssembledSlot]:
        """
        Slide over the days and emit every run of N fully free days.

        Overlapping runs are all returned (Mon-Wed, Tue-Thu, ...) so the caller
        can pick among them.
        """
        required = self.consecutive_days_required
        run: Deque[Tuple[DayAvailability, FreeWindow]] = deque(maxlen=required)
        assembled: List[AssembledSlot] = []

        for day in days:
            window = day.full_window()

            if window is None:
                run.clear()
                continue

            run.append((day, window))

            if len(run) == required:
                run_days = [run_day for run_day, _ in run]
                slot = CandidateSlot.spanning(
                    run[0][1].start,
                    run[-1][1].end,
                    is_multi_day=True,
                    participants=self.participants,
                )
                slot.degraded_confidence = any(run_day.unknown for run_day in run_days)
                assembled.append(AssembledSlot(slot=slot, days=run_days))

        return assembled
