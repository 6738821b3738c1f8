"""
Reduction of a multi-participant search to a single combined calendar.
"""

import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from itertools import chain
from typing import List, Sequence, Tuple

from pendulum import DateTime

from .intervals import BusyTimeline, normalize
from .models import ParticipantCalendar, TimeRange

logger = logging.getLogger(__name__)


@dataclass
class CombinedCalendar:
    """
    Busy time of all participants, unioned.

    ``busy`` already includes the unknown periods (they are treated as busy);
    ``unknown`` keeps them separately so affected days can be flagged.
    """
    participants: Tuple[str, ...]
    busy: BusyTimeline
    unknown: BusyTimeline

    @classmethod
    def single(cls, calendar: ParticipantCalendar) -> "CombinedCalendar":
        return cls(
            participants=(calendar.participant_id,),
            busy=BusyTimeline(calendar.blocked_intervals()),
            unknown=BusyTimeline(calendar.unknown_intervals),
        )

    def has_unknown_on(self, day: DateTime) -> bool:
        """Check whether any participant's data is unknown during the calendar day."""
        day_start = day.start_of("day")
        calendar_day = TimeRange(start=day_start, end=day_start.add(days=1))
        return bool(self.unknown.within(calendar_day))


class MultiParticipantIntersector:
    """
    Unions busy time across participants.

    The common free time of N participants is the free time of the union of
    their busy time, so once the union is built the single-calendar window
    computation and block assembly apply unchanged. Per-participant
    normalization shares no state and is fanned out to ``executor`` when one
    is given.
    """

    def __init__(self, executor: Executor | None = None):
        self.executor = executor

    def combine(self, calendars: Sequence[ParticipantCalendar]) -> CombinedCalendar:
        participants = tuple(calendar.participant_id for calendar in calendars)

        if self.executor is not None:
            normalized: List[List[TimeRange]] = list(
                self.executor.map(_normalize_blocked, calendars)
            )
        else:
            normalized = [_normalize_blocked(calendar) for calendar in calendars]

        unknown_participants = [c.participant_id for c in calendars if c.has_unknown_data]
        if unknown_participants:
            logger.debug(
                "Treating unknown availability as busy for: %s",
                ", ".join(unknown_participants)
            )

        return CombinedCalendar(
            participants=participants,
            busy=BusyTimeline(chain.from_iterable(normalized)),
            unknown=BusyTimeline(
                chain.from_iterable(c.unknown_intervals for c in calendars)
            ),
        )


def _normalize_blocked(calendar: ParticipantCalendar) -> List[TimeRange]:
    return normalize(calendar.blocked_intervals())
