"""
Confidence scoring for candidate slots.

Score policy (all weights live in ``ScoringWeights``):

- base score
- up to ``buffer_points`` scaled by the smaller of the free buffers before and
  after the slot, saturating at ``buffer_cap_minutes``
- up to ``window_points`` for edges set by a commitment rather than by the
  preferred-window boundary (half per edge)
- up to ``fit_points`` inversely proportional to how much longer the slot is
  than the requested duration

The result is rounded and clamped to [0, 100].
"""

from dataclasses import dataclass
from typing import List

from pendulum import DateTime

from .consecutive import AssembledSlot
from .models import TimeRange


@dataclass(frozen=True)
class ScoringWeights:
    """Coefficients of the confidence score."""
    base: float = 50.0
    buffer_points: float = 25.0
    buffer_cap_minutes: int = 30
    window_points: float = 15.0
    fit_points: float = 10.0


@dataclass(frozen=True)
class SlotContext:
    """What the scorer knows about the surroundings of a slot."""
    buffer_before_minutes: float
    buffer_after_minutes: float
    clipped_start: bool
    clipped_end: bool
    duration_minutes: int
    requested_minutes: int


class ConfidenceScorer:
    """
    Assigns a 0-100 confidence score to candidate slots.

    For two slots that differ only in their adjacent buffers, the one with
    the larger smaller-buffer never scores lower.
    """

    def __init__(self, weights: ScoringWeights | None = None):
        self.weights = weights or ScoringWeights()

    def score(self, context: SlotContext) -> int:
        weights = self.weights
        total = weights.base

        buffer = max(0.0, min(context.buffer_before_minutes, context.buffer_after_minutes))
        if weights.buffer_cap_minutes > 0:
            total += weights.buffer_points * min(buffer, weights.buffer_cap_minutes) / weights.buffer_cap_minutes
        else:
            total += weights.buffer_points

        unclipped_edges = (not context.clipped_start) + (not context.clipped_end)
        total += weights.window_points * unclipped_edges / 2

        requested = max(context.requested_minutes, 1)
        over_length = max(0, context.duration_minutes - requested) / requested
        total += weights.fit_points / (1 + over_length)

        return max(0, min(100, int(round(total))))

    def score_slot(self, assembled: AssembledSlot, requested_minutes: int) -> int:
        return self.score(self.context_for(assembled, requested_minutes))

    def context_for(self, assembled: AssembledSlot, requested_minutes: int) -> SlotContext:
        """
        Measure the buffers and envelope clipping around an assembled slot.

        Buffers look at the merged busy time of the whole calendar day, so a
        slot that opens the preferred window right after an early meeting has
        a small buffer even though nothing inside the envelope precedes it.
        """
        slot = assembled.slot
        first_day = assembled.first_day
        last_day = assembled.last_day

        return SlotContext(
            buffer_before_minutes=_buffer_before(slot.start, first_day.busy),
            buffer_after_minutes=_buffer_after(slot.end, last_day.busy),
            clipped_start=slot.start == first_day.envelope.start,
            clipped_end=slot.end == last_day.envelope.end,
            duration_minutes=slot.duration_minutes,
            requested_minutes=requested_minutes,
        )


def _minutes_between(start: DateTime, end: DateTime) -> float:
    return max(0.0, (end - start).total_seconds() / 60)


def _buffer_before(moment: DateTime, busy: List[TimeRange]) -> float:
    """Free minutes between the last commitment of the day and ``moment``."""
    boundary = moment.start_of("day")
    for interval in busy:
        if interval.end <= moment:
            boundary = max(boundary, interval.end)
        else:
            break
    return _minutes_between(boundary, moment)


def _buffer_after(moment: DateTime, busy: List[TimeRange]) -> float:
    """Free minutes between ``moment`` and the next commitment of the day."""
    boundary = moment.start_of("day").add(days=1)
    for interval in busy:
        if interval.start >= moment:
            boundary = min(boundary, interval.start)
            break
    return _minutes_between(moment, boundary)
