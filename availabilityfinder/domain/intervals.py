"""
Interval arithmetic over busy time.

``normalize`` turns an unordered bag of busy intervals into the minimal,
ordered run of busy blocks for a calendar. Everything downstream (free
window computation, participant intersection, scoring) works on that form.
"""

from bisect import bisect_left, bisect_right
from typing import Iterable, Iterator, List

from .models import TimeRange


def normalize(intervals: Iterable[TimeRange]) -> List[TimeRange]:
    """
    Merge overlapping or adjacent time ranges.

    Example: [10:00-11:00, 09:00-10:00, 10:30-12:00] -> [09:00-12:00]

    Touching boundaries are merged, so the result contains no two ranges
    that could be merged further. Empty input yields an empty list.
    """
    sorted_ranges = sorted(intervals, key=lambda r: (r.start, r.end))

    if not sorted_ranges:
        return []

    merged: List[TimeRange] = [sorted_ranges[0]]

    for current in sorted_ranges[1:]:
        last = merged[-1]

        # Check if ranges overlap or are adjacent (no gap)
        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = TimeRange(start=last.start, end=current.end)
        else:
            merged.append(current)

    return merged


class BusyTimeline:
    """
    Normalized busy time of one calendar (or of several, already unioned).

    Because the merged ranges are disjoint and ordered, both their starts and
    their ends are sorted, so the ranges touching any window can be located
    by binary search instead of a scan per day.
    """

    def __init__(self, intervals: Iterable[TimeRange] = ()):
        self.intervals = normalize(intervals)
        self._starts = [interval.start for interval in self.intervals]
        self._ends = [interval.end for interval in self.intervals]

    def within(self, window: TimeRange) -> List[TimeRange]:
        """Return the busy ranges overlapping ``window``, in order."""
        first = bisect_right(self._ends, window.start)
        last = bisect_left(self._starts, window.end)
        return self.intervals[first:last]

    def __iter__(self) -> Iterator[TimeRange]:
        return iter(self.intervals)

    def __len__(self) -> int:
        return len(self.intervals)
