"""
Tests for multi-participant busy time union.
"""

from concurrent.futures import ThreadPoolExecutor

import pendulum

from availabilityfinder.domain.intersector import CombinedCalendar, MultiParticipantIntersector
from availabilityfinder.domain.models import ParticipantCalendar, TimeRange


def _dt(value: str):
    return pendulum.parse(value, tz="Europe/Berlin")


def _range(start: str, end: str) -> TimeRange:
    return TimeRange(start=_dt(start), end=_dt(end))


def _calendars():
    return [
        ParticipantCalendar(
            participant_id="user1@example.com",
            busy_intervals=[
                _range("2024-11-25 10:00", "2024-11-25 12:00"),
                _range("2024-11-25 15:00", "2024-11-25 16:00"),
            ],
        ),
        ParticipantCalendar(
            participant_id="user2@example.com",
            busy_intervals=[
                _range("2024-11-25 11:30", "2024-11-25 13:00"),
                _range("2024-11-25 14:00", "2024-11-25 15:00"),
            ],
        ),
    ]


class TestMultiParticipantIntersector:
    """Tests for MultiParticipantIntersector."""

    def test_union_of_busy_times(self):
        combined = MultiParticipantIntersector().combine(_calendars())

        assert combined.participants == ("user1@example.com", "user2@example.com")
        assert list(combined.busy) == [
            _range("2024-11-25 10:00", "2024-11-25 13:00"),
            _range("2024-11-25 14:00", "2024-11-25 16:00"),
        ]

    def test_executor_gives_same_result(self):
        sequential = MultiParticipantIntersector().combine(_calendars())

        with ThreadPoolExecutor(max_workers=2) as executor:
            parallel = MultiParticipantIntersector(executor).combine(_calendars())

        assert list(parallel.busy) == list(sequential.busy)

    def test_unknown_periods_are_busy(self):
        calendars = _calendars() + [
            ParticipantCalendar(
                participant_id="user3@example.com",
                unknown_intervals=[_range("2024-11-26 00:00", "2024-11-27 00:00")],
            )
        ]

        combined = MultiParticipantIntersector().combine(calendars)

        assert _range("2024-11-26 00:00", "2024-11-27 00:00") in list(combined.busy)
        assert combined.has_unknown_on(_dt("2024-11-26"))
        assert not combined.has_unknown_on(_dt("2024-11-25"))
        assert not combined.has_unknown_on(_dt("2024-11-27"))


class TestCombinedCalendar:
    """Tests for the single-calendar shortcut."""

    def test_single_normalizes(self):
        calendar = ParticipantCalendar(
            participant_id="user1@example.com",
            busy_intervals=[
                _range("2024-11-25 10:00", "2024-11-25 11:00"),
                _range("2024-11-25 09:00", "2024-11-25 10:00"),
            ],
        )

        combined = CombinedCalendar.single(calendar)

        assert list(combined.busy) == [_range("2024-11-25 09:00", "2024-11-25 11:00")]
        assert len(combined.unknown) == 0
