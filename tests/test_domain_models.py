"""
Tests for domain models.
"""

import pendulum
import pytest
from datetime import time

from availabilityfinder.domain.models import (
    AvailabilityRequest,
    CandidateSlot,
    ParticipantCalendar,
    TimeRange,
)


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 480  # 8 hours

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        start = pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        end = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")

        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=start, end=end)

    def test_empty_time_range_raises_error(self):
        """A zero-length range is not a valid busy interval."""
        moment = pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin")

        with pytest.raises(ValueError):
            TimeRange(start=moment, end=moment)

    def test_overlaps(self):
        """Test overlap detection; touching ranges do not overlap."""
        tr1 = TimeRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")
        )
        tr2 = TimeRange(
            start=pendulum.parse("2024-11-25 11:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin")
        )
        tr3 = TimeRange(
            start=pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        )

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)
        assert not tr2.overlaps(tr3)

    def test_intersect(self):
        """Test intersection calculation."""
        tr1 = TimeRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")
        )
        tr2 = TimeRange(
            start=pendulum.parse("2024-11-25 11:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin")
        )

        intersection = tr1.intersect(tr2)

        assert intersection is not None
        assert intersection.start == pendulum.parse("2024-11-25 11:00", tz="Europe/Berlin")
        assert intersection.end == pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")

    def test_intersect_no_overlap(self):
        """Test intersection with no overlap returns None."""
        tr1 = TimeRange(
            start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 12:00", tz="Europe/Berlin")
        )
        tr2 = TimeRange(
            start=pendulum.parse("2024-11-25 14:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-25 17:00", tz="Europe/Berlin")
        )

        assert tr1.intersect(tr2) is None


class TestParticipantCalendar:
    """Tests for ParticipantCalendar."""

    def test_lists_are_frozen_to_tuples(self):
        busy = [
            TimeRange(
                start=pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
                end=pendulum.parse("2024-11-25 10:00", tz="Europe/Berlin")
            )
        ]

        calendar = ParticipantCalendar(participant_id="a@example.com", busy_intervals=busy)

        assert calendar.busy_intervals == tuple(busy)
        assert not calendar.has_unknown_data

    def test_unavailable_blocks_whole_range(self):
        date_range = TimeRange(
            start=pendulum.parse("2024-11-25 00:00", tz="Europe/Berlin"),
            end=pendulum.parse("2024-11-29 23:59", tz="Europe/Berlin")
        )

        calendar = ParticipantCalendar.unavailable("a@example.com", date_range)

        assert calendar.has_unknown_data
        assert calendar.busy_intervals == ()
        assert calendar.blocked_intervals() == [date_range]


class TestAvailabilityRequest:
    """Tests for AvailabilityRequest."""

    def test_defaults(self):
        request = AvailabilityRequest(
            start_date=pendulum.parse("2024-11-25 00:00", tz="Europe/Berlin"),
            end_date=pendulum.parse("2024-11-29 23:59", tz="Europe/Berlin"),
            minimum_duration_minutes=30,
        )

        assert request.preferred_start == time(9, 0)
        assert request.preferred_end == time(17, 0)
        assert request.consecutive_days_required == 1
        assert request.days_of_week == frozenset({1, 2, 3, 4, 5})

    def test_is_qualifying_day_uses_iso_weekdays(self):
        request = AvailabilityRequest(
            start_date=pendulum.parse("2024-11-25 00:00", tz="Europe/Berlin"),
            end_date=pendulum.parse("2024-12-01 23:59", tz="Europe/Berlin"),
            minimum_duration_minutes=30,
            days_of_week=[1, 7],
        )

        assert request.is_qualifying_day(pendulum.parse("2024-11-25", tz="Europe/Berlin"))  # Monday
        assert not request.is_qualifying_day(pendulum.parse("2024-11-30", tz="Europe/Berlin"))  # Saturday
        assert request.is_qualifying_day(pendulum.parse("2024-12-01", tz="Europe/Berlin"))  # Sunday


class TestCandidateSlot:
    """Tests for CandidateSlot."""

    def test_spanning_derives_duration(self):
        slot = CandidateSlot.spanning(
            pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            pendulum.parse("2024-11-25 10:30", tz="Europe/Berlin"),
        )

        assert slot.duration_minutes == 90
        assert not slot.is_multi_day
        assert slot.time_range.duration_minutes() == 90

    def test_format_display(self):
        slot = CandidateSlot.spanning(
            pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            pendulum.parse("2024-11-25 10:00", tz="Europe/Berlin"),
        )

        assert slot.format_display() == "Monday, 2024-11-25 | 09:00 - 10:00 (60 min)"

    def test_format_display_multi_day(self):
        slot = CandidateSlot.spanning(
            pendulum.parse("2024-11-25 09:00", tz="Europe/Berlin"),
            pendulum.parse("2024-11-27 17:00", tz="Europe/Berlin"),
            is_multi_day=True,
        )

        assert "Wednesday, 2024-11-27 17:00" in slot.format_display()
