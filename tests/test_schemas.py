"""
Tests for the camelCase request/response models.
"""

import json
from datetime import time

import pendulum
import pytest
from pydantic import ValidationError

from availabilityfinder.domain.models import CandidateSlot
from availabilityfinder.schemas import AvailabilityRequestBody, slots_to_json


def _dt(value: str):
    return pendulum.parse(value, tz="Europe/Berlin")


class TestAvailabilityRequestBody:
    def test_parses_camel_case_payload(self):
        body = AvailabilityRequestBody.model_validate({
            "startDate": "2024-11-25",
            "endDate": "2024-11-29",
            "minimumDurationMinutes": 60,
            "preferredStartTime": "08:30",
            "preferredEndTime": "16:00",
            "consecutiveDaysRequired": 2,
            "daysOfWeek": [1, 2, 3],
        })

        request = body.to_request("Europe/Berlin")

        assert request.start_date == _dt("2024-11-25 00:00")
        assert request.end_date == _dt("2024-11-29 00:00").end_of("day")
        assert request.preferred_start == time(8, 30)
        assert request.preferred_end == time(16, 0)
        assert request.consecutive_days_required == 2
        assert request.days_of_week == frozenset({1, 2, 3})

    def test_defaults(self):
        body = AvailabilityRequestBody(
            start_date="2024-11-25T00:00:00",
            end_date="2024-11-26T12:00:00",
            minimum_duration_minutes=30,
        )

        request = body.to_request("Europe/Berlin", default_start=time(10, 0), default_end=time(15, 0))

        assert request.end_date == _dt("2024-11-26 12:00")
        assert request.preferred_start == time(10, 0)
        assert request.preferred_end == time(15, 0)
        assert request.consecutive_days_required == 1
        assert request.days_of_week == frozenset({1, 2, 3, 4, 5})

    def test_rejects_unparseable_dates(self):
        with pytest.raises(ValidationError, match="Invalid date"):
            AvailabilityRequestBody.model_validate({
                "startDate": "next tuesday",
                "endDate": "2024-11-29",
                "minimumDurationMinutes": 60,
            })

    @pytest.mark.parametrize("value", ["P1D", "2024-11-25/2024-11-29"])
    def test_rejects_durations_and_intervals(self, value):
        with pytest.raises(ValidationError, match="Invalid date"):
            AvailabilityRequestBody.model_validate({
                "startDate": value,
                "endDate": "2024-11-29",
                "minimumDurationMinutes": 60,
            })


class TestSlotsToJson:
    def test_camel_case_keys(self):
        slot = CandidateSlot.spanning(
            _dt("2024-11-25 09:00"),
            _dt("2024-11-25 10:30"),
            is_multi_day=False,
            participants=("a@example.com",),
        )
        slot.confidence_score = 72

        payload = json.loads(slots_to_json([slot]))

        assert payload == [
            {
                "startTime": "2024-11-25T09:00:00+01:00",
                "endTime": "2024-11-25T10:30:00+01:00",
                "durationMinutes": 90,
                "confidenceScore": 72,
                "isMultiDay": False,
                "degradedConfidence": False,
            }
        ]

    def test_empty_list(self):
        assert json.loads(slots_to_json([])) == []
