"""
Request and response shapes exchanged with consumers.

Field names follow the camelCase JSON of the availability HTTP endpoint;
Python code uses the snake_case attribute names.
"""

from datetime import datetime, time
from typing import List, Optional

import pendulum
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from .domain.models import AvailabilityRequest, CandidateSlot

DATE_ONLY_LENGTH = len("YYYY-MM-DD")


class AvailabilityRequestBody(BaseModel):
    """Availability search criteria as sent by a client."""
    model_config = ConfigDict(populate_by_name=True)

    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    minimum_duration_minutes: int = Field(alias="minimumDurationMinutes")
    preferred_start_time: Optional[time] = Field(default=None, alias="preferredStartTime")
    preferred_end_time: Optional[time] = Field(default=None, alias="preferredEndTime")
    consecutive_days_required: int = Field(default=1, alias="consecutiveDaysRequired")
    days_of_week: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5], alias="daysOfWeek")

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_timestamp(cls, value: str) -> str:
        """Reject values that are not a date or a timestamp, such as durations."""
        try:
            parsed = pendulum.parse(value)
        except ValueError as exc:
            raise ValueError(f"Invalid date or datetime: {value}") from exc

        if not isinstance(parsed, (pendulum.DateTime, pendulum.Date)):
            raise ValueError(f"Invalid date or datetime: {value}")
        return value

    def to_request(
        self,
        timezone: str,
        default_start: time = time(9, 0),
        default_end: time = time(17, 0)
    ) -> AvailabilityRequest:
        """
        Convert to the domain request.

        Timestamps without an offset are read in ``timezone``. A date-only
        ``endDate`` includes that whole day.
        """
        start = pendulum.parse(self.start_date, tz=timezone)
        end = pendulum.parse(self.end_date, tz=timezone)

        if len(self.end_date) == DATE_ONLY_LENGTH:
            end = end.end_of("day")

        return AvailabilityRequest(
            start_date=start,
            end_date=end,
            minimum_duration_minutes=self.minimum_duration_minutes,
            preferred_start=self.preferred_start_time or default_start,
            preferred_end=self.preferred_end_time or default_end,
            consecutive_days_required=self.consecutive_days_required,
            days_of_week=frozenset(self.days_of_week),
        )


class AvailableTimeSlot(BaseModel):
    """One candidate slot in the response array."""
    model_config = ConfigDict(populate_by_name=True)

    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    duration_minutes: int = Field(alias="durationMinutes")
    confidence_score: int = Field(ge=0, le=100, alias="confidenceScore")
    is_multi_day: bool = Field(alias="isMultiDay")
    degraded_confidence: bool = Field(default=False, alias="degradedConfidence")

    @classmethod
    def from_slot(cls, slot: CandidateSlot) -> "AvailableTimeSlot":
        return cls(
            start_time=slot.start,
            end_time=slot.end,
            duration_minutes=slot.duration_minutes,
            confidence_score=slot.confidence_score,
            is_multi_day=slot.is_multi_day,
            degraded_confidence=slot.degraded_confidence,
        )


_slot_list = TypeAdapter(List[AvailableTimeSlot])


def slots_to_json(slots: List[CandidateSlot], indent: int | None = 2) -> str:
    """Serialize candidate slots as the camelCase response array."""
    payload = [AvailableTimeSlot.from_slot(slot) for slot in slots]
    return _slot_list.dump_json(payload, by_alias=True, indent=indent).decode("utf-8")
