"""
Mock calendar client for running searches without Microsoft Graph access.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pendulum
from pendulum import DateTime

from ..domain.exceptions import ParticipantDataUnavailable
from ..domain.models import TimeRange
from ..services.availability_finder import ScheduleResult

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockGraphClient:
    """
    Mock client that simulates Microsoft Graph API responses.

    Calendar data is loaded from a JSON file:

        {
            "events": [
                {"calendarId": "alice", "start": "2024-11-25T10:00:00", "end": "..."}
            ],
            "unavailable": ["carol"]
        }

    Calendars listed under ``unavailable`` behave like mailboxes the real API
    refuses to read. A bare list of events is accepted as well.
    """

    def __init__(self, config=None, data_file: Path | None = None):
        """
        Initialize the mock client.

        Args:
            config: Optional AppConfig for calendar_id mapping
            data_file: Optional path to the mock calendar JSON
        """
        self.config = config
        self.data_file = data_file or DEFAULT_DATA_FILE
        self._load_calendar_data()

    def _load_calendar_data(self):
        """Read events and unavailable calendar ids from the data file."""
        if not self.data_file.exists():
            logger.warning("Mock calendar file %s not found, using empty calendars", self.data_file)
            self.calendar_events: List[Dict[str, Any]] = []
            self.unavailable_calendars: set[str] = set()
            return

        with open(self.data_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, list):
            data = {"events": data}

        self.calendar_events = data.get("events", [])
        self.unavailable_calendars = set(data.get("unavailable", []))

    def _get_calendar_id_for_email(self, email: str) -> str:
        """Resolve the mock calendar id configured for an email address."""
        if self.config:
            participant = self.config.find_participant_by_email(email)
            if participant and participant.calendar_id:
                return participant.calendar_id

        # Unmapped addresses are their own calendar id
        return email

    def get_schedule(
        self,
        emails: List[str],
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "Europe/Berlin"
    ) -> ScheduleResult:
        """
        Load busy times from mock calendar data (JSON file).

        Args:
            emails: List of user email addresses
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone identifier

        Returns:
            Dictionary mapping email -> list of busy TimeRange objects, or
            ParticipantDataUnavailable for calendars marked unavailable or
            holding an event that cannot be read
        """
        schedule: ScheduleResult = {}

        for email in emails:
            calendar_id = self._get_calendar_id_for_email(email)

            if calendar_id in self.unavailable_calendars:
                schedule[email] = ParticipantDataUnavailable(email, "access denied (mock)")
                continue

            try:
                schedule[email] = self._busy_times_for(calendar_id, start_time, end_time, timezone)
            except (KeyError, TypeError, ValueError) as e:
                # A skipped event would read as free time
                logger.warning("Invalid mock event for %s: %s", email, e)
                schedule[email] = ParticipantDataUnavailable(email, f"unreadable mock event: {e}")

        return schedule

    def _busy_times_for(
        self,
        calendar_id: str,
        start_time: DateTime,
        end_time: DateTime,
        timezone: str
    ) -> List[TimeRange]:
        """Busy ranges of one mock calendar that touch the requested window."""
        calendar_busy: List[TimeRange] = []

        for event in self.calendar_events:
            if event.get("calendarId") != calendar_id:
                continue

            event_start = pendulum.parse(event["start"], tz=timezone)
            event_end = pendulum.parse(event["end"], tz=timezone)

            if event_start < end_time and event_end > start_time:
                calendar_busy.append(TimeRange(start=event_start, end=event_end))

        return calendar_busy
