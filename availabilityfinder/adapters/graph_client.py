"""
Microsoft Graph API client for fetching calendar data.
"""

import logging
from typing import Any, Dict, List

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError, ParticipantDataUnavailable
from ..domain.models import TimeRange
from ..services.availability_finder import ScheduleResult

logger = logging.getLogger(__name__)

# Free/busy statuses that block a slot
BUSY_STATUSES = {"busy", "tentative", "oof", "workingelsewhere"}


class GraphClient:
    """
    Client for Microsoft Graph API calendar operations.

    Uses the /calendar/getSchedule endpoint to fetch free/busy information.
    Schedules the API cannot return (unknown mailbox, missing permission)
    are reported as ``ParticipantDataUnavailable`` rather than as free.
    """

    GRAPH_API_ENDPOINT = "https://graph.microsoft.com/v1.0"

    def __init__(
        self,
        access_token: str,
        endpoint: str | None = None,
        timeout: int = 30,
        session: requests.Session | None = None
    ):
        """
        Initialize the Graph API client.

        Args:
            access_token: Valid Microsoft Graph access token
            endpoint: Optional API base URL
            timeout: Request timeout in seconds
            session: Optional requests session (mainly for tests)
        """
        self.access_token = access_token
        self.endpoint = (endpoint or self.GRAPH_API_ENDPOINT).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json"
        }

    def get_schedule(
        self,
        emails: List[str],
        start_time: DateTime,
        end_time: DateTime,
        timezone: str = "Europe/Berlin"
    ) -> ScheduleResult:
        """
        Get schedule (busy times) for multiple users.

        Args:
            emails: List of user email addresses
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone identifier

        Returns:
            Dictionary mapping email -> list of busy TimeRange objects, or
            ParticipantDataUnavailable for schedules the API could not read

        Raises:
            CalendarAPIError: If the API call fails as a whole
        """
        url = f"{self.endpoint}/me/calendar/getSchedule"

        payload = {
            "schedules": emails,
            "startTime": {
                "dateTime": start_time.in_timezone(timezone).format("YYYY-MM-DDTHH:mm:ss"),
                "timeZone": timezone
            },
            "endTime": {
                "dateTime": end_time.in_timezone(timezone).format("YYYY-MM-DDTHH:mm:ss"),
                "timeZone": timezone
            },
            "availabilityViewInterval": 60
        }
        headers = {**self.headers, "Prefer": f'outlook.timezone="{timezone}"'}

        try:
            response = self.session.post(
                url,
                headers=headers,
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise CalendarAPIError(f"Failed to fetch schedule from Microsoft Graph: {e}") from e
        except ValueError as e:
            raise CalendarAPIError(f"Microsoft Graph returned invalid JSON: {e}") from e

        logger.debug("getSchedule returned %d schedule(s)", len(data.get("value", [])))

        return self.parse_schedule_response(data, timezone)

    def parse_schedule_response(
        self,
        response_data: Dict[str, Any],
        timezone: str
    ) -> ScheduleResult:
        """
        Parse the getSchedule API response into our domain model.

        Response format:
        {
            "value": [
                {
                    "scheduleId": "user@example.com",
                    "scheduleItems": [
                        {
                            "status": "busy",
                            "start": {"dateTime": "...", "timeZone": "..."},
                            "end": {"dateTime": "...", "timeZone": "..."}
                        }
                    ]
                },
                {
                    "scheduleId": "other@example.com",
                    "error": {"message": "...", "responseCode": "ErrorMailboxNotFound"}
                }
            ]
        }
        """
        schedules: ScheduleResult = {}

        for schedule in response_data.get("value", []):
            email = schedule.get("scheduleId", "").lower()

            error = schedule.get("error")
            if error:
                reason = error.get("message") or error.get("responseCode") or "unknown error"
                schedules[email] = ParticipantDataUnavailable(email, reason)
                continue

            try:
                schedules[email] = [
                    TimeRange(
                        start=self._parse_datetime(item["start"], timezone),
                        end=self._parse_datetime(item["end"], timezone),
                    )
                    for item in schedule.get("scheduleItems", [])
                    if item.get("status", "").lower() in BUSY_STATUSES
                ]

            except (KeyError, TypeError, ValueError) as e:
                # A dropped item would read as free time
                logger.warning("Could not parse schedule items for %s: %s", email, e)
                schedules[email] = ParticipantDataUnavailable(email, f"unreadable schedule item: {e}")

        return schedules

    def _parse_datetime(self, value: Dict[str, str], timezone: str) -> DateTime:
        """
        Parse a Graph dateTimeTimeZone object to a pendulum DateTime.

        The request asks Graph for wall-clock times in ``timezone``, so values
        without an offset are read in that zone.
        """
        dt = pendulum.parse(value["dateTime"], tz=timezone)

        if isinstance(dt, DateTime):
            return dt.in_timezone(timezone)

        raise ValueError(f"Could not parse datetime: {value['dateTime']}")
