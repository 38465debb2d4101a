"""
Google Meet Provider

Creates a Google Calendar event with a Meet conference attached. The Meet link
serves as both the join and the host start URL.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .base import MeetingDetails, MeetingErrorKind, MeetingProvisionError, MeetingProvisioner

logger = logging.getLogger(__name__)

CALENDAR_EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"


class GoogleMeetProvisioner(MeetingProvisioner):
    PROVIDER_NAME = "google_meet"

    def _init_provider(self, api_key: Optional[str] = None, **kwargs) -> None:
        self._api_key = api_key

    def is_available(self) -> bool:
        return bool(self._api_key)

    @staticmethod
    def _event_window(start_time: str, duration_minutes: int) -> tuple[str, str]:
        start = datetime.fromisoformat(start_time.replace("Z", "+00:00"))
        end = start + timedelta(minutes=duration_minutes or 60)
        return start.isoformat(), end.isoformat()

    def _create(self, client, session_id, topic, duration_minutes, start_time) -> MeetingDetails:
        start, end = self._event_window(start_time, duration_minutes)
        response = client.post(
            CALENDAR_EVENTS_URL,
            params={"conferenceDataVersion": 1, "key": self._api_key},
            json={
                "summary": topic or "Mentorship Session",
                "description": "Mentorship session scheduled via MentorMatch",
                "start": {"dateTime": start, "timeZone": "UTC"},
                "end": {"dateTime": end, "timeZone": "UTC"},
                "conferenceData": {
                    "createRequest": {
                        "requestId": f"mentormatch-{session_id}",
                        "conferenceSolutionKey": {"type": "hangoutsMeet"},
                    }
                },
                "attendees": [],
            },
        )
        kind = MeetingErrorKind.AUTH if response.status_code in (401, 403) else MeetingErrorKind.UPSTREAM
        self._raise_for_status(response, kind, "Failed to create Google Meet meeting")

        event = response.json()
        entry_points = (event.get("conferenceData") or {}).get("entryPoints") or []
        meet_link = next(
            (e.get("uri") for e in entry_points if e.get("entryPointType") == "video"),
            None,
        ) or event.get("hangoutLink")
        if not meet_link:
            raise MeetingProvisionError(MeetingErrorKind.UPSTREAM, "Google Calendar event has no Meet link")

        return MeetingDetails(
            meeting_id=str(event["id"]),
            join_url=meet_link,
            start_url=meet_link,
            provider=self.PROVIDER_NAME,
        )
