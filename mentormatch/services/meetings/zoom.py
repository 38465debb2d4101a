"""
Zoom Meeting Provider

Server-to-server OAuth (account credentials grant) followed by a scheduled
meeting create on the authorizing user.
"""

import logging
from typing import Optional

import httpx

from .base import MeetingDetails, MeetingErrorKind, MeetingProvisionError, MeetingProvisioner

logger = logging.getLogger(__name__)

ZOOM_TOKEN_URL = "https://zoom.us/oauth/token"
ZOOM_MEETINGS_URL = "https://api.zoom.us/v2/users/me/meetings"
SCHEDULED_MEETING = 2


class ZoomProvisioner(MeetingProvisioner):
    PROVIDER_NAME = "zoom"

    def _init_provider(
        self,
        account_id: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        **kwargs,
    ) -> None:
        self._account_id = account_id
        self._client_id = client_id
        self._client_secret = client_secret

    def is_available(self) -> bool:
        return bool(self._account_id and self._client_id and self._client_secret)

    def _access_token(self, client: httpx.Client) -> str:
        response = client.post(
            ZOOM_TOKEN_URL,
            auth=(self._client_id, self._client_secret),
            data={"grant_type": "account_credentials", "account_id": self._account_id},
        )
        self._raise_for_status(response, MeetingErrorKind.AUTH, "Failed to authenticate with Zoom")
        token = response.json().get("access_token")
        if not token:
            raise MeetingProvisionError(MeetingErrorKind.AUTH, "Zoom returned no access token")
        return token

    def _create(self, client, session_id, topic, duration_minutes, start_time) -> MeetingDetails:
        token = self._access_token(client)
        response = client.post(
            ZOOM_MEETINGS_URL,
            headers={"Authorization": f"Bearer {token}"},
            json={
                "topic": topic or "Mentorship Session",
                "type": SCHEDULED_MEETING,
                "start_time": start_time,
                "duration": duration_minutes or 60,
                "settings": {
                    "host_video": True,
                    "participant_video": True,
                    "join_before_host": False,
                    "mute_upon_entry": False,
                    "waiting_room": True,
                    "audio": "voip",
                },
            },
        )
        self._raise_for_status(response, MeetingErrorKind.UPSTREAM, "Failed to create Zoom meeting")
        meeting = response.json()
        return MeetingDetails(
            meeting_id=str(meeting["id"]),
            join_url=meeting["join_url"],
            start_url=meeting.get("start_url") or meeting["join_url"],
            provider=self.PROVIDER_NAME,
        )
