"""Meeting providers against a mocked HTTP transport."""

import json

import httpx
import pytest

from mentormatch.core.settings import settings
from mentormatch.services.meetings import (
    GoogleMeetProvisioner,
    MeetingErrorKind,
    MeetingProvisionError,
    ZoomProvisioner,
    build_provisioner,
)
from mentormatch.services.meetings.google_meet import CALENDAR_EVENTS_URL
from mentormatch.services.meetings.zoom import ZOOM_MEETINGS_URL, ZOOM_TOKEN_URL

START = "2026-11-02T15:30:00Z"


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def _zoom(handler, **creds):
    creds = {"account_id": "acct", "client_id": "cid", "client_secret": "secret", **creds}
    return ZoomProvisioner(client=_client(handler), **creds)


class TestZoom:

    def test_creates_scheduled_meeting(self):
        seen = []

        def handler(request):
            seen.append(request)
            if str(request.url) == ZOOM_TOKEN_URL:
                return httpx.Response(200, json={"access_token": "tok"})
            assert str(request.url) == ZOOM_MEETINGS_URL
            assert request.headers["Authorization"] == "Bearer tok"
            body = json.loads(request.content)
            assert body["type"] == 2
            assert body["start_time"] == START
            assert body["duration"] == 45
            return httpx.Response(201, json={
                "id": 987654321,
                "join_url": "https://zoom.us/j/987654321",
                "start_url": "https://zoom.us/s/987654321?zak=abc",
            })

        details = _zoom(handler).create_meeting("s-1", "Mentorship Session: alpha", 45, START)
        assert details.meeting_id == "987654321"
        assert details.join_url == "https://zoom.us/j/987654321"
        assert details.start_url.startswith("https://zoom.us/s/")
        assert details.provider == "zoom"
        assert len(seen) == 2
        assert b"grant_type=account_credentials" in seen[0].content

    def test_token_failure_is_auth_error(self):
        def handler(request):
            return httpx.Response(401, json={"reason": "Invalid client_id or client_secret"})

        with pytest.raises(MeetingProvisionError) as exc:
            _zoom(handler).create_meeting("s-1", "topic", 60, START)
        assert exc.value.kind == MeetingErrorKind.AUTH
        assert exc.value.status_code == 401

    def test_meeting_failure_is_upstream_error(self):
        def handler(request):
            if str(request.url) == ZOOM_TOKEN_URL:
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(500, text="oops")

        with pytest.raises(MeetingProvisionError) as exc:
            _zoom(handler).create_meeting("s-1", "topic", 60, START)
        assert exc.value.kind == MeetingErrorKind.UPSTREAM

    def test_transport_error_is_upstream_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(MeetingProvisionError) as exc:
            _zoom(handler).create_meeting("s-1", "topic", 60, START)
        assert exc.value.kind == MeetingErrorKind.UPSTREAM

    def test_missing_credentials(self):
        calls = []
        provisioner = ZoomProvisioner(
            client=_client(lambda r: calls.append(r) or httpx.Response(200)),
            account_id=None, client_id="cid", client_secret="secret",
        )
        assert not provisioner.is_available()
        with pytest.raises(MeetingProvisionError) as exc:
            provisioner.create_meeting("s-1", "topic", 60, START)
        assert exc.value.kind == MeetingErrorKind.CONFIG
        assert calls == []


class TestGoogleMeet:

    def test_uses_video_entry_point(self):
        def handler(request):
            assert str(request.url).startswith(CALENDAR_EVENTS_URL)
            assert request.url.params["conferenceDataVersion"] == "1"
            body = json.loads(request.content)
            assert body["conferenceData"]["createRequest"]["requestId"] == "mentormatch-s-1"
            assert body["end"]["dateTime"] == "2026-11-02T16:30:00+00:00"
            return httpx.Response(200, json={
                "id": "evt1",
                "hangoutLink": "https://meet.google.com/fallback",
                "conferenceData": {"entryPoints": [
                    {"entryPointType": "phone", "uri": "tel:+1-555"},
                    {"entryPointType": "video", "uri": "https://meet.google.com/abc-defg-hij"},
                ]},
            })

        provisioner = GoogleMeetProvisioner(client=_client(handler), api_key="key")
        details = provisioner.create_meeting("s-1", "topic", 60, START)
        assert details.meeting_id == "evt1"
        assert details.join_url == "https://meet.google.com/abc-defg-hij"
        assert details.start_url == details.join_url

    def test_falls_back_to_hangout_link(self):
        def handler(request):
            return httpx.Response(200, json={"id": "evt2", "hangoutLink": "https://meet.google.com/xyz"})

        details = GoogleMeetProvisioner(client=_client(handler), api_key="key").create_meeting("s", "t", 30, START)
        assert details.join_url == "https://meet.google.com/xyz"

    def test_forbidden_is_auth_error(self):
        def handler(request):
            return httpx.Response(403, json={"error": {"message": "forbidden"}})

        with pytest.raises(MeetingProvisionError) as exc:
            GoogleMeetProvisioner(client=_client(handler), api_key="key").create_meeting("s", "t", 30, START)
        assert exc.value.kind == MeetingErrorKind.AUTH

    def test_event_without_link_is_upstream_error(self):
        def handler(request):
            return httpx.Response(200, json={"id": "evt3"})

        with pytest.raises(MeetingProvisionError) as exc:
            GoogleMeetProvisioner(client=_client(handler), api_key="key").create_meeting("s", "t", 30, START)
        assert exc.value.kind == MeetingErrorKind.UPSTREAM


class TestFactory:

    def test_builds_requested_provider(self):
        assert isinstance(build_provisioner("google_meet", api_key="k"), GoogleMeetProvisioner)
        assert isinstance(build_provisioner("zoom"), ZoomProvisioner)

    def test_credentials_come_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "zoom_account_id", "acct")
        monkeypatch.setattr(settings, "zoom_client_id", "cid")
        monkeypatch.setattr(settings, "zoom_client_secret", "secret")
        monkeypatch.setattr(settings, "google_api_key", None)
        assert build_provisioner("zoom").is_available()
        assert not build_provisioner("google_meet").is_available()
        assert build_provisioner("google_meet", api_key="k").is_available()

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            build_provisioner("skype")
