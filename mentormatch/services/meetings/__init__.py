"""
Meeting Provisioner Module

Allocates a joinable video meeting when a mentor approves a session.

Configuration:
- MEETING_PROVIDER: 'zoom' (default) or 'google_meet'
- PROVIDER_TIMEOUT_SECONDS: per-request timeout for provider calls

For Zoom (server-to-server OAuth app):
- ZOOM_ACCOUNT_ID, ZOOM_CLIENT_ID, ZOOM_CLIENT_SECRET

For Google Meet (Calendar API):
- GOOGLE_API_KEY

Usage:
    from mentormatch.services.meetings import get_meeting_provisioner

    provisioner = get_meeting_provisioner()
    details = provisioner.create_meeting(
        session_id=session.id,
        topic="Mentorship Session",
        duration_minutes=60,
        start_time="2026-10-18T10:00:00Z",
    )
    print(details.join_url)
"""

from .base import MeetingDetails, MeetingErrorKind, MeetingProvisionError, MeetingProvisioner
from .zoom import ZoomProvisioner
from .google_meet import GoogleMeetProvisioner
from .factory import (
    MeetingProviderType,
    PROVIDER_REGISTRY,
    build_provisioner,
    get_meeting_provisioner,
    reset_meeting_provisioner,
)

__all__ = [
    "MeetingDetails",
    "MeetingErrorKind",
    "MeetingProvisionError",
    "MeetingProvisioner",
    "ZoomProvisioner",
    "GoogleMeetProvisioner",
    "MeetingProviderType",
    "PROVIDER_REGISTRY",
    "build_provisioner",
    "get_meeting_provisioner",
    "reset_meeting_provisioner",
]
