"""
Meeting Provisioner Factory

Selects the configured provider. Routes depend on ``get_meeting_provisioner``
so tests can override it with a fake.
"""

import logging
from enum import Enum
from typing import Dict, Optional, Type

from mentormatch.core.settings import settings

from .base import MeetingProvisioner
from .google_meet import GoogleMeetProvisioner
from .zoom import ZoomProvisioner

logger = logging.getLogger(__name__)


class MeetingProviderType(str, Enum):
    """Supported meeting providers."""
    ZOOM = "zoom"
    GOOGLE_MEET = "google_meet"


PROVIDER_REGISTRY: Dict[str, Type[MeetingProvisioner]] = {
    MeetingProviderType.ZOOM: ZoomProvisioner,
    MeetingProviderType.GOOGLE_MEET: GoogleMeetProvisioner,
}

_provisioner_instance: Optional[MeetingProvisioner] = None


def _configured_credentials(provider_type: MeetingProviderType) -> Dict[str, Optional[str]]:
    if provider_type == MeetingProviderType.ZOOM:
        return {
            "account_id": settings.zoom_account_id,
            "client_id": settings.zoom_client_id,
            "client_secret": settings.zoom_client_secret,
        }
    return {"api_key": settings.google_api_key}


def build_provisioner(provider: Optional[str] = None, **kwargs) -> MeetingProvisioner:
    """Build a provider; explicit kwargs win over configured credentials."""
    provider_type = MeetingProviderType(provider or settings.meeting_provider)
    provider_class = PROVIDER_REGISTRY[provider_type]
    for key, value in _configured_credentials(provider_type).items():
        kwargs.setdefault(key, value)
    kwargs.setdefault("timeout", settings.provider_timeout_seconds)
    return provider_class(**kwargs)


def get_meeting_provisioner() -> MeetingProvisioner:
    """FastAPI dependency returning the process-wide provisioner."""
    global _provisioner_instance
    if _provisioner_instance is None:
        _provisioner_instance = build_provisioner()
        logger.info(f"[meetings] using provider {_provisioner_instance.PROVIDER_NAME}")
    return _provisioner_instance


def reset_meeting_provisioner() -> None:
    """Reset the singleton instance (useful for testing)."""
    global _provisioner_instance
    _provisioner_instance = None
