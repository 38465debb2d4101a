"""
Meeting Provisioner Base Interface

Abstract base class defining the contract for video-conferencing providers.
All providers (Zoom, Google Meet) must implement this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeetingDetails:
    """Standardized result from any meeting provider."""
    meeting_id: str
    join_url: str
    start_url: str
    provider: str


class MeetingErrorKind(str, Enum):
    AUTH = "auth"          # provider rejected our credentials
    UPSTREAM = "upstream"  # provider API error or network failure
    CONFIG = "config"      # credentials missing locally


class MeetingProvisionError(Exception):
    def __init__(self, kind: MeetingErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class MeetingProvisioner(ABC):
    """Creates a joinable meeting room for a session.

    Calls are not idempotent: invoking ``create_meeting`` twice for the same
    session creates two remote meetings.
    """

    PROVIDER_NAME: str = "base"

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = 15.0, **kwargs):
        """
        Args:
            client: Optional pre-built httpx client (tests pass one with a MockTransport)
            timeout: Per-request timeout in seconds when we build our own client
            **kwargs: Provider-specific configuration
        """
        self._client = client
        self._timeout = timeout
        self._init_provider(**kwargs)

    @abstractmethod
    def _init_provider(self, **kwargs) -> None:
        """Read provider credentials. Implemented by subclasses."""

    @abstractmethod
    def _create(self, client: httpx.Client, session_id: str, topic: str,
                duration_minutes: int, start_time: str) -> MeetingDetails:
        """Make the provider API calls and return the meeting."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is properly configured."""

    def create_meeting(self, session_id: str, topic: str, duration_minutes: int, start_time: str) -> MeetingDetails:
        """Create a meeting for ``session_id`` starting at ``start_time`` (ISO-8601).

        Raises:
            MeetingProvisionError: on missing credentials, auth failure, non-2xx
                responses or transport errors. No retries are attempted.
        """
        if not self.is_available():
            raise MeetingProvisionError(MeetingErrorKind.CONFIG, f"{self.PROVIDER_NAME} credentials not configured")

        logger.info(f"[meetings] provider={self.PROVIDER_NAME} creating meeting for session {session_id}")
        client = self._client or httpx.Client(timeout=self._timeout)
        try:
            details = self._create(client, session_id, topic, duration_minutes, start_time)
        except httpx.HTTPError as e:
            logger.error(f"[meetings] provider={self.PROVIDER_NAME} transport error: {e}")
            raise MeetingProvisionError(MeetingErrorKind.UPSTREAM, f"{self.PROVIDER_NAME} request failed: {e}") from e
        except (KeyError, ValueError) as e:
            # Malformed 2xx body
            logger.error(f"[meetings] provider={self.PROVIDER_NAME} unexpected response: {e}")
            raise MeetingProvisionError(MeetingErrorKind.UPSTREAM, f"{self.PROVIDER_NAME} returned an unexpected response") from e
        finally:
            if self._client is None:
                client.close()

        logger.info(f"[meetings] provider={self.PROVIDER_NAME} meeting_id={details.meeting_id} session={session_id}")
        return details

    @staticmethod
    def _raise_for_status(response: httpx.Response, kind: MeetingErrorKind, message: str) -> None:
        if response.is_success:
            return
        logger.error(f"[meetings] {message}: status={response.status_code} body={response.text[:500]}")
        raise MeetingProvisionError(kind, message, status_code=response.status_code)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
