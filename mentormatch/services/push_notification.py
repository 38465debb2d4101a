"""Push notification service using Firebase Cloud Messaging."""

import logging
from typing import List, Optional, Dict, Any

from mentormatch.schemas.push_notification import PushNotificationPayload
from mentormatch.store import MentorStore

logger = logging.getLogger(__name__)


def _is_fcm_available() -> bool:
    """Check if Firebase Cloud Messaging is available."""
    try:
        import firebase_admin
        from firebase_admin import messaging  # noqa: F401
        # Check if Firebase app is initialized
        firebase_admin.get_app()
        return True
    except Exception:
        return False


def _convert_data_to_strings(data: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Convert data payload values to strings (FCM requirement)."""
    if not data:
        return {}
    return {k: str(v) for k, v in data.items() if v is not None}


class PushNotificationService:
    """Service for sending push notifications via FCM."""

    @staticmethod
    def send_to_user(
        store: MentorStore,
        user_id: str,
        payload: PushNotificationPayload
    ) -> Dict[str, Any]:
        """Send push notification to all devices of a specific user.

        Args:
            store: Storage boundary for the current request
            user_id: Target user's ID
            payload: Notification content

        Returns:
            Dict with success count and any errors
        """
        if not _is_fcm_available():
            logger.debug("FCM not available - push notification skipped")
            return {"success_count": 0, "failure_count": 0, "message": "FCM not configured"}

        tokens = store.active_device_tokens(user_id)
        if not tokens:
            logger.info(f"No active device tokens for user {user_id}")
            return {"success_count": 0, "failure_count": 0, "message": "No registered devices"}

        fcm_tokens = [t.fcm_token for t in tokens]
        return PushNotificationService._send_multicast(store, fcm_tokens, payload)

    @staticmethod
    def _send_multicast(
        store: MentorStore,
        fcm_tokens: List[str],
        payload: PushNotificationPayload
    ) -> Dict[str, Any]:
        """Send to multiple tokens using multicast.

        FCM supports up to 500 tokens per multicast.
        """
        from firebase_admin import messaging
        from firebase_admin.exceptions import FirebaseError

        if not fcm_tokens:
            return {"success_count": 0, "failure_count": 0}

        notification = messaging.Notification(title=payload.title, body=payload.body)
        webpush_config = None
        if payload.link:
            webpush_config = messaging.WebpushConfig(
                fcm_options=messaging.WebpushFCMOptions(link=payload.link)
            )

        message = messaging.MulticastMessage(
            tokens=fcm_tokens[:500],
            notification=notification,
            data=_convert_data_to_strings(payload.data),
            webpush=webpush_config,
        )

        try:
            response = messaging.send_each_for_multicast(message)
        except FirebaseError as e:
            logger.error(f"Multicast send failed: {e}")
            return {"success_count": 0, "failure_count": len(fcm_tokens), "error": str(e)}

        logger.info(
            f"Multicast result: {response.success_count} success, "
            f"{response.failure_count} failures"
        )

        # Handle failed tokens (invalid/expired)
        if response.failure_count > 0:
            for idx, send_response in enumerate(response.responses):
                if not send_response.success:
                    error = send_response.exception
                    if error and ("UNREGISTERED" in str(error) or "INVALID" in str(error)):
                        PushNotificationService._deactivate_token(store, fcm_tokens[idx])

        return {
            "success_count": response.success_count,
            "failure_count": response.failure_count,
        }

    @staticmethod
    def _deactivate_token(store: MentorStore, fcm_token: str) -> None:
        """Mark a token inactive after FCM reports it unregistered."""
        token = store.get_device_token(fcm_token)
        if token:
            with store.atomic():
                token.is_active = "false"
            logger.info(f"Deactivated invalid FCM token for user {token.user_id}")
