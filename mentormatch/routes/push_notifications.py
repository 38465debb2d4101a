"""Push notification device registration endpoints."""

from fastapi import APIRouter, Depends
import logging

from mentormatch.models.device_token import DevicePlatform, DeviceToken
from mentormatch.models.profile import Profile
from mentormatch.schemas.push_notification import (
    RegisterDeviceRequest,
    RegisterDeviceResponse,
    UnregisterDeviceRequest,
)
from mentormatch.services.auth import get_current_user
from mentormatch.store import MentorStore, get_store
from mentormatch.utils.datetime import utc_now

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/push-notifications", tags=["Push Notifications"])


def _response(token: DeviceToken, message: str) -> RegisterDeviceResponse:
    return RegisterDeviceResponse(
        id=token.id,
        user_id=token.user_id,
        platform=token.platform.value,
        created_at=token.created_at,
        message=message,
    )


@router.post("/register-device", response_model=RegisterDeviceResponse)
def register_device(
    request: RegisterDeviceRequest,
    current_user: Profile = Depends(get_current_user),
    store: MentorStore = Depends(get_store),
):
    """Register a browser/device for chat push notifications.

    If the token already exists for this user, updates it.
    If the token exists for a different user, reassigns it (device changed users).
    """
    existing = store.get_device_token(request.fcm_token)

    if existing:
        same_user = existing.user_id == current_user.id
        with store.atomic():
            existing.user_id = current_user.id
            existing.platform = DevicePlatform(request.platform.value)
            existing.last_used = utc_now()
            existing.is_active = "true"
        if same_user:
            return _response(existing, "Device token updated")
        logger.info(f"Reassigned device token to user {current_user.id}")
        return _response(existing, "Device registered (reassigned from previous user)")

    device_token = DeviceToken(
        user_id=current_user.id,
        fcm_token=request.fcm_token,
        platform=DevicePlatform(request.platform.value),
    )
    with store.atomic():
        store.add_device_token(device_token)

    logger.info(f"Registered new device for user {current_user.id} on {request.platform.value}")
    return _response(device_token, "Device registered successfully")


@router.post("/unregister-device")
def unregister_device(
    request: UnregisterDeviceRequest,
    current_user: Profile = Depends(get_current_user),
    store: MentorStore = Depends(get_store),
):
    """Called when the user logs out or disables notifications."""
    token = store.get_device_token(request.fcm_token)
    if not token or token.user_id != current_user.id:
        # Token not found or belongs to different user - that's fine, no error
        return {"message": "Device unregistered", "found": False}

    with store.atomic():
        store.delete_device_token(token)
    return {"message": "Device unregistered", "found": True}
