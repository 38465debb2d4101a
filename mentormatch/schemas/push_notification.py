"""Pydantic schemas for push notification endpoints."""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum
from mentormatch.schemas.common import UTCDateTime


class DevicePlatformEnum(str, Enum):
    ios = "ios"
    android = "android"
    web = "web"


class RegisterDeviceRequest(BaseModel):
    """Request to register a browser or device for chat push notifications."""
    fcm_token: str = Field(..., min_length=1, description="Firebase Cloud Messaging token")
    platform: DevicePlatformEnum = Field(DevicePlatformEnum.web, description="Device platform (ios, android, web)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "fcm_token": "dKzH7v...:APA91b...",
                "platform": "web",
            }
        }
    }


class RegisterDeviceResponse(BaseModel):
    id: str
    user_id: str
    platform: str
    created_at: UTCDateTime
    message: str = "Device registered successfully"


class UnregisterDeviceRequest(BaseModel):
    """Request to unregister a device (e.g., on logout)."""
    fcm_token: str = Field(..., description="Firebase Cloud Messaging token to remove")


class PushNotificationPayload(BaseModel):
    """Internal model for push notification content."""
    title: str
    body: str
    data: Optional[dict] = None
    # Web push
    link: Optional[str] = None
