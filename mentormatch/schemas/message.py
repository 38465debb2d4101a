from pydantic import BaseModel, Field
from typing import Annotated, List, Literal, Optional, Union
from mentormatch.schemas.common import UTCDateTime

from mentormatch.models.message import MessageKind
from mentormatch.models.profile import ProfileRole
from mentormatch.services.chat import (
    MAX_TEXT_LENGTH,
    MAX_VOICE_SECONDS,
    MIN_VOICE_SECONDS,
    TextMessage,
    VoiceMessage,
    body_of,
)


class TextMessageIn(BaseModel):
    kind: Literal["text"]
    receiver_id: str
    content: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH)

    def to_body(self) -> TextMessage:
        return TextMessage(content=self.content)


class VoiceMessageIn(BaseModel):
    kind: Literal["voice"]
    receiver_id: str
    duration: float = Field(..., ge=MIN_VOICE_SECONDS, le=MAX_VOICE_SECONDS, description="Length in seconds")
    audio_data: str = Field(..., min_length=1, description="base64 encoded audio (webm/opus)")

    def to_body(self) -> VoiceMessage:
        return VoiceMessage(duration_seconds=self.duration, audio_data=self.audio_data)


MessageIn = Annotated[Union[TextMessageIn, VoiceMessageIn], Field(discriminator="kind")]


class VoiceOut(BaseModel):
    duration: float
    formatted_duration: str
    audio_data: str


class MessageOut(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    kind: MessageKind
    content: Optional[str] = None
    voice: Optional[VoiceOut] = None
    read: bool
    created_at: UTCDateTime

    @classmethod
    def from_message(cls, message) -> "MessageOut":
        body = body_of(message)
        voice = None
        if isinstance(body, VoiceMessage):
            voice = VoiceOut(
                duration=body.duration_seconds,
                formatted_duration=body.formatted_duration,
                audio_data=body.audio_data,
            )
        return cls(
            id=message.id,
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
            kind=MessageKind(message.kind),
            content=body.content if isinstance(body, TextMessage) else None,
            voice=voice,
            read=bool(message.read),
            created_at=message.created_at,
        )


class MarkReadRequest(BaseModel):
    message_ids: List[str] = Field(..., min_length=1, max_length=500)


class ConversationOut(BaseModel):
    user_id: str
    name: Optional[str] = None
    role: Optional[ProfileRole] = None
    profile_pic: Optional[str] = None
    last_message: str
    last_message_kind: MessageKind
    last_message_at: UTCDateTime
    unread_count: int
