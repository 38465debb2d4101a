"""Chat relay: append-only message log between two profiles.

A message body is either ``TextMessage`` or ``VoiceMessage``; the kind is
fixed when the row is written, so readers never have to guess by parsing.
Delivery is a best-effort FCM push to the receiver after commit.
"""
from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from mentormatch.core.settings import settings
from mentormatch.models.message import Message, MessageKind
from mentormatch.models.profile import Profile
from mentormatch.schemas.push_notification import PushNotificationPayload
from mentormatch.services import audit
from mentormatch.services.errors import NotFound, ValidationFailed
from mentormatch.services.push_notification import PushNotificationService
from mentormatch.store import MentorStore

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 5000
MIN_VOICE_SECONDS = 1
MAX_VOICE_SECONDS = 300
MAX_AUDIO_BYTES = 5 * 1024 * 1024
PREVIEW_LENGTH = 80


def format_duration(seconds: float) -> str:
    """0:07, 1:30 ..."""
    total = int(round(seconds))
    return f"{total // 60}:{total % 60:02d}"


@dataclass(frozen=True)
class TextMessage:
    content: str


@dataclass(frozen=True)
class VoiceMessage:
    duration_seconds: float
    audio_data: str  # base64

    @property
    def formatted_duration(self) -> str:
        return format_duration(self.duration_seconds)


MessageBody = Union[TextMessage, VoiceMessage]


def body_of(message: Message) -> MessageBody:
    if message.kind == MessageKind.voice.value:
        return VoiceMessage(duration_seconds=message.voice_duration_seconds or 0.0,
                            audio_data=message.voice_audio_data or "")
    return TextMessage(content=message.content or "")


def preview(message: Message) -> str:
    if message.kind == MessageKind.voice.value:
        # Must not touch voice_audio_data; conversation listings defer it
        return f"Voice message ({format_duration(message.voice_duration_seconds or 0.0)})"
    body = body_of(message)
    if len(body.content) > PREVIEW_LENGTH:
        return body.content[:PREVIEW_LENGTH - 1] + "…"
    return body.content


def _validate(body: MessageBody) -> MessageBody:
    if isinstance(body, TextMessage):
        content = body.content.strip()
        if not content:
            raise ValidationFailed("Message cannot be empty")
        if len(content) > MAX_TEXT_LENGTH:
            raise ValidationFailed(f"Message is longer than {MAX_TEXT_LENGTH} characters")
        return TextMessage(content=content)

    if not MIN_VOICE_SECONDS <= body.duration_seconds <= MAX_VOICE_SECONDS:
        raise ValidationFailed(f"Voice messages must be between {MIN_VOICE_SECONDS} and {MAX_VOICE_SECONDS} seconds")
    try:
        raw = base64.b64decode(body.audio_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationFailed("Voice message audio must be base64 encoded") from e
    if not raw:
        raise ValidationFailed("Voice message audio is empty")
    if len(raw) > MAX_AUDIO_BYTES:
        raise ValidationFailed("Voice message audio is too large")
    return body


def send_message(store: MentorStore, sender: Profile, receiver_id: str, body: MessageBody) -> Message:
    if receiver_id == sender.id:
        raise ValidationFailed("Cannot send a message to yourself")
    receiver = store.get_profile(receiver_id)
    if not receiver:
        raise NotFound("Recipient not found")
    body = _validate(body)

    if isinstance(body, VoiceMessage):
        message = Message(
            sender_id=sender.id,
            receiver_id=receiver_id,
            kind=MessageKind.voice.value,
            voice_duration_seconds=float(body.duration_seconds),
            voice_audio_data=body.audio_data,
        )
    else:
        message = Message(
            sender_id=sender.id,
            receiver_id=receiver_id,
            kind=MessageKind.text.value,
            content=body.content,
        )
    with store.atomic():
        store.add_message(message)

    audit.log_message_send(sender.id, message.id, receiver_id, message.kind)
    _push_to_receiver(store, sender, message)
    return message


def send_text(store: MentorStore, sender: Profile, receiver_id: str, content: str) -> Message:
    return send_message(store, sender, receiver_id, TextMessage(content=content))


def send_voice(
    store: MentorStore, sender: Profile, receiver_id: str, duration_seconds: float, audio_data: str
) -> Message:
    return send_message(store, sender, receiver_id, VoiceMessage(duration_seconds=duration_seconds, audio_data=audio_data))


def _push_to_receiver(store: MentorStore, sender: Profile, message: Message) -> None:
    payload = PushNotificationPayload(
        title=sender.name,
        body=preview(message),
        data={"type": "message", "message_id": message.id, "sender_id": sender.id, "kind": message.kind},
        link=f"{settings.app_url.rstrip('/')}/chat/{sender.id}",
    )
    try:
        PushNotificationService.send_to_user(store, message.receiver_id, payload)
    except Exception as e:
        # The message is already stored; the receiver still sees it on next fetch
        logger.warning(f"Push delivery failed for message {message.id}: {e}")


def conversation(store: MentorStore, me: Profile, other_id: str) -> List[Message]:
    if not store.get_profile(other_id):
        raise NotFound("User not found")
    return store.conversation(me.id, other_id)


def mark_read(store: MentorStore, me: Profile, message_ids: Sequence[str]) -> int:
    """Flag messages addressed to ``me`` as read. Safe to repeat."""
    with store.atomic():
        updated = store.mark_read(me.id, message_ids)
    return updated


def conversations(store: MentorStore, me: Profile) -> List[Dict]:
    """One entry per counterpart, most recent first."""
    summaries: Dict[str, Dict] = {}
    for message in store.messages_involving(me.id):  # newest first
        other_id = message.receiver_id if message.sender_id == me.id else message.sender_id
        entry = summaries.get(other_id)
        if entry is None:
            entry = summaries[other_id] = {
                "user_id": other_id,
                "last_message": preview(message),
                "last_message_kind": message.kind,
                "last_message_at": message.created_at,
                "unread_count": 0,
            }
        if message.receiver_id == me.id and not message.read:
            entry["unread_count"] += 1

    for other_id, entry in summaries.items():
        other: Optional[Profile] = store.get_profile(other_id)
        entry["name"] = other.name if other else None
        entry["role"] = other.role.value if other else None
        entry["profile_pic"] = other.profile_pic if other else None
    return list(summaries.values())
