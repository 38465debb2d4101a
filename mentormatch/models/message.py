from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Float, Index
from datetime import datetime, UTC
import enum
import uuid

from mentormatch.db import Base


class MessageKind(str, enum.Enum):
    text = "text"
    voice = "voice"


class Message(Base):
    """Chat message. Text messages carry `content`; voice messages carry the voice_* columns."""
    __tablename__ = "messages"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    sender_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String, nullable=False, default=MessageKind.text.value)
    content = Column(Text, nullable=True)
    voice_duration_seconds = Column(Float, nullable=True)
    voice_audio_data = Column(Text, nullable=True)  # base64
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("ix_messages_pair_created", "sender_id", "receiver_id", "created_at"),
    )
