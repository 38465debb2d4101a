from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import enum
import uuid

from mentormatch.db import Base


class SessionStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    completed = "completed"


class MentorSession(Base):
    """A scheduled video session between a student and a mentor."""
    __tablename__ = "sessions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    mentor_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    repository_id = Column(String, ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False)
    scheduled_at = Column(DateTime, nullable=False)  # naive UTC
    duration_minutes = Column(Integer, nullable=False, default=60)
    notes = Column(Text, nullable=True)
    status = Column(String, nullable=False, default=SessionStatus.pending.value)

    # Filled in by the meeting provider on approval
    meeting_id = Column(String, nullable=True)
    join_url = Column(String, nullable=True)
    start_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    student = relationship("Profile", foreign_keys=[student_id])
    mentor = relationship("Profile", foreign_keys=[mentor_id])
    repository = relationship("Repository")
