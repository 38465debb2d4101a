from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import enum
import uuid

from mentormatch.db import Base


class RequestStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    completed = "completed"


# Statuses that count as an open request for the (student, mentor, repository) tuple
OPEN_REQUEST_STATUSES = (RequestStatus.pending.value, RequestStatus.accepted.value)


class MentorshipRequest(Base):
    __tablename__ = "mentorship_requests"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    mentor_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    repository_id = Column(String, ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False)
    status = Column(String, nullable=False, default=RequestStatus.pending.value)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    student = relationship("Profile", foreign_keys=[student_id])
    mentor = relationship("Profile", foreign_keys=[mentor_id])
    repository = relationship("Repository")

    __table_args__ = (
        # One open request per tuple; rejected/completed rows may repeat
        Index(
            "uq_mentorship_requests_open_tuple",
            "student_id", "mentor_id", "repository_id",
            unique=True,
            postgresql_where=text("status IN ('pending', 'accepted')"),
            sqlite_where=text("status IN ('pending', 'accepted')"),
        ),
    )
