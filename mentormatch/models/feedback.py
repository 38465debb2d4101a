from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import uuid

from mentormatch.db import Base

MIN_RATING = 1
MAX_RATING = 5


class MentorshipFeedback(Base):
    __tablename__ = "mentorship_feedback"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    mentorship_request_id = Column(
        String, ForeignKey("mentorship_requests.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    student_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    mentor_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    feedback_text = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    mentorship_request = relationship("MentorshipRequest")

    __table_args__ = (
        CheckConstraint(f"rating BETWEEN {MIN_RATING} AND {MAX_RATING}", name="ck_mentorship_feedback_rating"),
    )


class SessionFeedback(Base):
    __tablename__ = "session_feedback"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(String, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, unique=True)
    student_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    mentor_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    feedback_text = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    session = relationship("MentorSession")

    __table_args__ = (
        CheckConstraint(f"rating BETWEEN {MIN_RATING} AND {MAX_RATING}", name="ck_session_feedback_rating"),
    )
