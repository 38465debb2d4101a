from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import uuid

from mentormatch.db import Base


class Repository(Base):
    """An open-source project students can be mentored on."""
    __tablename__ = "repositories"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    github_url = Column(String, nullable=False)
    language = Column(String, nullable=True, index=True)
    stars = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    mentors = relationship(
        "Profile",
        secondary="mentor_repositories",
        back_populates="mentored_repositories",
        order_by="Profile.name",
    )


class MentorRepository(Base):
    """Join row: a mentor is willing to mentor a repository."""
    __tablename__ = "mentor_repositories"

    mentor_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    repository_id = Column(String, ForeignKey("repositories.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
