from sqlalchemy import Column, String, DateTime, Enum, Text, JSON
from sqlalchemy.orm import relationship
import enum
from datetime import datetime, UTC
from mentormatch.db import Base
import uuid

class ProfileRole(enum.Enum):
    student = "student"
    mentor = "mentor"

class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(Enum(ProfileRole), nullable=False, default=ProfileRole.student)
    bio = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    interests = Column(JSON, nullable=False, default=list)
    profile_pic = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    # Repositories this profile has volunteered to mentor (mentors only)
    mentored_repositories = relationship(
        "Repository",
        secondary="mentor_repositories",
        back_populates="mentors",
        order_by="Repository.stars.desc()",
    )
    device_tokens = relationship("DeviceToken", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_mentor(self) -> bool:
        return self.role == ProfileRole.mentor
