from pydantic import BaseModel, Field
from typing import Optional
from mentormatch.schemas.common import UTCDateTime

from mentormatch.models.session import SessionStatus
from mentormatch.schemas.profile import ProfileSummary
from mentormatch.schemas.repository import RepositoryBrief


class SessionCreate(BaseModel):
    mentor_id: str
    repository_id: str
    scheduled_at: UTCDateTime
    duration_minutes: int = 60
    notes: Optional[str] = Field(None, max_length=2000)


class SessionOut(BaseModel):
    id: str
    student_id: str
    mentor_id: str
    repository_id: str
    scheduled_at: UTCDateTime
    duration_minutes: int
    notes: Optional[str] = None
    status: SessionStatus
    meeting_id: Optional[str] = None
    join_url: Optional[str] = None
    start_url: Optional[str] = None
    created_at: UTCDateTime
    student: Optional[ProfileSummary] = None
    mentor: Optional[ProfileSummary] = None
    repository: Optional[RepositoryBrief] = None

    model_config = {
        'from_attributes': True
    }
