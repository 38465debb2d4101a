from pydantic import BaseModel, Field
from typing import Optional
from mentormatch.schemas.common import UTCDateTime

from mentormatch.models.mentorship import RequestStatus
from mentormatch.schemas.profile import ProfileSummary
from mentormatch.schemas.repository import RepositoryBrief


class MentorshipRequestCreate(BaseModel):
    mentor_id: str
    repository_id: str
    message: Optional[str] = Field(None, max_length=2000)


class MentorshipRequestOut(BaseModel):
    id: str
    student_id: str
    mentor_id: str
    repository_id: str
    status: RequestStatus
    message: Optional[str] = None
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None
    student: Optional[ProfileSummary] = None
    mentor: Optional[ProfileSummary] = None
    repository: Optional[RepositoryBrief] = None

    model_config = {
        'from_attributes': True
    }


class FeedbackCreate(BaseModel):
    # Range is enforced again in the service before any write
    rating: int = Field(..., ge=1, le=5)
    feedback_text: Optional[str] = Field(None, max_length=5000)
