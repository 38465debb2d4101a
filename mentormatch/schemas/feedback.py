from pydantic import BaseModel
from typing import Dict, Literal, Optional
from mentormatch.schemas.common import UTCDateTime


class FeedbackOut(BaseModel):
    id: str
    kind: Literal["mentorship", "session"]
    parent_id: str
    rating: int
    feedback_text: Optional[str] = None
    student_id: str
    mentor_id: str
    repository_name: Optional[str] = None
    student_name: Optional[str] = None
    mentor_name: Optional[str] = None
    created_at: UTCDateTime

    model_config = {
        'from_attributes': True
    }


class MentorshipFeedbackOut(BaseModel):
    id: str
    mentorship_request_id: str
    student_id: str
    mentor_id: str
    rating: int
    feedback_text: Optional[str] = None
    created_at: UTCDateTime

    model_config = {
        'from_attributes': True
    }


class SessionFeedbackOut(BaseModel):
    id: str
    session_id: str
    student_id: str
    mentor_id: str
    rating: int
    feedback_text: Optional[str] = None
    created_at: UTCDateTime

    model_config = {
        'from_attributes': True
    }


class MentorFeedbackSummary(BaseModel):
    mentor_id: str
    count: int
    average_rating: Optional[float] = None
    distribution: Dict[str, int]
    mentorship_count: int
    session_count: int
