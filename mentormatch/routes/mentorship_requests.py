from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from mentormatch.models.mentorship import RequestStatus
from mentormatch.models.profile import Profile
from mentormatch.schemas.feedback import MentorshipFeedbackOut
from mentormatch.schemas.mentorship import FeedbackCreate, MentorshipRequestCreate, MentorshipRequestOut
from mentormatch.services import mentorship
from mentormatch.services.auth import get_current_user, require_mentor, require_student
from mentormatch.store import MentorStore, get_store

router = APIRouter(prefix="/mentorship-requests", tags=["Mentorship Requests"])


@router.post("", response_model=MentorshipRequestOut, status_code=201)
def create_request(
    payload: MentorshipRequestCreate,
    store: MentorStore = Depends(get_store),
    student: Profile = Depends(require_student),
):
    return mentorship.create_request(
        store,
        student_id=student.id,
        mentor_id=payload.mentor_id,
        repository_id=payload.repository_id,
        message=payload.message,
    )


@router.get("", response_model=List[MentorshipRequestOut])
def list_requests(
    status: Optional[RequestStatus] = Query(None),
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    """Requests the caller made (students) or received (mentors)."""
    status_value = status.value if status else None
    if current_user.is_mentor:
        return mentorship.list_for_mentor(store, current_user.id, status_value)
    return mentorship.list_for_student(store, current_user.id, status_value)


@router.get("/{request_id}", response_model=MentorshipRequestOut)
def get_request(
    request_id: str,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    return mentorship.get_request_for(store, request_id, current_user)


@router.post("/{request_id}/accept", response_model=MentorshipRequestOut)
def accept_request(
    request_id: str,
    store: MentorStore = Depends(get_store),
    mentor: Profile = Depends(require_mentor),
):
    return mentorship.set_status(store, request_id, RequestStatus.accepted, mentor)


@router.post("/{request_id}/reject", response_model=MentorshipRequestOut)
def reject_request(
    request_id: str,
    store: MentorStore = Depends(get_store),
    mentor: Profile = Depends(require_mentor),
):
    return mentorship.set_status(store, request_id, RequestStatus.rejected, mentor)


@router.post("/{request_id}/feedback", response_model=MentorshipFeedbackOut, status_code=201)
def submit_feedback(
    request_id: str,
    payload: FeedbackCreate,
    store: MentorStore = Depends(get_store),
    student: Profile = Depends(require_student),
):
    """Rate the mentorship; this also marks the request completed."""
    return mentorship.complete_via_feedback(store, request_id, payload.rating, payload.feedback_text, student)
