from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from mentormatch.models.profile import Profile
from mentormatch.models.session import SessionStatus
from mentormatch.schemas.feedback import SessionFeedbackOut
from mentormatch.schemas.mentorship import FeedbackCreate
from mentormatch.schemas.session import SessionCreate, SessionOut
from mentormatch.services import sessions
from mentormatch.services.auth import get_current_user, require_mentor, require_student
from mentormatch.services.meetings import MeetingProvisioner, get_meeting_provisioner
from mentormatch.store import MentorStore, get_store

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.post("", response_model=SessionOut, status_code=201)
def request_session(
    payload: SessionCreate,
    store: MentorStore = Depends(get_store),
    student: Profile = Depends(require_student),
):
    return sessions.request_session(
        store,
        student_id=student.id,
        mentor_id=payload.mentor_id,
        repository_id=payload.repository_id,
        scheduled_at=payload.scheduled_at,
        duration_minutes=payload.duration_minutes,
        notes=payload.notes,
    )


@router.get("", response_model=List[SessionOut])
def list_sessions(
    status: Optional[SessionStatus] = Query(None),
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    status_value = status.value if status else None
    if current_user.is_mentor:
        return sessions.list_for_mentor(store, current_user.id, status_value)
    return sessions.list_for_student(store, current_user.id, status_value)


@router.get("/{session_id}", response_model=SessionOut)
def get_session(
    session_id: str,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    return sessions.get_session_for(store, session_id, current_user)


@router.post("/{session_id}/approve", response_model=SessionOut)
def approve_session(
    session_id: str,
    store: MentorStore = Depends(get_store),
    mentor: Profile = Depends(require_mentor),
    provisioner: MeetingProvisioner = Depends(get_meeting_provisioner),
):
    """Create the video meeting, then mark the session approved."""
    return sessions.approve(store, session_id, mentor, provisioner)


@router.post("/{session_id}/reject", response_model=SessionOut)
def reject_session(
    session_id: str,
    store: MentorStore = Depends(get_store),
    mentor: Profile = Depends(require_mentor),
):
    return sessions.reject(store, session_id, mentor)


@router.post("/{session_id}/feedback", response_model=SessionFeedbackOut, status_code=201)
def submit_session_feedback(
    session_id: str,
    payload: FeedbackCreate,
    store: MentorStore = Depends(get_store),
    student: Profile = Depends(require_student),
):
    return sessions.complete_via_feedback(store, session_id, payload.rating, payload.feedback_text, student)
