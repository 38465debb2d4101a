from fastapi import APIRouter, Depends
from typing import List

from mentormatch.exceptions import NotFoundException
from mentormatch.models.profile import Profile, ProfileRole
from mentormatch.schemas.feedback import FeedbackOut, MentorFeedbackSummary
from mentormatch.services import feedback
from mentormatch.services.auth import get_current_user, require_mentor, require_student
from mentormatch.store import MentorStore, get_store

router = APIRouter(prefix="/feedback", tags=["Feedback"])


@router.get("/received", response_model=List[FeedbackOut])
def feedback_received(store: MentorStore = Depends(get_store), mentor: Profile = Depends(require_mentor)):
    return feedback.list_for_mentor(store, mentor.id)


@router.get("/given", response_model=List[FeedbackOut])
def feedback_given(store: MentorStore = Depends(get_store), student: Profile = Depends(require_student)):
    return feedback.list_for_student(store, student.id)


@router.get("/mentors/{mentor_id}/summary", response_model=MentorFeedbackSummary)
def mentor_feedback_summary(
    mentor_id: str,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    mentor = store.get_profile(mentor_id)
    if not mentor or mentor.role != ProfileRole.mentor:
        raise NotFoundException("Mentor not found")
    return feedback.mentor_summary(store, mentor_id)
