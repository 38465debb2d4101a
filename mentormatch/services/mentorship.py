"""Mentorship request lifecycle.

    pending -> accepted | rejected
    accepted -> completed   (only through feedback)

Rejected and completed are terminal. Every transition is a compare-and-set on
the current status, so two racing writers cannot both succeed.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from mentormatch.models.feedback import MentorshipFeedback
from mentormatch.models.mentorship import MentorshipRequest, RequestStatus
from mentormatch.models.profile import Profile, ProfileRole
from mentormatch.services import audit
from mentormatch.services.errors import DuplicateRequest, Forbidden, InvalidTransition, NotFound, ValidationFailed
from mentormatch.services.feedback import clean_feedback_text, validate_rating
from mentormatch.store import MentorStore
from mentormatch.utils.datetime import utc_now

logger = logging.getLogger(__name__)

TRANSITIONS = {
    RequestStatus.pending: {RequestStatus.accepted, RequestStatus.rejected},
    RequestStatus.accepted: {RequestStatus.completed},
    RequestStatus.rejected: set(),
    RequestStatus.completed: set(),
}

# Statuses a mentor may set directly; completed only comes from feedback
MENTOR_DECISIONS = {RequestStatus.accepted, RequestStatus.rejected}


def _ensure_transition(request: MentorshipRequest, target: RequestStatus) -> RequestStatus:
    current = RequestStatus(request.status)
    if target not in TRANSITIONS[current]:
        raise InvalidTransition("mentorship request", current.value, target.value)
    return current


def get_request(store: MentorStore, request_id: str) -> MentorshipRequest:
    request = store.get_request(request_id)
    if not request:
        raise NotFound("Mentorship request not found")
    return request


def get_request_for(store: MentorStore, request_id: str, actor: Profile) -> MentorshipRequest:
    request = get_request(store, request_id)
    if actor.id not in (request.student_id, request.mentor_id):
        raise Forbidden("Not a participant of this mentorship request")
    return request


def create_request(
    store: MentorStore,
    student_id: str,
    mentor_id: str,
    repository_id: str,
    message: Optional[str] = None,
) -> MentorshipRequest:
    student = store.get_profile(student_id)
    if not student:
        raise NotFound("Student not found")
    if student.role != ProfileRole.student:
        raise Forbidden("Only students can request mentorship")
    mentor = store.get_profile(mentor_id)
    if not mentor or mentor.role != ProfileRole.mentor:
        raise NotFound("Mentor not found")
    if not store.get_repository(repository_id):
        raise NotFound("Repository not found")
    if not store.mentors_repository(mentor_id, repository_id):
        raise ValidationFailed("This mentor does not mentor the selected repository")

    if store.find_request(student_id, mentor_id, repository_id):
        raise DuplicateRequest("An open mentorship request already exists for this mentor and repository")

    request = MentorshipRequest(
        student_id=student_id,
        mentor_id=mentor_id,
        repository_id=repository_id,
        status=RequestStatus.pending.value,
        message=(message or "").strip() or None,
    )
    try:
        with store.atomic():
            store.add_request(request)
    except IntegrityError as exc:
        # A concurrent create for the same tuple won the partial unique index
        logger.info("Duplicate mentorship request rejected by index: student=%s mentor=%s repo=%s",
                    student_id, mentor_id, repository_id)
        raise DuplicateRequest(
            "An open mentorship request already exists for this mentor and repository"
        ) from exc

    audit.log_mentorship_create(student_id, request.id, mentor_id, repository_id)
    return request


def set_status(store: MentorStore, request_id: str, status: RequestStatus, actor: Profile) -> MentorshipRequest:
    """Mentor accepts or rejects a pending request."""
    status = RequestStatus(status)
    if status not in MENTOR_DECISIONS:
        raise ValidationFailed("Status must be 'accepted' or 'rejected'")
    request = get_request(store, request_id)
    if request.mentor_id != actor.id:
        raise Forbidden("Only the requested mentor can decide on this request")
    current = _ensure_transition(request, status)

    with store.atomic():
        if not store.transition_request(request.id, current.value, status.value, updated_at=utc_now()):
            raise InvalidTransition("mentorship request", store.get_request(request.id).status, status.value)

    audit.log_mentorship_status(actor.id, request.id, current.value, status.value)
    return store.get_request(request.id)


def complete_via_feedback(
    store: MentorStore,
    request_id: str,
    rating: int,
    feedback_text: Optional[str],
    actor: Profile,
) -> MentorshipFeedback:
    """Record the student's rating and close the mentorship in one transaction."""
    rating = validate_rating(rating)
    request = get_request(store, request_id)
    if request.student_id != actor.id:
        raise Forbidden("Only the requesting student can leave feedback")
    current = _ensure_transition(request, RequestStatus.completed)

    feedback = MentorshipFeedback(
        mentorship_request_id=request.id,
        student_id=request.student_id,
        mentor_id=request.mentor_id,
        rating=rating,
        feedback_text=clean_feedback_text(feedback_text),
    )
    try:
        with store.atomic():
            store.add_mentorship_feedback(feedback)
            if not store.transition_request(
                request.id, current.value, RequestStatus.completed.value, updated_at=utc_now()
            ):
                raise InvalidTransition("mentorship request", request.status, RequestStatus.completed.value)
    except IntegrityError as exc:
        raise InvalidTransition("mentorship request", RequestStatus.completed.value,
                                RequestStatus.completed.value) from exc

    audit.log_feedback_submit(actor.id, "mentorship", request.id, rating)
    return feedback


def list_for_student(store: MentorStore, student_id: str, status: Optional[str] = None) -> List[MentorshipRequest]:
    return store.list_requests(student_id=student_id, status=status)


def list_for_mentor(store: MentorStore, mentor_id: str, status: Optional[str] = None) -> List[MentorshipRequest]:
    return store.list_requests(mentor_id=mentor_id, status=status)
