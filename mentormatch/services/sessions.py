"""Session scheduling lifecycle.

    pending -> approved | rejected
    approved -> completed   (only through session feedback)

Approval calls the meeting provider synchronously before anything is written;
a provider failure leaves the session pending.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from mentormatch.models.feedback import SessionFeedback
from mentormatch.models.mentorship import RequestStatus
from mentormatch.models.profile import Profile
from mentormatch.models.session import MentorSession, SessionStatus
from mentormatch.services import audit
from mentormatch.services.errors import Forbidden, InvalidTransition, NotFound, ProvisioningFailed, ValidationFailed
from mentormatch.services.feedback import clean_feedback_text, validate_rating
from mentormatch.services.meetings import MeetingProvisionError, MeetingProvisioner
from mentormatch.store import MentorStore
from mentormatch.utils.datetime import ensure_aware_utc, isoformat_utc, to_naive_utc, utc_now

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 240
DEFAULT_DURATION_MINUTES = 60
DEFAULT_TOPIC = "Mentorship Session"

TRANSITIONS = {
    SessionStatus.pending: {SessionStatus.approved, SessionStatus.rejected},
    SessionStatus.approved: {SessionStatus.completed},
    SessionStatus.rejected: set(),
    SessionStatus.completed: set(),
}


def _ensure_transition(session: MentorSession, target: SessionStatus) -> SessionStatus:
    current = SessionStatus(session.status)
    if target not in TRANSITIONS[current]:
        raise InvalidTransition("session", current.value, target.value)
    return current


def get_session(store: MentorStore, session_id: str) -> MentorSession:
    session = store.get_session(session_id)
    if not session:
        raise NotFound("Session not found")
    return session


def get_session_for(store: MentorStore, session_id: str, actor: Profile) -> MentorSession:
    session = get_session(store, session_id)
    if actor.id not in (session.student_id, session.mentor_id):
        raise Forbidden("Not a participant of this session")
    return session


def _require_mentor(session: MentorSession, actor: Profile) -> None:
    if session.mentor_id != actor.id:
        raise Forbidden("Only the session's mentor can do this")


def request_session(
    store: MentorStore,
    student_id: str,
    mentor_id: str,
    repository_id: str,
    scheduled_at: datetime,
    duration_minutes: int = DEFAULT_DURATION_MINUTES,
    notes: Optional[str] = None,
) -> MentorSession:
    """Student asks for a session under an accepted mentorship.

    Overlapping sessions for the same mentor are allowed; the mentor decides
    on approval.
    """
    if scheduled_at is None:
        raise ValidationFailed("Please select a date for the session")
    if ensure_aware_utc(scheduled_at) <= utc_now():
        raise ValidationFailed("Please pick a future date for the session")
    if not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
        raise ValidationFailed(
            f"Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes"
        )
    if not store.find_request(student_id, mentor_id, repository_id, statuses=(RequestStatus.accepted.value,)):
        raise ValidationFailed("Sessions can only be scheduled under an accepted mentorship")

    session = MentorSession(
        student_id=student_id,
        mentor_id=mentor_id,
        repository_id=repository_id,
        scheduled_at=to_naive_utc(scheduled_at),
        duration_minutes=duration_minutes,
        notes=(notes or "").strip() or None,
        status=SessionStatus.pending.value,
    )
    with store.atomic():
        store.add_session(session)

    audit.log_session_request(student_id, session.id, mentor_id, isoformat_utc(scheduled_at), duration_minutes)
    return session


def approve(store: MentorStore, session_id: str, actor: Profile, provisioner: MeetingProvisioner) -> MentorSession:
    session = get_session(store, session_id)
    _require_mentor(session, actor)
    current = _ensure_transition(session, SessionStatus.approved)

    repository = session.repository
    topic = f"{DEFAULT_TOPIC}: {repository.name}" if repository else DEFAULT_TOPIC
    try:
        details = provisioner.create_meeting(
            session_id=session.id,
            topic=topic,
            duration_minutes=session.duration_minutes,
            start_time=isoformat_utc(session.scheduled_at),
        )
    except MeetingProvisionError as e:
        logger.error(f"Meeting provisioning failed for session {session.id} ({e.kind.value}): {e}")
        raise ProvisioningFailed("Could not create the meeting; the session is still pending") from e

    with store.atomic():
        won = store.transition_session(
            session.id,
            current.value,
            SessionStatus.approved.value,
            meeting_id=details.meeting_id,
            join_url=details.join_url,
            start_url=details.start_url,
            updated_at=utc_now(),
        )
        if not won:
            # Another approval/rejection landed while the provider call was in flight
            logger.warning(
                f"Session {session.id} changed state during approval; remote meeting "
                f"{details.provider}:{details.meeting_id} is orphaned"
            )
            raise InvalidTransition("session", store.get_session(session.id).status, SessionStatus.approved.value)

    audit.log_session_status(actor.id, session.id, current.value, SessionStatus.approved.value, details.meeting_id)
    return store.get_session(session.id)


def reject(store: MentorStore, session_id: str, actor: Profile) -> MentorSession:
    session = get_session(store, session_id)
    _require_mentor(session, actor)
    current = _ensure_transition(session, SessionStatus.rejected)

    with store.atomic():
        if not store.transition_session(session.id, current.value, SessionStatus.rejected.value, updated_at=utc_now()):
            raise InvalidTransition("session", store.get_session(session.id).status, SessionStatus.rejected.value)

    audit.log_session_status(actor.id, session.id, current.value, SessionStatus.rejected.value)
    return store.get_session(session.id)


def complete_via_feedback(
    store: MentorStore,
    session_id: str,
    rating: int,
    feedback_text: Optional[str],
    actor: Profile,
) -> SessionFeedback:
    """Record the student's session rating and complete the session atomically."""
    rating = validate_rating(rating)
    session = get_session(store, session_id)
    if session.student_id != actor.id:
        raise Forbidden("Only the session's student can leave feedback")
    current = _ensure_transition(session, SessionStatus.completed)

    feedback = SessionFeedback(
        session_id=session.id,
        student_id=session.student_id,
        mentor_id=session.mentor_id,
        rating=rating,
        feedback_text=clean_feedback_text(feedback_text),
    )
    try:
        with store.atomic():
            store.add_session_feedback(feedback)
            if not store.transition_session(
                session.id, current.value, SessionStatus.completed.value, updated_at=utc_now()
            ):
                raise InvalidTransition("session", session.status, SessionStatus.completed.value)
    except IntegrityError as e:
        raise InvalidTransition("session", SessionStatus.completed.value, SessionStatus.completed.value) from e

    audit.log_feedback_submit(actor.id, "session", session.id, rating)
    return feedback


def list_for_student(store: MentorStore, student_id: str, status: Optional[str] = None) -> List[MentorSession]:
    return store.list_sessions(student_id=student_id, status=status)


def list_for_mentor(store: MentorStore, mentor_id: str, status: Optional[str] = None) -> List[MentorSession]:
    return store.list_sessions(mentor_id=mentor_id, status=status)
