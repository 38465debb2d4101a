"""Feedback collection and reporting.

Feedback rows are written by the lifecycle services (mentorship and session
``complete_via_feedback``) in the same transaction as the parent's move to
``completed``. This module owns rating validation and the read side.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from mentormatch.models.feedback import MAX_RATING, MIN_RATING
from mentormatch.services.errors import ValidationFailed
from mentormatch.store import MentorStore

logger = logging.getLogger(__name__)


def validate_rating(rating) -> int:
    """Reject anything that is not an integer in [1, 5] before any write happens."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationFailed("Rating must be a whole number")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationFailed(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def clean_feedback_text(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return text or None


@dataclass
class FeedbackEntry:
    id: str
    kind: str  # "mentorship" | "session"
    parent_id: str
    rating: int
    feedback_text: Optional[str]
    student_id: str
    mentor_id: str
    repository_name: Optional[str]
    student_name: Optional[str]
    mentor_name: Optional[str]
    created_at: object


def _mentorship_entries(rows) -> List[FeedbackEntry]:
    out = []
    for fb in rows:
        request = fb.mentorship_request
        out.append(FeedbackEntry(
            id=fb.id,
            kind="mentorship",
            parent_id=fb.mentorship_request_id,
            rating=fb.rating,
            feedback_text=fb.feedback_text,
            student_id=fb.student_id,
            mentor_id=fb.mentor_id,
            repository_name=request.repository.name if request and request.repository else None,
            student_name=request.student.name if request and request.student else None,
            mentor_name=request.mentor.name if request and request.mentor else None,
            created_at=fb.created_at,
        ))
    return out


def _session_entries(rows) -> List[FeedbackEntry]:
    out = []
    for fb in rows:
        session = fb.session
        out.append(FeedbackEntry(
            id=fb.id,
            kind="session",
            parent_id=fb.session_id,
            rating=fb.rating,
            feedback_text=fb.feedback_text,
            student_id=fb.student_id,
            mentor_id=fb.mentor_id,
            repository_name=session.repository.name if session and session.repository else None,
            student_name=session.student.name if session and session.student else None,
            mentor_name=session.mentor.name if session and session.mentor else None,
            created_at=fb.created_at,
        ))
    return out


def list_for_mentor(store: MentorStore, mentor_id: str) -> List[FeedbackEntry]:
    entries = _mentorship_entries(store.list_mentorship_feedback(mentor_id=mentor_id))
    entries += _session_entries(store.list_session_feedback(mentor_id=mentor_id))
    return sorted(entries, key=lambda e: e.created_at, reverse=True)


def list_for_student(store: MentorStore, student_id: str) -> List[FeedbackEntry]:
    entries = _mentorship_entries(store.list_mentorship_feedback(student_id=student_id))
    entries += _session_entries(store.list_session_feedback(student_id=student_id))
    return sorted(entries, key=lambda e: e.created_at, reverse=True)


def mentor_summary(store: MentorStore, mentor_id: str) -> dict:
    entries = list_for_mentor(store, mentor_id)
    count = len(entries)
    average = round(sum(e.rating for e in entries) / count, 2) if count else None
    distribution = {str(r): 0 for r in range(MIN_RATING, MAX_RATING + 1)}
    for e in entries:
        distribution[str(e.rating)] += 1
    return {
        "mentor_id": mentor_id,
        "count": count,
        "average_rating": average,
        "distribution": distribution,
        "mentorship_count": sum(1 for e in entries if e.kind == "mentorship"),
        "session_count": sum(1 for e in entries if e.kind == "session"),
    }
