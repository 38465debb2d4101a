"""Audit logging helper functions for lifecycle events.

Standard single-line logs so they are easy to index.
"""
from __future__ import annotations
import logging
from typing import Optional, Any

from mentormatch.utils.datetime import utc_now

_logger = logging.getLogger("mentormatch.audit")


def _emit(event: str, user_id: Optional[str] = None, **data: Any):
    payload = {"ts": utc_now().isoformat(), "event": event}
    if user_id:
        payload["user_id"] = user_id
    payload.update(data)
    parts = [f"{k}={repr(v)}" for k, v in payload.items()]
    _logger.info("AUDIT " + " ".join(parts))

# Public convenience wrappers

def log_mentorship_create(user_id: str, request_id: str, mentor_id: str, repository_id: str):
    _emit("mentorship.create", user_id=user_id, request_id=request_id, mentor_id=mentor_id, repository_id=repository_id)

def log_mentorship_status(user_id: str, request_id: str, old_status: str, new_status: str):
    _emit("mentorship.status", user_id=user_id, request_id=request_id, old_status=old_status, new_status=new_status)

def log_session_request(user_id: str, session_id: str, mentor_id: str, scheduled_at: str, duration_minutes: int):
    _emit("session.request", user_id=user_id, session_id=session_id, mentor_id=mentor_id,
          scheduled_at=scheduled_at, duration_minutes=duration_minutes)

def log_session_status(user_id: str, session_id: str, old_status: str, new_status: str, meeting_id: str | None = None):
    event = {"approved": "session.approve", "rejected": "session.reject"}.get(new_status, "session.status")
    _emit(event, user_id=user_id, session_id=session_id, old_status=old_status, new_status=new_status,
          meeting_id=meeting_id)

def log_feedback_submit(user_id: str, parent_type: str, parent_id: str, rating: int):
    _emit("feedback.submit", user_id=user_id, parent_type=parent_type, parent_id=parent_id, rating=rating)

def log_message_send(user_id: str, message_id: str, receiver_id: str, kind: str):
    _emit("message.send", user_id=user_id, message_id=message_id, receiver_id=receiver_id, kind=kind)
