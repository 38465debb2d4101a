"""Typed storage boundary over the SQLAlchemy session.

Services never touch the ORM session directly; they receive a ``MentorStore``
and group their writes inside ``store.atomic()``.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from fastapi import Depends
from sqlalchemy import delete, or_, update
from sqlalchemy.orm import Session, defer, selectinload

from mentormatch.db import get_db
from mentormatch.models.device_token import DeviceToken
from mentormatch.models.feedback import MentorshipFeedback, SessionFeedback
from mentormatch.models.mentorship import MentorshipRequest, OPEN_REQUEST_STATUSES
from mentormatch.models.message import Message
from mentormatch.models.profile import Profile, ProfileRole
from mentormatch.models.repository import MentorRepository, Repository
from mentormatch.models.session import MentorSession

logger = logging.getLogger(__name__)


class MentorStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def atomic(self) -> Iterator["MentorStore"]:
        """Commit everything written inside the block, or nothing."""
        try:
            yield self
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def _add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    def _compare_and_set(self, model, row_id: str, expected_status: str, **values) -> bool:
        """Single-statement conditional update; False when the row left ``expected_status``."""
        result = self.db.execute(
            update(model)
            .where(model.id == row_id, model.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    # --- profiles ---

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        return self.db.get(Profile, profile_id)

    def get_profile_by_email(self, email: str) -> Optional[Profile]:
        return self.db.query(Profile).filter(Profile.email == email).first()

    def add_profile(self, profile: Profile) -> Profile:
        return self._add(profile)

    def list_mentors(self) -> List[Profile]:
        return (
            self.db.query(Profile)
            .options(selectinload(Profile.mentored_repositories))
            .filter(Profile.role == ProfileRole.mentor)
            .order_by(Profile.name)
            .all()
        )

    # --- repositories ---

    def get_repository(self, repository_id: str) -> Optional[Repository]:
        return self.db.get(Repository, repository_id)

    def list_repositories(self, language: Optional[str] = None, search: Optional[str] = None) -> List[Repository]:
        q = self.db.query(Repository).options(selectinload(Repository.mentors))
        if language:
            q = q.filter(Repository.language.ilike(language))
        if search:
            pattern = f"%{search}%"
            q = q.filter(or_(Repository.name.ilike(pattern), Repository.description.ilike(pattern)))
        return q.order_by(Repository.stars.desc(), Repository.name).all()

    def add_repository(self, repository: Repository) -> Repository:
        return self._add(repository)

    def delete_repository(self, repository: Repository) -> None:
        self.db.execute(delete(MentorRepository).where(MentorRepository.repository_id == repository.id))
        self.db.delete(repository)
        self.db.flush()

    def mentors_repository(self, mentor_id: str, repository_id: str) -> bool:
        return self.db.get(MentorRepository, (mentor_id, repository_id)) is not None

    def replace_mentor_repositories(self, mentor_id: str, repository_ids: Sequence[str]) -> None:
        self.db.execute(delete(MentorRepository).where(MentorRepository.mentor_id == mentor_id))
        for repository_id in dict.fromkeys(repository_ids):
            self.db.add(MentorRepository(mentor_id=mentor_id, repository_id=repository_id))
        self.db.flush()
        self.db.expire_all()

    # --- mentorship requests ---

    def get_request(self, request_id: str) -> Optional[MentorshipRequest]:
        return self.db.get(MentorshipRequest, request_id)

    def add_request(self, request: MentorshipRequest) -> MentorshipRequest:
        return self._add(request)

    def find_request(
        self, student_id: str, mentor_id: str, repository_id: str, statuses: Sequence[str] = OPEN_REQUEST_STATUSES
    ) -> Optional[MentorshipRequest]:
        return (
            self.db.query(MentorshipRequest)
            .filter(
                MentorshipRequest.student_id == student_id,
                MentorshipRequest.mentor_id == mentor_id,
                MentorshipRequest.repository_id == repository_id,
                MentorshipRequest.status.in_(statuses),
            )
            .first()
        )

    def list_requests(
        self, student_id: Optional[str] = None, mentor_id: Optional[str] = None, status: Optional[str] = None
    ) -> List[MentorshipRequest]:
        q = self.db.query(MentorshipRequest).options(
            selectinload(MentorshipRequest.repository),
            selectinload(MentorshipRequest.student),
            selectinload(MentorshipRequest.mentor),
        )
        if student_id:
            q = q.filter(MentorshipRequest.student_id == student_id)
        if mentor_id:
            q = q.filter(MentorshipRequest.mentor_id == mentor_id)
        if status:
            q = q.filter(MentorshipRequest.status == status)
        return q.order_by(MentorshipRequest.created_at.desc()).all()

    def transition_request(self, request_id: str, expected_status: str, new_status: str, **values) -> bool:
        return self._compare_and_set(MentorshipRequest, request_id, expected_status, status=new_status, **values)

    # --- sessions ---

    def get_session(self, session_id: str) -> Optional[MentorSession]:
        return self.db.get(MentorSession, session_id)

    def add_session(self, session: MentorSession) -> MentorSession:
        return self._add(session)

    def list_sessions(
        self, student_id: Optional[str] = None, mentor_id: Optional[str] = None, status: Optional[str] = None
    ) -> List[MentorSession]:
        q = self.db.query(MentorSession).options(
            selectinload(MentorSession.repository),
            selectinload(MentorSession.student),
            selectinload(MentorSession.mentor),
        )
        if student_id:
            q = q.filter(MentorSession.student_id == student_id)
        if mentor_id:
            q = q.filter(MentorSession.mentor_id == mentor_id)
        if status:
            q = q.filter(MentorSession.status == status)
        return q.order_by(MentorSession.scheduled_at.asc()).all()

    def transition_session(self, session_id: str, expected_status: str, new_status: str, **values) -> bool:
        return self._compare_and_set(MentorSession, session_id, expected_status, status=new_status, **values)

    # --- feedback ---

    def add_mentorship_feedback(self, feedback: MentorshipFeedback) -> MentorshipFeedback:
        return self._add(feedback)

    def add_session_feedback(self, feedback: SessionFeedback) -> SessionFeedback:
        return self._add(feedback)

    def list_mentorship_feedback(
        self, mentor_id: Optional[str] = None, student_id: Optional[str] = None
    ) -> List[MentorshipFeedback]:
        q = self.db.query(MentorshipFeedback).options(
            selectinload(MentorshipFeedback.mentorship_request).selectinload(MentorshipRequest.repository)
        )
        if mentor_id:
            q = q.filter(MentorshipFeedback.mentor_id == mentor_id)
        if student_id:
            q = q.filter(MentorshipFeedback.student_id == student_id)
        return q.order_by(MentorshipFeedback.created_at.desc()).all()

    def list_session_feedback(
        self, mentor_id: Optional[str] = None, student_id: Optional[str] = None
    ) -> List[SessionFeedback]:
        q = self.db.query(SessionFeedback).options(
            selectinload(SessionFeedback.session).selectinload(MentorSession.repository)
        )
        if mentor_id:
            q = q.filter(SessionFeedback.mentor_id == mentor_id)
        if student_id:
            q = q.filter(SessionFeedback.student_id == student_id)
        return q.order_by(SessionFeedback.created_at.desc()).all()

    # --- messages ---

    def add_message(self, message: Message) -> Message:
        return self._add(message)

    def conversation(self, user_a: str, user_b: str) -> List[Message]:
        return (
            self.db.query(Message)
            .filter(
                or_(
                    (Message.sender_id == user_a) & (Message.receiver_id == user_b),
                    (Message.sender_id == user_b) & (Message.receiver_id == user_a),
                )
            )
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )

    def messages_involving(self, user_id: str) -> List[Message]:
        return (
            self.db.query(Message)
            .options(defer(Message.voice_audio_data))
            .filter(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .order_by(Message.created_at.desc())
            .all()
        )

    def mark_read(self, receiver_id: str, message_ids: Sequence[str]) -> int:
        if not message_ids:
            return 0
        result = self.db.execute(
            update(Message)
            .where(Message.receiver_id == receiver_id, Message.id.in_(list(message_ids)), Message.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    # --- device tokens ---

    def active_device_tokens(self, user_id: str) -> List[DeviceToken]:
        return (
            self.db.query(DeviceToken)
            .filter(DeviceToken.user_id == user_id, DeviceToken.is_active == "true")
            .all()
        )

    def get_device_token(self, fcm_token: str) -> Optional[DeviceToken]:
        return self.db.query(DeviceToken).filter(DeviceToken.fcm_token == fcm_token).first()

    def add_device_token(self, token: DeviceToken) -> DeviceToken:
        return self._add(token)

    def delete_device_token(self, token: DeviceToken) -> None:
        self.db.delete(token)
        self.db.flush()


def get_store(db: Session = Depends(get_db)) -> MentorStore:
    return MentorStore(db)
