"""Session scheduling, approval with meeting provisioning, and session feedback."""

from datetime import UTC, datetime, timedelta

import pytest

from mentormatch.models.feedback import SessionFeedback
from mentormatch.models.session import MentorSession, SessionStatus
from mentormatch.services import sessions
from mentormatch.services.errors import InvalidTransition, ProvisioningFailed, ValidationFailed

STUDENT = {"Authorization": "Bearer mock-student-token"}
STUDENT2 = {"Authorization": "Bearer mock-student2-token"}
MENTOR = {"Authorization": "Bearer mock-mentor-token"}
MENTOR2 = {"Authorization": "Bearer mock-mentor2-token"}

SCHEDULED_AT = (datetime.now(UTC) + timedelta(days=14)).replace(hour=15, minute=30, second=0, microsecond=0)
SCHEDULED_AT_Z = SCHEDULED_AT.strftime("%Y-%m-%dT%H:%M:%SZ")


def _request_session(client, repository, **overrides):
    body = {
        "mentor_id": "mentor-1",
        "repository_id": repository.id,
        "scheduled_at": SCHEDULED_AT_Z,
        "duration_minutes": 45,
        "notes": "Walk through the plugin system",
    }
    body.update(overrides)
    return client.post("/sessions", json=body, headers=STUDENT)


@pytest.fixture
def pending_session(db_session, accepted_request, repository):
    session = MentorSession(
        student_id="student-1",
        mentor_id="mentor-1",
        repository_id=repository.id,
        scheduled_at=SCHEDULED_AT.replace(tzinfo=None),
        duration_minutes=45,
        status=SessionStatus.pending.value,
    )
    db_session.add(session)
    db_session.commit()
    return session


@pytest.fixture
def approved_session(db_session, pending_session):
    pending_session.status = SessionStatus.approved.value
    pending_session.meeting_id = "meet-0"
    pending_session.join_url = "https://meet.example/abc"
    pending_session.start_url = "https://meet.example/abc?host=1"
    db_session.commit()
    return pending_session


class TestRequestSession:

    def test_request_under_accepted_mentorship(self, client, accepted_request, repository):
        response = _request_session(client, repository)
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["duration_minutes"] == 45
        assert data["scheduled_at"] in (SCHEDULED_AT_Z, SCHEDULED_AT.isoformat())
        assert data["join_url"] is None

    def test_past_date_rejected(self, client, accepted_request, repository, db_session):
        last_month = (datetime.now(UTC) - timedelta(days=30)).strftime("%Y-%m-%dT%H:%M:%SZ")
        response = _request_session(client, repository, scheduled_at=last_month)
        assert response.status_code == 422
        assert response.json()["error"] == "ValidationFailed"
        assert db_session.query(MentorSession).count() == 0

    def test_naive_date_read_as_utc(self, store, accepted_request, repository):
        with pytest.raises(ValidationFailed):
            sessions.request_session(
                store, "student-1", "mentor-1", repository.id,
                scheduled_at=datetime.now(UTC).replace(tzinfo=None) - timedelta(minutes=5),
            )

    def test_timestamps_carry_utc_offset(self, client, accepted_request, repository):
        data = _request_session(client, repository).json()
        assert data["scheduled_at"].endswith(("Z", "+00:00"))
        assert data["created_at"].endswith(("Z", "+00:00"))

    def test_requires_accepted_mentorship(self, client, pending_request, repository):
        response = _request_session(client, repository)
        assert response.status_code == 422

    def test_duration_bounds(self, client, accepted_request, repository):
        assert _request_session(client, repository, duration_minutes=5).status_code == 422
        assert _request_session(client, repository, duration_minutes=600).status_code == 422

    def test_double_booking_allowed(self, client, accepted_request, repository):
        assert _request_session(client, repository).status_code == 201
        assert _request_session(client, repository).status_code == 201

    def test_mentor_cannot_request(self, client, accepted_request, repository):
        body = {"mentor_id": "mentor-1", "repository_id": repository.id, "scheduled_at": SCHEDULED_AT_Z}
        assert client.post("/sessions", json=body, headers=MENTOR).status_code == 403


class TestApproval:

    def test_approve_provisions_meeting(self, client, pending_session, fake_provisioner):
        response = client.post(f"/sessions/{pending_session.id}/approve", headers=MENTOR)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["join_url"] == "https://meet.example/abc"
        assert data["start_url"] == "https://meet.example/abc?host=1"
        assert data["meeting_id"] == "meet-1"

        assert len(fake_provisioner.calls) == 1
        call = fake_provisioner.calls[0]
        assert call["topic"] == "Mentorship Session: alpha"
        assert call["duration_minutes"] == 45
        assert call["start_time"] == SCHEDULED_AT_Z

    def test_provider_failure_leaves_session_pending(self, client, pending_session, fake_provisioner):
        fake_provisioner.fail = True
        response = client.post(f"/sessions/{pending_session.id}/approve", headers=MENTOR)
        assert response.status_code == 502
        assert response.json()["error"] == "ProvisioningFailed"

        detail = client.get(f"/sessions/{pending_session.id}", headers=MENTOR).json()
        assert detail["status"] == "pending"
        assert detail["join_url"] is None

    def test_approve_twice_conflicts_without_second_meeting(self, client, pending_session, fake_provisioner):
        assert client.post(f"/sessions/{pending_session.id}/approve", headers=MENTOR).status_code == 200
        response = client.post(f"/sessions/{pending_session.id}/approve", headers=MENTOR)
        assert response.status_code == 409
        assert len(fake_provisioner.calls) == 1

    def test_rejected_session_cannot_be_approved(self, client, pending_session, fake_provisioner):
        assert client.post(f"/sessions/{pending_session.id}/reject", headers=MENTOR).status_code == 200
        assert client.post(f"/sessions/{pending_session.id}/approve", headers=MENTOR).status_code == 409
        assert fake_provisioner.calls == []

    def test_other_mentor_cannot_approve(self, client, pending_session, mentor2_user, fake_provisioner):
        response = client.post(f"/sessions/{pending_session.id}/approve", headers=MENTOR2)
        assert response.status_code == 403
        assert fake_provisioner.calls == []

    def test_lost_race_keeps_winner_state(self, store, pending_session, mentor_user, fake_provisioner, db_session):
        real_transition = store.transition_session

        def reject_first(session_id, expected_status, new_status, **values):
            # A concurrent rejection lands while the provider call is in flight
            real_transition(session_id, expected_status, SessionStatus.rejected.value)
            return real_transition(session_id, expected_status, new_status, **values)

        store.transition_session = reject_first
        with pytest.raises(InvalidTransition):
            sessions.approve(store, pending_session.id, mentor_user, fake_provisioner)
        # The whole block rolled back, so the session is untouched by either writer
        assert store.get_session(pending_session.id).join_url is None

    def test_provisioning_error_maps_to_domain_error(self, store, pending_session, mentor_user, fake_provisioner):
        fake_provisioner.fail = True
        with pytest.raises(ProvisioningFailed):
            sessions.approve(store, pending_session.id, mentor_user, fake_provisioner)
        assert store.get_session(pending_session.id).status == SessionStatus.pending.value


class TestListing:

    def test_mentor_and_student_lists(self, client, pending_session, student2_user):
        assert [s["id"] for s in client.get("/sessions", headers=MENTOR).json()] == [pending_session.id]
        assert [s["id"] for s in client.get("/sessions", headers=STUDENT).json()] == [pending_session.id]
        assert client.get("/sessions", headers=STUDENT2).json() == []

    def test_status_filter(self, client, pending_session):
        assert client.get("/sessions?status=approved", headers=STUDENT).json() == []

    def test_non_participant_forbidden(self, client, pending_session, student2_user):
        assert client.get(f"/sessions/{pending_session.id}", headers=STUDENT2).status_code == 403


class TestSessionFeedback:

    def test_feedback_completes_session(self, client, approved_session):
        response = client.post(
            f"/sessions/{approved_session.id}/feedback",
            json={"rating": 4, "feedback_text": "Very helpful"},
            headers=STUDENT,
        )
        assert response.status_code == 201
        assert response.json()["session_id"] == approved_session.id
        detail = client.get(f"/sessions/{approved_session.id}", headers=STUDENT).json()
        assert detail["status"] == "completed"

    def test_feedback_requires_approved_session(self, client, pending_session, db_session):
        response = client.post(f"/sessions/{pending_session.id}/feedback", json={"rating": 4}, headers=STUDENT)
        assert response.status_code == 409
        assert db_session.query(SessionFeedback).count() == 0

    def test_rating_out_of_range_is_rejected(self, client, approved_session, db_session):
        response = client.post(f"/sessions/{approved_session.id}/feedback", json={"rating": 0}, headers=STUDENT)
        assert response.status_code == 422
        assert db_session.query(SessionFeedback).count() == 0

    def test_service_validates_rating_first(self, store, approved_session, student_user):
        with pytest.raises(ValidationFailed):
            sessions.complete_via_feedback(store, approved_session.id, True, None, student_user)
        assert store.db.query(SessionFeedback).count() == 0

    def test_no_feedback_row_when_completion_fails(self, store, approved_session, student_user, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(store, "transition_session", boom)
        with pytest.raises(RuntimeError):
            sessions.complete_via_feedback(store, approved_session.id, 5, None, student_user)
        assert store.db.query(SessionFeedback).count() == 0
        assert store.get_session(approved_session.id).status == SessionStatus.approved.value


def test_alpha_scenario_end_to_end(client, student_user, mentor_user, repository, fake_provisioner, db_session):
    """Request, accept, schedule, approve, rate: the session ends completed with one feedback row."""
    request_id = client.post(
        "/mentorship-requests",
        json={"mentor_id": "mentor-1", "repository_id": repository.id},
        headers=STUDENT,
    ).json()["id"]
    assert client.post(f"/mentorship-requests/{request_id}/accept", headers=MENTOR).json()["status"] == "accepted"

    tomorrow = (datetime.now(UTC) + timedelta(days=1)).replace(microsecond=0)
    session = _request_session(client, repository, scheduled_at=tomorrow.isoformat(), duration_minutes=60).json()
    assert session["status"] == "pending"

    approved = client.post(f"/sessions/{session['id']}/approve", headers=MENTOR).json()
    assert approved["status"] == "approved"
    assert approved["join_url"] == "https://meet.example/abc"
    assert fake_provisioner.calls[0]["start_time"] == tomorrow.strftime("%Y-%m-%dT%H:%M:%SZ")

    response = client.post(f"/sessions/{session['id']}/feedback", json={"rating": 5}, headers=STUDENT)
    assert response.status_code == 201

    assert client.get(f"/sessions/{session['id']}", headers=STUDENT).json()["status"] == "completed"
    rows = db_session.query(SessionFeedback).filter_by(session_id=session["id"]).all()
    assert [r.rating for r in rows] == [5]
