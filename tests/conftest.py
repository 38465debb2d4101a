import os

# Must be set before the app (and its engine/settings) is imported
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mentormatch.main import app
from mentormatch.db import Base, get_db
from mentormatch.models.mentorship import MentorshipRequest, RequestStatus
from mentormatch.models.profile import Profile, ProfileRole
from mentormatch.models.repository import MentorRepository, Repository
from mentormatch.services.meetings import MeetingDetails, MeetingErrorKind, MeetingProvisionError, MeetingProvisioner
from mentormatch.services.meetings import get_meeting_provisioner
from mentormatch.store import MentorStore

# Use SQLite in-memory for test DB
TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
# StaticPool so the TestClient's sessions and the fixtures' session share one
# in-memory database.
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_test_db():
    # recreate schema for each test to ensure isolation
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_overrides():
    yield
    app.dependency_overrides.clear()
    app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def store(db_session):
    return MentorStore(db_session)


def _profile(db_session, uid, name, role):
    user = Profile(
        id=uid,
        name=name,
        email=f"{uid}@example.com",
        role=role,
        skills=[],
        interests=[],
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def student_user(db_session):
    return _profile(db_session, "student-1", "Student One", ProfileRole.student)


@pytest.fixture
def student2_user(db_session):
    return _profile(db_session, "student-2", "Student Two", ProfileRole.student)


@pytest.fixture
def mentor_user(db_session):
    return _profile(db_session, "mentor-1", "Mentor One", ProfileRole.mentor)


@pytest.fixture
def mentor2_user(db_session):
    return _profile(db_session, "mentor-2", "Mentor Two", ProfileRole.mentor)


@pytest.fixture
def repository(db_session, mentor_user):
    repo = Repository(
        name="alpha",
        description="A friendly Python web framework",
        github_url="https://github.com/example/alpha",
        language="Python",
        stars=1200,
    )
    db_session.add(repo)
    db_session.flush()
    db_session.add(MentorRepository(mentor_id=mentor_user.id, repository_id=repo.id))
    db_session.commit()
    return repo


@pytest.fixture
def pending_request(db_session, student_user, mentor_user, repository):
    request = MentorshipRequest(
        student_id=student_user.id,
        mentor_id=mentor_user.id,
        repository_id=repository.id,
        status=RequestStatus.pending.value,
    )
    db_session.add(request)
    db_session.commit()
    return request


@pytest.fixture
def accepted_request(db_session, pending_request):
    pending_request.status = RequestStatus.accepted.value
    db_session.commit()
    return pending_request


class FakeProvisioner(MeetingProvisioner):
    """Records calls instead of talking to a video provider."""

    PROVIDER_NAME = "fake"

    def _init_provider(self, fail: bool = False, **kwargs) -> None:
        self.fail = fail
        self.calls = []

    def is_available(self) -> bool:
        return True

    def _create(self, client, session_id, topic, duration_minutes, start_time) -> MeetingDetails:
        self.calls.append({
            "session_id": session_id,
            "topic": topic,
            "duration_minutes": duration_minutes,
            "start_time": start_time,
        })
        if self.fail:
            raise MeetingProvisionError(MeetingErrorKind.UPSTREAM, "provider unavailable", status_code=503)
        return MeetingDetails(
            meeting_id=f"meet-{len(self.calls)}",
            join_url="https://meet.example/abc",
            start_url="https://meet.example/abc?host=1",
            provider=self.PROVIDER_NAME,
        )


@pytest.fixture
def fake_provisioner():
    # A dummy client keeps create_meeting from building a real httpx.Client
    provisioner = FakeProvisioner(client=object())
    app.dependency_overrides[get_meeting_provisioner] = lambda: provisioner
    return provisioner
