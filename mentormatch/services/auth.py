from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth as firebase_auth
import logging

from mentormatch.core.settings import settings
from mentormatch.exceptions import ForbiddenException, UnauthorizedException
from mentormatch.models.profile import Profile, ProfileRole
from mentormatch.store import MentorStore, get_store
from mentormatch.utils.datetime import utc_now

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Development/test tokens (ensure persistence so FK constraints pass)
MOCK_TOKENS = {
    "mock-student-token": ("student-1", "Student One", "student@example.com", ProfileRole.student),
    "mock-student2-token": ("student-2", "Student Two", "student2@example.com", ProfileRole.student),
    "mock-mentor-token": ("mentor-1", "Mentor One", "mentor@example.com", ProfileRole.mentor),
    "mock-mentor2-token": ("mentor-2", "Mentor Two", "mentor2@example.com", ProfileRole.mentor),
}


def _mock_user(store: MentorStore, token: str) -> Profile:
    uid, name, email, role = MOCK_TOKENS[token]
    user = store.get_profile(uid)
    if not user:
        user = Profile(id=uid, name=name, email=email, role=role, skills=[], interests=[], created_at=utc_now())
        with store.atomic():
            store.add_profile(user)
    return user


def _role_from_claim(claim) -> ProfileRole:
    return ProfileRole.mentor if claim == "mentor" else ProfileRole.student


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    store: MentorStore = Depends(get_store),
) -> Profile:
    """Resolve the bearer token to a Profile, creating the profile on first sign-in."""
    if credentials is None:
        raise UnauthorizedException("Authorization header missing or invalid")
    token = credentials.credentials

    if token in MOCK_TOKENS and not settings.is_production:
        return _mock_user(store, token)

    try:
        decoded_token = firebase_auth.verify_id_token(token)
        user_id = decoded_token["uid"]
        email = decoded_token["email"]
    except Exception:
        raise UnauthorizedException("Invalid or expired token")

    user = store.get_profile(user_id)
    if user:
        return user

    full_name = decoded_token.get("name")
    if not full_name:
        given = decoded_token.get("given_name", "")
        family = decoded_token.get("family_name", "")
        full_name = (given + " " + family).strip() or email.split("@")[0].title()

    # Signup: the profile is created the first time a verified token is seen
    user = Profile(
        id=user_id,
        email=email,
        name=full_name,
        role=_role_from_claim(decoded_token.get("role")),
        profile_pic=decoded_token.get("picture"),
        skills=[],
        interests=[],
    )
    with store.atomic():
        store.add_profile(user)
    logger.info(f"Created profile {user.id} ({user.role.value}) on first sign-in")
    return user


def require_mentor(user: Profile = Depends(get_current_user)) -> Profile:
    if user.role != ProfileRole.mentor:
        raise ForbiddenException("Mentor access required")
    return user


def require_student(user: Profile = Depends(get_current_user)) -> Profile:
    if user.role != ProfileRole.student:
        raise ForbiddenException("Student access required")
    return user
