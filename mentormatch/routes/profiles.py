from fastapi import APIRouter, Depends
from typing import List

from mentormatch.exceptions import NotFoundException
from mentormatch.models.profile import Profile
from mentormatch.schemas.profile import MentorRepositoriesUpdate, ProfileOut, ProfileSummary, ProfileUpdate
from mentormatch.schemas.repository import MentorOut, RepositoryBrief
from mentormatch.services.auth import get_current_user, require_mentor
from mentormatch.services.errors import ValidationFailed
from mentormatch.store import MentorStore, get_store

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("/me", response_model=ProfileOut)
def get_my_profile(current_user: Profile = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=ProfileOut)
def update_my_profile(
    payload: ProfileUpdate,
    current_user: Profile = Depends(get_current_user),
    store: MentorStore = Depends(get_store),
):
    updates = payload.model_dump(exclude_unset=True)
    with store.atomic():
        for field, value in updates.items():
            if field == "name" and not value:
                continue
            setattr(current_user, field, value)
    return current_user


@router.get("/mentors", response_model=List[MentorOut])
def list_mentors(store: MentorStore = Depends(get_store), current_user: Profile = Depends(get_current_user)):
    return store.list_mentors()


@router.get("/me/repositories", response_model=List[RepositoryBrief])
def get_my_repositories(current_user: Profile = Depends(require_mentor)):
    return current_user.mentored_repositories


@router.put("/me/repositories", response_model=List[RepositoryBrief])
def set_my_repositories(
    payload: MentorRepositoriesUpdate,
    current_user: Profile = Depends(require_mentor),
    store: MentorStore = Depends(get_store),
):
    """Replace the set of repositories this mentor volunteers for."""
    missing = [rid for rid in payload.repository_ids if store.get_repository(rid) is None]
    if missing:
        raise ValidationFailed(f"Unknown repository ids: {', '.join(missing)}")
    with store.atomic():
        store.replace_mentor_repositories(current_user.id, payload.repository_ids)
    return current_user.mentored_repositories


@router.get("/{profile_id}", response_model=ProfileSummary)
def get_profile(
    profile_id: str,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    profile = store.get_profile(profile_id)
    if not profile:
        raise NotFoundException("Profile not found")
    return profile
