from fastapi import APIRouter, Depends, Query
from typing import List, Optional
import logging

from mentormatch.exceptions import NotFoundException
from mentormatch.models.profile import Profile
from mentormatch.models.repository import Repository
from mentormatch.schemas.profile import ProfileSummary
from mentormatch.schemas.repository import RepositoryIn, RepositoryOut, RepositoryUpdate
from mentormatch.services.auth import get_current_user, require_mentor
from mentormatch.store import MentorStore, get_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/repositories", tags=["Repositories"])


def _get_or_404(store: MentorStore, repository_id: str) -> Repository:
    repo = store.get_repository(repository_id)
    if not repo:
        raise NotFoundException("Repository not found")
    return repo


@router.get("", response_model=List[RepositoryOut])
def list_repositories(
    language: Optional[str] = Query(None, max_length=60),
    q: Optional[str] = Query(None, max_length=200, description="Search name and description"),
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    return store.list_repositories(language=language, search=q)


@router.get("/{repository_id}", response_model=RepositoryOut)
def get_repository(
    repository_id: str,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    return _get_or_404(store, repository_id)


@router.get("/{repository_id}/mentors", response_model=List[ProfileSummary])
def list_repository_mentors(
    repository_id: str,
    store: MentorStore = Depends(get_store),
    current_user: Profile = Depends(get_current_user),
):
    return _get_or_404(store, repository_id).mentors


# Any mentor may curate the catalog; there is no per-repository owner.
@router.post("", response_model=RepositoryOut, status_code=201)
def create_repository(
    payload: RepositoryIn,
    store: MentorStore = Depends(get_store),
    mentor: Profile = Depends(require_mentor),
):
    repo = Repository(**payload.model_dump())
    with store.atomic():
        store.add_repository(repo)
    logger.info(f"Mentor {mentor.id} added repository {repo.id} ({repo.name})")
    return repo


@router.put("/{repository_id}", response_model=RepositoryOut)
def update_repository(
    repository_id: str,
    payload: RepositoryUpdate,
    store: MentorStore = Depends(get_store),
    mentor: Profile = Depends(require_mentor),
):
    repo = _get_or_404(store, repository_id)
    with store.atomic():
        for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(repo, field, value)
    return repo


@router.delete("/{repository_id}", status_code=204)
def delete_repository(
    repository_id: str,
    store: MentorStore = Depends(get_store),
    mentor: Profile = Depends(require_mentor),
):
    repo = _get_or_404(store, repository_id)
    with store.atomic():
        store.delete_repository(repo)
    logger.info(f"Mentor {mentor.id} deleted repository {repository_id}")
