from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from mentormatch.schemas.common import UTCDateTime

from mentormatch.schemas.profile import ProfileSummary


def _github_url(v: str) -> str:
    v = v.strip()
    if not (v.startswith("https://github.com/") or v.startswith("http://github.com/")):
        raise ValueError("github_url must point to github.com")
    return v.rstrip("/")


class RepositoryIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    github_url: str
    language: Optional[str] = Field(None, max_length=60)
    stars: int = Field(0, ge=0)

    @field_validator('github_url')
    def validate_github_url(cls, v: str):
        return _github_url(v)


class RepositoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    github_url: Optional[str] = None
    language: Optional[str] = Field(None, max_length=60)
    stars: Optional[int] = Field(None, ge=0)

    @field_validator('github_url')
    def validate_github_url(cls, v: str | None):
        return _github_url(v) if v is not None else v


class RepositoryOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    github_url: str
    language: Optional[str] = None
    stars: int
    created_at: Optional[UTCDateTime] = None
    mentors: List[ProfileSummary] = []

    model_config = {
        'from_attributes': True
    }


class RepositoryBrief(BaseModel):
    id: str
    name: str
    language: Optional[str] = None
    stars: int

    model_config = {
        'from_attributes': True
    }


class MentorOut(ProfileSummary):
    repositories: List[RepositoryBrief] = Field(default_factory=list, validation_alias="mentored_repositories")
