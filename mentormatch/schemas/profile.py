from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from mentormatch.schemas.common import UTCDateTime
from mentormatch.models.profile import ProfileRole

MAX_TAGS = 30


def _clean_tags(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    seen = []
    for v in values:
        v = v.strip()
        if v and v.lower() not in (s.lower() for s in seen):
            seen.append(v)
    if len(seen) > MAX_TAGS:
        raise ValueError(f"At most {MAX_TAGS} entries allowed")
    return seen


class ProfileOut(BaseModel):
    id: str
    name: str
    email: str
    role: ProfileRole
    bio: Optional[str] = None
    skills: List[str] = []
    interests: List[str] = []
    profile_pic: Optional[str] = None
    created_at: Optional[UTCDateTime] = None

    model_config = {
        'from_attributes': True
    }


class ProfileSummary(BaseModel):
    """Public view used when embedding a person in another resource."""
    id: str
    name: str
    role: ProfileRole
    bio: Optional[str] = None
    skills: List[str] = []
    profile_pic: Optional[str] = None

    model_config = {
        'from_attributes': True
    }


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    bio: Optional[str] = Field(None, max_length=2000)
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    profile_pic: Optional[str] = None

    @field_validator('skills', 'interests')
    def clean_tags(cls, v):
        return _clean_tags(v)

    @field_validator('profile_pic')
    def validate_url(cls, v: str | None):
        if v is None or v.strip() == "":
            return None
        if not (v.startswith('http://') or v.startswith('https://')):
            raise ValueError('profile_pic must start with http(s)://')
        return v


class MentorRepositoriesUpdate(BaseModel):
    repository_ids: List[str] = Field(default_factory=list, max_length=50)
