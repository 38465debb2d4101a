from pydantic import BaseModel, Field
from typing import List, Optional

from mentormatch.schemas.repository import RepositoryOut


class DiscoveryRequest(BaseModel):
    level: str = Field("", max_length=1000, description="beginner / intermediate / advanced, or free text")
    interests: str = Field("", max_length=1000)
    career_goals: str = Field("", max_length=1000)
    preferences: str = Field("", max_length=1000)

    model_config = {
        "json_schema_extra": {
            "example": {
                "level": "intermediate",
                "interests": "developer tooling, compilers",
                "career_goals": "backend engineer",
                "preferences": "Python, friendly maintainers",
            }
        }
    }


class DiscoveryResponse(BaseModel):
    repositories: List[str]
    reasoning: str
    matches: List[RepositoryOut] = []
    model: Optional[str] = None


class DiscoveryErrorOut(BaseModel):
    detail: str
    error: str
