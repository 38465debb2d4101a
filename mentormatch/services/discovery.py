"""
AI Repository Discovery

Formats a student's preferences and the repository catalog into a prompt and
asks an OpenAI-compatible chat-completions gateway for a ranked shortlist via a
forced tool call.

Failures carry a ``DiscoveryErrorKind`` taken from the HTTP status or the SDK
exception type:
- 429 -> RATE_LIMITED
- 402 -> QUOTA_EXHAUSTED
- bad input -> VALIDATION
- everything else (5xx, network, unparseable output, missing key) -> TRANSIENT

Configuration:
- AI_GATEWAY_URL: base URL of the gateway (default: Lovable AI gateway)
- AI_GATEWAY_API_KEY: bearer key for the gateway
- AI_MODEL: model name (default: google/gemini-2.5-flash)
"""

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import openai

from mentormatch.core.settings import settings
from mentormatch.models.repository import Repository

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5
MAX_FIELD_LENGTH = 1000

SYSTEM_PROMPT = """You are an expert career advisor helping developers find the right open source projects to contribute to.
Analyze the user's preferences, skill level, career goals, and interests to recommend the most suitable repositories from the provided list.
Consider:
- Their current skill level and how it matches the project complexity
- Their career goals and how contributing to specific projects can help
- Their interests and passions
- The availability of mentors for the projects

Only recommend repositories that appear in the provided list, using their exact names. Include 3-5 recommendations, most relevant first."""

RECOMMEND_TOOL = {
    "type": "function",
    "function": {
        "name": "recommend_repositories",
        "description": "Return recommended repository names",
        "parameters": {
            "type": "object",
            "properties": {
                "repositories": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Array of recommended repository names",
                },
                "reasoning": {
                    "type": "string",
                    "description": "Brief explanation of why these repos are recommended",
                },
            },
            "required": ["repositories", "reasoning"],
            "additionalProperties": False,
        },
    },
}


class DiscoveryErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
    TRANSIENT = "transient"
    VALIDATION = "validation"


USER_MESSAGES = {
    DiscoveryErrorKind.RATE_LIMITED: "Rate limit exceeded. Please try again in a moment.",
    DiscoveryErrorKind.QUOTA_EXHAUSTED: "AI credits exhausted. Please try again later.",
    DiscoveryErrorKind.TRANSIENT: "Failed to get AI recommendations. Please try again.",
}


class DiscoveryError(Exception):
    def __init__(self, kind: DiscoveryErrorKind, message: Optional[str] = None):
        super().__init__(message or USER_MESSAGES.get(kind, "Invalid discovery request"))
        self.kind = kind
        self.message = str(self)


@dataclass
class DiscoveryPreferences:
    level: str = ""
    interests: str = ""
    career_goals: str = ""
    preferences: str = ""

    def validate(self) -> "DiscoveryPreferences":
        values = [self.level, self.interests, self.career_goals, self.preferences]
        if not any(v and v.strip() for v in values):
            raise DiscoveryError(DiscoveryErrorKind.VALIDATION, "Tell us a little about your level or interests first")
        if any(v and len(v) > MAX_FIELD_LENGTH for v in values):
            raise DiscoveryError(DiscoveryErrorKind.VALIDATION, f"Each field must be at most {MAX_FIELD_LENGTH} characters")
        return self


@dataclass
class Recommendation:
    repositories: List[str]
    reasoning: str
    matched: List[Repository] = field(default_factory=list)
    model: Optional[str] = None
    latency_ms: int = 0


def classify_error(exc: Exception) -> DiscoveryErrorKind:
    """Map an SDK/transport exception to an error kind by type and status code."""
    if isinstance(exc, openai.RateLimitError):
        return DiscoveryErrorKind.RATE_LIMITED
    if isinstance(exc, openai.APIStatusError):
        if exc.status_code == 429:
            return DiscoveryErrorKind.RATE_LIMITED
        if exc.status_code == 402:
            return DiscoveryErrorKind.QUOTA_EXHAUSTED
    return DiscoveryErrorKind.TRANSIENT


def format_catalog(repositories: List[Repository]) -> List[Dict[str, Any]]:
    return [
        {
            "name": repo.name,
            "description": repo.description,
            "language": repo.language,
            "stars": repo.stars,
            "mentors": [
                {"name": m.name, "bio": m.bio, "skills": m.skills or []}
                for m in repo.mentors
            ],
        }
        for repo in repositories
    ]


def build_user_prompt(prefs: DiscoveryPreferences, catalog: List[Dict[str, Any]]) -> str:
    return (
        "User Profile:\n"
        f"- Skill Level: {prefs.level or 'not specified'}\n"
        f"- Career Goals: {prefs.career_goals or 'not specified'}\n"
        f"- Interests: {prefs.interests or 'not specified'}\n"
        f"- Additional Preferences: {prefs.preferences or 'none'}\n\n"
        "Available Repositories:\n"
        f"{json.dumps(catalog, indent=2)}\n\n"
        "Based on this information, recommend the most suitable repositories for this user."
    )


def _match_catalog(names: List[str], repositories: List[Repository]) -> List[Repository]:
    by_name = {repo.name.lower(): repo for repo in repositories}
    matched: List[Repository] = []
    for name in names:
        repo = by_name.get(str(name).strip().lower())
        if repo is not None and repo not in matched:
            matched.append(repo)
    return matched[:MAX_RECOMMENDATIONS]


class RepositoryDiscovery:
    """Recommendation client. Calls are never retried."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        client: Any = None,
        timeout: Optional[float] = None,
    ):
        self._api_key = api_key or settings.ai_gateway_api_key
        self._base_url = base_url or settings.ai_gateway_url
        self.model = model or settings.ai_model
        self._timeout = timeout or settings.provider_timeout_seconds * 2
        self._client = client

    def is_available(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self):
        """Lazy load the OpenAI SDK client pointed at the gateway."""
        if self._client is None:
            if not self._api_key:
                logger.error("[discovery] AI_GATEWAY_API_KEY not configured")
                raise DiscoveryError(DiscoveryErrorKind.TRANSIENT)
            self._client = openai.OpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                max_retries=0,
                timeout=self._timeout,
            )
        return self._client

    def recommend(self, prefs: DiscoveryPreferences, repositories: List[Repository]) -> Recommendation:
        prefs.validate()
        if not repositories:
            return Recommendation(repositories=[], reasoning="No repositories are available yet.", model=self.model)

        client = self._get_client()
        catalog = format_catalog(repositories)
        start_time = time.time()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(prefs, catalog)},
                ],
                tools=[RECOMMEND_TOOL],
                tool_choice={"type": "function", "function": {"name": "recommend_repositories"}},
            )
        except openai.OpenAIError as e:
            kind = classify_error(e)
            logger.error(f"[discovery] model={self.model} kind={kind.value} error={e}")
            raise DiscoveryError(kind) from e

        latency_ms = int((time.time() - start_time) * 1000)
        names, reasoning = self._parse(response)
        matched = _match_catalog(names, repositories)
        logger.info(
            f"[discovery] model={self.model} latency_ms={latency_ms} "
            f"suggested={len(names)} matched={len(matched)}"
        )
        return Recommendation(
            repositories=[repo.name for repo in matched],
            reasoning=reasoning,
            matched=matched,
            model=self.model,
            latency_ms=latency_ms,
        )

    @staticmethod
    def _parse(response) -> tuple[List[str], str]:
        try:
            tool_calls = response.choices[0].message.tool_calls or []
        except (AttributeError, IndexError) as e:
            raise DiscoveryError(DiscoveryErrorKind.TRANSIENT, "No recommendations received from AI") from e
        if not tool_calls:
            raise DiscoveryError(DiscoveryErrorKind.TRANSIENT, "No recommendations received from AI")

        try:
            arguments = json.loads(tool_calls[0].function.arguments)
        except (TypeError, ValueError) as e:
            logger.error(f"[discovery] unparseable tool arguments: {e}")
            raise DiscoveryError(DiscoveryErrorKind.TRANSIENT, "No recommendations received from AI") from e

        names = arguments.get("repositories")
        if not isinstance(names, list):
            raise DiscoveryError(DiscoveryErrorKind.TRANSIENT, "No recommendations received from AI")
        return [str(n) for n in names], str(arguments.get("reasoning") or "")


_service_instance: Optional[RepositoryDiscovery] = None


def get_discovery_service() -> RepositoryDiscovery:
    """FastAPI dependency returning the process-wide discovery client."""
    global _service_instance
    if _service_instance is None:
        _service_instance = RepositoryDiscovery()
    return _service_instance


def reset_discovery_service() -> None:
    """Reset the singleton instance (useful for testing)."""
    global _service_instance
    _service_instance = None
