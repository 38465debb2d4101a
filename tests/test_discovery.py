"""AI repository discovery: prompt, tool-call parsing and typed gateway errors."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from mentormatch.main import app
from mentormatch.models.repository import Repository
from mentormatch.services.discovery import (
    DiscoveryError,
    DiscoveryErrorKind,
    DiscoveryPreferences,
    RepositoryDiscovery,
    classify_error,
    get_discovery_service,
)

STUDENT = {"Authorization": "Bearer mock-student-token"}
GATEWAY_URL = "https://gateway.test/v1/chat/completions"


def _tool_response(repositories, reasoning="Good first issues and active mentors"):
    arguments = json.dumps({"repositories": repositories, "reasoning": reasoning})
    call = SimpleNamespace(function=SimpleNamespace(name="recommend_repositories", arguments=arguments))
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(tool_calls=[call]))])


def _status_error(cls, status_code):
    response = httpx.Response(status_code, request=httpx.Request("POST", GATEWAY_URL))
    return cls(f"gateway returned {status_code}", response=response, body=None)


@pytest.fixture
def fake_client():
    client = MagicMock()
    client.chat.completions.create.return_value = _tool_response(["alpha"])
    return client


@pytest.fixture
def discovery(fake_client):
    service = RepositoryDiscovery(api_key="test-key", model="test-model", client=fake_client)
    app.dependency_overrides[get_discovery_service] = lambda: service
    return service


@pytest.fixture
def catalog(db_session, repository):
    beta = Repository(name="beta", description="Rust CLI", github_url="https://github.com/example/beta",
                      language="Rust", stars=40)
    db_session.add(beta)
    db_session.commit()
    return [repository, beta]


PREFS = {"level": "beginner", "interests": "web frameworks", "career_goals": "backend", "preferences": ""}


class TestRecommend:

    def test_matches_catalog_case_insensitively(self, discovery, fake_client, catalog):
        fake_client.chat.completions.create.return_value = _tool_response(["ALPHA", "unknown", "beta", "alpha"])
        result = discovery.recommend(DiscoveryPreferences(**PREFS), catalog)
        assert result.repositories == ["alpha", "beta"]
        assert result.model == "test-model"

    def test_forces_tool_call(self, discovery, fake_client, catalog):
        discovery.recommend(DiscoveryPreferences(**PREFS), catalog)
        kwargs = fake_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["tool_choice"]["function"]["name"] == "recommend_repositories"
        user_prompt = kwargs["messages"][1]["content"]
        assert "web frameworks" in user_prompt
        assert "alpha" in user_prompt

    def test_empty_catalog_skips_model(self, discovery, fake_client):
        result = discovery.recommend(DiscoveryPreferences(**PREFS), [])
        assert result.repositories == []
        fake_client.chat.completions.create.assert_not_called()

    def test_blank_preferences_are_validation_errors(self, discovery, fake_client, catalog):
        with pytest.raises(DiscoveryError) as exc:
            discovery.recommend(DiscoveryPreferences(), catalog)
        assert exc.value.kind == DiscoveryErrorKind.VALIDATION
        fake_client.chat.completions.create.assert_not_called()

    def test_missing_tool_call_is_transient(self, discovery, fake_client, catalog):
        fake_client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(tool_calls=None))]
        )
        with pytest.raises(DiscoveryError) as exc:
            discovery.recommend(DiscoveryPreferences(**PREFS), catalog)
        assert exc.value.kind == DiscoveryErrorKind.TRANSIENT

    def test_missing_api_key_is_transient(self, catalog):
        service = RepositoryDiscovery(api_key="", model="test-model")
        service._api_key = None
        with pytest.raises(DiscoveryError) as exc:
            service.recommend(DiscoveryPreferences(**PREFS), catalog)
        assert exc.value.kind == DiscoveryErrorKind.TRANSIENT


class TestClassifyError:

    def test_rate_limit(self):
        assert classify_error(_status_error(openai.RateLimitError, 429)) == DiscoveryErrorKind.RATE_LIMITED

    def test_payment_required(self):
        assert classify_error(_status_error(openai.APIStatusError, 402)) == DiscoveryErrorKind.QUOTA_EXHAUSTED

    def test_server_error(self):
        assert classify_error(_status_error(openai.InternalServerError, 503)) == DiscoveryErrorKind.TRANSIENT

    def test_connection_error(self):
        error = openai.APIConnectionError(request=httpx.Request("POST", GATEWAY_URL))
        assert classify_error(error) == DiscoveryErrorKind.TRANSIENT

    def test_message_text_is_not_inspected(self):
        error = _status_error(openai.InternalServerError, 500)
        error.message = "429 rate limit from upstream"
        assert classify_error(error) == DiscoveryErrorKind.TRANSIENT


class TestDiscoveryEndpoint:

    def test_success(self, client, student_user, discovery, catalog):
        response = client.post("/discovery/recommendations", json=PREFS, headers=STUDENT)
        assert response.status_code == 200
        data = response.json()
        assert data["repositories"] == ["alpha"]
        assert data["reasoning"] == "Good first issues and active mentors"
        assert data["matches"][0]["github_url"] == "https://github.com/example/alpha"
        assert data["matches"][0]["mentors"][0]["id"] == "mentor-1"

    @pytest.mark.parametrize(
        "error_cls, upstream_status, expected_status, expected_kind",
        [
            (openai.RateLimitError, 429, 429, "rate_limited"),
            (openai.APIStatusError, 402, 402, "quota_exhausted"),
            (openai.InternalServerError, 500, 502, "transient"),
        ],
    )
    def test_gateway_errors(self, client, student_user, discovery, fake_client, catalog,
                            error_cls, upstream_status, expected_status, expected_kind):
        fake_client.chat.completions.create.side_effect = _status_error(error_cls, upstream_status)
        response = client.post("/discovery/recommendations", json=PREFS, headers=STUDENT)
        assert response.status_code == expected_status
        assert response.json()["error"] == expected_kind
        # No retries
        assert fake_client.chat.completions.create.call_count == 1

    def test_blank_request_is_422(self, client, student_user, discovery, catalog):
        response = client.post("/discovery/recommendations", json={}, headers=STUDENT)
        assert response.status_code == 422
        assert response.json()["error"] == "validation"
