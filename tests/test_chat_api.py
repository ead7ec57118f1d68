from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from tests.helpers import REPLY, gemini_body, reply_text
from wellbeing_chat.config.app_config import AppConfig
from wellbeing_chat.config.llm_config import LlmConfig
from wellbeing_chat.main import create_app

REQUIRED_FIELDS = ("message_student", "feeling_label", "skill_tag", "tip_summary", "next_step_prompt", "escalation")


def _client(handler, app_env: str = "development", api_key: str | None = "test-key", **llm: object) -> TestClient:
    app = create_app(
        app_config=AppConfig(app_env=app_env),
        llm_config=LlmConfig(api_key=api_key, **llm),
        transport=httpx.MockTransport(handler),
    )
    return TestClient(app, raise_server_exceptions=False)


def _answer(text: str):
    return lambda request: httpx.Response(200, json=gemini_body(text))


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError("the completion service should not be called")


def test_successful_reply_has_all_fields_and_no_cache_headers() -> None:
    response = _client(_answer(reply_text())).post("/api/chat", json={"text": "I'm stressed about exams"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.headers["cache-control"] == "no-store"
    assert response.json() == {**REPLY, "crisisFlag": False}


def test_user_message_key_is_accepted() -> None:
    response = _client(_answer(reply_text())).post("/api/chat", json={"userMessage": "hi"})

    assert response.status_code == 200


def test_crisis_escalation_sets_flag() -> None:
    response = _client(_answer(reply_text(escalation="crisis-988"))).post("/api/chat", json={"text": "help"})

    body = response.json()
    assert body["escalation"] == "crisis-988"
    assert body["crisisFlag"] is True


@pytest.mark.parametrize("payload", [{"text": ""}, {"text": "   \n\t "}, {}, {"text": 5}])
def test_empty_input_is_400(payload: dict) -> None:
    response = _client(_unreachable).post("/api/chat", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing 'text' (or 'userMessage')"}


def test_invalid_json_body_is_400() -> None:
    response = _client(_unreachable).post(
        "/api/chat", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400


def test_input_at_limit_is_accepted_and_over_limit_is_413() -> None:
    client = _client(_answer(reply_text()))

    assert client.post("/api/chat", json={"text": "x" * 2000}).status_code == 200

    response = client.post("/api/chat", json={"text": "x" * 2001})
    assert response.status_code == 413
    assert response.json() == {"error": "Input too long"}


def test_missing_api_key_is_500(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    response = _client(_unreachable, api_key=None).post("/api/chat", json={"text": "hi"})

    assert response.status_code == 500
    assert "GEMINI_API_KEY" in response.json()["error"]


def test_unparseable_text_returns_fallback_with_200() -> None:
    response = _client(_answer("I cannot help with that.")).post("/api/chat", json={"text": "hi"})

    assert response.status_code == 200
    body = response.json()
    assert body["feeling_label"] == "unsure"
    assert body["escalation"] == "none"
    assert body["crisisFlag"] is False
    for field in REQUIRED_FIELDS:
        assert field in body


def test_prose_wrapped_json_is_recovered() -> None:
    text = (
        'Sure! {"message_student":"hi","feeling_label":"sad","skill_tag":["breathe"],'
        '"tip_summary":"t","next_step_prompt":"n","escalation":"encourage-counselor"} Hope that helps!'
    )
    response = _client(_answer(text)).post("/api/chat", json={"text": "hi"})

    assert response.json()["skill_tag"] == ["breathe"]
    assert response.json()["escalation"] == "encourage-counselor"


def test_safety_block_returns_crisis_reply() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

    response = _client(handler).post("/api/chat", json={"text": "something alarming"})

    assert response.status_code == 200
    body = response.json()
    assert body["escalation"] == "crisis-988"
    assert body["crisisFlag"] is True
    assert "988" in body["message_student"]


def test_missing_candidates_is_502() -> None:
    response = _client(lambda request: httpx.Response(200, json={"usageMetadata": {}})).post(
        "/api/chat", json={"text": "hi"}
    )

    assert response.status_code == 502
    assert response.json() == {"error": "Invalid upstream response shape"}


def test_upstream_error_message_passes_through_in_development() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"message": "API key not valid"}})

    response = _client(handler).post("/api/chat", json={"text": "hi"})

    assert response.status_code == 400
    assert response.json() == {"error": "API key not valid"}


def test_upstream_error_message_is_redacted_in_production() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "Quota exceeded for project 1234"}})

    response = _client(handler, app_env="production").post("/api/chat", json={"text": "hi"})

    assert response.status_code == 429
    assert response.json() == {"error": "Upstream error"}


def test_transport_failure_is_504() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("dns failure", request=request)

    response = _client(handler).post("/api/chat", json={"text": "hi"})

    assert response.status_code == 504
    assert response.headers["cache-control"] == "no-store"


def test_timeout_is_504_and_aborts_the_request() -> None:
    cancelled: list[bool] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise
        return httpx.Response(200, json=gemini_body(reply_text()))

    started = time.monotonic()
    response = _client(handler, timeout=0.2).post("/api/chat", json={"text": "hi"})
    elapsed = time.monotonic() - started

    assert response.status_code == 504
    assert cancelled == [True]
    assert elapsed < 2


def test_get_is_not_allowed() -> None:
    response = _client(_unreachable).get("/api/chat")

    assert response.status_code == 405
    assert response.headers["allow"] == "POST"
    assert "error" in response.json()


def test_health() -> None:
    assert _client(_unreachable).get("/health").json() == {"status": "ok"}


def test_unexpected_fault_is_500_server_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise RuntimeError("boom")

    response = _client(handler).post("/api/chat", json={"text": "hi"})

    assert response.status_code == 500
    assert response.json() == {"error": "Server error"}
