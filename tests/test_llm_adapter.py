# tests/test_llm_adapter.py
import json

import httpx
import pytest

from jobassist.core.config import settings
from jobassist.services import generation, llm_adapter
from jobassist.services.llm_adapters import anthropic_adapter, mock_adapter
from jobassist.services.llm_errors import GenerationError


@pytest.mark.asyncio
async def test_mock_adapter_runs():
    text = await llm_adapter.complete("INTERVIEW", "prompt", {"job_role": "Analyst", "question_count": 3})
    assert text.startswith("```json")
    data = generation.parse_reply("INTERVIEW", text)
    assert len(data["questions"]) == 3


@pytest.mark.asyncio
async def test_mock_adapter_is_deterministic():
    payload = {"topic": "SQL", "difficulty": "easy", "question_count": 5}
    a = await llm_adapter.complete("MOCK_TEST", "p", payload)
    b = await llm_adapter.complete("MOCK_TEST", "p", payload)
    assert a == b


@pytest.mark.asyncio
async def test_adapter_errors_wrapped(monkeypatch):
    async def broken(stage, prompt, payload, max_tokens=4096):
        raise RuntimeError("simulated failure")

    monkeypatch.setattr(mock_adapter, "complete", broken)
    with pytest.raises(GenerationError):
        await llm_adapter.complete("CV_PARSE", "p", {})


@pytest.mark.asyncio
async def test_empty_reply_is_failure(monkeypatch):
    async def blank(stage, prompt, payload, max_tokens=4096):
        return "   "

    monkeypatch.setattr(mock_adapter, "complete", blank)
    with pytest.raises(GenerationError):
        await llm_adapter.complete("CV_PARSE", "p", {})


def test_unknown_adapter_fails_loudly():
    with pytest.raises(ImportError):
        llm_adapter._load_adapter("jobassist.services.llm_adapters.does_not_exist")


@pytest.fixture
def anthropic(monkeypatch):
    """Route the anthropic adapter through an httpx MockTransport; returns the request log."""
    calls = []
    replies = []
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request):
        calls.append(request)
        status, body = replies.pop(0)
        return httpx.Response(status, json=body)

    monkeypatch.setattr(settings, "LLM_API_KEY", "test-key")
    monkeypatch.setattr(settings, "LLM_BACKOFF_FACTOR", 0)
    monkeypatch.setattr(
        anthropic_adapter.httpx, "AsyncClient",
        lambda *a, **kw: real_client(transport=httpx.MockTransport(handler)),
    )
    return calls, replies


def _message(text):
    return {"content": [{"type": "text", "text": text}]}


@pytest.mark.asyncio
async def test_anthropic_adapter_request_shape(anthropic):
    calls, replies = anthropic
    replies.append((200, _message('{"ok": true}')))
    text = await anthropic_adapter.complete("CV_REVIEW", "review this", {}, max_tokens=2048)
    assert text == '{"ok": true}'
    req = calls[0]
    assert req.headers["x-api-key"] == "test-key"
    assert req.headers["anthropic-version"] == settings.LLM_API_VERSION
    body = json.loads(req.content)
    assert body["max_tokens"] == 2048
    assert body["messages"] == [{"role": "user", "content": "review this"}]


@pytest.mark.asyncio
async def test_anthropic_no_retry_by_default(anthropic, monkeypatch):
    calls, replies = anthropic
    monkeypatch.setattr(settings, "LLM_RETRIES", 0)
    replies.append((529, {"error": "overloaded"}))
    with pytest.raises(GenerationError):
        await anthropic_adapter.complete("CV_PARSE", "p", {})
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_anthropic_retries_overload_when_configured(anthropic, monkeypatch):
    calls, replies = anthropic
    monkeypatch.setattr(settings, "LLM_RETRIES", 1)
    replies.extend([(529, {"error": "overloaded"}), (200, _message("done"))])
    assert await anthropic_adapter.complete("CV_PARSE", "p", {}) == "done"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_anthropic_auth_error_not_retried(anthropic, monkeypatch):
    calls, replies = anthropic
    monkeypatch.setattr(settings, "LLM_RETRIES", 3)
    replies.append((401, {"error": "bad key"}))
    with pytest.raises(GenerationError):
        await anthropic_adapter.complete("CV_PARSE", "p", {})
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_anthropic_requires_key(monkeypatch):
    monkeypatch.setattr(settings, "LLM_API_KEY", None)
    with pytest.raises(GenerationError):
        await anthropic_adapter.complete("CV_PARSE", "p", {})


@pytest.mark.asyncio
async def test_anthropic_non_text_reply(anthropic):
    _, replies = anthropic
    replies.append((200, {"content": [{"type": "tool_use", "id": "x"}]}))
    with pytest.raises(GenerationError):
        await anthropic_adapter.complete("CV_PARSE", "p", {})
