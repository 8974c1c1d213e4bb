# jobassist/services/llm_adapters/anthropic_adapter.py
"""
Async HTTP adapter for the Anthropic Messages API.

Env configuration:
- LLM_API_KEY: required, sent as x-api-key
- LLM_HTTP_URL: messages endpoint (default https://api.anthropic.com/v1/messages)
- LLM_MODEL / LLM_API_VERSION
- LLM_TIMEOUT_SEC: request timeout
- LLM_RETRIES: extra attempts on transport errors and 429/5xx (default 0)
- LLM_BACKOFF_FACTOR: backoff multiplier
"""

import asyncio
import logging
from typing import Any, Dict

import httpx

from jobassist.core.config import settings
from jobassist.services.llm_errors import GenerationError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504, 529}


def _headers() -> Dict[str, str]:
    if not settings.LLM_API_KEY:
        raise GenerationError("LLM_API_KEY unset for anthropic adapter")
    return {
        "content-type": "application/json",
        "x-api-key": settings.LLM_API_KEY,
        "anthropic-version": settings.LLM_API_VERSION,
    }


def _reply_text(body: Dict[str, Any]) -> str:
    blocks = body.get("content") or []
    parts = [b.get("text", "") for b in blocks if isinstance(b, dict) and b.get("type") == "text"]
    if not parts:
        raise GenerationError("No text response from generation service")
    return "".join(parts)


async def _post_once(client: httpx.AsyncClient, body: Dict[str, Any]) -> Dict[str, Any]:
    resp = await client.post(settings.LLM_HTTP_URL, json=body, headers=_headers(), timeout=settings.LLM_TIMEOUT_SEC)
    resp.raise_for_status()
    return resp.json()


def _retryable(exc: Exception) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, httpx.TransportError)


async def complete(stage: str, prompt: str, payload: Dict[str, Any], max_tokens: int = 4096) -> str:
    body = {
        "model": settings.LLM_MODEL,
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }
    attempts = max(0, settings.LLM_RETRIES) + 1
    async with httpx.AsyncClient() as client:
        for attempt in range(1, attempts + 1):
            try:
                data = await _post_once(client, body)
                return _reply_text(data)
            except (httpx.HTTPStatusError, httpx.TransportError) as exc:
                if attempt < attempts and _retryable(exc):
                    logger.warning("%s attempt %d failed (%s), retrying", stage, attempt, exc)
                    await asyncio.sleep(settings.LLM_BACKOFF_FACTOR * attempt)
                    continue
                raise GenerationError(f"{stage}: generation service request failed") from exc

    raise GenerationError(f"{stage}: generation service request failed")
