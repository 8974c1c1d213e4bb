# jobassist/services/llm_adapter.py
"""
Pluggable LLM adapter loader and facade.

Environment:
- LLM_ADAPTER: "mock" (default), "anthropic", or a dotted module path

Public:
- async def complete(stage: str, prompt: str, payload: dict, max_tokens: int = 4096) -> str

Adapters are modules exposing the same `complete` coroutine and return the raw
reply text; cleaning and JSON parsing happen in jobassist.services.generation.
"""

import importlib
import logging
from types import ModuleType
from typing import Any, Dict, Optional

from jobassist.core.config import settings
from jobassist.services.llm_errors import GenerationError

logger = logging.getLogger(__name__)

ADAPTERS = {
    "mock": "jobassist.services.llm_adapters.mock_adapter",
    "anthropic": "jobassist.services.llm_adapters.anthropic_adapter",
}

_adapter: Optional[ModuleType] = None


def _load_adapter(name: str) -> ModuleType:
    global _adapter
    mod = importlib.import_module(ADAPTERS.get(name, name))
    # adapter module must implement async complete
    if not hasattr(mod, "complete"):
        raise RuntimeError(f"Adapter {name} does not expose complete()")
    _adapter = mod
    logger.info("LLM adapter loaded: %s", mod.__name__)
    return mod


def get_adapter() -> ModuleType:
    if _adapter is None:
        return _load_adapter(settings.LLM_ADAPTER)
    return _adapter


def reset_adapter() -> None:
    """Forget the loaded adapter so the next call re-reads settings."""
    global _adapter
    _adapter = None


async def complete(stage: str, prompt: str, payload: Dict[str, Any], max_tokens: int = 4096) -> str:
    """
    Unified entry to call the configured adapter once. Any adapter failure
    surfaces as GenerationError; there is no fallback to canned output.
    """
    adapter = get_adapter()
    try:
        text = await adapter.complete(stage, prompt, payload, max_tokens=max_tokens)
    except GenerationError:
        raise
    except Exception as exc:
        raise GenerationError(f"{stage}: generation service call failed") from exc
    if not text or not text.strip():
        raise GenerationError(f"{stage}: empty reply from generation service")
    return text
