# jobassist/services/generation.py
"""
Generation client: one prompt, one call, one parsed structure per use case.

Every operation builds its prompt with jobassist.services.prompts, sends it
through the configured adapter (jobassist.services.llm_adapter.complete),
strips markdown fences from the reply and parses it as JSON.

Failures are typed (see jobassist.services.llm_errors):
- GenerationError        the service call failed or returned nothing
- GenerationParseError   the cleaned reply is not JSON of the expected type
- GenerationSchemaError  interview/test replies that cannot be persisted
"""

import json
import logging
import re
from typing import Any, Dict, List, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from jobassist.services import llm_adapter
from jobassist.services import prompts
from jobassist.services.llm_errors import GenerationParseError, GenerationSchemaError
from jobassist.models.interview import GeneratedInterview
from jobassist.models.mock_test import GeneratedTest

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# ```json / ``` fences anywhere in the reply
_FENCE_RE = re.compile(r"```(?:json)?\n?", re.IGNORECASE)

LOG_PREVIEW_CHARS = 500


def clean_reply(text: str) -> str:
    """Remove markdown code fences and surrounding whitespace."""
    return _FENCE_RE.sub("", text or "").strip()


def parse_reply(stage: str, text: str, expect: Union[Type[dict], Type[list]] = dict) -> Any:
    cleaned = clean_reply(text)
    logger.debug("%s cleaned reply: %s", stage, cleaned[:LOG_PREVIEW_CHARS])
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise GenerationParseError(f"{stage}: reply is not valid JSON ({exc.msg})") from exc
    if not isinstance(parsed, expect):
        raise GenerationParseError(f"{stage}: expected a JSON {expect.__name__}, got {type(parsed).__name__}")
    return parsed


def _validate(stage: str, model: Type[M], data: Dict[str, Any]) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise GenerationSchemaError(f"{stage}: reply does not match schema ({exc.error_count()} errors)") from exc


async def _run(stage: str, prompt: str, payload: Dict[str, Any], max_tokens: int = 4096, expect=dict) -> Any:
    text = await llm_adapter.complete(stage, prompt, payload, max_tokens=max_tokens)
    logger.debug("%s raw reply: %s", stage, text[:LOG_PREVIEW_CHARS])
    return parse_reply(stage, text, expect=expect)


async def parse_cv(cv_text: str) -> Dict[str, Any]:
    return await _run("CV_PARSE", prompts.parse_cv_prompt(cv_text), {"cv_text": cv_text})


async def review_cv(cv: Dict[str, Any]) -> Dict[str, Any]:
    return await _run("CV_REVIEW", prompts.review_cv_prompt(cv), {"cv": cv}, max_tokens=2048)


async def improve_cv(cv: Dict[str, Any]) -> Dict[str, Any]:
    return await _run("CV_IMPROVE", prompts.improve_cv_prompt(cv), {"cv": cv})


async def tailor_cv(cv: Dict[str, Any], job_brief: str) -> Dict[str, Any]:
    return await _run("CV_TAILOR", prompts.tailor_cv_prompt(cv, job_brief), {"cv": cv, "job_brief": job_brief})


async def generate_cv_questions(cv: Dict[str, Any], job_brief: str) -> List[str]:
    questions = await _run(
        "CV_QUESTIONS",
        prompts.cv_questions_prompt(cv, job_brief),
        {"cv": cv, "job_brief": job_brief},
        max_tokens=2048,
        expect=list,
    )
    if not all(isinstance(q, str) for q in questions):
        raise GenerationSchemaError("CV_QUESTIONS: expected a list of strings")
    return questions


async def generate_interview(job_role: str, experience_level: str, question_count: int) -> GeneratedInterview:
    payload = {"job_role": job_role, "experience_level": experience_level, "question_count": question_count}
    data = await _run("INTERVIEW", prompts.interview_prompt(job_role, experience_level, question_count), payload)
    return _validate("INTERVIEW", GeneratedInterview, data)


async def generate_mock_test(topic: str, difficulty: str, question_count: int) -> GeneratedTest:
    payload = {"topic": topic, "difficulty": difficulty, "question_count": question_count}
    data = await _run("MOCK_TEST", prompts.mock_test_prompt(topic, difficulty, question_count), payload)
    return _validate("MOCK_TEST", GeneratedTest, data)


async def generate_role_test(job_role: str, experience_level: str, question_count: int) -> GeneratedTest:
    payload = {"job_role": job_role, "experience_level": experience_level, "question_count": question_count}
    data = await _run("ROLE_TEST", prompts.role_test_prompt(job_role, experience_level, question_count), payload)
    return _validate("ROLE_TEST", GeneratedTest, data)
