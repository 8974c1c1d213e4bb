# tests/test_generation.py
import json

import pytest

from jobassist.services import generation, llm_adapter
from jobassist.services.llm_errors import GenerationError, GenerationParseError, GenerationSchemaError


def _reply(obj):
    async def fake_complete(stage, prompt, payload, max_tokens=4096):
        return obj if isinstance(obj, str) else "```json\n" + json.dumps(obj) + "\n```"
    return fake_complete


def _question(letter="A"):
    return {
        "question": "What is 2 + 2?",
        "optionA": "4", "optionB": "3", "optionC": "5", "optionD": "22",
        "correctAnswer": letter,
        "explanation": "Arithmetic.",
    }


@pytest.mark.parametrize("raw", [
    '```json\n{"a": 1}\n```',
    '```\n{"a": 1}\n```',
    '  {"a": 1}  ',
    'Here you go:\n```json\n{"a": 1}```',
])
def test_clean_reply_strips_fences(raw):
    cleaned = generation.clean_reply(raw)
    assert cleaned.endswith('{"a": 1}')
    assert "```" not in cleaned


def test_parse_reply_rejects_invalid_json():
    with pytest.raises(GenerationParseError):
        generation.parse_reply("CV_PARSE", "not json at all")


def test_parse_reply_checks_top_level_type():
    assert generation.parse_reply("CV_QUESTIONS", '["q1"]', expect=list) == ["q1"]
    with pytest.raises(GenerationParseError):
        generation.parse_reply("CV_QUESTIONS", '{"q": 1}', expect=list)


@pytest.mark.asyncio
async def test_parse_cv_with_mock_adapter():
    parsed = await generation.parse_cv("Jane Doe\njane@example.com\nData analyst with SQL")
    assert parsed["personalInfo"]["name"] == "Jane Doe"
    assert parsed["personalInfo"]["email"] == "jane@example.com"
    assert parsed["skills"]


@pytest.mark.asyncio
async def test_mock_test_letters_normalized(monkeypatch):
    monkeypatch.setattr(llm_adapter, "complete", _reply({"title": "T", "questions": [_question(" b ")]}))
    test = await generation.generate_mock_test("Math", "easy", 5)
    assert test.questions[0].correct_answer == "B"


@pytest.mark.asyncio
async def test_bad_correct_answer_is_schema_error(monkeypatch):
    monkeypatch.setattr(llm_adapter, "complete", _reply({"title": "T", "questions": [_question("E")]}))
    with pytest.raises(GenerationSchemaError) as exc:
        await generation.generate_mock_test("Math", "easy", 5)
    # schema errors are parse errors for callers that only care about that
    assert isinstance(exc.value, GenerationParseError)


@pytest.mark.asyncio
async def test_empty_question_list_rejected(monkeypatch):
    monkeypatch.setattr(llm_adapter, "complete", _reply({"title": "T", "questions": []}))
    with pytest.raises(GenerationSchemaError):
        await generation.generate_role_test("Analyst", "junior", 5)


@pytest.mark.asyncio
async def test_interview_schema(monkeypatch):
    good = {"questions": [{"question": "Why us?", "questionType": "Behavioral"}]}
    monkeypatch.setattr(llm_adapter, "complete", _reply(good))
    interview = await generation.generate_interview("Analyst", "junior", 1)
    assert interview.questions[0].question_type == "behavioral"

    monkeypatch.setattr(llm_adapter, "complete", _reply({"questions": [{"tips": "no question"}]}))
    with pytest.raises(GenerationSchemaError):
        await generation.generate_interview("Analyst", "junior", 1)


@pytest.mark.asyncio
async def test_cv_questions_parse_failure_propagates(monkeypatch):
    monkeypatch.setattr(llm_adapter, "complete", _reply("I cannot answer that"))
    with pytest.raises(GenerationParseError):
        await generation.generate_cv_questions({"summary": "x"}, "Data role")

    monkeypatch.setattr(llm_adapter, "complete", _reply([1, 2]))
    with pytest.raises(GenerationSchemaError):
        await generation.generate_cv_questions({"summary": "x"}, "Data role")


@pytest.mark.asyncio
async def test_service_failure_propagates(monkeypatch):
    async def boom(stage, prompt, payload, max_tokens=4096):
        raise GenerationError("rate limited")

    monkeypatch.setattr(llm_adapter, "complete", boom)
    with pytest.raises(GenerationError):
        await generation.review_cv({"summary": "x"})
