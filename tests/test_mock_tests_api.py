# tests/test_mock_tests_api.py
import json

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from jobassist.db.models import MockTest, TestQuestion
from jobassist.repositories import mock_tests as test_repo
from jobassist.services import llm_adapter


async def _generate(ac, headers, count=5, difficulty="medium"):
    r = await ac.post(
        "/api/tests/generate",
        json={"topic": "SQL", "difficulty": difficulty, "questionCount": count},
        headers=headers,
    )
    return r


def _answer_key(db, test_id):
    rows = db.execute(select(TestQuestion).where(TestQuestion.test_id == test_id).order_by(TestQuestion.order)).scalars()
    return [(q.id, q.correct_answer) for q in rows]


def _wrong(letter):
    return "A" if letter != "A" else "B"


@pytest.mark.asyncio
@pytest.mark.parametrize("count, status", [(4, 400), (5, 201), (50, 201), (51, 400)])
async def test_question_count_boundaries(client, register, count, status):
    async with client as ac:
        headers, _ = await register(ac)
        r = await _generate(ac, headers, count=count)
        assert r.status_code == status
        if status == 201:
            assert r.json()["data"]["questionCount"] == count


@pytest.mark.asyncio
async def test_generate_response_shape(client, register):
    async with client as ac:
        headers, _ = await register(ac)
        r = await _generate(ac, headers, count=5, difficulty="hard")
        data = r.json()["data"]
        assert data["difficulty"] == "hard"
        assert data["duration"] == 8
        assert data["title"] == "SQL Mock Test"
        assert data["testId"]


@pytest.mark.asyncio
async def test_generate_rejects_unknown_difficulty(client, register):
    async with client as ac:
        headers, _ = await register(ac)
        r = await _generate(ac, headers, difficulty="impossible")
        assert r.status_code == 400


@pytest.mark.asyncio
async def test_get_test_hides_answers(client, register):
    async with client as ac:
        headers, _ = await register(ac)
        test_id = (await _generate(ac, headers)).json()["data"]["testId"]
        r = await ac.get(f"/api/tests/{test_id}", headers=headers)
        assert r.status_code == 200
        for q in r.json()["data"]["questions"]:
            assert "correctAnswer" not in q
            assert "explanation" not in q
            assert {"optionA", "optionB", "optionC", "optionD"} <= set(q)

        assert (await ac.get("/api/tests/99999", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_invalid_letter_from_model_saves_nothing(client, register, db_session, monkeypatch):
    async def bad_letter(stage, prompt, payload, max_tokens=4096):
        q = {"question": "Q?", "optionA": "a", "optionB": "b", "optionC": "c", "optionD": "d", "correctAnswer": "E"}
        return "```json\n" + json.dumps({"title": "T", "questions": [q] * 5}) + "\n```"

    monkeypatch.setattr(llm_adapter, "complete", bad_letter)
    async with client as ac:
        headers, _ = await register(ac)
        r = await _generate(ac, headers)
        assert r.status_code == 500
        assert r.json()["error"] == "GENERATION_PARSE_FAILED"
    assert db_session.execute(select(func.count()).select_from(MockTest)).scalar_one() == 0


@pytest.mark.asyncio
async def test_child_failure_rolls_back_test(client, register, db_session, monkeypatch):
    real = test_repo.TestQuestion

    def flaky(**kwargs):
        if kwargs["order"] == 4:
            raise SQLAlchemyError("insert failed")
        return real(**kwargs)

    monkeypatch.setattr(test_repo, "TestQuestion", flaky)
    async with client as ac:
        headers, _ = await register(ac)
        r = await _generate(ac, headers)
        assert r.status_code == 500
    assert db_session.execute(select(func.count()).select_from(MockTest)).scalar_one() == 0
    assert db_session.execute(select(func.count()).select_from(TestQuestion)).scalar_one() == 0


@pytest.mark.asyncio
async def test_submit_half_answered_rounds_half_up(client, register, db_session):
    async with client as ac:
        headers, _ = await register(ac)
        test_id = (await _generate(ac, headers, count=8)).json()["data"]["testId"]
        key = _answer_key(db_session, test_id)

        # answer the first half: one right, three wrong; the rest unanswered
        answers = {str(key[0][0]): key[0][1]}
        for qid, letter in key[1:4]:
            answers[str(qid)] = _wrong(letter)

        r = await ac.post(f"/api/tests/{test_id}/submit", json={"answers": answers, "timeTaken": 300}, headers=headers)
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["score"] == 1
        assert data["totalQuestions"] == 8
        # 12.5 rounds up
        assert data["percentage"] == 13
        assert data["timeTaken"] == 300
        assert [res["isCorrect"] for res in data["results"]] == [True] + [False] * 7
        assert data["results"][-1]["userAnswer"] is None


@pytest.mark.asyncio
async def test_submit_validation(client, register):
    async with client as ac:
        headers, _ = await register(ac)
        test_id = (await _generate(ac, headers)).json()["data"]["testId"]
        r = await ac.post(f"/api/tests/{test_id}/submit", json={"answers": {}}, headers=headers)
        assert r.status_code == 400
        r = await ac.post(f"/api/tests/{test_id}/submit", json={"answers": "A", "timeTaken": 5}, headers=headers)
        assert r.status_code == 400
        r = await ac.post("/api/tests/99999/submit", json={"answers": {}, "timeTaken": 5}, headers=headers)
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_results_history_and_stats(client, register, db_session):
    async with client as ac:
        headers, _ = await register(ac)
        other, _ = await register(ac, "other@example.com")

        r = await ac.get("/api/tests/results", headers=headers)
        assert r.status_code == 200
        assert r.json()["data"]["stats"] == {"totalTests": 0, "averageScore": 0, "bestScore": 0}

        test_id = (await _generate(ac, headers, count=5)).json()["data"]["testId"]
        key = _answer_key(db_session, test_id)
        all_right = {str(qid): letter for qid, letter in key}
        two_right = {str(qid): letter for qid, letter in key[:2]}

        first = await ac.post(f"/api/tests/{test_id}/submit", json={"answers": all_right, "timeTaken": 60}, headers=headers)
        await ac.post(f"/api/tests/{test_id}/submit", json={"answers": two_right, "timeTaken": 90}, headers=headers)

        data = (await ac.get("/api/tests/results", headers=headers)).json()["data"]
        assert data["stats"] == {"totalTests": 2, "averageScore": 70, "bestScore": 100}
        # newest first, attempts accumulate
        assert [res["percentage"] for res in data["results"]] == [40, 100]
        assert data["results"][0]["testTitle"] == "SQL Mock Test"

        result_id = first.json()["data"]["resultId"]
        r = await ac.get(f"/api/tests/results/{result_id}", headers=headers)
        assert r.status_code == 200
        detail = r.json()["data"]
        assert detail["percentage"] == 100
        assert all(d["isCorrect"] for d in detail["detailedResults"])

        assert (await ac.get(f"/api/tests/results/{result_id}", headers=other)).status_code == 404

        listed = (await ac.get("/api/tests", headers=headers)).json()["data"]
        assert listed[0]["questionCount"] == 5
        assert listed[0]["attemptCount"] == 2
        # catalogue is shared, attempts are per user
        other_view = (await ac.get("/api/tests", headers=other)).json()["data"]
        assert other_view[0]["attemptCount"] == 0


@pytest.mark.asyncio
async def test_generate_for_role(client, register):
    async with client as ac:
        headers, _ = await register(ac)
        r = await ac.post(
            "/api/tests/generate-for-role",
            json={"jobRole": "Data Analyst", "experienceLevel": "junior", "questionCount": 6},
            headers=headers,
        )
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["difficulty"] == "medium"
        assert data["questionCount"] == 6

        listed = (await ac.get("/api/tests", headers=headers)).json()["data"]
        assert listed[0]["topic"] == "Data Analyst (junior)"
