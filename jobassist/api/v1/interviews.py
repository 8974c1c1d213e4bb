# jobassist/api/v1/interviews.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from jobassist.api.v1.deps import db_failed, generation_failed, get_current_user
from jobassist.core.errors import Forbidden, NotFound, envelope
from jobassist.db.session import get_db
from jobassist.models.interview import GenerateInterviewRequest, SubmitAnswerRequest
from jobassist.repositories import interviews as interview_repo
from jobassist.services import generation
from jobassist.services.llm_errors import GenerationError

logger = logging.getLogger(__name__)

router = APIRouter()


def _session_not_found() -> NotFound:
    return NotFound("Interview session not found", "SESSION_NOT_FOUND")


@router.post("/generate", status_code=201)
async def generate_interview(
    payload: GenerateInterviewRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    try:
        generated = await generation.generate_interview(
            payload.job_role, payload.experience_level, payload.question_count
        )
    except GenerationError as exc:
        raise generation_failed(exc, "Failed to generate interview questions")
    try:
        session = await run_in_threadpool(
            interview_repo.create_interview_session_with_questions,
            db, current_user["id"], payload.job_role, payload.experience_level, generated
        )
    except SQLAlchemyError:
        raise db_failed("Failed to save interview session")
    return envelope("Interview session created successfully", {
        "sessionId": session["id"],
        "jobRole": session["jobRole"],
        "experienceLevel": session["experienceLevel"],
        "questionCount": session["questionCount"],
    })


@router.get("")
def list_sessions(db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    try:
        return envelope("Interview sessions fetched", interview_repo.list_sessions(db, current_user["id"]))
    except SQLAlchemyError:
        raise db_failed("Failed to fetch sessions")


@router.get("/questions/{question_id}")
def get_question(question_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    try:
        question = interview_repo.get_question(db, question_id, current_user["id"])
    except SQLAlchemyError:
        raise db_failed("Failed to fetch question")
    if question is None:
        raise NotFound("Question not found", "QUESTION_NOT_FOUND")
    return envelope("Question fetched", question)


@router.post("/submit-answer")
def submit_answer(
    payload: SubmitAnswerRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    user_id = current_user["id"]
    try:
        if interview_repo.get_session(db, payload.session_id, user_id) is None:
            if interview_repo.session_exists(db, payload.session_id):
                raise Forbidden()
            raise _session_not_found()
        if not interview_repo.question_in_session(db, payload.question_id, payload.session_id):
            raise NotFound("Question not found in this session", "QUESTION_NOT_FOUND")
        response = interview_repo.upsert_response(
            db, payload.session_id, payload.question_id, user_id, payload.answer
        )
    except SQLAlchemyError:
        raise db_failed("Failed to submit answer")
    return envelope("Answer submitted successfully", response)


@router.get("/{session_id}")
def get_session(session_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    try:
        session = interview_repo.get_session(db, session_id, current_user["id"])
    except SQLAlchemyError:
        raise db_failed("Failed to fetch session")
    if session is None:
        raise _session_not_found()
    return envelope("Interview session fetched", session)


@router.get("/{session_id}/responses")
def get_responses(session_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    user_id = current_user["id"]
    try:
        if interview_repo.get_session(db, session_id, user_id) is None:
            raise _session_not_found()
        responses = interview_repo.session_responses(db, session_id, user_id)
    except SQLAlchemyError:
        raise db_failed("Failed to fetch responses")
    return envelope("Responses fetched", responses)
