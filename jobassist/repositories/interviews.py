# jobassist/repositories/interviews.py
"""
Interview sessions, their generated questions and the user's answers.

A session and all of its questions are written in one unit of work: the
session row is flushed to get its id, every question is added with a dense
1..N `order`, and a single commit makes them visible together. Any failure
rolls the whole unit back.
"""

import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from jobassist.db.models import InterviewQuestion, InterviewResponse, InterviewSession
from jobassist.models.interview import GeneratedInterview

logger = logging.getLogger(__name__)


def _session_dict(s: InterviewSession) -> Dict[str, Any]:
    return {
        "id": s.id,
        "jobRole": s.job_role,
        "experienceLevel": s.experience_level,
        "questionCount": s.question_count,
        "createdBy": s.created_by,
        "createdAt": s.created_at,
    }


def create_interview_session_with_questions(
    db: Session, user_id: int, job_role: str, experience_level: str, generated: GeneratedInterview
) -> Dict[str, Any]:
    session = InterviewSession(
        job_role=job_role,
        experience_level=experience_level,
        question_count=len(generated.questions),
        created_by=user_id,
    )
    try:
        db.add(session)
        db.flush()
        for order, q in enumerate(generated.questions, start=1):
            db.add(InterviewQuestion(
                session_id=session.id,
                question=q.question,
                question_type=q.question_type,
                sample_answer=q.sample_answer,
                tips=q.tips,
                order=order,
            ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("interview session %s created with %d questions", session.id, session.question_count)
    return _session_dict(session)


def list_sessions(db: Session, user_id: int) -> List[Dict[str, Any]]:
    """The user's sessions, newest first, with how many questions they answered."""
    answered = (
        select(InterviewResponse.session_id, func.count(func.distinct(InterviewResponse.question_id)).label("answered"))
        .where(InterviewResponse.user_id == user_id)
        .group_by(InterviewResponse.session_id)
        .subquery()
    )
    stmt = (
        select(InterviewSession, func.coalesce(answered.c.answered, 0))
        .outerjoin(answered, answered.c.session_id == InterviewSession.id)
        .where(InterviewSession.created_by == user_id)
        .order_by(InterviewSession.created_at.desc(), InterviewSession.id.desc())
    )
    out = []
    for session, answered_count in db.execute(stmt):
        row = _session_dict(session)
        row["answeredCount"] = answered_count
        out.append(row)
    return out


def _owned_session(db: Session, session_id: int, user_id: int) -> Optional[InterviewSession]:
    stmt = select(InterviewSession).where(
        InterviewSession.id == session_id, InterviewSession.created_by == user_id
    )
    return db.execute(stmt).scalar_one_or_none()


def session_exists(db: Session, session_id: int) -> bool:
    return db.get(InterviewSession, session_id) is not None


def get_session(db: Session, session_id: int, user_id: int) -> Optional[Dict[str, Any]]:
    """Session with its questions; sample answers and tips are held back for practice."""
    session = _owned_session(db, session_id, user_id)
    if session is None:
        return None
    out = _session_dict(session)
    out["questions"] = [
        {"id": q.id, "question": q.question, "questionType": q.question_type, "order": q.order}
        for q in session.questions
    ]
    return out


def get_question(db: Session, question_id: int, user_id: int) -> Optional[Dict[str, Any]]:
    stmt = (
        select(InterviewQuestion)
        .join(InterviewSession, InterviewQuestion.session_id == InterviewSession.id)
        .where(InterviewQuestion.id == question_id, InterviewSession.created_by == user_id)
    )
    q = db.execute(stmt).scalar_one_or_none()
    if q is None:
        return None
    return {
        "id": q.id,
        "sessionId": q.session_id,
        "question": q.question,
        "questionType": q.question_type,
        "sampleAnswer": q.sample_answer,
        "tips": q.tips,
        "order": q.order,
    }


def question_in_session(db: Session, question_id: int, session_id: int) -> bool:
    q = db.get(InterviewQuestion, question_id)
    return q is not None and q.session_id == session_id


def upsert_response(db: Session, session_id: int, question_id: int, user_id: int, answer: str) -> Dict[str, Any]:
    """
    Insert or replace the user's answer to a question. At most one row exists
    per (question, user); a concurrent insert that hits the unique constraint
    is retried as an update.
    """
    def _existing():
        stmt = select(InterviewResponse).where(
            InterviewResponse.question_id == question_id, InterviewResponse.user_id == user_id
        )
        return db.execute(stmt).scalar_one_or_none()

    for attempt in range(2):
        row = _existing()
        try:
            if row is None:
                row = InterviewResponse(
                    session_id=session_id, question_id=question_id, user_id=user_id, user_answer=answer
                )
                db.add(row)
            else:
                row.user_answer = answer
                row.completed_at = datetime.datetime.utcnow()
            db.commit()
            break
        except IntegrityError:
            db.rollback()
            if attempt:
                raise
        except SQLAlchemyError:
            db.rollback()
            raise
    return {
        "id": row.id,
        "sessionId": row.session_id,
        "questionId": row.question_id,
        "userAnswer": row.user_answer,
        "completedAt": row.completed_at,
    }


def session_responses(db: Session, session_id: int, user_id: int) -> List[Dict[str, Any]]:
    """Every question of the session, left-joined with the user's answer if any."""
    stmt = (
        select(InterviewQuestion, InterviewResponse)
        .outerjoin(
            InterviewResponse,
            (InterviewResponse.question_id == InterviewQuestion.id)
            & (InterviewResponse.user_id == user_id)
            & (InterviewResponse.session_id == session_id),
        )
        .where(InterviewQuestion.session_id == session_id)
        .order_by(InterviewQuestion.order)
    )
    return [
        {
            "questionId": q.id,
            "question": q.question,
            "questionType": q.question_type,
            "sampleAnswer": q.sample_answer,
            "tips": q.tips,
            "userAnswer": r.user_answer if r else None,
            "completedAt": r.completed_at if r else None,
        }
        for q, r in db.execute(stmt)
    ]
