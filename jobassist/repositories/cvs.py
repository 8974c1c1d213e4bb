# jobassist/repositories/cvs.py
import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobassist.db.models import CV
from jobassist.models.cv import CVJson, ParsedCV
from jobassist.repositories.generic import NotOwner, RecordNotFound


def _to_dict(cv: CV) -> Dict[str, Any]:
    return {
        "id": cv.id,
        "originalContent": cv.original_content,
        "fullName": cv.full_name,
        "email": cv.email,
        "phone": cv.phone,
        "location": cv.location,
        "summary": cv.summary,
        "structuredContent": cv.structured_content,
        "createdBy": cv.created_by,
        "createdAt": cv.created_at,
        "updatedAt": cv.updated_at,
    }


def _columns(parsed: ParsedCV, cv_json: CVJson, original_content: str) -> Dict[str, Any]:
    info = parsed.personal_info
    return {
        "original_content": original_content,
        "full_name": info.name if info else None,
        "email": info.email if info else None,
        "phone": (info.phone or None) if info else None,
        "location": (info.location or None) if info else None,
        "summary": parsed.summary or None,
        "structured_content": cv_json,
    }


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def save_cv(db: Session, user_id: int, cv_json: CVJson, original_content: str) -> Dict[str, Any]:
    parsed = ParsedCV.model_validate(cv_json)
    cv = CV(created_by=user_id, **_columns(parsed, cv_json, original_content))
    db.add(cv)
    _commit(db)
    db.refresh(cv)
    return _to_dict(cv)


def _owned(db: Session, cv_id: int, user_id: int) -> Optional[CV]:
    stmt = select(CV).where(CV.id == cv_id, CV.created_by == user_id)
    return db.execute(stmt).scalar_one_or_none()


def get_cv(db: Session, cv_id: int, user_id: int) -> Optional[Dict[str, Any]]:
    cv = _owned(db, cv_id, user_id)
    return _to_dict(cv) if cv else None


def list_cvs(db: Session, user_id: int) -> List[Dict[str, Any]]:
    stmt = select(CV).where(CV.created_by == user_id).order_by(CV.created_at.desc(), CV.id.desc())
    return [_to_dict(cv) for cv in db.execute(stmt).scalars()]


def update_cv(db: Session, cv_id: int, user_id: int, cv_json: CVJson, original_content: str) -> Optional[Dict[str, Any]]:
    """Replace a CV's content; None when it does not exist or is not the user's."""
    cv = _owned(db, cv_id, user_id)
    if cv is None:
        return None
    parsed = ParsedCV.model_validate(cv_json)
    for key, value in _columns(parsed, cv_json, original_content).items():
        setattr(cv, key, value)
    cv.updated_at = datetime.datetime.utcnow()
    _commit(db)
    db.refresh(cv)
    return _to_dict(cv)


def delete_cv(db: Session, cv_id: int, user_id: int) -> None:
    """
    Delete a CV after checking ownership.
    Raises RecordNotFound if the id does not exist, NotOwner if it belongs to
    someone else (the row is left untouched).
    """
    cv = db.get(CV, cv_id)
    if cv is None:
        raise RecordNotFound(cv_id)
    if cv.created_by != user_id:
        raise NotOwner(cv_id)
    db.delete(cv)
    _commit(db)
