# jobassist/repositories/users.py
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobassist.core.security import hash_password, sanitize_user
from jobassist.db.models import User
from jobassist.models.user import normalize_email
from jobassist.repositories.generic import camel_row, insert_row, select_all, select_column

USERS_TABLE = "users"
PUBLIC_COLUMNS = ["id", "email", "username", "created_at"]


class EmailTaken(Exception):
    pass


def _row(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "password": user.password,
        "createdAt": user.created_at,
    }


def create_user(db: Session, email: str, password: str) -> Dict[str, Any]:
    """Insert a user with a hashed password; returns the sanitized row."""
    email = normalize_email(email)
    if get_user_by_email(db, email) is not None:
        raise EmailTaken(email)
    values = {
        "email": email,
        "password": hash_password(password),
        "username": email.split("@")[0],
    }
    try:
        user_id = insert_row(db, USERS_TABLE, values)
    except IntegrityError as exc:
        # lost a race against a concurrent signup
        raise EmailTaken(email) from exc
    return sanitize_user(_row(db.get(User, user_id)))


def get_user_by_email(db: Session, email: str) -> Optional[Dict[str, Any]]:
    """Full row, password hash included; for credential checks only."""
    user = db.execute(select(User).where(func.lower(User.email) == normalize_email(email))).scalar_one_or_none()
    return _row(user) if user else None


def get_user_by_id(db: Session, user_id: int) -> Optional[Dict[str, Any]]:
    user = db.get(User, user_id)
    return sanitize_user(_row(user)) if user else None


def list_users(db: Session) -> List[Dict[str, Any]]:
    return [sanitize_user(camel_row(r)) for r in select_all(db, USERS_TABLE, PUBLIC_COLUMNS)]


def list_emails(db: Session) -> List[str]:
    return select_column(db, USERS_TABLE, "email")
