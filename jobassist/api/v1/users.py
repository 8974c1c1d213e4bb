# jobassist/api/v1/users.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobassist.api.v1.deps import db_failed, get_current_user
from jobassist.core.errors import BadRequest, Unauthorized, envelope
from jobassist.core.security import burn_password_check, create_access_token, sanitize_user, verify_password
from jobassist.db.session import get_db
from jobassist.models.user import LoginIn, SignupIn
from jobassist.repositories import users as users_repo

logger = logging.getLogger(__name__)

router = APIRouter()


def _invalid_credentials() -> Unauthorized:
    # one body for unknown email and wrong password
    return Unauthorized("Invalid credentials", "INVALID_CREDENTIALS")


def _token_for(user: dict) -> str:
    return create_access_token(str(user["id"]), email=user["email"])


@router.post("/users", status_code=201)
def signup(payload: SignupIn, db: Session = Depends(get_db)):
    try:
        user = users_repo.create_user(db, payload.email, payload.password)
    except users_repo.EmailTaken:
        raise BadRequest("Email already registered", "EMAIL_TAKEN")
    except SQLAlchemyError:
        raise db_failed("Failed to create user")
    logger.info("user %s signed up", user["id"])
    data = {"token": _token_for(user), "user": {"id": user["id"], "email": user["email"], "username": user["username"]}}
    return envelope("User created successfully", data)


@router.post("/users/login")
def login(payload: LoginIn, db: Session = Depends(get_db)):
    try:
        row = users_repo.get_user_by_email(db, payload.email)
    except SQLAlchemyError:
        raise db_failed("Login failed")
    if row is None:
        burn_password_check(payload.password)
        raise _invalid_credentials()
    if not verify_password(payload.password, row["password"]):
        raise _invalid_credentials()
    user = sanitize_user(row)
    return envelope("Login successful", {"token": _token_for(user), "user": user})


@router.get("/users/me")
async def me(current_user: dict = Depends(get_current_user)):
    return envelope("User fetched", current_user)


@router.get("/users")
def list_users(db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    try:
        return envelope("Users fetched", users_repo.list_users(db))
    except SQLAlchemyError:
        raise db_failed("Failed to fetch users")


@router.get("/users/email")
def list_emails(db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    try:
        return envelope("Emails fetched", users_repo.list_emails(db))
    except SQLAlchemyError:
        raise db_failed("Failed to fetch emails")
