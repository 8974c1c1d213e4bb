# jobassist/api/v1/deps.py
import logging
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from jobassist.core.errors import Unauthorized, UpstreamFailure
from jobassist.core.security import JWTError, decode_access_token
from jobassist.db.session import get_db
from jobassist.repositories import users as users_repo
from jobassist.services.llm_errors import GenerationError, GenerationParseError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 in our envelope, not a bare 403
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Sanitized user row for the bearer token; 401 on anything wrong with it."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Authentication required")
    try:
        td = decode_access_token(credentials.credentials)
    except JWTError:
        raise Unauthorized("Invalid or expired token", "INVALID_TOKEN")
    try:
        user_id = int(td.sub)
    except (TypeError, ValueError):
        raise Unauthorized("Invalid or expired token", "INVALID_TOKEN")
    user = users_repo.get_user_by_id(db, user_id)
    if not user:
        raise Unauthorized("User not found", "INVALID_TOKEN")
    return user


def generation_failed(exc: GenerationError, message: str) -> UpstreamFailure:
    """Log a generation failure and turn it into the client-facing 500."""
    logger.error("%s: %s", message, exc)
    code = "GENERATION_PARSE_FAILED" if isinstance(exc, GenerationParseError) else "GENERATION_FAILED"
    return UpstreamFailure(message, code)


def db_failed(message: str) -> UpstreamFailure:
    # call from inside the except block so the traceback is logged
    logger.exception(message)
    return UpstreamFailure(message, "DATABASE_ERROR")
