# jobassist/core/security.py
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from jobassist.core.config import settings

# pbkdf2_sha256 is pure python, avoids bcrypt backend issues
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ALGORITHM = "HS256"

# fields that must never leave the server
SENSITIVE_USER_FIELDS = ("password", "password_hash", "hashed_password")

# verified against when the email is unknown so both login failures cost the same
_DUMMY_HASH = pwd_context.hash("jobassist-dummy-password")


class TokenData(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password required to hash")
    return pwd_context.hash(password)


def verify_password(plain: Optional[str], hashed: Optional[str]) -> bool:
    if not plain or not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # unknown or malformed hash
        return False


def burn_password_check(plain: Optional[str]) -> None:
    """Run a verification against a throwaway hash; result is discarded."""
    pwd_context.verify(plain or "", _DUMMY_HASH)


def sanitize_user(user: Mapping[str, Any]) -> dict:
    """Copy of a user-shaped row with credential fields stripped."""
    return {k: v for k, v in dict(user).items() if k not in SENSITIVE_USER_FIELDS}


def create_access_token(subject: str, email: Optional[str] = None, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.utcnow()
    exp = now + (expires_delta if expires_delta else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": subject, "iat": now, "exp": exp}
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenData:
    """Raises JWTError on a bad signature, malformed token or expiry."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    return TokenData(sub=payload.get("sub"), email=payload.get("email"))


__all__ = [
    "JWTError",
    "TokenData",
    "hash_password",
    "verify_password",
    "burn_password_check",
    "sanitize_user",
    "create_access_token",
    "decode_access_token",
]
