# jobassist/models/user.py
from pydantic import BaseModel, EmailStr, Field, field_validator

from jobassist.models.common import NonEmptyStr


def normalize_email(value: str) -> str:
    """Emails are stored and looked up lower-cased."""
    return value.strip().lower()


class SignupIn(BaseModel):
    email: EmailStr
    # not stripped: whitespace is part of the secret
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v):
        return normalize_email(v)


class LoginIn(BaseModel):
    email: NonEmptyStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v):
        return normalize_email(v)
