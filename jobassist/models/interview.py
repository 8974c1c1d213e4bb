# jobassist/models/interview.py
from typing import List, Optional

from pydantic import Field, field_validator

from jobassist.models.common import CamelModel, NonEmptyStr


class GeneratedInterviewQuestion(CamelModel):
    question: NonEmptyStr
    question_type: Optional[str] = Field(None, alias="questionType")
    sample_answer: Optional[str] = Field(None, alias="sampleAnswer")
    tips: Optional[str] = None

    @field_validator("question_type", mode="before")
    @classmethod
    def _normalize_type(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
        return v or None


class GeneratedInterview(CamelModel):
    job_role: Optional[str] = Field(None, alias="jobRole")
    experience_level: Optional[str] = Field(None, alias="experienceLevel")
    questions: List[GeneratedInterviewQuestion] = Field(min_length=1)


class GenerateInterviewRequest(CamelModel):
    job_role: NonEmptyStr = Field(alias="jobRole")
    experience_level: NonEmptyStr = Field(alias="experienceLevel")
    question_count: int = Field(10, alias="questionCount", ge=1, le=50)


class SubmitAnswerRequest(CamelModel):
    session_id: int = Field(alias="sessionId")
    question_id: int = Field(alias="questionId")
    answer: NonEmptyStr
