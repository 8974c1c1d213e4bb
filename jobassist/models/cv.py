# jobassist/models/cv.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from jobassist.models.common import CamelModel

CVJson = Dict[str, Any]


# Parsed CV shape as produced by the parse step. Only used to read fields out
# of client payloads; unknown keys are kept so improve/tailor round-trips
# whatever the model returned.
class PersonalInfo(BaseModel):
    model_config = ConfigDict(extra="allow")
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None


class ParsedCV(CamelModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    personal_info: Optional[PersonalInfo] = Field(None, alias="personalInfo")
    summary: Optional[str] = None
    experience: Optional[List[Any]] = None
    education: Optional[List[Any]] = None
    skills: Optional[List[Any]] = None
    certifications: Optional[List[Any]] = None

    def missing_required(self) -> Optional[str]:
        """Message for the first missing required section, None when complete."""
        info = self.personal_info
        if not info or not info.name or not info.email:
            return "Required fields missing: personalInfo.name and personalInfo.email"
        if not self.education:
            return "At least one education entry is required"
        if not self.skills:
            return "At least one skill is required"
        return None


class ParseCVRequest(CamelModel):
    cv_text: Optional[str] = Field(None, alias="cvText")


class CVJsonRequest(CamelModel):
    cv_json: Optional[CVJson] = Field(None, alias="cvJson")
    cache_key: Optional[str] = Field(None, alias="cacheKey")


class TailorCVRequest(CamelModel):
    cv_json: Optional[CVJson] = Field(None, alias="cvJson")
    job_brief: Optional[str] = Field(None, alias="jobBrief")


class SaveCVRequest(CamelModel):
    cv_json: Optional[CVJson] = Field(None, alias="cvJson")
    original_content: Optional[str] = Field(None, alias="originalContent")
