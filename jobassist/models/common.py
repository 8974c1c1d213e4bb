# jobassist/models/common.py
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    """Request/response bodies use camelCase on the wire, snake_case in python."""
    model_config = ConfigDict(populate_by_name=True)
