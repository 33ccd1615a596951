"""
Pydantic schemas for generation API operations
"""

from pydantic import Field, field_validator
from typing import Optional

from toolsmith.models import RequestStatus
from toolsmith.schemas.base import CamelModel


class GenerationCreate(CamelModel):
    """Schema for submitting a tool description"""
    spec: str = Field(..., min_length=1, description="Natural-language description of the tool")
    requester_id: Optional[int] = Field(None, description="Identifier of the submitting user")

    @field_validator("spec")
    @classmethod
    def spec_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Tool description must not be empty")
        return v


class GenerationAccepted(CamelModel):
    """Returned immediately on submission, before the run finishes"""
    request_id: int
    status: RequestStatus
    progress: int = 0
