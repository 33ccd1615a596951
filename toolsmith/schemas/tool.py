"""
Pydantic schemas for tool catalog, compliance and analytics endpoints
"""

from pydantic import Field
from typing import Optional

from toolsmith.schemas.base import CamelModel


class UseRecorded(CamelModel):
    artifact_id: int
    recorded: bool


class ComplianceCheckRequest(CamelModel):
    """Candidate tool name to probe against the compliance gate"""
    name: str = Field(..., min_length=1, description="Requested tool name or description")


class ComplianceCheckResponse(CamelModel):
    permitted: bool
    reason: Optional[str] = None


class CategorySummary(CamelModel):
    name: str
    icon: str
    description: str
    count: int = 0
