"""
Artifact domain models
Generated tools, the drafts they are built from, and their metadata bag
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


CATEGORIES = ("pdf", "video", "ai", "image", "productivity", "security", "developer", "unique")
DEFAULT_CATEGORY = "unique"


class ArtifactStatus(str, Enum):
    """Artifact availability"""
    ACTIVE = "active"
    BETA = "beta"
    GENERATING = "generating"


class IntegrationDescriptor(BaseModel):
    """External service wired into artifacts of one category"""
    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    description: str


class ComplianceStamp(BaseModel):
    checked: bool = True
    checked_at: datetime


class ProvenanceStamp(BaseModel):
    builder_version: str
    built_at: datetime


class ArtifactMetadata(BaseModel):
    """
    Open attribute bag attached to an artifact.

    The well-known keys below are the only ones the service itself reads or
    writes; anything else a provider returns is carried through untouched.
    """
    model_config = ConfigDict(extra="allow")

    features: List[str] = Field(default_factory=list)
    integration: Optional[IntegrationDescriptor] = None
    compliance: Optional[ComplianceStamp] = None
    provenance: Optional[ProvenanceStamp] = None


class ArtifactDraft(BaseModel):
    """Artifact proposal returned by a generation provider, before persistence"""
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    icon: str = "🛠️"
    status: ArtifactStatus = ArtifactStatus.ACTIVE
    requester_id: Optional[int] = None
    metadata: ArtifactMetadata = Field(default_factory=ArtifactMetadata)

    @field_validator("name", "description", "body")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def has_known_category(self) -> bool:
        return self.category in CATEGORIES


class Artifact(BaseModel):
    """A persisted, usable tool"""
    id: int
    name: str
    description: str
    category: str
    icon: str = "🛠️"
    status: ArtifactStatus = ArtifactStatus.ACTIVE
    body: Optional[str] = None
    metadata: ArtifactMetadata = Field(default_factory=ArtifactMetadata)
    requester_id: Optional[int] = None
    usage_count: int = Field(default=0, ge=0)
    created_at: datetime
