"""
Generation request domain models
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RequestStatus(str, Enum):
    """Lifecycle status of a generation request"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.COMPLETED, RequestStatus.FAILED)


class PipelineStep(str, Enum):
    """Pipeline stages in execution order, plus the error step"""
    ANALYZING = "analyzing"
    PLANNING = "planning"
    VALIDATING = "validating"
    GENERATING = "generating"
    TESTING = "testing"
    DEPLOYING = "deploying"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStep.COMPLETED, PipelineStep.ERROR)


class GenerationRequest(BaseModel):
    """One submitted spec and its progress through the pipeline"""
    id: int
    spec: str
    status: RequestStatus = RequestStatus.PENDING
    progress: int = Field(default=0, ge=0, le=100)
    artifact_id: Optional[int] = None
    error_message: Optional[str] = None
    requester_id: Optional[int] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class GenerationProgress(BaseModel):
    """Progress event published for a request"""
    step: PipelineStep
    progress: int = Field(ge=0, le=100)
    message: str


class EnrichedSpec(BaseModel):
    """What the provider is asked to build"""
    original: str
    description: str
    category: str
