from .artifact import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    Artifact,
    ArtifactDraft,
    ArtifactMetadata,
    ArtifactStatus,
    ComplianceStamp,
    IntegrationDescriptor,
    ProvenanceStamp,
)
from .generation import (
    EnrichedSpec,
    GenerationProgress,
    GenerationRequest,
    PipelineStep,
    RequestStatus,
)
from .analytics import Analytics

__all__ = [
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "Artifact",
    "ArtifactDraft",
    "ArtifactMetadata",
    "ArtifactStatus",
    "ComplianceStamp",
    "IntegrationDescriptor",
    "ProvenanceStamp",
    "EnrichedSpec",
    "GenerationProgress",
    "GenerationRequest",
    "PipelineStep",
    "RequestStatus",
    "Analytics",
]
