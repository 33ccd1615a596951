from .repository import ArtifactRepository
from .compliance import ComplianceGate, ComplianceVerdict
from .enrichment import ArtifactEnricher
from .artifact_provider import ArtifactProvider, LLMArtifactProvider, TemplateArtifactProvider
from .progress import ProgressBroadcaster, Subscription
from .requirement_analysis import RequirementAnalyzer
from .generation_pipeline import GenerationPipeline

__all__ = [
    "ArtifactRepository",
    "ComplianceGate",
    "ComplianceVerdict",
    "ArtifactEnricher",
    "ArtifactProvider",
    "LLMArtifactProvider",
    "TemplateArtifactProvider",
    "ProgressBroadcaster",
    "Subscription",
    "RequirementAnalyzer",
    "GenerationPipeline",
]
