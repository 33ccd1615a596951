"""
Dependency wiring for Toolsmith
Builds every component from Settings and exposes them to FastAPI routes
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request, WebSocket

from toolsmith.core.config import Settings
from toolsmith.core.llm_providers import ToolsmithLLMManager, create_llm_manager
from toolsmith.services.artifact_provider import (
    ArtifactProvider,
    LLMArtifactProvider,
    TemplateArtifactProvider,
)
from toolsmith.services.catalog import default_catalog
from toolsmith.services.compliance import ComplianceGate
from toolsmith.services.enrichment import INTEGRATIONS, ArtifactEnricher
from toolsmith.services.generation_pipeline import GenerationPipeline
from toolsmith.services.progress import ProgressBroadcaster
from toolsmith.services.repository import ArtifactRepository
from toolsmith.services.requirement_analysis import RequirementAnalyzer

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Owns one isolated set of components.

    Construction is cheap and offline; ``startup`` resolves the LLM provider
    and seeds the catalog, ``shutdown`` stops in-flight generation runs.
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional[ArtifactProvider] = None,
        llm_manager: Optional[ToolsmithLLMManager] = None,
    ):
        self.settings = settings
        self.repository = ArtifactRepository()
        self.gate = ComplianceGate(settings.COMPLIANCE_DENY_LIST)
        self.enricher = ArtifactEnricher(builder_version=settings.BUILDER_VERSION)
        self.broadcaster = ProgressBroadcaster(queue_size=settings.PROGRESS_QUEUE_SIZE)
        self.llm_manager = llm_manager or create_llm_manager(settings)
        self.analyzer = RequirementAnalyzer()
        self._explicit_provider = provider is not None
        self.pipeline = GenerationPipeline(
            repository=self.repository,
            gate=self.gate,
            provider=provider or TemplateArtifactProvider(),
            enricher=self.enricher,
            broadcaster=self.broadcaster,
            analyzer=self.analyzer,
            stage_delay=settings.GENERATION_STAGE_DELAY,
            provider_timeout=settings.GENERATION_PROVIDER_TIMEOUT,
            provider_retries=settings.GENERATION_PROVIDER_RETRIES,
            retry_delay=settings.GENERATION_RETRY_DELAY,
        )
        self.started = False

    @property
    def provider(self) -> ArtifactProvider:
        return self.pipeline.provider

    async def startup(self) -> None:
        logger.info("Starting Toolsmith services...")

        llm = await self.llm_manager.get_llm_instance()
        self.analyzer.llm = llm
        if llm is not None and not self._explicit_provider:
            self.pipeline.provider = LLMArtifactProvider(llm)
        logger.info(f"Generation provider: {self.provider.name}")

        if self.settings.SEED_DEFAULT_CATALOG:
            self.repository.seed_artifacts(default_catalog())

        self.started = True
        logger.info("Toolsmith services started")

    async def shutdown(self) -> None:
        logger.info("Stopping Toolsmith services...")
        await self.pipeline.shutdown()
        self.broadcaster.close()
        self.started = False

    def system_status(self) -> Dict[str, Any]:
        analytics = self.repository.get_analytics()
        llm_info = self.llm_manager.get_provider_info()
        return {
            "generation_provider": self.provider.name,
            "llm": {
                "provider": llm_info.get("provider"),
                "model": llm_info.get("model"),
                "offline": llm_info.get("offline", not llm_info.get("initialized", False)),
            },
            "compliance": {"active": True, "deny_list_size": len(self.gate.deny_list)},
            "integrations": len(INTEGRATIONS),
            "tools": len(self.repository.list_artifacts()),
            "tools_generated": analytics.tools_generated,
            "success_rate": analytics.success_rate,
            "active_sessions": analytics.active_sessions,
            "in_flight_generations": self.pipeline.in_flight,
            "progress_observers": self.broadcaster.subscriber_count,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


# FastAPI dependencies

def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_repository(request: Request) -> ArtifactRepository:
    return get_container(request).repository


def get_pipeline(request: Request) -> GenerationPipeline:
    return get_container(request).pipeline


def get_gate(request: Request) -> ComplianceGate:
    return get_container(request).gate


def get_ws_container(websocket: WebSocket) -> ServiceContainer:
    return websocket.app.state.container
