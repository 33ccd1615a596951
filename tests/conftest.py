"""
Toolsmith - Test Configuration & Fixtures
=========================================

Shared fixtures
- isolated component instances per test
- stub generation provider
- application client with offline settings
"""

import pytest
from typing import Any, Dict, List
from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from toolsmith.core.config import Settings
from toolsmith.main import create_app
from toolsmith.models import ArtifactDraft, ArtifactMetadata
from toolsmith.services.artifact_provider import ArtifactProvider
from toolsmith.services.compliance import ComplianceGate
from toolsmith.services.enrichment import ArtifactEnricher
from toolsmith.services.generation_pipeline import GenerationPipeline
from toolsmith.services.progress import ProgressBroadcaster, Subscription
from toolsmith.services.repository import ArtifactRepository
from toolsmith.services.requirement_analysis import RequirementAnalyzer


def make_draft(name: str = "Password Generator", category: str = "security", **overrides: Any) -> ArtifactDraft:
    """Build a complete provider draft"""
    fields: Dict[str, Any] = {
        "name": name,
        "description": f"{name} for everyday use",
        "category": category,
        "body": "export function run(input) { return input; }\n",
        "icon": "🔐",
        "metadata": ArtifactMetadata(features=["Generate", "Copy"]),
    }
    fields.update(overrides)
    return ArtifactDraft(**fields)


def drain(subscription: Subscription) -> List[Dict[str, Any]]:
    """Collect every frame currently queued for a subscription"""
    frames = []
    while not subscription.queue.empty():
        frames.append(subscription.queue.get_nowait())
    return frames


def make_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "LLM_API_KEY": "",
        "LLM_PROVIDER": "fallback",
        "GENERATION_STAGE_DELAY": 0.0,
        "GENERATION_RETRY_DELAY": 0.0,
        "SEED_DEFAULT_CATALOG": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ==================== Components ====================

@pytest.fixture
def repository():
    return ArtifactRepository()


@pytest.fixture
def gate():
    return ComplianceGate()


@pytest.fixture
def enricher():
    return ArtifactEnricher(builder_version="test")


@pytest.fixture
def broadcaster():
    return ProgressBroadcaster(queue_size=100)


@pytest.fixture
def stub_provider():
    """Provider double returning the password generator draft"""
    provider = AsyncMock(spec=ArtifactProvider)
    provider.name = "stub"
    provider.request_draft.return_value = make_draft()
    return provider


@pytest.fixture
def pipeline(repository, gate, stub_provider, enricher, broadcaster):
    return GenerationPipeline(
        repository=repository,
        gate=gate,
        provider=stub_provider,
        enricher=enricher,
        broadcaster=broadcaster,
        analyzer=RequirementAnalyzer(),
        stage_delay=0,
        provider_timeout=1.0,
        provider_retries=0,
        retry_delay=0,
    )


# ==================== Application ====================

@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
