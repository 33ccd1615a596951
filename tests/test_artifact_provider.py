"""
Unit Tests: Generation Provider Adapters
"""

import json
import pytest
from unittest.mock import AsyncMock, Mock

from toolsmith.core.exceptions import ProviderException
from toolsmith.models import EnrichedSpec
from toolsmith.services.artifact_provider import (
    LLMArtifactProvider,
    TemplateArtifactProvider,
    parse_draft,
)


DRAFT_JSON = {
    "name": "Password Generator",
    "description": "Creates strong passwords",
    "category": "security",
    "icon": "🔐",
    "code": "function generate() { return 'x'; }",
    "metadata": {
        "features": ["Length control", "Symbols"],
        "complexity": "simple",
        "technologies": ["JavaScript"],
    },
}


def spec(text: str = "password generator", category: str = "security") -> EnrichedSpec:
    return EnrichedSpec(original=text, description=text, category=category)


class TestParseDraft:
    """Parsing provider output into drafts"""

    def test_parses_plain_json_and_maps_code_to_body(self):
        draft = parse_draft(json.dumps(DRAFT_JSON))

        assert draft.name == "Password Generator"
        assert draft.body.startswith("function generate")
        assert draft.metadata.features == ["Length control", "Symbols"]

    def test_keeps_extra_metadata_keys(self):
        draft = parse_draft(json.dumps(DRAFT_JSON))

        assert draft.metadata.model_dump()["complexity"] == "simple"

    def test_tolerates_markdown_fence(self):
        raw = f"```json\n{json.dumps(DRAFT_JSON)}\n```"

        assert parse_draft(raw).name == "Password Generator"

    def test_invalid_json_is_provider_error(self):
        with pytest.raises(ProviderException):
            parse_draft("not json at all")

    def test_non_object_is_provider_error(self):
        with pytest.raises(ProviderException):
            parse_draft("[1, 2, 3]")

    @pytest.mark.parametrize("missing", ["name", "description", "category", "code"])
    def test_missing_required_field_is_provider_error(self, missing):
        data = {key: value for key, value in DRAFT_JSON.items() if key != missing}

        with pytest.raises(ProviderException) as exc_info:
            parse_draft(json.dumps(data))

        assert exc_info.value.details.code == "PROVIDER_ERROR"

    def test_blank_name_is_provider_error(self):
        with pytest.raises(ProviderException):
            parse_draft(json.dumps({**DRAFT_JSON, "name": "   "}))


class TestLLMArtifactProvider:
    """Test suite for LLMArtifactProvider"""

    @pytest.mark.asyncio
    async def test_request_draft(self):
        llm = Mock()
        llm.ainvoke = AsyncMock(return_value=Mock(content=json.dumps(DRAFT_JSON)))
        provider = LLMArtifactProvider(llm)

        draft = await provider.request_draft(spec())

        assert draft.name == "Password Generator"
        llm.ainvoke.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_upstream_failure_carries_message(self):
        llm = Mock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        provider = LLMArtifactProvider(llm)

        with pytest.raises(ProviderException) as exc_info:
            await provider.request_draft(spec())

        assert "quota exceeded" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_empty_response_is_provider_error(self):
        llm = Mock()
        llm.ainvoke = AsyncMock(return_value=Mock(content=""))
        provider = LLMArtifactProvider(llm)

        with pytest.raises(ProviderException):
            await provider.request_draft(spec())


class TestTemplateArtifactProvider:
    """Offline drafts"""

    @pytest.mark.asyncio
    async def test_builds_title_cased_draft(self):
        draft = await TemplateArtifactProvider().request_draft(spec())

        assert draft.name == "Password Generator"
        assert draft.category == "security"
        assert draft.icon == "🔐"
        assert "Password Generator" in draft.body
        assert draft.metadata.features

    @pytest.mark.asyncio
    async def test_is_deterministic(self):
        provider = TemplateArtifactProvider()

        first = await provider.request_draft(spec("merge pdf files", "pdf"))
        second = await provider.request_draft(spec("merge pdf files", "pdf"))

        assert first == second
        assert first.name == "Merge Pdf Files"

    @pytest.mark.asyncio
    async def test_keeps_acronyms(self):
        draft = await TemplateArtifactProvider().request_draft(spec("PDF merger", "pdf"))

        assert draft.name == "PDF Merger"

    @pytest.mark.asyncio
    async def test_rejects_text_without_words(self):
        with pytest.raises(ProviderException):
            await TemplateArtifactProvider().request_draft(spec("!!!", "unique"))
