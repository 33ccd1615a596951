"""
Unit Tests: Artifact Enrichment
"""

from datetime import datetime, timezone

from toolsmith.services.enrichment import (
    INTEGRATIONS,
    ArtifactEnricher,
    integration_for,
    strip_wiring_stub,
    wiring_stub,
)

from conftest import make_draft


FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


class TestArtifactEnricher:
    """Wiring stubs and metadata stamps"""

    def test_prepends_stub_for_wired_category(self):
        enricher = ArtifactEnricher(builder_version="2.0", clock=fixed_clock)
        draft = make_draft(name="Merger", category="pdf")

        enriched = enricher.enrich(draft, "pdf")

        assert enriched.body.startswith("// API Integration: PDFShift")
        assert INTEGRATIONS["pdf"].url in enriched.body
        assert enriched.body.endswith(draft.body)
        assert enriched.metadata.integration == INTEGRATIONS["pdf"]

    def test_no_stub_for_unwired_category(self):
        enricher = ArtifactEnricher(clock=fixed_clock)
        draft = make_draft(category="security")

        enriched = enricher.enrich(draft, "security")

        assert enriched.body == draft.body
        assert enriched.metadata.integration is None

    def test_always_stamps_compliance_and_provenance(self):
        enricher = ArtifactEnricher(builder_version="3.1", clock=fixed_clock)

        enriched = enricher.enrich(make_draft(), "security")

        assert enriched.metadata.compliance.checked is True
        assert enriched.metadata.compliance.checked_at == FIXED_NOW
        assert enriched.metadata.provenance.builder_version == "3.1"
        assert enriched.metadata.provenance.built_at == FIXED_NOW

    def test_keeps_provider_metadata(self):
        enricher = ArtifactEnricher(clock=fixed_clock)

        enriched = enricher.enrich(make_draft(), "security")

        assert enriched.metadata.features == ["Generate", "Copy"]

    def test_is_idempotent(self):
        enricher = ArtifactEnricher(clock=fixed_clock)
        draft = make_draft(name="Enhancer", category="video")

        once = enricher.enrich(draft, "video")
        twice = enricher.enrich(once, "video")

        assert twice == once
        assert twice.body.count("// API Integration:") == 1

    def test_recategorizing_replaces_stub(self):
        enricher = ArtifactEnricher(clock=fixed_clock)
        draft = make_draft(name="Thing", category="image")

        as_image = enricher.enrich(draft, "image")
        as_ai = enricher.enrich(as_image, "ai")

        assert "DeepAI" not in as_ai.body
        assert as_ai.body.startswith("// API Integration: Ollama")
        assert as_ai.category == "ai"

    def test_does_not_mutate_input(self):
        enricher = ArtifactEnricher(clock=fixed_clock)
        draft = make_draft(category="pdf")
        original_body = draft.body

        enricher.enrich(draft, "pdf")

        assert draft.body == original_body
        assert draft.metadata.compliance is None


class TestWiringStub:
    """Per-category integration stubs"""

    def test_strip_removes_only_leading_stub(self):
        stub = wiring_stub(INTEGRATIONS["ai"])
        body = "const x = 1;\n"

        assert strip_wiring_stub(f"{stub}\n{body}") == body
        assert strip_wiring_stub(body) == body

    def test_integration_lookup(self):
        assert integration_for("video").name == "FFmpeg"
        assert integration_for("unique") is None
