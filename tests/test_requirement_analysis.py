"""
Unit Tests: Requirement Analyzer
"""

import pytest
from unittest.mock import AsyncMock, Mock

from toolsmith.services.requirement_analysis import RequirementAnalyzer, categorize_by_keywords


def llm_returning(*contents):
    llm = Mock()
    llm.ainvoke = AsyncMock(side_effect=[Mock(content=content) for content in contents])
    return llm


class TestKeywordCategorization:
    """Keyword heuristic for categories"""

    @pytest.mark.parametrize("spec, expected", [
        ("password generator", "security"),
        ("merge two PDF files", "pdf"),
        ("trim a video clip", "video"),
        ("remove photo background", "image"),
        ("regex tester", "developer"),
        ("weekly task planner", "productivity"),
        ("chatbot for my shop", "ai"),
        ("dream journal", "unique"),
    ])
    def test_keyword_hints(self, spec, expected):
        assert categorize_by_keywords(spec) == expected

    def test_matches_whole_words_only(self):
        # "said" contains "ai" but is not the word "ai"
        assert categorize_by_keywords("she said hello") == "unique"


class TestRequirementAnalyzer:
    """Test suite for RequirementAnalyzer"""

    @pytest.mark.asyncio
    async def test_offline_analysis_uses_original_text(self):
        analyzer = RequirementAnalyzer(llm=None)

        enriched = await analyzer.analyze("password generator")

        assert enriched.original == "password generator"
        assert enriched.description == "password generator"
        assert enriched.category == "security"

    @pytest.mark.asyncio
    async def test_llm_enhances_and_categorizes(self):
        analyzer = RequirementAnalyzer(llm=llm_returning("A secure password generator.", "Security"))

        enriched = await analyzer.analyze("password generator")

        assert enriched.description == "A secure password generator."
        assert enriched.category == "security"

    @pytest.mark.asyncio
    async def test_unknown_llm_category_falls_back_to_keywords(self):
        analyzer = RequirementAnalyzer(llm=llm_returning("Better text", "cooking"))

        enriched = await analyzer.analyze("merge pdf pages")

        assert enriched.category == "pdf"

    @pytest.mark.asyncio
    async def test_llm_failure_degrades(self):
        llm = Mock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("rate limited"))
        analyzer = RequirementAnalyzer(llm=llm)

        enriched = await analyzer.analyze("dream journal")

        assert enriched.description == "dream journal"
        assert enriched.category == "unique"

    @pytest.mark.asyncio
    async def test_empty_enhancement_keeps_original(self):
        analyzer = RequirementAnalyzer(llm=llm_returning("   ", "pdf"))

        enriched = await analyzer.analyze("pdf merger")

        assert enriched.description == "pdf merger"
