"""Requirement analysis: description enhancement and categorization"""

import re
import logging
from typing import Optional, Tuple

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate

from toolsmith.models import CATEGORIES, DEFAULT_CATEGORY, EnrichedSpec


# Offline categorization hints, checked in order
CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("pdf", ("pdf", "document", "ocr", "invoice")),
    ("video", ("video", "subtitle", "clip", "movie", "stream")),
    ("image", ("image", "photo", "picture", "png", "jpeg", "jpg", "logo", "icon")),
    ("security", ("password", "encrypt", "decrypt", "hash", "privacy", "vpn", "2fa", "security")),
    ("developer", ("code", "api", "json", "regex", "debug", "sql", "git", "developer")),
    ("ai", ("ai", "gpt", "chatbot", "machine learning", "llm", "neural")),
    ("productivity", ("schedule", "calendar", "task", "todo", "resume", "excel", "spreadsheet", "note")),
)


class RequirementAnalyzer:
    """
    Turns a raw spec into an ``EnrichedSpec``.

    Both steps are auxiliary: any failure degrades to the original text and
    to a keyword-based (or default) category instead of raising.
    """

    def __init__(self, llm: Optional[BaseChatModel] = None):
        self.llm = llm
        self.logger = logging.getLogger(self.__class__.__name__)

        self.enhance_prompt = ChatPromptTemplate.from_messages([
            ("system",
             "You are a tool description enhancer. Take basic tool descriptions and make them "
             "more detailed, professional, and compelling while maintaining accuracy."),
            ("human", 'Enhance this tool description to be more detailed and compelling: "{description}"'),
        ])

        self.categorize_prompt = ChatPromptTemplate.from_messages([
            ("system",
             "Categorize the tool request into one of these categories: {categories}.\n\n"
             "Categories:\n"
             "- pdf: PDF manipulation, document processing\n"
             "- video: Video editing, conversion, processing\n"
             "- ai: AI-powered tools, machine learning, automation\n"
             "- image: Image editing, graphics, visual processing\n"
             "- productivity: Office tools, scheduling, organization\n"
             "- security: Encryption, passwords, privacy tools\n"
             "- developer: Coding tools, APIs, development utilities\n"
             "- unique: Innovative, creative, or unusual tools\n\n"
             "Respond with only the category name."),
            ("human", 'Categorize this tool request: "{description}"'),
        ])

    async def analyze(self, spec: str) -> EnrichedSpec:
        description = await self.enhance_description(spec)
        category = await self.categorize(spec)
        return EnrichedSpec(original=spec, description=description, category=category)

    async def enhance_description(self, spec: str) -> str:
        if self.llm is None:
            return spec
        try:
            response = await self.llm.ainvoke(self.enhance_prompt.format_messages(description=spec))
            enhanced = str(response.content).strip()
            return enhanced or spec
        except Exception as e:
            self.logger.warning(f"Description enhancement failed, keeping original: {e}")
            return spec

    async def categorize(self, spec: str) -> str:
        if self.llm is not None:
            try:
                response = await self.llm.ainvoke(self.categorize_prompt.format_messages(
                    categories=", ".join(CATEGORIES), description=spec
                ))
                category = str(response.content).strip().lower().strip(".")
                if category in CATEGORIES:
                    return category
                self.logger.warning(f"Model returned unknown category '{category}'")
            except Exception as e:
                self.logger.warning(f"Categorization failed, using keyword hints: {e}")
        return categorize_by_keywords(spec)


def categorize_by_keywords(spec: str) -> str:
    lowered = spec.lower()
    words = set(re.findall(r"[a-z0-9]+", lowered))
    for category, keywords in CATEGORY_KEYWORDS:
        for keyword in keywords:
            # multi-word hints match as phrases, single words as whole tokens
            if (" " in keyword and keyword in lowered) or keyword in words:
                return category
    return DEFAULT_CATEGORY
