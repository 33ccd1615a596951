"""
Generation provider adapters

A provider turns an ``EnrichedSpec`` into an ``ArtifactDraft``. Providers make
a single attempt per call; timeouts and retries are the pipeline's business.
Any failure, including a draft missing required fields, surfaces as
``ProviderException``.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from pydantic import ValidationError

from toolsmith.core.exceptions import ProviderException
from toolsmith.models import ArtifactDraft, ArtifactMetadata, EnrichedSpec


class ArtifactProvider(ABC):
    """External capability producing artifact drafts"""

    name: str = "provider"

    @abstractmethod
    async def request_draft(self, spec: EnrichedSpec) -> ArtifactDraft:
        """Return a validated draft or raise ``ProviderException``."""


def _strip_json_fence(text: str) -> str:
    """Remove a surrounding Markdown JSON code fence when present."""
    fenced = re.match(r"^```(?:json)?\s*(.*?)\s*```$", text.strip(), re.DOTALL)
    if fenced:
        return fenced.group(1).strip()
    return text.strip()


def parse_draft(raw: str, provider: str = "llm") -> ArtifactDraft:
    """
    Parse a provider response into an ``ArtifactDraft``.

    Accepts the body under either ``body`` or ``code``.

    Raises:
        ProviderException: If the text is not a JSON object or lacks required fields.
    """
    try:
        data = json.loads(_strip_json_fence(raw))
    except json.JSONDecodeError as exc:
        raise ProviderException(
            message=f"Provider returned invalid JSON: {exc.msg}",
            provider=provider,
        ) from exc

    if not isinstance(data, dict):
        raise ProviderException(message="Provider response is not a JSON object", provider=provider)

    if "body" not in data and "code" in data:
        data["body"] = data.pop("code")

    try:
        return ArtifactDraft.model_validate(data)
    except ValidationError as exc:
        missing = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
        raise ProviderException(
            message=f"Invalid tool generation response: bad or missing fields {missing}",
            provider=provider,
        ) from exc


class LLMArtifactProvider(ArtifactProvider):
    """Drafts artifacts with a LangChain chat model"""

    name = "llm"

    def __init__(self, llm: BaseChatModel):
        self.llm = llm
        self.logger = logging.getLogger(self.__class__.__name__)
        self.generation_prompt = ChatPromptTemplate.from_messages([
            ("system",
             "You are an expert software architect and tool creator. Generate detailed, functional "
             "tools based on user descriptions. Always respond with valid JSON."),
            ("human",
             """Create a detailed specification for a digital tool based on this description: "{description}"

The request was classified as: {category}
Determine the most appropriate category from: pdf, video, ai, image, productivity, security, developer, unique

Respond with JSON in this exact format:
{{
  "name": "Tool Name",
  "description": "Detailed description of what the tool does",
  "category": "appropriate category",
  "icon": "appropriate emoji icon",
  "body": "Complete, functional implementation code",
  "metadata": {{
    "features": ["feature1", "feature2", "feature3"],
    "complexity": "simple|medium|complex",
    "estimated_time": "time estimate",
    "technologies": ["tech1", "tech2"]
  }}
}}

Requirements:
- Generate actual, functional code that implements the requested tool
- Make the code production-ready with error handling
- Include comprehensive features based on the description"""),
        ])

    async def request_draft(self, spec: EnrichedSpec) -> ArtifactDraft:
        try:
            response = await self.llm.ainvoke(self.generation_prompt.format_messages(
                description=spec.description, category=spec.category
            ))
        except Exception as exc:
            raise ProviderException(message=f"Failed to generate tool: {exc}", provider=self.name) from exc

        content = str(response.content or "")
        if not content.strip():
            raise ProviderException(message="Provider returned an empty response", provider=self.name)
        return parse_draft(content, provider=self.name)


_TEMPLATE_ICONS: Dict[str, str] = {
    "pdf": "📄",
    "video": "🎥",
    "ai": "🤖",
    "image": "🖼️",
    "productivity": "📊",
    "security": "🔐",
    "developer": "💻",
    "unique": "✨",
}

_TEMPLATE_BODY = """// {name}
// {description}

export function run(input) {{
  if (input === undefined || input === null) {{
    throw new Error('{name}: input is required');
  }}
  return {{ tool: '{slug}', category: '{category}', result: input }};
}}
"""


class TemplateArtifactProvider(ArtifactProvider):
    """Builds drafts locally without model calls"""

    name = "template"

    async def request_draft(self, spec: EnrichedSpec) -> ArtifactDraft:
        words = re.findall(r"[A-Za-z0-9]+", spec.original)
        if not words:
            raise ProviderException(message="Cannot derive a tool name from the request", provider=self.name)

        name = " ".join(word if word.isupper() else word.capitalize() for word in words[:6])
        slug = "-".join(word.lower() for word in words[:6])
        metadata: Dict[str, Any] = {
            "features": [f"{name} core workflow", "Input validation", "Local processing"],
            "complexity": "simple",
            "technologies": ["JavaScript"],
        }

        return ArtifactDraft(
            name=name,
            description=spec.description,
            category=spec.category,
            icon=_TEMPLATE_ICONS.get(spec.category, "🛠️"),
            body=_TEMPLATE_BODY.format(
                name=name,
                description=spec.description.replace("\n", " "),
                slug=slug,
                category=spec.category,
            ),
            metadata=ArtifactMetadata.model_validate(metadata),
        )
