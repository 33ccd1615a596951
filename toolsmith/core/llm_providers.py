"""
LLM provider layer for Toolsmith

Chooses a LangChain chat model from the configured key. The key format
identifies the vendor unless a provider is named explicitly; anything that
cannot be initialized leaves the service in offline mode.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import ChatOpenAI


class ProviderType(Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    FALLBACK = "fallback"


# Checked in order: the Anthropic prefix also starts with "sk-"
_KEY_PATTERNS: Tuple[Tuple[ProviderType, "re.Pattern[str]"], ...] = (
    (ProviderType.ANTHROPIC, re.compile(r"^sk-ant-[A-Za-z0-9\-_]{40,}$")),
    (ProviderType.OPENAI, re.compile(r"^sk-[A-Za-z0-9\-_]{40,}$")),
)

_PROVIDER_ALIASES: Dict[str, ProviderType] = {
    "openai": ProviderType.OPENAI,
    "anthropic": ProviderType.ANTHROPIC,
    "claude": ProviderType.ANTHROPIC,
    "fallback": ProviderType.FALLBACK,
    "offline": ProviderType.FALLBACK,
}


@dataclass
class ProviderConfig:
    api_key: str = ""
    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 4000
    timeout: int = 60
    extra_params: Dict[str, Any] = field(default_factory=dict)


class BaseLLMProvider:
    """
    One vendor's chat model.

    Subclasses declare their key prefix and default model and implement
    ``_build_llm``; ``initialize`` never raises.
    """

    provider_type: ClassVar[ProviderType] = ProviderType.FALLBACK
    key_prefix: ClassVar[Optional[str]] = None
    default_model: ClassVar[str] = "offline-template"

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.model = config.model or self.default_model
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._llm: Optional[BaseChatModel] = None

    @property
    def is_offline(self) -> bool:
        return self.provider_type == ProviderType.FALLBACK

    def accepts_key(self, api_key: str) -> bool:
        if self.key_prefix is None:
            return True
        return api_key.startswith(self.key_prefix) and len(api_key) > 20

    def _build_llm(self) -> Optional[BaseChatModel]:
        return None

    async def initialize(self) -> bool:
        name = self.provider_type.value
        if not self.accepts_key(self.config.api_key):
            self.logger.error(f"API key does not look like a {name} key")
            return False
        try:
            self._llm = self._build_llm()
        except Exception as e:
            self.logger.error(f"Failed to initialize {name} provider: {e}")
            return False
        self.logger.info(f"{name} provider initialized with model {self.model}")
        return True

    def get_llm(self) -> Optional[BaseChatModel]:
        return self._llm

    def get_provider_info(self) -> Dict[str, Any]:
        return {
            "provider": self.provider_type.value,
            "model": self.model,
            "initialized": self._llm is not None,
            "offline": self.is_offline,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    def _model_kwargs(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
            "timeout": self.config.timeout,
            "api_key": self.config.api_key,
            **self.config.extra_params,
        }


class OpenAIProvider(BaseLLMProvider):
    provider_type = ProviderType.OPENAI
    key_prefix = "sk-"
    default_model = "gpt-4o-mini"

    def _build_llm(self) -> BaseChatModel:
        return ChatOpenAI(**self._model_kwargs())


class AnthropicProvider(BaseLLMProvider):
    provider_type = ProviderType.ANTHROPIC
    key_prefix = "sk-ant-"
    default_model = "claude-3-5-haiku-20241022"

    def _build_llm(self) -> BaseChatModel:
        try:
            from langchain_anthropic import ChatAnthropic
        except ImportError as e:
            raise ImportError("Anthropic support is optional: pip install 'toolsmith[anthropic]'") from e
        return ChatAnthropic(**self._model_kwargs())


class FallbackProvider(BaseLLMProvider):
    """Offline mode: no model, drafts are built locally"""


class LLMProviderFactory:
    """Maps settings to a provider instance"""

    _providers: Dict[ProviderType, Type[BaseLLMProvider]] = {
        ProviderType.OPENAI: OpenAIProvider,
        ProviderType.ANTHROPIC: AnthropicProvider,
        ProviderType.FALLBACK: FallbackProvider,
    }

    @classmethod
    def detect_provider_from_key(cls, api_key: str) -> ProviderType:
        for provider_type, pattern in _KEY_PATTERNS:
            if api_key and pattern.match(api_key):
                return provider_type
        return ProviderType.FALLBACK

    @classmethod
    def get_provider_from_config(cls, provider_name: str) -> ProviderType:
        return _PROVIDER_ALIASES.get(provider_name.lower(), ProviderType.FALLBACK)

    @classmethod
    def create(cls, config: ProviderConfig, provider_name: Optional[str] = None) -> BaseLLMProvider:
        if provider_name:
            provider_type = cls.get_provider_from_config(provider_name)
        else:
            provider_type = cls.detect_provider_from_key(config.api_key)
        return cls._providers[provider_type](config)


class ToolsmithLLMManager:
    """Resolves the configured provider once and caches it"""

    def __init__(self, api_key: str, provider_name: Optional[str] = None,
                 model: Optional[str] = None, **config_kwargs):
        self.provider_name = provider_name
        self.config = ProviderConfig(api_key=api_key, model=model, **config_kwargs)
        self._provider: Optional[BaseLLMProvider] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    async def get_llm_provider(self) -> BaseLLMProvider:
        if self._provider is not None:
            return self._provider

        provider = LLMProviderFactory.create(self.config, self.provider_name)
        if not await provider.initialize():
            self.logger.warning(
                f"{provider.provider_type.value} provider unavailable, switching to offline mode"
            )
            provider = FallbackProvider(ProviderConfig())
            await provider.initialize()

        self._provider = provider
        return provider

    async def get_llm_instance(self) -> Optional[BaseChatModel]:
        """The chat model, or None when running offline"""
        provider = await self.get_llm_provider()
        return provider.get_llm()

    def get_provider_info(self) -> Dict[str, Any]:
        if self._provider is not None:
            return self._provider.get_provider_info()
        return {
            "provider": LLMProviderFactory.detect_provider_from_key(self.config.api_key).value,
            "model": self.config.model,
            "initialized": False,
            "offline": True,
        }


def create_llm_manager(settings_obj) -> ToolsmithLLMManager:
    return ToolsmithLLMManager(
        api_key=settings_obj.LLM_API_KEY,
        provider_name=settings_obj.LLM_PROVIDER,
        model=settings_obj.LLM_MODEL,
        temperature=settings_obj.LLM_TEMPERATURE,
        max_tokens=settings_obj.LLM_MAX_TOKENS,
        timeout=settings_obj.LLM_TIMEOUT,
    )
