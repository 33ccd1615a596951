import os
from typing import Annotated, Optional, List
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, ValidationInfo, field_validator
import logging


KNOWN_PROVIDERS = {"openai", "anthropic", "claude", "fallback", "offline"}


class Settings(BaseSettings):
    """
    Toolsmith application configuration
    Manages all environment variables with validation and type safety
    """

    # Basic application settings
    APP_NAME: str = "Toolsmith"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # API settings
    API_PREFIX: str = "/api/v1"
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:5000"],
        description="Allowed CORS origins"
    )

    # LLM configuration (empty key runs the service offline)
    LLM_API_KEY: str = Field(
        default="",
        repr=False,
        description="LLM API key (auto-detects provider from key format)"
    )
    LLM_PROVIDER: Optional[str] = Field(
        default=None,
        description="Force a provider instead of detecting it from the key"
    )
    LLM_MODEL: Optional[str] = Field(
        default=None,
        description="LLM model (auto-selects default if not specified)"
    )
    LLM_TEMPERATURE: float = Field(
        default=0.7,
        ge=0.0, le=2.0,
        description="LLM temperature for artifact drafting"
    )
    LLM_MAX_TOKENS: int = Field(
        default=4000,
        description="Maximum tokens for LLM responses"
    )
    LLM_TIMEOUT: int = Field(
        default=60,
        description="LLM request timeout in seconds"
    )

    # Generation pipeline
    GENERATION_PROVIDER_TIMEOUT: float = Field(
        default=90.0,
        gt=0,
        description="Deadline in seconds for one draft request to the provider"
    )
    GENERATION_PROVIDER_RETRIES: int = Field(
        default=0,
        ge=0,
        description="Extra provider attempts after a provider failure"
    )
    GENERATION_RETRY_DELAY: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay in seconds between provider attempts"
    )
    GENERATION_STAGE_DELAY: float = Field(
        default=0.5,
        ge=0.0,
        description="Pause in seconds between pipeline stages"
    )
    BUILDER_VERSION: str = Field(
        default="2.0",
        description="Version stamped into artifact provenance"
    )

    # Progress streaming
    PROGRESS_QUEUE_SIZE: int = Field(
        default=100,
        ge=1,
        description="Buffered progress frames per connected observer"
    )

    # Compliance
    COMPLIANCE_DENY_LIST: Annotated[Optional[List[str]], NoDecode] = Field(
        default=None,
        description="Override for the default compliance deny-list"
    )

    # Catalog
    FEATURED_LIMIT: int = Field(default=6, ge=1)
    RECENT_LIMIT: int = Field(default=10, ge=1)
    SEED_DEFAULT_CATALOG: bool = Field(
        default=True,
        description="Seed the repository with the stock tool catalog at startup"
    )

    model_config = SettingsConfigDict(
        env_file=os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )

    @field_validator("ALLOWED_ORIGINS", "COMPLIANCE_DENY_LIST", mode="before")
    @classmethod
    def split_comma_list(cls, v, info: ValidationInfo):
        # "a, b" in the environment; an empty deny-list value keeps the default
        if not isinstance(v, str):
            return v
        items = [item.strip() for item in v.split(",") if item.strip()]
        if not items and info.field_name == "COMPLIANCE_DENY_LIST":
            return None
        return items

    @field_validator("LLM_PROVIDER")
    @classmethod
    def check_llm_provider(cls, v):
        if v and v.lower() not in KNOWN_PROVIDERS:
            raise ValueError(f"Unknown LLM provider '{v}', expected one of {sorted(KNOWN_PROVIDERS)}")
        return v

    @field_validator("LLM_API_KEY")
    @classmethod
    def warn_unrecognized_key(cls, v):
        if v:
            from .llm_providers import LLMProviderFactory, ProviderType
            if LLMProviderFactory.detect_provider_from_key(v) == ProviderType.FALLBACK:
                logging.getLogger(__name__).warning(
                    "LLM_API_KEY has an unrecognized format, running with the offline provider"
                )
        return v


# Global settings instance
settings = Settings()
