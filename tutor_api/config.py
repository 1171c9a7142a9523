"""Process-wide configuration loaded once from the environment."""

from dataclasses import dataclass, field
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    AWS_REGION,
    LANGSMITH_PROJECT,
    TUTOR_SYSTEM_PROMPT,
    HistorySystemPolicy,
    ProviderName,
)
from .provider_registry import PROVIDER_CONFIGS
from .providers.base import ProviderConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    tutor_provider: ProviderName = "groq"
    tutor_model: str | None = None
    tutor_system_prompt: str = TUTOR_SYSTEM_PROMPT
    tutor_history_system_turns: HistorySystemPolicy = "allow"
    tutor_api_key_parameter_name: str | None = None
    tutor_upstream_timeout_seconds: float | None = None

    groq_api_key: str | None = None
    gemini_api_key: str | None = None
    openai_api_key: str | None = None

    aws_region: str = AWS_REGION
    langsmith_api_key: str | None = None
    langsmith_project: str = LANGSMITH_PROJECT

    @field_validator(
        "tutor_model",
        "tutor_api_key_parameter_name",
        "groq_api_key",
        "gemini_api_key",
        "openai_api_key",
        "langsmith_api_key",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("tutor_system_prompt")
    @classmethod
    def validate_system_prompt(cls, system_prompt: str) -> str:
        if not system_prompt.strip():
            raise ValueError("tutor_system_prompt must not be blank")
        return system_prompt

    def api_key_for(self, provider: ProviderConfig) -> str | None:
        return getattr(self, provider.api_key_env_var.lower(), None)


@dataclass(frozen=True)
class TutorConfig:
    provider: ProviderConfig
    model: str
    system_prompt: str
    history_system_turns: HistorySystemPolicy = "allow"
    api_key: str | None = field(default=None, repr=False)


def build_tutor_config(settings: Settings, api_key: str | None = None) -> TutorConfig:
    """Resolve the selected provider and its key into an explicit config value."""
    provider = PROVIDER_CONFIGS[settings.tutor_provider]
    return TutorConfig(
        provider=provider,
        model=settings.tutor_model or provider.default_model,
        system_prompt=settings.tutor_system_prompt,
        history_system_turns=settings.tutor_history_system_turns,
        api_key=api_key if api_key is not None else settings.api_key_for(provider),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
