"""Configuration models for the document assistant."""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr

ProviderName = Literal["openai", "gemini"]


class ProviderConfig(BaseModel):
    """Connection and generation defaults for a hosted completion API."""

    api_key: SecretStr = SecretStr("")
    model: str = "gpt-4"
    base_url: str = "https://api.openai.com/v1"
    max_tokens: int = Field(default=4000, ge=100, le=8000)
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    timeout_ms: int = Field(default=30000, gt=0)
    # Overrides the per-model context window table when set.
    context_window: int | None = Field(default=None, ge=256)
    max_retries: int = Field(default=2, ge=1, le=6)
    retry_min_seconds: float = Field(default=0.5, ge=0.0)
    retry_max_seconds: float = Field(default=6.0, ge=0.0)
    # Prepended to chat histories as a system turn.
    system_message: str | None = None

    def redacted(self) -> dict[str, Any]:
        """Dump without the key; only whether one is set."""
        data = self.model_dump(exclude={"api_key"})
        data["api_key_set"] = bool(self.api_key.get_secret_value())
        return data


class OpenAIConfig(ProviderConfig):
    model: str = "gpt-4"
    base_url: str = "https://api.openai.com/v1"


class GeminiConfig(ProviderConfig):
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"


class HistoryConfig(BaseModel):
    """Bounds for the in-session interaction log."""

    max_items: int = Field(default=50, ge=1)
    max_age_hours: float = Field(default=24.0, gt=0.0)
    prompt_items: int = Field(default=3, ge=0)
    summary_chars: int = Field(default=200, ge=20)


class AgentConfig(BaseModel):
    """Configures tool behavior and prompt context sizes."""

    max_content_length: int = Field(default=10000, ge=100)
    general_context_chars: int = Field(default=1000, ge=0)
    generate_context_chars: int = Field(default=500, ge=0)
    include_examples: bool = True
    default_command: str = "general"
    history: HistoryConfig = Field(default_factory=HistoryConfig)


class AgentSettings(BaseModel):
    """User-level settings as loaded from the settings store or environment."""

    provider: ProviderName = "openai"
    api_key: SecretStr = SecretStr("")
    model: str | None = None
    max_tokens: int = Field(default=4000, ge=100, le=8000)
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    save_history: bool = True

    @classmethod
    def from_env(cls) -> "AgentSettings":
        provider = os.getenv("DOCS_AGENT_PROVIDER", "openai").lower()
        key_var = "GEMINI_API_KEY" if provider == "gemini" else "OPENAI_API_KEY"
        data: dict[str, Any] = {
            "provider": provider,
            "api_key": os.getenv(key_var, ""),
            "model": os.getenv("DOCS_AGENT_MODEL") or None,
        }
        if os.getenv("DOCS_AGENT_MAX_TOKENS"):
            data["max_tokens"] = int(os.environ["DOCS_AGENT_MAX_TOKENS"])
        if os.getenv("DOCS_AGENT_TEMPERATURE"):
            data["temperature"] = float(os.environ["DOCS_AGENT_TEMPERATURE"])
        return cls.model_validate(data)

    def to_provider_config(self) -> ProviderConfig:
        config_cls = GeminiConfig if self.provider == "gemini" else OpenAIConfig
        overrides: dict[str, Any] = {
            "api_key": self.api_key,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        if self.model:
            overrides["model"] = self.model
        return config_cls(**overrides)

    def status(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "has_api_key": bool(self.api_key.get_secret_value()),
            "model": self.model or "default",
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "save_history": self.save_history,
        }
