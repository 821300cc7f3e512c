"""Build the session provider from user settings."""

from __future__ import annotations

import httpx

from docs_agent.config import AgentSettings
from docs_agent.providers.base import ProviderClient
from docs_agent.providers.gemini_client import GeminiClient
from docs_agent.providers.openai_client import OpenAIClient


def create_provider(
    settings: AgentSettings, *, http_client: httpx.Client | None = None
) -> ProviderClient:
    """Raises ``InputValidationError`` when the key is missing or malformed."""
    config = settings.to_provider_config()
    if settings.provider == "gemini":
        return GeminiClient(config, http_client=http_client)
    return OpenAIClient(config, http_client=http_client)
