"""OpenAI-style chat-completions provider."""

from __future__ import annotations

from typing import Any, ClassVar

from docs_agent.config import OpenAIConfig, ProviderConfig
from docs_agent.errors import InputValidationError, ProviderError
from docs_agent.providers.base import ChatMessage, GenerationOptions, ProviderClient

USER_AGENT = "docs-agent/0.1"


class OpenAIClient(ProviderClient):
    """Talks to ``POST {base_url}/chat/completions``."""

    provider_name = "openai"
    display_name = "OpenAI"
    config_class: ClassVar[type[ProviderConfig]] = OpenAIConfig
    default_context_window = 8192
    fallback_models = (
        {"id": "gpt-4", "name": "GPT-4", "description": "OpenAI GPT-4"},
        {"id": "gpt-3.5-turbo", "name": "GPT-3.5 Turbo", "description": "OpenAI GPT-3.5 Turbo"},
    )

    def validate_config(self) -> None:
        super().validate_config()
        if not self.api_key.startswith("sk-"):
            raise InputValidationError("Invalid OpenAI API key format")

    def _complete(self, prompt: str, options: GenerationOptions) -> str:
        return self._complete_messages([ChatMessage(role="user", content=prompt)], options)

    def _complete_messages(
        self, messages: list[ChatMessage], options: GenerationOptions
    ) -> str:
        payload = self._post_json(
            f"{self.config.base_url.rstrip('/')}/chat/completions",
            self.build_body(messages, options),
            self._headers(),
        )
        return extract_chat_text(payload)

    def _list_models(self) -> list[dict[str, str]]:
        payload = self._get_json(f"{self.config.base_url.rstrip('/')}/models", self._headers())
        ids = sorted(
            str(item["id"])
            for item in payload.get("data") or []
            if isinstance(item, dict) and "gpt" in str(item.get("id", ""))
        )
        return [{"id": model_id, "name": model_id, "description": f"OpenAI {model_id}"} for model_id in ids]

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": USER_AGENT,
        }

    def build_body(
        self, messages: list[ChatMessage], options: GenerationOptions
    ) -> dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [message.model_dump() for message in messages],
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "top_p": options.top_p,
            "frequency_penalty": options.frequency_penalty,
            "presence_penalty": options.presence_penalty,
        }


def extract_chat_text(payload: dict[str, Any]) -> str:
    """Read ``choices[0].message.content``."""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ProviderError("No response choices received from API")
    first = choices[0] if isinstance(choices[0], dict) else {}
    message = first.get("message")
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        raise ProviderError("Invalid response format from API")
    return content
