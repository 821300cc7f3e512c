"""Gemini generate-content provider."""

from __future__ import annotations

from typing import Any, ClassVar

from docs_agent.config import GeminiConfig, ProviderConfig
from docs_agent.errors import ProviderError
from docs_agent.providers.base import ChatMessage, GenerationOptions, ProviderClient


class GeminiClient(ProviderClient):
    """Talks to ``POST {base_url}/models/{model}:generateContent``.

    The key travels in the ``x-goog-api-key`` header, never in the query
    string. Only its presence is validated.
    """

    provider_name = "gemini"
    display_name = "Gemini"
    config_class: ClassVar[type[ProviderConfig]] = GeminiConfig
    default_context_window = 30720
    fallback_models = (
        {"id": "gemini-1.5-flash", "name": "Gemini 1.5 Flash", "description": "Google Gemini 1.5 Flash"},
        {"id": "gemini-2.0-flash", "name": "Gemini 2.0 Flash", "description": "Google Gemini 2.0 Flash"},
    )

    def _complete(self, prompt: str, options: GenerationOptions) -> str:
        return self._complete_messages([ChatMessage(role="user", content=prompt)], options)

    def _complete_messages(
        self, messages: list[ChatMessage], options: GenerationOptions
    ) -> str:
        base_url = self.config.base_url.rstrip("/")
        payload = self._post_json(
            f"{base_url}/models/{self.config.model}:generateContent",
            self.build_body(messages, options),
            {"x-goog-api-key": self.api_key},
        )
        return extract_candidate_text(payload)

    def _list_models(self) -> list[dict[str, str]]:
        payload = self._get_json(
            f"{self.config.base_url.rstrip('/')}/models", {"x-goog-api-key": self.api_key}
        )
        models: list[dict[str, str]] = []
        for item in payload.get("models") or []:
            if not isinstance(item, dict):
                continue
            model_id = str(item.get("name", "")).removeprefix("models/")
            if "gemini" not in model_id:
                continue
            models.append(
                {
                    "id": model_id,
                    "name": str(item.get("displayName") or model_id),
                    "description": str(item.get("description") or f"Google {model_id}"),
                }
            )
        return sorted(models, key=lambda model: model["id"])

    def build_body(
        self, messages: list[ChatMessage], options: GenerationOptions
    ) -> dict[str, Any]:
        """System turns become ``systemInstruction``; assistant turns use the ``model`` role."""
        system = [message.content for message in messages if message.role == "system"]
        body: dict[str, Any] = {
            "contents": [
                {
                    "role": "model" if message.role == "assistant" else "user",
                    "parts": [{"text": message.content}],
                }
                for message in messages
                if message.role != "system"
            ],
            "generationConfig": {
                "maxOutputTokens": options.max_tokens,
                "temperature": options.temperature,
                "topP": options.top_p,
            },
        }
        if system:
            body["systemInstruction"] = {"parts": [{"text": "\n\n".join(system)}]}
        return body


def extract_candidate_text(payload: dict[str, Any]) -> str:
    """Join the text parts of ``candidates[0].content``."""
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        feedback = payload.get("promptFeedback")
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        if reason:
            raise ProviderError(f"Prompt blocked by provider: {reason}")
        raise ProviderError("No candidates received from API")

    first = candidates[0] if isinstance(candidates[0], dict) else {}
    content = first.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        raise ProviderError("Invalid response format from API")
    text = "".join(
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
    if not text.strip():
        raise ProviderError("Invalid response format from API")
    return text
