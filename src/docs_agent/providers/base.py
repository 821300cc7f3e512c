"""Provider client interface with token budgeting and retry policy.

Concrete providers implement ``_complete`` and, where the API has them, the
multi-turn and model-listing hooks. Key validation, the context
window check, truncation and the HTTP/retry plumbing live here.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, Literal

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from docs_agent.config import ProviderConfig
from docs_agent.errors import InputValidationError, ProviderError, redact_secret

LOGGER = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
TRUNCATION_MARKER = "... [truncated]"
TRUNCATION_BUFFER_CHARS = 100
# Smallest response budget worth sending; below it the prompt is rejected.
MIN_RESPONSE_TOKENS = 100

# Matched by longest model-name prefix.
DEFAULT_CONTEXT_WINDOWS: dict[str, int] = {
    "gpt-4o": 8192,
    "gpt-4": 8192,
    "gpt-3.5-turbo": 4096,
    "gemini-1.5-flash": 30720,
    "gemini-2.0-flash": 30720,
    "gemini-2.5-flash": 30720,
}

ChatRole = Literal["system", "user", "assistant"]
CHAT_ROLES = frozenset(("system", "user", "assistant"))


class GenerationOptions(BaseModel):
    """Per-call generation overrides; unset fields fall back to the config."""

    max_tokens: int | None = Field(default=None, ge=1)
    temperature: float | None = Field(default=None, ge=0.0, le=1.0)
    top_p: float = Field(default=1.0, gt=0.0, le=1.0)
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0


class ChatMessage(BaseModel):
    role: ChatRole
    content: str


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, ProviderError) and exc.transient


class ProviderClient(ABC):
    """Sends a prompt to a hosted completion endpoint and returns plain text."""

    provider_name: ClassVar[str] = "provider"
    display_name: ClassVar[str] = "Provider"
    config_class: ClassVar[type[ProviderConfig]] = ProviderConfig
    default_context_window: ClassVar[int] = 8192
    fallback_models: ClassVar[tuple[dict[str, str], ...]] = ()

    def __init__(
        self,
        config: ProviderConfig | None = None,
        *,
        http_client: httpx.Client | None = None,
        context_windows: Mapping[str, int] | None = None,
    ) -> None:
        self.config = config or self.config_class()
        self._context_windows = dict(
            DEFAULT_CONTEXT_WINDOWS if context_windows is None else context_windows
        )
        self._http = http_client
        self._owns_http = http_client is None
        self.validate_config()
        LOGGER.info(
            "%s provider initialized with model %s", self.display_name, self.config.model
        )

    @property
    def api_key(self) -> str:
        return self.config.api_key.get_secret_value()

    @property
    def context_window(self) -> int:
        if self.config.context_window is not None:
            return self.config.context_window
        model = self.config.model.lower()
        for prefix in sorted(self._context_windows, key=len, reverse=True):
            if model.startswith(prefix):
                return self._context_windows[prefix]
        return self.default_context_window

    def validate_config(self) -> None:
        """Format check only; never performs a network call."""
        if not self.api_key.strip():
            raise InputValidationError(f"{self.display_name} API key is required")

    def generate_response(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> str:
        resolved = self._preflight(prompt, options)
        LOGGER.debug(
            "Requesting completion from %s (model=%s, prompt_tokens~%s, max_tokens=%s)",
            self.provider_name,
            self.config.model,
            self.estimate_token_count(prompt),
            resolved.max_tokens,
        )
        return self._complete(prompt, resolved).strip()

    def generate_response_with_history(
        self,
        messages: Iterable[ChatMessage | Mapping[str, Any]],
        options: GenerationOptions | None = None,
    ) -> str:
        """Complete a multi-turn conversation, system message first when configured."""
        turns = self.format_conversation_history(messages)
        if not any(turn.role == "user" for turn in turns):
            raise InputValidationError("Conversation has no user message")
        resolved = self._preflight("\n".join(turn.content for turn in turns), options)
        LOGGER.debug(
            "Requesting chat completion from %s (model=%s, turns=%s)",
            self.provider_name,
            self.config.model,
            len(turns),
        )
        return self._complete_messages(turns, resolved).strip()

    def format_conversation_history(
        self, history: Iterable[ChatMessage | Mapping[str, Any]]
    ) -> list[ChatMessage]:
        """Keep turns that have both a role and content."""
        turns: list[ChatMessage] = []
        if self.config.system_message:
            turns.append(ChatMessage(role="system", content=self.config.system_message))
        for item in history:
            if isinstance(item, ChatMessage):
                turn = item
            else:
                role, content = item.get("role"), item.get("content")
                if role not in CHAT_ROLES or not content:
                    continue
                turn = ChatMessage(role=role, content=str(content))
            if turn.content:
                turns.append(turn)
        return turns

    @abstractmethod
    def _complete(self, prompt: str, options: GenerationOptions) -> str:
        """Perform the provider call and return the raw completion text."""

    def _complete_messages(
        self, messages: list[ChatMessage], options: GenerationOptions
    ) -> str:
        transcript = "\n\n".join(
            f"{message.role.capitalize()}: {message.content}" for message in messages
        )
        return self._complete(transcript, options)

    def _preflight(
        self, prompt: str, options: GenerationOptions | None
    ) -> GenerationOptions:
        try:
            self.validate_config()
        except InputValidationError as exc:
            raise ProviderError(exc.message) from exc

        if not self.is_within_limit(prompt, options):
            raise ProviderError(
                f"Prompt exceeds the {self.context_window}-token context window "
                f"of {self.config.model}"
            )
        resolved = self.resolve_options(options)
        return resolved.model_copy(
            update={"max_tokens": self.response_budget(prompt, resolved)}
        )

    def resolve_options(self, options: GenerationOptions | None = None) -> GenerationOptions:
        options = options or GenerationOptions()
        return options.model_copy(
            update={
                "max_tokens": options.max_tokens or self.config.max_tokens,
                "temperature": (
                    self.config.temperature
                    if options.temperature is None
                    else options.temperature
                ),
            }
        )

    def estimate_token_count(self, text: str) -> int:
        return math.ceil(len(text) / CHARS_PER_TOKEN)

    def response_budget(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> int:
        """Requested ``max_tokens`` clamped to what the window leaves after ``prompt``."""
        requested = self.resolve_options(options).max_tokens or 0
        available = self.context_window - self.estimate_token_count(prompt)
        return max(0, min(requested, available))

    def response_reserve(self, options: GenerationOptions | None = None) -> int:
        """Tokens kept free for the answer when a prompt has to be truncated."""
        requested = self.resolve_options(options).max_tokens or 0
        return min(requested, self.context_window // 2)

    def is_within_limit(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> bool:
        requested = self.resolve_options(options).max_tokens or 0
        floor = min(MIN_RESPONSE_TOKENS, requested)
        if self.estimate_token_count(prompt) >= self.context_window:
            return False
        return self.response_budget(prompt, options) >= floor

    def truncate_to_token_limit(self, text: str, max_tokens: int) -> str:
        if self.estimate_token_count(text) <= max_tokens:
            return text
        keep = max(
            0,
            max_tokens * CHARS_PER_TOKEN - len(TRUNCATION_MARKER) - TRUNCATION_BUFFER_CHARS,
        )
        if keep == 0 and self.estimate_token_count(TRUNCATION_MARKER) > max_tokens:
            return ""
        return text[:keep] + TRUNCATION_MARKER

    def get_available_models(self) -> list[dict[str, str]]:
        """Models offered by the provider; the static list when the lookup fails."""
        try:
            models = self._list_models()
        except ProviderError as exc:
            LOGGER.warning(
                "Model listing failed for %s (status=%s); using fallback list",
                self.provider_name,
                exc.status_code,
            )
            models = []
        return models or [dict(model) for model in self.fallback_models]

    def _list_models(self) -> list[dict[str, str]]:
        return []

    def update_api_key(self, api_key: str) -> None:
        self.update_config(api_key=api_key)

    def update_config(self, **changes: Any) -> None:
        """Apply ``changes`` and re-validate; the old config survives a failure."""
        candidate = type(self.config).model_validate(
            {**self.config.model_dump(), **changes}
        )
        previous = self.config
        self.config = candidate
        try:
            self.validate_config()
        except InputValidationError:
            self.config = previous
            raise
        if self._owns_http and self._http is not None:
            self._http.close()
            self._http = None

    def get_config(self) -> dict[str, Any]:
        data = self.config.redacted()
        data["provider"] = self.provider_name
        data["effective_context_window"] = self.context_window
        return data

    def test_connection(self) -> dict[str, Any]:
        try:
            response = self.generate_response(
                'Hello, please respond with "Connection successful"',
                GenerationOptions(max_tokens=50),
            )
        except ProviderError as exc:
            message = redact_secret(exc.message, self.api_key)
            return {
                "success": False,
                "message": f"API connection failed: {message}",
                "error": message,
            }
        return {
            "success": True,
            "message": "API connection successful",
            "response": response[:100],
        }

    def close(self) -> None:
        if self._owns_http and self._http is not None:
            self._http.close()
            self._http = None

    def __enter__(self) -> "ProviderClient":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    # HTTP plumbing shared by REST providers.

    def _client(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(timeout=self.config.timeout_ms / 1000.0)
        return self._http

    def _post_json(
        self, url: str, body: dict[str, Any], headers: dict[str, str]
    ) -> dict[str, Any]:
        return self._request_json("POST", url, headers, body)

    def _get_json(self, url: str, headers: dict[str, str]) -> dict[str, Any]:
        return self._request_json("GET", url, headers)

    def _request_json(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        for attempt in self._retrying():
            with attempt:
                payload = self._send(method, url, headers, body)
        return payload

    def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = self._client().request(method, url, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise ProviderError("Request timeout - please try again", transient=True) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                f"Network error: {exc.__class__.__name__}", transient=True
            ) from exc

        if not response.is_success:
            LOGGER.warning(
                "%s returned HTTP %s", self.provider_name, response.status_code
            )
            raise ProviderError.from_status(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                "Invalid JSON in provider response",
                status_code=response.status_code,
                body=response.text[:500],
            ) from exc
        if not isinstance(payload, dict):
            raise ProviderError("Unexpected provider response payload")

        error = payload.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProviderError(
                message or "Unknown API error",
                status_code=response.status_code,
                body=response.text,
            )
        return payload

    def _retrying(self) -> Retrying:
        return Retrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self.config.max_retries)),
            wait=wait_exponential(
                multiplier=self.config.retry_min_seconds,
                max=self.config.retry_max_seconds,
            ),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(LOGGER, logging.WARNING),
        )
