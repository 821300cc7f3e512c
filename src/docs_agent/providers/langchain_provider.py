"""Adapter exposing any LangChain chat model as a provider client."""

from __future__ import annotations

from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from docs_agent.config import ProviderConfig
from docs_agent.errors import ProviderError
from docs_agent.providers.base import ChatMessage, GenerationOptions, ProviderClient

_MESSAGE_TYPES = {"system": SystemMessage, "user": HumanMessage, "assistant": AIMessage}


class LangChainChatProvider(ProviderClient):
    """Routes prompts through ``llm.invoke``; the model owns its credentials."""

    provider_name = "langchain"
    display_name = "LangChain"

    def __init__(self, llm: Any, config: ProviderConfig | None = None) -> None:
        self.llm = llm
        model = (
            getattr(llm, "model_name", None)
            or getattr(llm, "model", None)
            or llm.__class__.__name__
        )
        super().__init__(config or ProviderConfig(model=str(model)))

    def validate_config(self) -> None:
        return None

    def _complete(self, prompt: str, options: GenerationOptions) -> str:
        return self._invoke([HumanMessage(content=prompt)])

    def _complete_messages(
        self, messages: list[ChatMessage], options: GenerationOptions
    ) -> str:
        return self._invoke(
            [_MESSAGE_TYPES[message.role](content=message.content) for message in messages]
        )

    def _invoke(self, messages: list[BaseMessage]) -> str:
        try:
            message = self.llm.invoke(messages)
        except Exception as exc:
            raise ProviderError(f"{exc.__class__.__name__}: {exc}") from exc
        text = message_text(message)
        if not text.strip():
            raise ProviderError("Invalid response format from API")
        return text


def message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and "text" in item:
                parts.append(str(item["text"]))
            else:
                parts.append(str(item))
        return " ".join(parts).strip()
    return str(content)
