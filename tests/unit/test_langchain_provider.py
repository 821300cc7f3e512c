import pytest
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from docs_agent.config import ProviderConfig
from docs_agent.errors import ProviderError
from docs_agent.providers.langchain_provider import LangChainChatProvider, message_text


class _ExplodingModel:
    def invoke(self, messages):
        raise RuntimeError("backend unavailable")


def test_wraps_a_langchain_chat_model() -> None:
    provider = LangChainChatProvider(FakeListChatModel(responses=["  A short answer.  "]))

    assert provider.generate_response("Question?") == "A short answer."
    assert provider.get_config()["provider"] == "langchain"


def test_model_failures_become_provider_errors() -> None:
    provider = LangChainChatProvider(_ExplodingModel())

    with pytest.raises(ProviderError, match="RuntimeError: backend unavailable"):
        provider.generate_response("Question?")


def test_message_text_flattens_content_blocks() -> None:
    message = AIMessage(content=[{"type": "text", "text": "Hello"}, "world"])

    assert message_text(message) == "Hello world"
    assert message_text(AIMessage(content="plain")) == "plain"


class _RecordingModel:
    def __init__(self) -> None:
        self.calls: list[list] = []

    def invoke(self, messages):
        self.calls.append(messages)
        return AIMessage(content="Noted.")


def test_history_maps_to_langchain_message_types() -> None:
    model = _RecordingModel()
    provider = LangChainChatProvider(
        model, ProviderConfig(model="recording", system_message="Stay concise.")
    )

    reply = provider.generate_response_with_history(
        [
            {"role": "user", "content": "Draft a title"},
            {"role": "assistant", "content": "Quarterly Notes"},
            {"role": "user", "content": "Shorter"},
        ]
    )

    assert reply == "Noted."
    sent = model.calls[0]
    assert [type(message) for message in sent] == [
        SystemMessage,
        HumanMessage,
        AIMessage,
        HumanMessage,
    ]
    assert sent[0].content == "Stay concise."
    assert sent[-1].content == "Shorter"
