from datetime import datetime, timedelta, timezone

import httpx
import pytest

from docs_agent.agent.dispatcher import Dispatcher, build_dispatcher, process_instruction
from docs_agent.agent.registry import ToolRegistry
from docs_agent.agent.tools import register_builtin_tools
from docs_agent.config import AgentConfig, AgentSettings
from docs_agent.errors import ProviderError
from docs_agent.memory.history import InteractionLog
from docs_agent.providers.base import TRUNCATION_MARKER
from docs_agent.types import DocumentContext


def _dispatcher(provider, log: InteractionLog | None = None) -> Dispatcher:
    registry = ToolRegistry()
    register_builtin_tools(registry)
    return Dispatcher(registry, provider, AgentConfig(), log=log)


def test_summarize_selection_reports_compression(make_provider) -> None:
    provider = make_provider(("A B C.",))
    dispatcher = _dispatcher(provider)
    context = DocumentContext(selection="A B C D E F G H I J", content="A B C D E F G H I J")

    result = dispatcher.process_instruction("Summarize this text", context)

    assert result.success is True
    assert result.tool == "summarize"
    assert result.result["summary"] == "A B C."
    assert result.result["text"] == "A B C."
    assert result.result["insert_mode"] == "insert"
    assert result.metadata["compression_ratio"] == 0.3
    assert result.metadata["latency_ms"] >= 0.0
    assert "timestamp" in result.metadata
    assert provider.options[0].max_tokens == 300
    assert len(dispatcher.log) == 1


def test_missing_subject_fails_without_calling_provider(provider) -> None:
    dispatcher = _dispatcher(provider)

    result = dispatcher.process_instruction("/summarize", DocumentContext())

    assert result.success is False
    assert result.error.startswith("No text available to summarize")
    assert provider.calls == 0
    assert dispatcher.log.recent(1)[0].success is False


def test_explain_without_any_subject_is_a_validation_error(provider) -> None:
    result = _dispatcher(provider).process_instruction("Explain this", DocumentContext())

    assert result.success is False
    assert result.error.startswith("No text available to explain")
    assert provider.calls == 0


def test_explicit_translate_uses_quoted_text_and_replaces_selection(make_provider) -> None:
    provider = make_provider(("Hola mundo",))
    dispatcher = _dispatcher(provider)

    quoted = dispatcher.process_instruction('/translate to Spanish "Hello world"', DocumentContext())
    selected = dispatcher.process_instruction(
        "/translate to Spanish", DocumentContext(selection="Hello world")
    )

    assert quoted.result["translated_text"] == "Hola mundo"
    assert quoted.result["insert_mode"] == "insert"
    assert selected.result["insert_mode"] == "replace"
    assert selected.metadata["target_language"] == "spanish"
    assert "Translate the following text to Spanish." in provider.prompts[0]
    assert '"Hello world"' in provider.prompts[0]


def test_rewrite_reports_length_change(make_provider) -> None:
    provider = make_provider(("Short.",))

    result = _dispatcher(provider).process_instruction(
        "Rewrite this to be more formal", DocumentContext(selection="This is a much longer sentence.")
    )

    assert result.success is True
    assert result.result["rewritten_text"] == "Short."
    assert result.metadata["style"] == "formal"
    assert result.metadata["length_change"].endswith("shorter")


def test_unknown_command_falls_back_to_general(make_provider) -> None:
    provider = make_provider(("Sure thing.",))

    result = _dispatcher(provider).process_instruction("/analyze the tone", DocumentContext())

    assert result.success is True
    assert result.tool == "general"
    assert result.result["response"] == "Sure thing."
    assert "User request: /analyze the tone" in provider.prompts[0]


def test_history_flows_into_general_prompts(make_provider) -> None:
    provider = make_provider(("first answer", "second answer"))
    dispatcher = _dispatcher(provider)

    dispatcher.process_instruction("hello there", DocumentContext())
    dispatcher.process_instruction("and again", DocumentContext())

    assert "Recent conversation:" not in provider.prompts[0]
    assert "1. User: hello there\n   AI: first answer" in provider.prompts[1]


def test_provider_failure_is_labelled_and_redacted(make_provider, secret_key) -> None:
    provider = make_provider(
        fail_with=ProviderError(f"HTTP 500: upstream rejected {secret_key}", status_code=500)
    )

    result = _dispatcher(provider).process_instruction(
        "Summarize", DocumentContext(content="Enough words to summarize here.")
    )

    assert result.success is False
    assert result.error.startswith("Summarization failed: HTTP 500")
    assert secret_key not in result.error
    assert "Traceback" not in result.error
    assert result.metadata["status_code"] == 500


def test_unexpected_errors_never_escape(make_provider) -> None:
    provider = make_provider(fail_with=RuntimeError("kaboom"))
    log = InteractionLog()

    result = _dispatcher(provider, log).process_instruction("hello", DocumentContext())

    assert result.success is False
    assert result.error == "Request failed: kaboom"
    assert len(log) == 1


def test_missing_provider_is_reported_per_request() -> None:
    result = _dispatcher(None).process_instruction("Summarize", DocumentContext(content="text"))

    assert result.success is False
    assert "API key is not configured" in result.error


def test_langchain_export_runs_through_dispatch(make_provider) -> None:
    provider = make_provider(("tidy",))
    dispatcher = _dispatcher(provider)

    tools = {tool.name: tool for tool in dispatcher.as_langchain_tools()}
    output = tools["format"].invoke({"instruction": "as a table", "selection": "a b c"})

    assert set(tools) == {"summarize", "rewrite", "explain", "translate", "format", "generate", "general"}
    assert output == "tidy"
    assert tools["summarize"].invoke({"instruction": ""}).startswith("Error: No text available")


def test_process_instruction_over_http_reports_server_error(secret_key) -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(500, text="internal error")

    settings = AgentSettings(api_key=secret_key)
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    dispatcher = build_dispatcher(settings, http_client=http_client)
    dispatcher.provider.update_config(retry_min_seconds=0.0)

    result = dispatcher.process_instruction("/rewrite", DocumentContext(selection="Some words."))

    assert result.success is False
    assert result.error == "Rewriting failed: HTTP 500: internal error"
    assert secret_key not in result.error
    assert len(calls) == 2


@pytest.mark.parametrize(
    ("api_key", "message"),
    [("", "API key is not configured"), ("abc", "Invalid OpenAI API key format")],
)
def test_module_level_entry_point_reports_key_problems(api_key: str, message: str) -> None:
    result = process_instruction(
        "Summarize", DocumentContext(content="text"), AgentSettings(api_key=api_key)
    )

    assert result.success is False
    assert message in result.error


def test_default_settings_rewrite_fits_a_small_model_window(make_provider) -> None:
    provider = make_provider(("Three brief words.",))
    provider.update_config(model="gpt-3.5-turbo")
    dispatcher = _dispatcher(provider)

    result = dispatcher.process_instruction(
        "Rewrite this", DocumentContext(selection="Three short words.")
    )

    assert result.success is True, result.error
    assert provider.calls == 1
    sent_budget = provider.options[0].max_tokens
    assert sent_budget + provider.estimate_token_count(provider.prompts[0]) <= 4096


def test_max_tokens_near_the_window_still_serves_requests(make_provider) -> None:
    provider = make_provider(("Fine.",))
    provider.update_config(max_tokens=8000)
    dispatcher = _dispatcher(provider)

    result = dispatcher.process_instruction("Write a haiku about rain", DocumentContext())

    assert result.success is True, result.error
    assert provider.options[0].max_tokens <= 8192 - provider.estimate_token_count(
        provider.prompts[0]
    )


def test_expired_history_is_left_out_of_the_next_prompt(make_provider) -> None:
    class _Clock:
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)

        def __call__(self) -> datetime:
            return self.now

    clock = _Clock()
    provider = make_provider(("first", "second"))
    dispatcher = _dispatcher(provider, log=InteractionLog(clock=clock))

    dispatcher.process_instruction("hello there", DocumentContext())
    clock.now += timedelta(hours=48)
    dispatcher.process_instruction("new day", DocumentContext())

    assert provider.calls == 2
    assert "Recent conversation:" not in provider.prompts[1]
    assert "hello there" not in provider.prompts[1]


def test_oversized_summary_input_is_rejected_before_the_provider(make_provider) -> None:
    provider = make_provider()
    dispatcher = _dispatcher(provider)

    result = dispatcher.process_instruction(
        "Summarize this", DocumentContext(selection="a" * 50_001)
    )

    assert result.success is False
    assert "Text is too long for summarization (max 50,000 characters)" in result.error
    assert result.metadata["error_type"] == "validation"
    assert provider.calls == 0


def test_summary_statistics_describe_the_truncated_text(make_provider) -> None:
    provider = make_provider(("Short summary.",), context_window=1000)
    dispatcher = _dispatcher(provider)
    subject = "word " * 2000

    result = dispatcher.process_instruction(
        "Summarize this", DocumentContext(selection=subject, content=subject)
    )

    assert result.success is True, result.error
    assert result.metadata["truncated"] is True
    sent = result.result["statistics"]["original_characters"]
    assert sent < len(subject)
    assert result.metadata["original_length"] == sent
    assert TRUNCATION_MARKER in provider.prompts[0]
