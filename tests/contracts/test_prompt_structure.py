import pytest

from docs_agent.agent.extraction import (
    ExplainParameters,
    FormatParameters,
    GeneralParameters,
    GenerateParameters,
    RewriteParameters,
    SummarizeParameters,
    SummaryLength,
    SummaryStyle,
    TranslateParameters,
    extract_rewrite,
    extract_translate,
)
from docs_agent.agent.kinds import ToolKind
from docs_agent.agent.prompts import PromptBuilder
from docs_agent.providers.base import TRUNCATION_MARKER, GenerationOptions

PARAMS = {
    ToolKind.SUMMARIZE: SummarizeParameters(),
    ToolKind.REWRITE: RewriteParameters(),
    ToolKind.EXPLAIN: ExplainParameters(),
    ToolKind.TRANSLATE: TranslateParameters(),
    ToolKind.FORMAT: FormatParameters(),
    ToolKind.GENERATE: GenerateParameters(),
    ToolKind.GENERAL: GeneralParameters(),
}


@pytest.mark.parametrize("kind", list(ToolKind))
def test_every_prompt_quotes_the_subject_and_asks_for_bare_output(kind: ToolKind) -> None:
    prompt = PromptBuilder().build(
        kind, "The quick brown fox.", PARAMS[kind], request_text="help me"
    )

    assert '"The quick brown fox."' in prompt
    assert "Return only" in prompt.splitlines()[-1]


def test_prompt_is_deterministic() -> None:
    builder = PromptBuilder()
    params = SummarizeParameters(style=SummaryStyle.BULLET_POINTS, length=SummaryLength.SHORT)

    first = builder.build(ToolKind.SUMMARIZE, "Some text.", params)

    assert first == builder.build(ToolKind.SUMMARIZE, "Some text.", params)
    assert "bullet-point summary" in first
    assert "1-2 sentences" in first


def test_rewrite_prompt_lists_specific_requirements() -> None:
    prompt = PromptBuilder().build(
        ToolKind.REWRITE, "teh text", extract_rewrite("fix grammar, formal")
    )

    assert "Specific requirements:\n- Fix grammar and spelling." in prompt
    assert "Style: Professional and formal language" in prompt
    assert prompt.index("Specific requirements") < prompt.index("Original text:")


def test_translate_prompt_names_the_language() -> None:
    prompt = PromptBuilder().build(
        ToolKind.TRANSLATE, "Hello", extract_translate("to Spanish")
    )

    assert "Translate the following text to Spanish." in prompt


def test_explain_prompt_adds_structural_hint_for_code() -> None:
    prompt = PromptBuilder().build(
        ToolKind.EXPLAIN, "def add(a, b): return a + b", ExplainParameters()
    )

    assert "This appears to be code." in prompt
    assert prompt.index("This appears to be code.") < prompt.index("Return only")


def test_general_prompt_orders_history_request_context_selection() -> None:
    prompt = PromptBuilder(general_context_chars=20).build(
        ToolKind.GENERAL,
        "picked words",
        GeneralParameters(),
        request_text="Is this clear?",
        document_text="A long document body that keeps going and going.",
        history="Recent conversation:\n1. User: hi\n   AI: hello",
    )

    positions = [
        prompt.index("Recent conversation:"),
        prompt.index("User request: Is this clear?"),
        prompt.index("Document context:\nA long document body..."),
        prompt.index('The user has selected this text:\n"picked words"'),
    ]
    assert positions == sorted(positions)


def test_generate_prompt_uses_document_excerpt() -> None:
    prompt = PromptBuilder(generate_context_chars=10).build(
        ToolKind.GENERATE,
        "a closing paragraph",
        GenerateParameters(),
        document_text="0123456789abcdef",
    )

    assert "0123456789..." in prompt
    assert 'Generation request:\n"a closing paragraph"' in prompt


def test_mismatched_parameters_are_rejected() -> None:
    with pytest.raises(TypeError):
        PromptBuilder().build(ToolKind.SUMMARIZE, "text", RewriteParameters())


def test_oversized_subject_is_truncated_to_fit(make_provider) -> None:
    provider = make_provider(context_window=1000)
    options = GenerationOptions(max_tokens=300)
    subject = "word " * 2000

    prompt, truncated = PromptBuilder().build_within_limit(
        ToolKind.SUMMARIZE, subject, SummarizeParameters(), provider, options
    )

    assert truncated is True
    assert TRUNCATION_MARKER in prompt
    assert provider.is_within_limit(prompt, options)


def test_truncation_is_idempotent(make_provider) -> None:
    provider = make_provider()
    once = provider.truncate_to_token_limit("z" * 5000, 200)

    assert provider.truncate_to_token_limit(once, 200) == once


def test_small_subject_is_left_alone(make_provider) -> None:
    provider = make_provider()

    prompt, truncated = PromptBuilder().build_within_limit(
        ToolKind.SUMMARIZE, "tiny", SummarizeParameters(), provider
    )

    assert truncated is False
    assert '"tiny"' in prompt


def test_truncation_leaves_room_when_max_tokens_fills_the_window(make_provider) -> None:
    provider = make_provider()
    provider.update_config(model="gpt-3.5-turbo")
    subject = "word " * 5000

    fitted = PromptBuilder().fit_subject(
        ToolKind.SUMMARIZE, subject, SummarizeParameters(), provider
    )
    prompt, truncated = PromptBuilder().build_within_limit(
        ToolKind.SUMMARIZE, subject, SummarizeParameters(), provider
    )

    assert truncated is True
    assert fitted.endswith(TRUNCATION_MARKER)
    assert len(fitted) > 1000
    assert provider.is_within_limit(prompt)
