"""Prompt templates for each tool kind.

Every prompt has the same shape: task preamble, one sentence per resolved
parameter, the subject text in a quoted block, then a closing instruction that
asks for the bare result. The explain prompt also appends one structural hint
about the subject (code, technical term or complex sentence) just before the
closing line.
"""

from __future__ import annotations

import re
from typing import TypeVar

from pydantic import BaseModel

from docs_agent.agent.extraction import (
    Audience,
    Depth,
    ExplainParameters,
    ExplainStyle,
    ExtractedParameters,
    FormatParameters,
    FormatType,
    GenerateParameters,
    Language,
    RewriteLength,
    RewriteParameters,
    RewriteStyle,
    SummarizeParameters,
    SummaryLength,
    SummaryStyle,
    Tone,
    TranslateParameters,
)
from docs_agent.agent.kinds import ToolKind
from docs_agent.providers.base import GenerationOptions, ProviderClient

SUMMARY_STYLE_SENTENCES = {
    SummaryStyle.BULLET_POINTS: "Create a bullet-point summary that captures the key points.",
    SummaryStyle.DETAILED: "Create a comprehensive summary that covers all important details.",
    SummaryStyle.CONCISE: "Create a concise summary that captures the main ideas.",
}
SUMMARY_LENGTH_SENTENCES = {
    SummaryLength.SHORT: "Keep it brief - 1-2 sentences maximum.",
    SummaryLength.LONG: "Provide a thorough summary with multiple paragraphs if needed.",
    SummaryLength.MEDIUM: "Aim for a moderate length - 3-5 sentences.",
}
REWRITE_STYLE_DESCRIPTIONS = {
    RewriteStyle.FORMAL: "Professional and formal language, suitable for business or official documents.",
    RewriteStyle.CASUAL: "Conversational and relaxed tone, as if speaking to a friend.",
    RewriteStyle.ACADEMIC: "Scholarly and precise language, suitable for research or educational content.",
    RewriteStyle.CREATIVE: "Expressive and imaginative language with vivid descriptions.",
    RewriteStyle.SIMPLE: "Clear and straightforward language, easy to understand.",
    RewriteStyle.IMPROVE: "Enhanced version with better word choice, structure, and clarity.",
}
TONE_DESCRIPTIONS = {
    Tone.PROFESSIONAL: "Maintain a professional and business-appropriate tone.",
    Tone.FRIENDLY: "Use a warm, approachable, and friendly tone.",
    Tone.PERSUASIVE: "Write in a compelling and convincing manner.",
    Tone.AUTHORITATIVE: "Use confident and expert language.",
    Tone.EMPATHETIC: "Show understanding and compassion.",
    Tone.NEUTRAL: "Maintain an objective and balanced tone.",
}
REWRITE_LENGTH_DESCRIPTIONS = {
    RewriteLength.SHORTER: "Make it more concise while preserving all key information.",
    RewriteLength.LONGER: "Expand with additional details, examples, or explanations.",
    RewriteLength.SAME: "Keep approximately the same length.",
}
EXPLAIN_STYLE_DESCRIPTIONS = {
    ExplainStyle.SIMPLE: "Use simple, everyday language that anyone can understand.",
    ExplainStyle.DETAILED: "Provide comprehensive coverage with thorough explanations.",
    ExplainStyle.TECHNICAL: "Use precise, technical language appropriate for experts.",
    ExplainStyle.ACADEMIC: "Use scholarly language suitable for academic contexts.",
    ExplainStyle.CONVERSATIONAL: "Use a friendly, conversational tone as if talking to a friend.",
    ExplainStyle.CLEAR: "Use clear, straightforward language that is easy to follow.",
}
AUDIENCE_DESCRIPTIONS = {
    Audience.BEGINNER: "Assume no prior knowledge and explain basic concepts.",
    Audience.EXPERT: "Assume advanced knowledge and focus on nuanced details.",
    Audience.CHILD: "Use very simple language appropriate for children.",
    Audience.GENERAL: "Assume general education level and moderate familiarity.",
}
DEPTH_DESCRIPTIONS = {
    Depth.BRIEF: "Keep the explanation concise and to the point.",
    Depth.DETAILED: "Provide comprehensive coverage with multiple aspects.",
    Depth.MODERATE: "Provide adequate detail without being overwhelming.",
}
FORMAT_DESCRIPTIONS = {
    FormatType.BULLETED_LIST: "a bulleted list",
    FormatType.TABLE: "a table",
    FormatType.OUTLINE: "an outline",
    FormatType.PARAGRAPHS: "paragraphs",
    FormatType.HEADINGS: "sections with proper headings",
    FormatType.STRUCTURED: "a well-structured format",
}
GENERATE_LENGTH_SENTENCES = {
    SummaryLength.SHORT: "Keep the new content short - a few sentences at most.",
    SummaryLength.LONG: "Write long-form content with several paragraphs.",
    SummaryLength.MEDIUM: "Aim for one or two paragraphs.",
}

CODE_INDICATORS = (
    "{", "}", "()", "=>", "function", "class", "def ", "var ", "let ", "const ",
    "import ", "#include", "public ", "private ",
)
COMPLEX_INDICATORS = (
    ";", ":", "however", "therefore", "furthermore", "nevertheless", "consequently",
)
_TECHNICAL_SHAPE = re.compile(r"[A-Z]{2,}|[a-z]+[A-Z][a-z]+")


def is_code_snippet(text: str) -> bool:
    return any(indicator in text for indicator in CODE_INDICATORS)


def is_technical_term(text: str) -> bool:
    return len(text) < 50 and _TECHNICAL_SHAPE.search(text) is not None


def is_complex_sentence(text: str) -> bool:
    return len(text) > 100 and any(indicator in text for indicator in COMPLEX_INDICATORS)


def structural_hint(text: str) -> str:
    if is_code_snippet(text):
        return "This appears to be code. Explain what it does, how it works, and any important concepts."
    if is_technical_term(text):
        return "This appears to be a technical term. Provide a clear definition and context."
    if is_complex_sentence(text):
        return "This appears to be complex text. Break it down and clarify the meaning."
    return ""


def quote_block(label: str, text: str) -> str:
    return f'{label}:\n"{text}"'


def excerpt(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


P = TypeVar("P", bound=BaseModel)


def _expect(params: BaseModel, expected: type[P]) -> P:
    if not isinstance(params, expected):
        raise TypeError(
            f"{expected.__name__} required, got {type(params).__name__}"
        )
    return params


def language_name(language: Language) -> str:
    if language is Language.UNSPECIFIED:
        return "the target language specified"
    return language.value.capitalize()


class PromptBuilder:
    """Deterministic prompt assembly for every ``ToolKind``."""

    def __init__(
        self, *, general_context_chars: int = 1000, generate_context_chars: int = 500
    ) -> None:
        self.general_context_chars = general_context_chars
        self.generate_context_chars = generate_context_chars

    def build(
        self,
        kind: ToolKind,
        subject: str,
        params: ExtractedParameters,
        *,
        request_text: str = "",
        document_text: str = "",
        history: str = "",
    ) -> str:
        match kind:
            case ToolKind.SUMMARIZE:
                sections = self._summarize(subject, params)
            case ToolKind.REWRITE:
                sections = self._rewrite(subject, params)
            case ToolKind.EXPLAIN:
                sections = self._explain(subject, params)
            case ToolKind.TRANSLATE:
                sections = self._translate(subject, params)
            case ToolKind.FORMAT:
                sections = self._format(subject, params)
            case ToolKind.GENERATE:
                sections = self._generate(subject, params, document_text, history)
            case ToolKind.GENERAL:
                sections = self._general(subject, request_text, document_text, history)
            case _:
                raise ValueError(f"Unsupported tool kind: {kind!r}")
        return "\n\n".join(section for section in sections if section)

    def build_within_limit(
        self,
        kind: ToolKind,
        subject: str,
        params: ExtractedParameters,
        provider: ProviderClient,
        options: GenerationOptions | None = None,
        **extras: str,
    ) -> tuple[str, bool]:
        """Build a prompt, truncating ``subject`` if the whole would not fit.

        Returns the prompt and whether the subject was truncated.
        """

        fitted = self.fit_subject(kind, subject, params, provider, options, **extras)
        return self.build(kind, fitted, params, **extras), fitted != subject

    def fit_subject(
        self,
        kind: ToolKind,
        subject: str,
        params: ExtractedParameters,
        provider: ProviderClient,
        options: GenerationOptions | None = None,
        **extras: str,
    ) -> str:
        """The subject as it will be sent: unchanged, or cut to the room left
        after the prompt template and the provider's response reserve."""

        prompt = self.build(kind, subject, params, **extras)
        if provider.is_within_limit(prompt, options):
            return subject

        overhead = provider.estimate_token_count(self.build(kind, "", params, **extras))
        budget = provider.context_window - provider.response_reserve(options) - overhead
        return provider.truncate_to_token_limit(subject, max(budget, 0))

    def _summarize(self, subject: str, params: ExtractedParameters) -> list[str]:
        params = _expect(params, SummarizeParameters)
        return [
            "You are an expert at creating clear, accurate summaries.\n"
            + SUMMARY_STYLE_SENTENCES[params.style]
            + "\n"
            + SUMMARY_LENGTH_SENTENCES[params.length],
            quote_block("Text to summarize", subject),
            "Return only the summary, without any introduction or commentary.",
        ]

    def _rewrite(self, subject: str, params: ExtractedParameters) -> list[str]:
        params = _expect(params, RewriteParameters)
        lines = [
            "You are an expert editor and writer. Rewrite the following text "
            "according to these specifications:",
            f"Style: {REWRITE_STYLE_DESCRIPTIONS[params.style]}",
            f"Tone: {TONE_DESCRIPTIONS[params.tone]}",
            f"Length: {REWRITE_LENGTH_DESCRIPTIONS[params.length]}",
        ]
        requirements = ""
        if params.specific_instructions:
            requirements = "Specific requirements:\n" + "\n".join(
                f"- {instruction}." for instruction in params.specific_instructions
            )
        return [
            "\n".join(lines),
            requirements,
            quote_block("Original text", subject),
            "Return only the rewritten text that follows all the above requirements, "
            "without explanations or commentary.",
        ]

    def _explain(self, subject: str, params: ExtractedParameters) -> list[str]:
        params = _expect(params, ExplainParameters)
        lines = [
            "You are an expert educator and communicator. Explain the following "
            "text or concept clearly and accurately.",
            f"Style: {EXPLAIN_STYLE_DESCRIPTIONS[params.style]}",
            f"Audience: {AUDIENCE_DESCRIPTIONS[params.audience]}",
            f"Depth: {DEPTH_DESCRIPTIONS[params.depth]}",
        ]
        if params.include_examples:
            lines.append("Include relevant examples to illustrate your explanation.")
        return [
            "\n".join(lines),
            quote_block("Text/concept to explain", subject),
            structural_hint(subject),
            "Return only the explanation, without restating these instructions.",
        ]

    def _translate(self, subject: str, params: ExtractedParameters) -> list[str]:
        params = _expect(params, TranslateParameters)
        return [
            "You are a professional translator.\n"
            f"Translate the following text to {language_name(params.target_language)}.\n"
            "Maintain the original meaning, tone, and style as much as possible.",
            quote_block("Text to translate", subject),
            "Return only the translation without additional commentary.",
        ]

    def _format(self, subject: str, params: ExtractedParameters) -> list[str]:
        params = _expect(params, FormatParameters)
        return [
            "You are a document formatting assistant.\n"
            f"Format the following text as {FORMAT_DESCRIPTIONS[params.format_type]}.\n"
            "Maintain the original content while improving structure and presentation.",
            quote_block("Text to format", subject),
            "Return only the formatted text, without commentary.",
        ]

    def _generate(
        self,
        subject: str,
        params: ExtractedParameters,
        document_text: str,
        history: str,
    ) -> list[str]:
        params = _expect(params, GenerateParameters)
        context = ""
        if document_text.strip():
            context = "Use this document context for inspiration and consistency:\n" + excerpt(
                document_text, self.generate_context_chars
            )
        return [
            history,
            "You are a creative writing assistant. Generate content based on the "
            "user's request.\n"
            + TONE_DESCRIPTIONS[params.tone]
            + "\n"
            + GENERATE_LENGTH_SENTENCES[params.length],
            context,
            quote_block("Generation request", subject),
            "Return only the generated content, ready to insert into the document, "
            "without commentary.",
        ]

    def _general(
        self, subject: str, request_text: str, document_text: str, history: str
    ) -> list[str]:
        selected = quote_block("The user has selected this text", subject) if subject else ""
        context = ""
        if document_text.strip() and document_text != subject:
            context = "Document context:\n" + excerpt(document_text, self.general_context_chars)
        return [
            history,
            "You are an AI writing assistant helping with a document.",
            f"User request: {request_text}",
            context,
            selected,
            "Provide a helpful response based on the context and request. "
            "Return only the response text.",
        ]
