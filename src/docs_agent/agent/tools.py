"""Built-in tool implementations for the document assistant."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from docs_agent.agent.extraction import (
    ExtractedParameters,
    GeneralParameters,
    SummaryLength,
    extract_explain,
    extract_format,
    extract_generate,
    extract_rewrite,
    extract_summarize,
    extract_translate,
    resolve_subject,
)
from docs_agent.agent.kinds import ToolKind
from docs_agent.agent.prompts import PromptBuilder, language_name
from docs_agent.config import AgentConfig
from docs_agent.document.metrics import length_change, ratio, reading_time, word_count
from docs_agent.errors import InputValidationError
from docs_agent.providers.base import GenerationOptions, ProviderClient
from docs_agent.types import DocumentContext, ParsedRequest, ToolResult

if TYPE_CHECKING:
    from docs_agent.agent.registry import ToolRegistry

LOGGER = logging.getLogger(__name__)

SUMMARY_MAX_TOKENS = {
    SummaryLength.SHORT: 100,
    SummaryLength.MEDIUM: 300,
    SummaryLength.LONG: 800,
}
MAX_SUMMARY_CHARS = 50_000


@dataclass(slots=True)
class ToolInvocation:
    """Everything a tool may read while serving one request."""

    request: ParsedRequest
    context: DocumentContext
    provider: ProviderClient
    config: AgentConfig
    history: str = ""


class Tool(ABC):
    """A stateless handler for one intent."""

    kind: ClassVar[ToolKind]
    description: ClassVar[str]
    failure_label: ClassVar[str] = "Request"

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    def execute(self, invocation: ToolInvocation) -> ToolResult:
        """Serve one request; raise ``DocsAgentError`` subclasses on failure."""

    def _complete(
        self,
        invocation: ToolInvocation,
        subject: str,
        params: ExtractedParameters,
        options: GenerationOptions | None = None,
        **extras: str,
    ) -> tuple[str, str]:
        """Return the completion and the subject as it appeared in the prompt."""
        config = invocation.config
        builder = PromptBuilder(
            general_context_chars=config.general_context_chars,
            generate_context_chars=config.generate_context_chars,
        )
        sent = builder.fit_subject(
            self.kind, subject, params, invocation.provider, options, **extras
        )
        if sent != subject:
            LOGGER.info("Subject text truncated to fit %s context window", self.name)
        prompt = builder.build(self.kind, sent, params, **extras)
        return invocation.provider.generate_response(prompt, options), sent


def _insert_mode(subject: str, context: DocumentContext) -> str:
    return "replace" if context.has_selection and subject == context.selection else "insert"


class SummarizeTool(Tool):
    kind = ToolKind.SUMMARIZE
    description = "Summarize selected text or the entire document."
    failure_label = "Summarization"

    def execute(self, invocation: ToolInvocation) -> ToolResult:
        subject = resolve_subject(invocation.request, invocation.context)
        if not subject.strip():
            raise InputValidationError(
                "No text available to summarize. Please select text or ensure "
                "document has content."
            )
        if len(subject) > MAX_SUMMARY_CHARS:
            raise InputValidationError(
                f"Text is too long for summarization (max {MAX_SUMMARY_CHARS:,} characters)"
            )
        params = extract_summarize(invocation.request.parameter_tail)
        options = GenerationOptions(max_tokens=SUMMARY_MAX_TOKENS[params.length])
        summary, sent = self._complete(invocation, subject, params, options)

        original_words = word_count(sent)
        summary_words = word_count(summary)
        return ToolResult.ok(
            {
                "text": summary,
                "summary": summary,
                "action": "summarize",
                "insert_mode": "insert",
                "statistics": {
                    "original_words": original_words,
                    "summary_words": summary_words,
                    "compression_ratio": ratio(summary_words, original_words),
                    "original_characters": len(sent),
                    "summary_characters": len(summary),
                },
            },
            tool=self.name,
            original_length=len(sent),
            summary_length=len(summary),
            compression_ratio=ratio(summary_words, original_words),
            style=params.style.value,
            length=params.length.value,
            truncated=sent != subject,
        )


class RewriteTool(Tool):
    kind = ToolKind.REWRITE
    description = "Rewrite and improve selected text."
    failure_label = "Rewriting"

    def execute(self, invocation: ToolInvocation) -> ToolResult:
        subject = resolve_subject(
            invocation.request, invocation.context, allow_document=False
        )
        if not subject.strip():
            raise InputValidationError(
                "No text available to rewrite. Please select text in the document."
            )
        params = extract_rewrite(invocation.request.parameter_tail)
        rewritten, sent = self._complete(invocation, subject, params)

        return ToolResult.ok(
            {
                "text": rewritten,
                "original_text": subject,
                "rewritten_text": rewritten,
                "instructions": params.model_dump(mode="json"),
                "action": "rewrite",
                "insert_mode": _insert_mode(subject, invocation.context),
                "statistics": {
                    "original_word_count": word_count(sent),
                    "rewritten_word_count": word_count(rewritten),
                    "original_char_count": len(sent),
                    "rewritten_char_count": len(rewritten),
                },
            },
            tool=self.name,
            original_length=len(sent),
            rewritten_length=len(rewritten),
            style=params.style.value,
            tone=params.tone.value,
            length_change=length_change(sent, rewritten),
            truncated=sent != subject,
        )


class ExplainTool(Tool):
    kind = ToolKind.EXPLAIN
    description = "Explain and clarify selected text or concepts."
    failure_label = "Explanation"

    def execute(self, invocation: ToolInvocation) -> ToolResult:
        subject = resolve_subject(
            invocation.request,
            invocation.context,
            allow_document=False,
            allow_what_is=True,
            allow_key_terms=True,
        )
        if not subject.strip():
            raise InputValidationError(
                "No text available to explain. Please select text in the document."
            )
        params = extract_explain(
            invocation.request.parameter_tail,
            include_examples_default=invocation.config.include_examples,
        )
        explanation, sent = self._complete(invocation, subject, params)

        return ToolResult.ok(
            {
                "text": explanation,
                "original_text": subject,
                "explanation": explanation,
                "preferences": params.model_dump(mode="json"),
                "action": "explain",
                "insert_mode": "insert",
                "statistics": {
                    "original_word_count": word_count(sent),
                    "explanation_word_count": word_count(explanation),
                    "reading_time": reading_time(explanation),
                },
            },
            tool=self.name,
            original_length=len(sent),
            explanation_length=len(explanation),
            style=params.style.value,
            audience=params.audience.value,
            truncated=sent != subject,
        )


class TranslateTool(Tool):
    kind = ToolKind.TRANSLATE
    description = "Translate text to another language."
    failure_label = "Translation"

    def execute(self, invocation: ToolInvocation) -> ToolResult:
        subject = resolve_subject(invocation.request, invocation.context)
        if not subject.strip():
            raise InputValidationError(
                "No text available to translate. Please select text or quote it "
                "in your request."
            )
        params = extract_translate(invocation.request.parameter_tail)
        translated, sent = self._complete(invocation, subject, params)

        return ToolResult.ok(
            {
                "text": translated,
                "original_text": subject,
                "translated_text": translated,
                "target_language": language_name(params.target_language),
                "action": "translate",
                "insert_mode": _insert_mode(subject, invocation.context),
                "statistics": {
                    "original_word_count": word_count(sent),
                    "translated_word_count": word_count(translated),
                },
            },
            tool=self.name,
            original_length=len(sent),
            translated_length=len(translated),
            target_language=params.target_language.value,
            truncated=sent != subject,
        )


class FormatTool(Tool):
    kind = ToolKind.FORMAT
    description = "Format and structure text content."
    failure_label = "Formatting"

    def execute(self, invocation: ToolInvocation) -> ToolResult:
        subject = resolve_subject(invocation.request, invocation.context)
        if not subject.strip():
            raise InputValidationError(
                "No text available to format. Please select text or ensure "
                "document has content."
            )
        params = extract_format(invocation.request.parameter_tail)
        formatted, sent = self._complete(invocation, subject, params)

        return ToolResult.ok(
            {
                "text": formatted,
                "original_text": subject,
                "formatted_text": formatted,
                "format_type": params.format_type.value,
                "action": "format",
                "insert_mode": _insert_mode(subject, invocation.context),
                "statistics": {
                    "original_word_count": word_count(sent),
                    "formatted_word_count": word_count(formatted),
                },
            },
            tool=self.name,
            original_length=len(sent),
            formatted_length=len(formatted),
            format_type=params.format_type.value,
            truncated=sent != subject,
        )


class GenerateTool(Tool):
    kind = ToolKind.GENERATE
    description = "Generate new content based on a request and the document."
    failure_label = "Generation"

    def execute(self, invocation: ToolInvocation) -> ToolResult:
        request = invocation.request
        subject = request.parameter_tail.strip()
        if not subject:
            raise InputValidationError(
                "No generation request provided. Describe what to write."
            )
        params = extract_generate(request.parameter_tail)
        generated, sent = self._complete(
            invocation,
            subject,
            params,
            document_text=invocation.context.content,
            history=invocation.history,
        )

        return ToolResult.ok(
            {
                "text": generated,
                "generated_text": generated,
                "action": "generate",
                "insert_mode": "insert",
                "statistics": {
                    "word_count": word_count(generated),
                    "reading_time": reading_time(generated),
                },
            },
            tool=self.name,
            request_length=len(subject),
            generated_length=len(generated),
            tone=params.tone.value,
            length=params.length.value,
            truncated=sent != subject,
        )


class GeneralTool(Tool):
    kind = ToolKind.GENERAL
    description = "General AI assistance for requests no other tool handles."

    def execute(self, invocation: ToolInvocation) -> ToolResult:
        request, context = invocation.request, invocation.context
        request_text = (request.raw_text or "").strip()
        if not request_text:
            raise InputValidationError("Please enter an instruction.")
        response, sent = self._complete(
            invocation,
            context.selection,
            GeneralParameters(),
            request_text=request_text,
            document_text=context.content,
            history=invocation.history,
        )

        return ToolResult.ok(
            {
                "text": response,
                "response": response,
                "action": "general_assistance",
                "insert_mode": "insert",
                "statistics": {
                    "word_count": word_count(response),
                    "reading_time": reading_time(response),
                },
            },
            tool=self.name,
            request_length=len(request_text),
            response_length=len(response),
            truncated=sent != context.selection,
        )


def create_tool(kind: ToolKind) -> Tool:
    match kind:
        case ToolKind.SUMMARIZE:
            return SummarizeTool()
        case ToolKind.REWRITE:
            return RewriteTool()
        case ToolKind.EXPLAIN:
            return ExplainTool()
        case ToolKind.TRANSLATE:
            return TranslateTool()
        case ToolKind.FORMAT:
            return FormatTool()
        case ToolKind.GENERATE:
            return GenerateTool()
        case ToolKind.GENERAL:
            return GeneralTool()
    raise ValueError(f"Unknown tool kind: {kind!r}")


def register_builtin_tools(registry: ToolRegistry) -> None:
    """Register one tool per ``ToolKind`` under its kind name."""

    for kind in ToolKind:
        registry.register(kind.value, create_tool(kind))
