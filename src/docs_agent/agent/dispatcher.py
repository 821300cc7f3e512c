"""Request dispatch: classify, select a tool, run it, record the interaction."""

from __future__ import annotations

import logging
from collections.abc import Callable

import httpx
from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field

from docs_agent.agent.classifier import IntentClassifier
from docs_agent.agent.registry import ToolRegistry
from docs_agent.agent.tools import Tool, ToolInvocation, register_builtin_tools
from docs_agent.config import AgentConfig, AgentSettings
from docs_agent.errors import InputValidationError, ProviderError, redact_secret
from docs_agent.memory.history import InteractionLog
from docs_agent.obs.tracing import Timer
from docs_agent.providers.base import ProviderClient
from docs_agent.providers.factory import create_provider
from docs_agent.types import DocumentContext, ParsedRequest, ToolResult

LOGGER = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "API key is not configured. Please set it in settings."


class ToolCallInput(BaseModel):
    instruction: str = Field(default="", description="What the user asked for.")
    selection: str = Field(default="", description="Currently selected text.")
    content: str = Field(default="", description="Full document text.")


class Dispatcher:
    """Routes parsed requests to registered tools.

    ``dispatch`` never raises: validation and provider failures become a
    failed ``ToolResult`` whose error is free of the configured API key, and
    every call appends exactly one record to the interaction log.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        provider: ProviderClient | None,
        config: AgentConfig | None = None,
        classifier: IntentClassifier | None = None,
        log: InteractionLog | None = None,
        *,
        unavailable_reason: str = MISSING_KEY_MESSAGE,
    ) -> None:
        self.registry = registry
        self.provider = provider
        self.config = config or AgentConfig()
        self.classifier = classifier or IntentClassifier(
            default_command=self.config.default_command
        )
        self.log = log if log is not None else InteractionLog(self.config.history)
        self.unavailable_reason = unavailable_reason

    def process_instruction(self, user_input: str, context: DocumentContext) -> ToolResult:
        return self.dispatch(self.classifier.parse(user_input), context)

    def dispatch(self, request: ParsedRequest, context: DocumentContext) -> ToolResult:
        tool = self.registry.select(request.command)
        with Timer() as timer:
            result = self._run(tool, request, context)
        result.metadata["latency_ms"] = round(timer.elapsed_ms, 2)
        result.metadata.setdefault("command", request.command)

        self.log.record(request.raw_text, result, context)
        LOGGER.info(
            "Dispatched command=%s tool=%s success=%s latency_ms=%.1f",
            request.command,
            result.tool,
            result.success,
            timer.elapsed_ms,
        )
        return result

    def _run(
        self, tool: Tool, request: ParsedRequest, context: DocumentContext
    ) -> ToolResult:
        name = getattr(tool, "name", request.command)
        label = getattr(tool, "failure_label", "Request")
        try:
            if self.provider is None:
                raise InputValidationError(self.unavailable_reason)
            invocation = ToolInvocation(
                request=request,
                context=context,
                provider=self.provider,
                config=self.config,
                history=self.log.as_prompt_context(self.config.history.prompt_items),
            )
            result = self.registry.execute(tool, invocation)
        except InputValidationError as exc:
            LOGGER.info("Rejected %s request: %s", name, exc.__class__.__name__)
            return ToolResult.fail(
                self._redact(exc.message), tool=name, error_type="validation"
            )
        except ProviderError as exc:
            LOGGER.warning("%s provider call failed (status=%s)", name, exc.status_code)
            return ToolResult.fail(
                self._redact(f"{label} failed: {exc.message}"),
                tool=name,
                error_type="provider",
                status_code=exc.status_code,
            )
        except Exception as exc:
            LOGGER.exception("Unexpected error in %s tool", name)
            return ToolResult.fail(
                self._redact(f"{label} failed: {exc}"), tool=name, error_type="internal"
            )

        if result.tool is None:
            result.tool = name
        return result

    def _redact(self, message: str) -> str:
        secret = self.provider.api_key if self.provider is not None else None
        return redact_secret(message, secret)

    def as_langchain_tools(self) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for entry in self.registry.describe():
            tools.append(
                StructuredTool.from_function(
                    name=entry["name"],
                    description=entry["description"] or entry["name"],
                    args_schema=ToolCallInput,
                    func=self._build_function(entry["name"]),
                )
            )
        return tools

    def _build_function(self, name: str) -> Callable[..., str]:
        def _callable(**kwargs: str) -> str:
            data = ToolCallInput.model_validate(kwargs)
            request = ParsedRequest(
                raw_text=data.instruction,
                command=name,
                parameter_tail=data.instruction,
                is_explicit=True,
            )
            result = self.dispatch(
                request, DocumentContext(selection=data.selection, content=data.content)
            )
            return result.text if result.success else f"Error: {result.error}"

        return _callable


def build_dispatcher(
    settings: AgentSettings,
    *,
    config: AgentConfig | None = None,
    log: InteractionLog | None = None,
    http_client: httpx.Client | None = None,
) -> Dispatcher:
    """Wire the built-in tools to a provider built from ``settings``.

    A missing or malformed key leaves the dispatcher without a provider; its
    requests then fail with the validation message instead of raising here.
    """
    registry = ToolRegistry()
    register_builtin_tools(registry)
    reason = MISSING_KEY_MESSAGE
    provider: ProviderClient | None = None
    if settings.api_key.get_secret_value().strip():
        try:
            provider = create_provider(settings, http_client=http_client)
        except InputValidationError as exc:
            LOGGER.warning("Provider %s not configured: %s", settings.provider, exc.message)
            reason = exc.message
    return Dispatcher(registry, provider, config, log=log, unavailable_reason=reason)


def process_instruction(
    user_input: str,
    context: DocumentContext,
    settings: AgentSettings,
    *,
    http_client: httpx.Client | None = None,
) -> ToolResult:
    """One-shot entry point: build a dispatcher, serve one instruction, close it."""
    dispatcher = build_dispatcher(settings, http_client=http_client)
    try:
        return dispatcher.process_instruction(user_input, context)
    finally:
        if dispatcher.provider is not None:
            dispatcher.provider.close()
