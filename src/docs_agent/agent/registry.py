"""Tool registry keyed by command name."""

from __future__ import annotations

import logging
from collections.abc import Callable
from time import perf_counter
from typing import Any

from docs_agent.agent.kinds import ToolKind
from docs_agent.agent.tools import GeneralTool, Tool, ToolInvocation
from docs_agent.errors import RegistrationError
from docs_agent.types import ToolResult, ToolTrace

LOGGER = logging.getLogger(__name__)


class ToolRegistry:
    """Stores tools by command name and times each execution."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._observer: Callable[[ToolTrace], None] | None = None

    def register(self, name: str, tool: Tool) -> None:
        if not callable(getattr(tool, "execute", None)):
            raise RegistrationError(f"Tool {name!r} has no callable execute()")
        if name in self._tools:
            raise RegistrationError(f"Tool already registered: {name}")
        self._tools[name] = tool

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def select(self, command: str) -> Tool:
        """Exact lookup, then the ``general`` tool, then a built-in default."""
        tool = self._tools.get(command) or self._tools.get(ToolKind.GENERAL.value)
        if tool is None:
            LOGGER.warning("No tool registered for %r and no general tool; using default", command)
            return GeneralTool()
        return tool

    def get(self, name: str) -> Tool:
        tool = self._tools.get(name)
        if tool is None:
            raise KeyError(f"Unknown tool: {name}")
        return tool

    def names(self) -> list[str]:
        return list(self._tools)

    def describe(self) -> list[dict[str, Any]]:
        return [
            {
                "name": name,
                "kind": getattr(getattr(tool, "kind", None), "value", None),
                "description": getattr(tool, "description", ""),
            }
            for name, tool in self._tools.items()
        ]

    def execute(self, tool: Tool, invocation: ToolInvocation) -> ToolResult:
        start = perf_counter()
        result = tool.execute(invocation)
        latency_ms = (perf_counter() - start) * 1000.0

        if self._observer is not None:
            self._observer(
                ToolTrace(
                    name=getattr(tool, "name", tool.__class__.__name__),
                    input_payload={
                        "command": invocation.request.command,
                        "parameter_tail": invocation.request.parameter_tail,
                    },
                    output_preview=result.text[:320],
                    latency_ms=latency_ms,
                )
            )
        return result

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
