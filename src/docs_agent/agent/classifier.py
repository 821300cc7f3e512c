"""Keyword-table intent classification for free-text instructions."""

from __future__ import annotations

import re
from collections.abc import Sequence

from docs_agent.types import ParsedRequest

Pattern = str | re.Pattern[str]

# Order is the tie-break: the first command with any matching entry wins.
DEFAULT_COMMAND_TABLE: tuple[tuple[str, tuple[Pattern, ...]], ...] = (
    ("summarize", ("summarize", "summary", "sum up", "brief", "overview")),
    ("rewrite", ("rewrite", "rephrase", "improve", "edit", "revise")),
    ("explain", ("explain", "clarify", "what does", "what is", "help me understand")),
    ("generate", ("generate", "create", "write", "compose", "draft")),
    ("analyze", ("analyze", "review", "examine", "assess", "evaluate")),
    ("translate", ("translate", "convert to", "in spanish", "in french")),
    ("format", ("format", "style", "make it", "change to")),
)


class IntentClassifier:
    """Maps raw user text to a command name.

    Text starting with ``escape_prefix`` names its command explicitly; the
    first token after the prefix is returned as-is even when no tool has that
    name, and the dispatcher decides the fallback. All other text is matched
    against an ordered table of substrings / compiled regexes.
    """

    def __init__(
        self,
        table: Sequence[tuple[str, Sequence[Pattern]]] = DEFAULT_COMMAND_TABLE,
        *,
        default_command: str = "general",
        escape_prefix: str = "/",
    ) -> None:
        self.table = tuple((command, tuple(patterns)) for command, patterns in table)
        self.default_command = default_command
        self.escape_prefix = escape_prefix

    def classify(self, raw_text: str) -> str:
        return self.parse(raw_text).command

    def parse(self, raw_text: str) -> ParsedRequest:
        stripped = (raw_text or "").strip()
        if self.escape_prefix and stripped.startswith(self.escape_prefix):
            parts = stripped[len(self.escape_prefix) :].split(maxsplit=1)
            command = parts[0].lower() if parts else self.default_command
            tail = parts[1] if len(parts) > 1 else ""
            return ParsedRequest(
                raw_text=raw_text,
                command=command,
                parameter_tail=tail,
                is_explicit=True,
            )

        return ParsedRequest(
            raw_text=raw_text,
            command=self._infer(stripped.lower()),
            parameter_tail=stripped,
        )

    def _infer(self, text: str) -> str:
        for command, patterns in self.table:
            if any(_matches(pattern, text) for pattern in patterns):
                return command
        return self.default_command


def _matches(pattern: Pattern, text: str) -> bool:
    if isinstance(pattern, re.Pattern):
        return pattern.search(text) is not None
    return pattern in text
