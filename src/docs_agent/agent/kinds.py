"""The closed set of tool kinds."""

from __future__ import annotations

from enum import Enum


class ToolKind(str, Enum):
    SUMMARIZE = "summarize"
    REWRITE = "rewrite"
    EXPLAIN = "explain"
    TRANSLATE = "translate"
    FORMAT = "format"
    GENERATE = "generate"
    GENERAL = "general"
