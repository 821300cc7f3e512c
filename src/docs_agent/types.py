"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, model_validator


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True, frozen=True)
class ParsedRequest:
    """One user submission after classification."""

    raw_text: str
    command: str
    parameter_tail: str
    is_explicit: bool = False


@dataclass(slots=True)
class DocumentMetadata:
    doc_id: str = ""
    name: str = ""
    word_count: int = 0


@dataclass(slots=True)
class DocumentContext:
    """Read-only view of the document supplied by the editor integration."""

    selection: str = ""
    content: str = ""
    truncated: bool = False
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)

    @property
    def has_selection(self) -> bool:
        return bool(self.selection.strip())


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float


class EditResult(BaseModel):
    success: bool
    error: str | None = None


class ToolResult(BaseModel):
    """Outcome of one dispatch. Exactly one of ``result`` / ``error`` is set."""

    success: bool
    tool: str | None = None
    result: dict[str, Any] | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_channels(self) -> "ToolResult":
        if self.success and (self.error is not None or self.result is None):
            raise ValueError("successful ToolResult needs a result and no error")
        if not self.success and (self.error is None or self.result is not None):
            raise ValueError("failed ToolResult needs an error and no result")
        self.metadata.setdefault("timestamp", utc_now_iso())
        return self

    @classmethod
    def ok(
        cls, result: dict[str, Any], *, tool: str | None = None, **metadata: Any
    ) -> "ToolResult":
        return cls(success=True, tool=tool, result=result, metadata=metadata)

    @classmethod
    def fail(
        cls, error: str, *, tool: str | None = None, **metadata: Any
    ) -> "ToolResult":
        return cls(success=False, tool=tool, error=error, metadata=metadata)

    @property
    def text(self) -> str:
        if self.result is None:
            return ""
        return str(self.result.get("text", ""))
