"""Bounded in-session log of past interactions."""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from docs_agent.config import HistoryConfig
from docs_agent.types import DocumentContext, ToolResult


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class InteractionRecord:
    id: str
    timestamp: datetime
    user_input: str
    tool: str | None
    success: bool
    response_summary: str
    document_id: str = ""

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "user_input": self.user_input,
            "tool": self.tool,
            "success": self.success,
            "response_summary": self.response_summary,
            "document_id": self.document_id,
        }


def _summarize(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class InteractionLog:
    """Append-only log trimmed by age and size on every write.

    Appends and trims run under one lock; reads take a snapshot under the
    same lock so callers never observe a half-trimmed list.
    """

    def __init__(
        self,
        config: HistoryConfig | None = None,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.config = config or HistoryConfig()
        self._clock = clock
        self._records: list[InteractionRecord] = []
        self._lock = threading.Lock()

    def record(
        self,
        user_input: str,
        result: ToolResult,
        context: DocumentContext | None = None,
    ) -> InteractionRecord:
        response = result.text if result.success else f"Error: {result.error}"
        entry = InteractionRecord(
            id=uuid.uuid4().hex,
            timestamp=self._clock(),
            user_input=user_input,
            tool=result.tool,
            success=result.success,
            response_summary=_summarize(response, self.config.summary_chars),
            document_id=context.metadata.doc_id if context is not None else "",
        )
        with self._lock:
            self._records.append(entry)
            self._trim_locked()
        return entry

    def recent(self, n: int = 10) -> list[InteractionRecord]:
        """Most recent first."""
        if n <= 0:
            return []
        with self._lock:
            self._trim_locked()
            return list(reversed(self._records[-n:]))

    def as_prompt_context(self, n: int = 3) -> str:
        entries = list(reversed(self.recent(n)))
        if not entries:
            return ""
        lines = ["Recent conversation:"]
        for index, entry in enumerate(entries, start=1):
            lines.append(f"{index}. User: {_summarize(entry.user_input, self.config.summary_chars)}")
            lines.append(f"   AI: {entry.response_summary}")
        return "\n".join(lines)

    def trim(self) -> int:
        """Drop expired and overflow entries; returns how many were removed."""
        with self._lock:
            return self._trim_locked()

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def _trim_locked(self) -> int:
        before = len(self._records)
        cutoff = self._clock() - timedelta(hours=self.config.max_age_hours)
        kept = [entry for entry in self._records if entry.timestamp >= cutoff]
        self._records = kept[-self.config.max_items :]
        return before - len(self._records)

    def __len__(self) -> int:
        with self._lock:
            self._trim_locked()
            return len(self._records)
