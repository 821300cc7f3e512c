"""Editor integration seam: read document context, write tool output back."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from docs_agent.document.metrics import word_count
from docs_agent.types import DocumentContext, DocumentMetadata, EditResult, ToolResult

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class DocumentEditor(Protocol):
    def get_selection(self) -> str: ...

    def get_full_text(self) -> str: ...

    def get_metadata(self) -> DocumentMetadata: ...

    def insert_at_cursor(self, text: str) -> None: ...

    def replace_selection(self, text: str) -> None: ...


class InMemoryEditor:
    """A plain-string document with a cursor and an optional selection."""

    def __init__(
        self,
        text: str = "",
        *,
        selection: tuple[int, int] | None = None,
        cursor: int | None = None,
        doc_id: str = "",
        name: str = "Untitled",
    ) -> None:
        self.text = text
        self.selection = selection
        self.cursor = len(text) if cursor is None else cursor
        self.doc_id = doc_id
        self.name = name

    def select(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(self.text):
            raise ValueError(f"Selection {start}:{end} is outside the document")
        self.selection = (start, end)
        self.cursor = end

    def get_selection(self) -> str:
        if self.selection is None:
            return ""
        start, end = self.selection
        return self.text[start:end]

    def get_full_text(self) -> str:
        return self.text

    def get_metadata(self) -> DocumentMetadata:
        return DocumentMetadata(
            doc_id=self.doc_id, name=self.name, word_count=word_count(self.text)
        )

    def insert_at_cursor(self, text: str) -> None:
        self.text = self.text[: self.cursor] + text + self.text[self.cursor :]
        self.cursor += len(text)
        self.selection = None

    def replace_selection(self, text: str) -> None:
        if self.selection is None:
            raise ValueError("No text is selected")
        start, end = self.selection
        self.text = self.text[:start] + text + self.text[end:]
        self.cursor = start + len(text)
        self.selection = None


@dataclass(slots=True, frozen=True)
class TextMatch:
    """One occurrence of a search string with the text around it."""

    text: str
    context: str
    index: int
    before_context: str
    after_context: str


@dataclass(slots=True, frozen=True)
class RangeContext:
    text: str
    start_index: int
    end_index: int
    length: int
    word_count: int


def _collapse(text: str) -> str:
    return " ".join(text.split())


def capture_context(
    editor: DocumentEditor, max_content_length: int = 10000
) -> DocumentContext:
    """Snapshot the editor, collapsing whitespace and capping the content length."""
    source = editor.get_metadata()
    return build_context(
        editor.get_selection(),
        editor.get_full_text(),
        max_content_length=max_content_length,
        doc_id=source.doc_id,
        name=source.name,
    )


def build_context(
    selection: str | None,
    content: str | None,
    *,
    max_content_length: int = 10000,
    doc_id: str = "",
    name: str = "",
) -> DocumentContext:
    full_text = content or ""
    collapsed = _collapse(full_text)
    truncated = len(collapsed) > max_content_length
    if truncated:
        collapsed = collapsed[:max_content_length] + "..."

    return DocumentContext(
        selection=_collapse(selection or ""),
        content=collapsed,
        truncated=truncated,
        metadata=DocumentMetadata(
            doc_id=doc_id, name=name, word_count=word_count(full_text)
        ),
    )


def apply_result(editor: DocumentEditor, result: ToolResult) -> EditResult:
    """Write a successful result into the editor according to its insert mode.

    ``replace`` falls back to inserting at the cursor when nothing is selected.
    """
    if not result.success:
        return EditResult(success=False, error=result.error)
    text = result.text
    if not text:
        return EditResult(success=False, error="No text to insert")

    mode = (result.result or {}).get("insert_mode", "insert")
    try:
        if mode == "replace" and editor.get_selection():
            editor.replace_selection(text)
        else:
            editor.insert_at_cursor(text)
    except ValueError as exc:
        LOGGER.warning("Editor rejected %s: %s", mode, exc)
        return EditResult(success=False, error=str(exc))
    return EditResult(success=True)


def find_text_context(
    editor: DocumentEditor, search_text: str, context_length: int = 200
) -> list[TextMatch]:
    """Every occurrence of ``search_text``, overlapping ones included."""
    if not search_text:
        return []
    content = editor.get_full_text()
    context_length = max(0, context_length)
    matches: list[TextMatch] = []
    index = content.find(search_text)
    while index != -1:
        match_end = index + len(search_text)
        start = max(0, index - context_length)
        end = min(len(content), match_end + context_length)
        matches.append(
            TextMatch(
                text=search_text,
                context=content[start:end],
                index=index,
                before_context=content[start:index],
                after_context=content[match_end:end],
            )
        )
        index = content.find(search_text, index + 1)
    return matches


def get_range_context(editor: DocumentEditor, start: int, end: int) -> RangeContext:
    """Text between two offsets, clamped to the document; reversed bounds are swapped."""
    content = editor.get_full_text()
    start = min(max(start, 0), len(content))
    end = min(max(end, 0), len(content))
    if start > end:
        start, end = end, start
    text = content[start:end]
    return RangeContext(
        text=text,
        start_index=start,
        end_index=end,
        length=len(text),
        word_count=word_count(text),
    )
