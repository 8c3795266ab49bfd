"""In-memory text document with offset <-> position conversion."""

from __future__ import annotations

from bisect import bisect_right
from typing import List, Optional

from .types import Position, Range


def _line_starts(text: str) -> List[int]:
    starts = [0]
    index = text.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = text.find("\n", index + 1)
    return starts


class TextDocument:
    """A document owned by a :class:`~position_tracker.host.workspace.Workspace`.

    Equality is identity: two documents with the same text are still two
    documents. Conversions always reflect the current content, so a position
    computed before an edit must be re-derived after it.
    """

    __slots__ = ("uri", "language_id", "_text", "_line_starts", "version", "_closed")

    def __init__(self, uri: str, text: str = "", *, language_id: str = "plaintext") -> None:
        self.uri = uri
        self.language_id = language_id
        self._text = text
        self._line_starts = _line_starts(text)
        self.version = 1
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"v{self.version}"
        return f"TextDocument({self.uri!r}, {state})"

    @property
    def text(self) -> str:
        return self._text

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_at(self, line: int) -> str:
        start = self._line_starts[line]
        if line + 1 < len(self._line_starts):
            return self._text[start : self._line_starts[line + 1] - 1]
        return self._text[start:]

    def get_text(self, range: Optional[Range] = None) -> str:
        if range is None:
            return self._text
        return self._text[self.offset_at(range.start) : self.offset_at(range.end)]

    def offset_at(self, position: Position) -> int:
        """Absolute offset for ``position``, clamped into the document."""

        if position.line < 0:
            return 0
        if position.line >= len(self._line_starts):
            return len(self._text)
        character = max(0, min(position.character, len(self.line_at(position.line))))
        return self._line_starts[position.line] + character

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self._text)))
        line = bisect_right(self._line_starts, offset) - 1
        return Position(line, offset - self._line_starts[line])

    def _set_text(self, text: str) -> None:
        self._text = text
        self._line_starts = _line_starts(text)
        self.version += 1

    def _mark_closed(self) -> None:
        self._closed = True


__all__ = ["TextDocument"]
