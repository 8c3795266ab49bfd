"""Coordinate and change value types shared by the host and the trackers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from .document import TextDocument


@dataclass(frozen=True, order=True, slots=True)
class Position:
    """Zero-based (line, character) coordinate."""

    line: int
    character: int

    def translate(self, line_delta: int = 0, character_delta: int = 0) -> "Position":
        return Position(self.line + line_delta, self.character + character_delta)


@dataclass(frozen=True, slots=True)
class Range:
    """Half-open span between two positions. Reversed endpoints are swapped."""

    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.end < self.start:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    @classmethod
    def of(cls, start_line: int, start_char: int, end_line: int, end_char: int) -> "Range":
        return cls(Position(start_line, start_char), Position(end_line, end_char))

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, position: Position) -> bool:
        return self.start <= position <= self.end


@dataclass(frozen=True, slots=True)
class TextEdit:
    """A replacement requested against the host's current content."""

    range: Range
    new_text: str

    @classmethod
    def insert(cls, position: Position, text: str) -> "TextEdit":
        return cls(Range(position, position), text)

    @classmethod
    def delete(cls, range: Range) -> "TextEdit":
        return cls(range, "")


@dataclass(frozen=True, slots=True)
class ContentChange:
    """One applied change, expressed against the pre-batch snapshot.

    ``range_offset``/``range_length``/``text`` are all the offset translator
    needs. ``range`` and ``replaced_text`` are carried for features that want
    line information or the old content.
    """

    range: Range
    range_offset: int
    range_length: int
    text: str
    replaced_text: str = ""

    @property
    def range_end(self) -> int:
        return self.range_offset + self.range_length

    @property
    def inserted_length(self) -> int:
        return len(self.text)


@dataclass(frozen=True, slots=True)
class TextDocumentChangeEvent:
    document: "TextDocument"
    content_changes: Tuple[ContentChange, ...]
    version: int


__all__ = [
    "ContentChange",
    "Position",
    "Range",
    "TextDocumentChangeEvent",
    "TextEdit",
]
