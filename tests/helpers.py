"""Marker-based helpers for locating text in test documents.

``position_of("4^5", doc)`` is the position of ``^`` inside the first match of
``"45"``; ``range_of("|22|", doc)`` is the range between the pipes inside the
first match of ``"22"``.
"""

from __future__ import annotations

from position_tracker.host import Position, Range, TextDocument, Workspace


def open_doc(workspace: Workspace, text: str) -> TextDocument:
    return workspace.open_document(text)


def offset_of(marker: str, document: TextDocument) -> int:
    caret = marker.index("^")
    needle = marker.replace("^", "")
    found = document.text.index(needle)
    return found + caret


def position_of(marker: str, document: TextDocument) -> Position:
    return document.position_at(offset_of(marker, document))


def range_of(marker: str, document: TextDocument) -> Range:
    first = marker.index("|")
    last = marker.rindex("|")
    if first == last:
        raise ValueError(f"Range marker needs two pipes: {marker!r}")
    needle = marker.replace("|", "")
    found = document.text.index(needle)
    return Range(
        document.position_at(found + first),
        document.position_at(found + last - 1),
    )
