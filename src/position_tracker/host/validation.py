"""Validation helpers shared by the workspace and the trackers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .types import Position

if TYPE_CHECKING:
    from .document import TextDocument
    from .workspace import Workspace


class DocumentValidationError(RuntimeError):
    """Raised when callers hand in coordinates or documents that are not valid."""

    def __init__(self, message: str, *, position: Optional[Position] = None) -> None:
        super().__init__(message)
        self.position = position


def ensure_open(document: "TextDocument") -> "TextDocument":
    if document.is_closed:
        raise DocumentValidationError(f"Document '{document.uri}' is closed")
    return document


def ensure_owned(workspace: "Workspace", document: "TextDocument") -> "TextDocument":
    ensure_open(document)
    if workspace.find_document(document.uri) is not document:
        raise DocumentValidationError(
            f"Document '{document.uri}' is not open in workspace '{workspace.name}'"
        )
    return document


def ensure_position(document: "TextDocument", position: Position) -> Position:
    ensure_open(document)
    if position.line < 0 or position.line >= document.line_count:
        raise DocumentValidationError("Line out of range", position=position)
    line = document.line_at(position.line)
    if position.character < 0 or position.character > len(line):
        raise DocumentValidationError("Character out of range", position=position)
    return position


__all__ = ["DocumentValidationError", "ensure_open", "ensure_owned", "ensure_position"]
