"""Host-side document model: documents, edits and change notifications."""

from .document import TextDocument
from .events import Disposable, Event, EventEmitter, dispose_all
from .types import ContentChange, Position, Range, TextDocumentChangeEvent, TextEdit
from .validation import DocumentValidationError, ensure_open, ensure_owned, ensure_position
from .workspace import Workspace

__all__ = [
    "ContentChange",
    "Disposable",
    "DocumentValidationError",
    "Event",
    "EventEmitter",
    "Position",
    "Range",
    "TextDocument",
    "TextDocumentChangeEvent",
    "TextEdit",
    "Workspace",
    "dispose_all",
    "ensure_open",
    "ensure_owned",
    "ensure_position",
]
