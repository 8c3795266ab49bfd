"""Host workspace: owns open documents and publishes edit/close events."""

from __future__ import annotations

from itertools import count
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from position_tracker.runtime import telemetry

from .document import TextDocument
from .events import EventEmitter
from .types import ContentChange, Position, Range, TextDocumentChangeEvent, TextEdit
from .validation import DocumentValidationError, ensure_owned, ensure_position


class Workspace:
    """Set of open documents plus the change/close notifications trackers use.

    Every ``apply_edits`` call is one edit batch: all edits are resolved against
    the same pre-edit snapshot and delivered together in one
    :class:`TextDocumentChangeEvent`, in the order the caller gave them.
    """

    def __init__(self, *, name: str = "workspace") -> None:
        self.name = name
        self._documents: Dict[str, TextDocument] = {}
        self._untitled = count(1)
        self._on_open: EventEmitter[TextDocument] = EventEmitter()
        self._on_change: EventEmitter[TextDocumentChangeEvent] = EventEmitter()
        self._on_close: EventEmitter[TextDocument] = EventEmitter()
        self.on_did_open_text_document = self._on_open.event
        self.on_did_change_text_document = self._on_change.event
        self.on_did_close_text_document = self._on_close.event

    def documents(self) -> Tuple[TextDocument, ...]:
        return tuple(self._documents.values())

    def find_document(self, uri: str) -> Optional[TextDocument]:
        return self._documents.get(uri)

    def open_document(
        self,
        text: str = "",
        *,
        uri: Optional[str] = None,
        language_id: str = "plaintext",
    ) -> TextDocument:
        if uri is None:
            uri = f"untitled:Untitled-{next(self._untitled)}"
        if uri in self._documents:
            raise ValueError(f"Document '{uri}' is already open")
        document = TextDocument(uri, text, language_id=language_id)
        self._documents[uri] = document
        self._on_open.fire(document)
        return document

    def close_document(self, document: TextDocument) -> None:
        if document.is_closed or self._documents.get(document.uri) is not document:
            return
        del self._documents[document.uri]
        document._mark_closed()
        self._on_close.fire(document)

    def apply_edits(
        self, document: TextDocument, edits: Iterable[TextEdit]
    ) -> TextDocumentChangeEvent:
        ensure_owned(self, document)
        edits = list(edits)
        with telemetry.span(
            "workspace::apply_edits",
            component="workspace",
            metadata={"uri": document.uri, "edits": len(edits)},
        ) as handle:
            changes = self._resolve_changes(document, edits)
            document._set_text(_apply(document.text, changes))
            handle.add_metadata("version", document.version)
            event = TextDocumentChangeEvent(
                document=document,
                content_changes=tuple(changes),
                version=document.version,
            )
        self._on_change.fire(event)
        return event

    def insert(self, document: TextDocument, position: Position, text: str) -> TextDocumentChangeEvent:
        return self.apply_edits(document, [TextEdit.insert(position, text)])

    def replace(self, document: TextDocument, range: Range, text: str) -> TextDocumentChangeEvent:
        return self.apply_edits(document, [TextEdit(range, text)])

    def delete(self, document: TextDocument, range: Range) -> TextDocumentChangeEvent:
        return self.apply_edits(document, [TextEdit.delete(range)])

    def dispose(self) -> None:
        for document in list(self._documents.values()):
            self.close_document(document)
        self._on_open.dispose()
        self._on_change.dispose()
        self._on_close.dispose()

    @staticmethod
    def _resolve_changes(document: TextDocument, edits: Sequence[TextEdit]) -> List[ContentChange]:
        changes: List[ContentChange] = []
        for edit in edits:
            ensure_position(document, edit.range.start)
            ensure_position(document, edit.range.end)
            start = document.offset_at(edit.range.start)
            end = document.offset_at(edit.range.end)
            changes.append(
                ContentChange(
                    range=edit.range,
                    range_offset=start,
                    range_length=end - start,
                    text=edit.new_text,
                    replaced_text=document.text[start:end],
                )
            )

        ordered = sorted(changes, key=lambda change: (change.range_offset, change.range_end))
        for previous, current in zip(ordered, ordered[1:]):
            if current.range_offset < previous.range_end or (
                current.range_offset == previous.range_offset
                and previous.range_length == 0
                and current.range_length == 0
            ):
                raise DocumentValidationError(
                    "Overlapping edits in one batch", position=current.range.start
                )
        return changes


def _apply(text: str, changes: Sequence[ContentChange]) -> str:
    # Right to left so earlier offsets stay valid; at a shared start the
    # replacement goes first so an insertion there lands in front of it.
    ordered = sorted(
        changes, key=lambda change: (change.range_offset, change.range_end), reverse=True
    )
    for change in ordered:
        text = text[: change.range_offset] + change.text + text[change.range_end :]
    return text


__all__ = ["Workspace"]
