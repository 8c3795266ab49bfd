"""Trackers bound to one document at a time.

These publish a whole mapping per edit batch instead of per-coordinate
callbacks; :class:`~position_tracker.tracking.positions.DocumentPositionTracker`
is the general-purpose replacement for multi-document use.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from position_tracker.host import (
    Disposable,
    EventEmitter,
    Position,
    TextDocument,
    TextDocumentChangeEvent,
    Workspace,
    dispose_all,
)
from position_tracker.runtime import telemetry

from .offsets import translate_offset

OffsetsChanged = Tuple[TextDocument, Mapping[int, Optional[int]]]
PositionsChanged = Tuple[TextDocument, Mapping[Position, Position]]

_LOGGER_NAME = "position_tracker.tracking"


class SingleDocumentOffsetTracker:
    """Keeps a set of raw offsets in one document current across edits.

    ``on_offsets_changed`` fires once per edit batch with a mapping keyed by
    the offsets originally passed to :meth:`track_doc`. Lost offsets stay in
    the mapping as ``None`` and are no longer translated.
    """

    def __init__(self, workspace: Workspace) -> None:
        self._document: Optional[TextDocument] = None
        self._offsets: Dict[int, Optional[int]] = {}
        self._emitter: EventEmitter[OffsetsChanged] = EventEmitter()
        self.on_offsets_changed = self._emitter.event
        self._disposables: List[Disposable] = [
            workspace.on_did_change_text_document(self._handle_change),
        ]

    @property
    def document(self) -> Optional[TextDocument]:
        return self._document

    @property
    def is_tracking(self) -> bool:
        return self._document is not None and any(
            value is not None for value in self._offsets.values()
        )

    def track_doc(self, document: TextDocument, offsets: Iterable[int]) -> None:
        self._document = document
        self._offsets = {offset: offset for offset in offsets}

    def clear(self) -> None:
        self._document = None
        self._offsets.clear()

    def current(self) -> Mapping[int, Optional[int]]:
        return dict(self._offsets)

    def _handle_change(self, event: TextDocumentChangeEvent) -> None:
        if event.document is not self._document:
            return

        lost = 0
        for original, current in list(self._offsets.items()):
            if current is None:
                continue
            updated = translate_offset(current, event.content_changes)
            self._offsets[original] = updated
            if updated is None:
                lost += 1

        if lost:
            telemetry.record_event(
                "tracking.offsets_lost",
                level="debug",
                data={"uri": event.document.uri, "count": lost},
                logger_name=_LOGGER_NAME,
            )
        self._emitter.fire((event.document, dict(self._offsets)))

    def dispose(self) -> None:
        dispose_all(self._disposables)
        self._disposables.clear()
        self._emitter.dispose()
        self.clear()


class SingleDocumentPositionTracker:
    """Line/character front end over :class:`SingleDocumentOffsetTracker`.

    ``on_positions_changed`` maps each position passed to :meth:`track_doc`
    to where it is now; positions that were swallowed by an edit are absent.

    The mapping is keyed by position value, not by registration. Passing the
    same position twice yields one entry, which is lossless because equal
    positions share an offset and therefore always translate alike.
    """

    def __init__(self, workspace: Workspace) -> None:
        self._tracker = SingleDocumentOffsetTracker(workspace)
        self._positions: Dict[Position, int] = {}
        self._emitter: EventEmitter[PositionsChanged] = EventEmitter()
        self.on_positions_changed = self._emitter.event
        self._disposables: List[Disposable] = [
            self._tracker.on_offsets_changed(self._handle_offsets),
        ]

    def track_doc(self, document: TextDocument, positions: Iterable[Position]) -> None:
        self._positions = {position: document.offset_at(position) for position in positions}
        self._tracker.track_doc(document, self._positions.values())

    def clear(self) -> None:
        self._positions.clear()
        self._tracker.clear()

    def _handle_offsets(self, payload: OffsetsChanged) -> None:
        document, offsets = payload
        moved: Dict[Position, Position] = {}
        for position, original_offset in self._positions.items():
            offset = offsets.get(original_offset)
            if offset is not None:
                moved[position] = document.position_at(offset)
        self._emitter.fire((document, moved))

    def dispose(self) -> None:
        dispose_all(self._disposables)
        self._disposables.clear()
        self._tracker.dispose()
        self._emitter.dispose()
        self._positions.clear()


__all__ = [
    "OffsetsChanged",
    "PositionsChanged",
    "SingleDocumentOffsetTracker",
    "SingleDocumentPositionTracker",
]
