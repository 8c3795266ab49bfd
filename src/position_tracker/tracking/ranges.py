"""Range tracking built from pairs of tracked positions."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Callable, Dict, Optional

from position_tracker.host import (
    Disposable,
    Position,
    Range,
    TextDocument,
    Workspace,
)
from position_tracker.runtime import telemetry

from .positions import DocumentPositionTracker, PositionSubscription

RangeCallback = Callable[[Optional[Range]], None]

_LOGGER_NAME = "position_tracker.tracking"


@dataclass(slots=True, eq=False)
class _RangeEntry:
    id: int
    document: TextDocument
    callback: RangeCallback
    start: Optional[Position]
    end: Optional[Position]
    handles: list[PositionSubscription] = field(default_factory=list)
    dirty: bool = False
    live: bool = True


class RangeSubscription(Disposable):
    """Handle for one tracked range; disposing it releases both endpoints."""

    __slots__ = ("id",)

    def __init__(self, subscription_id: int, on_dispose: Callable[[], None]) -> None:
        super().__init__(on_dispose)
        self.id = subscription_id


class DocumentRangeTracker:
    """Tracks ranges as two independently tracked endpoints.

    Endpoint callbacks only record the new endpoint; the combined range is
    recomputed once per edit batch after the position tracker has finished
    the document, so an edit that moves both endpoints produces a single
    callback. A range is alive while both endpoints are; once either is lost
    the callback receives ``None`` and the range is dropped.
    """

    def __init__(self, workspace: Workspace) -> None:
        self._positions = DocumentPositionTracker(workspace)
        self._ids = count(1)
        self._ranges: Dict[TextDocument, Dict[int, _RangeEntry]] = {}
        self._processed = self._positions.on_did_process_document(self._flush)

    def track_range(
        self, document: TextDocument, range: Range, callback: RangeCallback
    ) -> RangeSubscription:
        entry = _RangeEntry(
            id=next(self._ids),
            document=document,
            callback=callback,
            start=range.start,
            end=range.end,
        )

        def on_start(position: Optional[Position]) -> None:
            entry.start = position
            entry.dirty = True

        def on_end(position: Optional[Position]) -> None:
            entry.end = position
            entry.dirty = True

        start = self._positions.track_position(document, range.start, on_start)
        try:
            end = self._positions.track_position(document, range.end, on_end)
        except Exception:
            start.dispose()
            raise
        entry.handles = [start, end]
        self._ranges.setdefault(document, {})[entry.id] = entry
        return RangeSubscription(entry.id, lambda: self._remove(entry))

    def range_count(self, document: Optional[TextDocument] = None) -> int:
        if document is not None:
            return len(self._ranges.get(document, {}))
        return sum(len(entries) for entries in self._ranges.values())

    def _remove(self, entry: _RangeEntry) -> None:
        entry.live = False
        for handle in entry.handles:
            handle.dispose()
        entries = self._ranges.get(entry.document)
        if entries is None:
            return
        entries.pop(entry.id, None)
        if not entries:
            del self._ranges[entry.document]

    def _flush(self, document: TextDocument) -> None:
        entries = self._ranges.get(document)
        if not entries:
            return

        for entry in list(entries.values()):
            if not entry.live or not entry.dirty:
                continue
            entry.dirty = False
            if entry.start is not None and entry.end is not None:
                entry.callback(Range(entry.start, entry.end))
                continue

            self._remove(entry)
            telemetry.record_event(
                "tracking.range_lost",
                level="debug",
                data={"uri": document.uri, "range": entry.id},
                logger_name=_LOGGER_NAME,
            )
            entry.callback(None)

    def dispose(self) -> None:
        self._processed.dispose()
        # Disposing the position tracker releases every endpoint at once.
        self._positions.dispose()
        for entries in self._ranges.values():
            for entry in entries.values():
                entry.live = False
        self._ranges.clear()


__all__ = ["DocumentRangeTracker", "RangeCallback", "RangeSubscription"]
