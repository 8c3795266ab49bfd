"""Textual-facing controller: turns key presses into edits and shows tracked ranges."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import count
from typing import Callable, Dict, Optional, Tuple

from position_tracker.host import Position, Range, TextDocument, TextEdit, Workspace
from position_tracker.tracking import (
    DocumentPositionTracker,
    DocumentRangeTracker,
    PositionSubscription,
    RangeSubscription,
)


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TrackingSnapshot:
    """What the host should render after each key."""

    text: str
    cursor: int
    mark: Optional[int]
    ranges: Tuple[Tuple[int, int], ...]


@dataclass(slots=True)
class TextualUIHooks:
    update_buffer: Callable[[TrackingSnapshot], None]
    update_status: Callable[[str], None] = _noop
    log: Callable[[str], None] = _noop


class TextualTrackingAdapter:
    """Single-document editing surface with live tracked ranges.

    ``ctrl+t`` drops a mark at the cursor; pressing it again tracks the range
    between the mark and the cursor. ``escape`` clears a pending mark. The
    pending mark is itself a tracked position, so edits move it like any
    other coordinate.
    """

    def __init__(self, workspace: Workspace, document: TextDocument, hooks: TextualUIHooks) -> None:
        self.workspace = workspace
        self.document = document
        self.hooks = hooks
        self.tracker = DocumentRangeTracker(workspace)
        self.positions = DocumentPositionTracker(workspace)
        self.cursor = len(document.text)
        self._mark: Optional[PositionSubscription] = None
        self._mark_offset: Optional[int] = None
        self._ranges: Dict[int, Range] = {}
        self._handles: Dict[int, RangeSubscription] = {}
        self._range_ids = count(1)
        self._refresh()

    @property
    def mark(self) -> Optional[int]:
        return self._mark_offset

    @property
    def tracked_ranges(self) -> Tuple[Range, ...]:
        return tuple(self._ranges.values())

    def handle_textual_key(self, key: str, *, text: Optional[str] = None) -> str:
        status = self._dispatch(key, text)
        self.hooks.log(f"key={key!r} cursor={self.cursor} status={status}")
        if status:
            self.hooks.update_status(status)
        self._refresh()
        return status

    def _dispatch(self, key: str, text: Optional[str]) -> str:
        if key == "ctrl+t":
            return self._toggle_mark()
        if key == "escape":
            self._clear_mark()
            return "mark cleared"
        if key == "left":
            self.cursor = max(0, self.cursor - 1)
        elif key == "right":
            self.cursor = min(len(self.document.text), self.cursor + 1)
        elif key == "home":
            self.cursor = self._line_start()
        elif key == "end":
            self.cursor = self._line_start() + len(self.document.line_at(self._cursor_position().line))
        elif key == "backspace":
            if self.cursor > 0:
                self._edit(self.cursor - 1, self.cursor, "")
        elif key == "delete":
            if self.cursor < len(self.document.text):
                self._edit(self.cursor, self.cursor + 1, "")
        elif key == "enter":
            self._edit(self.cursor, self.cursor, "\n")
        elif text and text.isprintable():
            self._edit(self.cursor, self.cursor, text)
        else:
            return ""
        return "ok"

    def _toggle_mark(self) -> str:
        if self._mark_offset is None:
            self._set_mark(self.cursor)
            return "mark set"
        start, end = sorted((self._mark_offset, self.cursor))
        self._clear_mark()
        range = Range(self.document.position_at(start), self.document.position_at(end))
        range_id = next(self._range_ids)
        self._handles[range_id] = self.tracker.track_range(
            self.document,
            range,
            lambda updated, range_id=range_id: self._on_range(range_id, updated),
        )
        self._ranges[range_id] = range
        return f"tracking range {range_id}"

    def _set_mark(self, offset: int) -> None:
        self._clear_mark()
        self._mark_offset = offset
        self._mark = self.positions.track_position(
            self.document, self.document.position_at(offset), self._on_mark
        )

    def _clear_mark(self) -> None:
        if self._mark is not None:
            self._mark.dispose()
        self._mark = None
        self._mark_offset = None

    def _on_mark(self, position: Optional[Position]) -> None:
        if position is None:
            self._mark = None
            self._mark_offset = None
            self.hooks.update_status("mark lost")
            return
        self._mark_offset = self.document.offset_at(position)

    def _on_range(self, range_id: int, updated: Optional[Range]) -> None:
        if updated is None:
            self._ranges.pop(range_id, None)
            self._handles.pop(range_id, None)
            self.hooks.update_status(f"range {range_id} lost")
            return
        self._ranges[range_id] = updated

    def _edit(self, start: int, end: int, text: str) -> None:
        range = Range(self.document.position_at(start), self.document.position_at(end))
        self.workspace.apply_edits(self.document, [TextEdit(range, text)])
        self.cursor = start + len(text)

    def _cursor_position(self) -> Position:
        return self.document.position_at(self.cursor)

    def _line_start(self) -> int:
        return self.document.offset_at(Position(self._cursor_position().line, 0))

    def _refresh(self) -> None:
        spans = tuple(
            (self.document.offset_at(range.start), self.document.offset_at(range.end))
            for range in self._ranges.values()
        )
        self.hooks.update_buffer(
            TrackingSnapshot(
                text=self.document.text,
                cursor=self.cursor,
                mark=self.mark,
                ranges=spans,
            )
        )

    def dispose(self) -> None:
        self._clear_mark()
        for handle in self._handles.values():
            handle.dispose()
        self._handles.clear()
        self._ranges.clear()
        self.tracker.dispose()
        self.positions.dispose()


__all__ = ["TextualTrackingAdapter", "TextualUIHooks", "TrackingSnapshot"]
