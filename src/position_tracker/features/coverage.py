"""Reload-coverage line state: which edited lines have not run since a reload.

While a run session is active, every edited line becomes *modified*. A hot
reload turns modified lines into *not run* lines, and coverage reports from
the running program clear the lines that executed. Lines are stored as
line-start offsets and moved through edits with the shared offset
translator, so they follow the code they mark.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from position_tracker.host import (
    ContentChange,
    Disposable,
    EventEmitter,
    Position,
    TextDocument,
    TextDocumentChangeEvent,
    Workspace,
    dispose_all,
)
from position_tracker.runtime import TrackerSettings, telemetry
from position_tracker.tracking.offsets import changed_spans, translate_offset

_LOGGER_NAME = "position_tracker.coverage"


@dataclass(frozen=True, slots=True)
class CoverageData:
    """Executed lines for one script. ``hit_lines`` are 1-based."""

    script_uri: str
    hit_lines: Tuple[int, ...]


@dataclass(slots=True)
class _LineState:
    modified: Set[int] = field(default_factory=set)
    not_run: Set[int] = field(default_factory=set)


def _line_start(document: TextDocument, offset: int) -> int:
    return document.offset_at(Position(document.position_at(offset).line, 0))


def _lines(document: TextDocument, offsets: Iterable[int]) -> List[int]:
    return sorted({document.position_at(offset).line for offset in offsets})


class ReloadCoverageTracker:
    def __init__(self, workspace: Workspace, settings: Optional[TrackerSettings] = None) -> None:
        self.workspace = workspace
        self.settings = settings or TrackerSettings.from_env()
        self._states: Dict[TextDocument, _LineState] = {}
        self._active = False
        self._changed: EventEmitter[TextDocument] = EventEmitter()
        self.on_did_change_markers = self._changed.event
        self._disposables: List[Disposable] = [
            workspace.on_did_change_text_document(self._handle_change),
            workspace.on_did_close_text_document(self._handle_close),
        ]

    @property
    def is_active(self) -> bool:
        return self._active

    def start_session(self) -> None:
        self._active = True

    def end_session(self) -> None:
        self._active = False
        self.full_restart()

    def modified_lines(self, document: TextDocument) -> List[int]:
        state = self._states.get(document)
        return _lines(document, state.modified) if state else []

    def not_run_lines(self, document: TextDocument) -> List[int]:
        state = self._states.get(document)
        return _lines(document, state.not_run) if state else []

    def mark_reload(self) -> List[TextDocument]:
        """Move modified lines to not-run; return documents that now have any."""

        pending: List[TextDocument] = []
        for document, state in list(self._states.items()):
            state.not_run |= state.modified
            state.modified.clear()
            if state.not_run:
                pending.append(document)
            self._changed.fire(document)
        telemetry.record_event(
            "coverage.reload",
            level="debug",
            data={"documents": len(pending)},
            logger_name=_LOGGER_NAME,
        )
        return pending

    def apply_coverage(self, items: Iterable[CoverageData]) -> None:
        for data in items:
            document = self.workspace.find_document(data.script_uri)
            state = self._states.get(document) if document is not None else None
            if document is None or state is None:
                continue
            hit = {line - 1 for line in data.hit_lines}
            state.not_run = {
                offset for offset in state.not_run
                if document.position_at(offset).line not in hit
            }
            self._changed.fire(document)

    def full_restart(self) -> None:
        documents = list(self._states)
        self._states.clear()
        for document in documents:
            self._changed.fire(document)

    def _handle_change(self, event: TextDocumentChangeEvent) -> None:
        if not self._active:
            return

        document = event.document
        state = self._states.setdefault(document, _LineState())

        # Coverage for lines that were waiting to run is no longer reliable.
        state.modified |= state.not_run
        state.not_run.clear()

        markers: Set[int] = set()
        for offset in state.modified:
            moved = translate_offset(offset, event.content_changes)
            if moved is not None:
                markers.add(_line_start(document, moved))

        spans = changed_spans(event.content_changes)
        for change, (start, _end) in zip(event.content_changes, spans):
            if not self._is_interesting(change):
                continue
            first = document.position_at(start).line
            for line in range(first, first + change.text.count("\n") + 1):
                markers.add(document.offset_at(Position(line, 0)))

        state.modified = {
            offset for offset in markers
            if not self.settings.is_ignored_line(document.line_at(document.position_at(offset).line))
        }
        self._changed.fire(document)

    def _is_interesting(self, change: ContentChange) -> bool:
        if change.text == change.replaced_text:
            return False
        if self.settings.coverage_skip_whitespace:
            if not change.text and not change.replaced_text.strip():
                return False
            if not change.replaced_text and not change.text.strip():
                return False
        return True

    def _handle_close(self, document: TextDocument) -> None:
        self._states.pop(document, None)

    def dispose(self) -> None:
        dispose_all(self._disposables)
        self._disposables.clear()
        self._states.clear()
        self._changed.dispose()


__all__ = ["CoverageData", "ReloadCoverageTracker"]
