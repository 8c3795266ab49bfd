"""Multi-document position tracking with per-subscription callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import count
from typing import Callable, Dict, List, Optional, Tuple

from position_tracker.host import (
    Disposable,
    EventEmitter,
    Position,
    TextDocument,
    TextDocumentChangeEvent,
    Workspace,
    dispose_all,
    ensure_owned,
    ensure_position,
)
from position_tracker.runtime import telemetry

from .offsets import translate_offset

PositionCallback = Callable[[Optional[Position]], None]

_LOGGER_NAME = "position_tracker.tracking"


@dataclass(slots=True, eq=False)
class _Subscription:
    id: int
    document: TextDocument
    offset: int
    callback: PositionCallback
    live: bool = True


class PositionSubscription(Disposable):
    """Handle for one tracked position; ``dispose`` is idempotent."""

    __slots__ = ("id",)

    def __init__(self, subscription_id: int, on_dispose: Callable[[], None]) -> None:
        super().__init__(on_dispose)
        self.id = subscription_id


class DocumentPositionTracker:
    """Tracks any number of positions across any number of open documents.

    One listener per workspace event is installed for the tracker as a whole;
    changes are dispatched to subscriptions by document. Within a batch,
    callbacks run in registration order against a snapshot of the document's
    subscriptions, so callbacks are free to dispose handles or register new
    positions.

    A position swallowed by an edit is reported once as ``None`` and its
    subscription is removed. Closing a document reports ``None`` to every
    subscription on it.
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace
        self._ids = count(1)
        self._registry: Dict[TextDocument, Dict[int, _Subscription]] = {}
        self._disposed = False
        self._processed: EventEmitter[TextDocument] = EventEmitter()
        self.on_did_process_document = self._processed.event
        self._disposables: List[Disposable] = [
            workspace.on_did_change_text_document(self._handle_change),
            workspace.on_did_close_text_document(self._handle_close),
        ]

    def track_position(
        self,
        document: TextDocument,
        position: Position,
        callback: PositionCallback,
    ) -> PositionSubscription:
        if self._disposed:
            raise RuntimeError("DocumentPositionTracker has been disposed")
        ensure_owned(self._workspace, document)
        ensure_position(document, position)

        subscription = _Subscription(
            id=next(self._ids),
            document=document,
            offset=document.offset_at(position),
            callback=callback,
        )
        self._registry.setdefault(document, {})[subscription.id] = subscription
        return PositionSubscription(subscription.id, lambda: self._remove(subscription))

    def tracked_documents(self) -> Tuple[TextDocument, ...]:
        return tuple(self._registry)

    def subscription_count(self, document: Optional[TextDocument] = None) -> int:
        if document is not None:
            return len(self._registry.get(document, {}))
        return sum(len(entries) for entries in self._registry.values())

    def _remove(self, subscription: _Subscription) -> None:
        subscription.live = False
        entries = self._registry.get(subscription.document)
        if entries is None:
            return
        entries.pop(subscription.id, None)
        if not entries:
            del self._registry[subscription.document]

    def _handle_change(self, event: TextDocumentChangeEvent) -> None:
        entries = self._registry.get(event.document)
        if not entries or self._disposed:
            return

        with telemetry.span(
            "tracking::positions",
            logger_name=_LOGGER_NAME,
            component="tracking",
            metadata={"uri": event.document.uri, "subscriptions": len(entries)},
        ):
            lost: List[_Subscription] = []
            for subscription in list(entries.values()):
                if self._disposed:
                    return
                if not subscription.live:
                    continue
                offset = translate_offset(subscription.offset, event.content_changes)
                if offset is None:
                    subscription.live = False
                    lost.append(subscription)
                    subscription.callback(None)
                    continue
                subscription.offset = offset
                subscription.callback(event.document.position_at(offset))

            for subscription in lost:
                self._remove(subscription)
            if lost:
                telemetry.record_event(
                    "tracking.position_lost",
                    level="debug",
                    data={"uri": event.document.uri, "count": len(lost)},
                    logger_name=_LOGGER_NAME,
                )

        if not self._disposed:
            self._processed.fire(event.document)

    def _handle_close(self, document: TextDocument) -> None:
        entries = self._registry.pop(document, None)
        if not entries or self._disposed:
            return

        telemetry.record_event(
            "tracking.document_closed",
            level="debug",
            data={"uri": document.uri, "subscriptions": len(entries)},
            logger_name=_LOGGER_NAME,
        )
        for subscription in list(entries.values()):
            if self._disposed:
                return
            if not subscription.live:
                continue
            subscription.live = False
            subscription.callback(None)

        if not self._disposed:
            self._processed.fire(document)

    def dispose(self) -> None:
        self._disposed = True
        dispose_all(self._disposables)
        self._disposables.clear()
        for entries in self._registry.values():
            for subscription in entries.values():
                subscription.live = False
        self._registry.clear()
        self._processed.dispose()


__all__ = ["DocumentPositionTracker", "PositionCallback", "PositionSubscription"]
