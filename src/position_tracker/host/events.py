"""Synchronous event emitters and disposables."""

from __future__ import annotations

from typing import Callable, Generic, Iterable, List, Optional, Protocol, TypeVar

T = TypeVar("T")
Listener = Callable[[T], None]


class SupportsDispose(Protocol):
    def dispose(self) -> None:
        ...


class Disposable:
    """Runs ``on_dispose`` once; later calls are no-ops."""

    __slots__ = ("_on_dispose",)

    def __init__(self, on_dispose: Optional[Callable[[], None]] = None) -> None:
        self._on_dispose = on_dispose

    @property
    def is_disposed(self) -> bool:
        return self._on_dispose is None

    def dispose(self) -> None:
        callback, self._on_dispose = self._on_dispose, None
        if callback is not None:
            callback()


class Event(Generic[T]):
    """Subscribe with ``event(listener)``; returns a ``Disposable``."""

    __slots__ = ("_emitter",)

    def __init__(self, emitter: "EventEmitter[T]") -> None:
        self._emitter = emitter

    def __call__(self, listener: Listener[T]) -> Disposable:
        return self._emitter.subscribe(listener)


class EventEmitter(Generic[T]):
    """Fan-out of one payload type to listeners in subscription order.

    ``fire`` iterates a copy of the listener list, so listeners may subscribe
    or unsubscribe while an event is being delivered.
    """

    def __init__(self) -> None:
        # One-element cells so the same callable can be subscribed twice and
        # each subscription removed on its own.
        self._listeners: List[List[Listener[T]]] = []
        self.event: Event[T] = Event(self)

    def subscribe(self, listener: Listener[T]) -> Disposable:
        cell = [listener]
        self._listeners.append(cell)

        def remove() -> None:
            self._listeners[:] = [item for item in self._listeners if item is not cell]

        return Disposable(remove)

    def fire(self, payload: T) -> None:
        for cell in list(self._listeners):
            cell[0](payload)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def dispose(self) -> None:
        self._listeners.clear()


def dispose_all(disposables: Iterable[SupportsDispose]) -> None:
    for disposable in list(disposables):
        disposable.dispose()


__all__ = ["Disposable", "Event", "EventEmitter", "SupportsDispose", "dispose_all"]
