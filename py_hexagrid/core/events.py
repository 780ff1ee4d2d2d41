"""
Change notification for grid containers.

Every grid container is an append-only ObservableSequence. Appending first
notifies the listeners registered for the container's event, then stores the
items, so a listener cannot find the new items in the container yet.
"""

from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterator, List, TypeVar, Union

T = TypeVar("T")

Listener = Callable[[List[Any]], None]


class GridEvent(str, Enum):
    """Names of the events fired when a grid container grows."""

    POINTS_UPDATED = "pointsUpdated"
    TRIANGLES_UPDATED = "trianglesUpdated"
    BASES_UPDATED = "basesUpdated"
    QUADS_UPDATED = "quadsUpdated"
    NEIGHBOURS_UPDATED = "neighboursUpdated"


EventName = Union[GridEvent, str]


def _event_key(event: EventName) -> GridEvent:
    try:
        return GridEvent(event)
    except ValueError:
        raise ValueError(f"Unknown grid event: {event!r}") from None


class EventEmitter:
    """Minimal synchronous emitter keyed by GridEvent."""

    def __init__(self):
        self._listeners: Dict[GridEvent, List[Listener]] = defaultdict(list)

    def on(self, event: EventName, listener: Listener) -> Listener:
        """Register ``listener`` for ``event``; returns the listener."""
        self._listeners[_event_key(event)].append(listener)
        return listener

    def off(self, event: EventName, listener: Listener) -> None:
        """Remove a listener registered with :meth:`on`. Unknown listeners are ignored."""
        listeners = self._listeners.get(_event_key(event), [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: EventName) -> int:
        return len(self._listeners.get(_event_key(event), []))

    def emit(self, event: EventName, items: List[Any]) -> bool:
        """Call every listener of ``event`` with ``items``; True if any was called."""
        # Copy so a listener may unsubscribe while being notified
        listeners = list(self._listeners.get(_event_key(event), []))
        for listener in listeners:
            listener(items)
        return bool(listeners)


class ObservableSequence(Generic[T]):
    """Append-only sequence that announces each append through an EventEmitter."""

    def __init__(self, event: EventName, emitter: EventEmitter):
        self.event = _event_key(event)
        self._emitter = emitter
        self._items: List[T] = []
        self._sealed = False

    def append(self, *items: T) -> int:
        """Notify listeners with ``items`` then store them; returns the new length."""
        if self._sealed:
            raise RuntimeError(f"{self.event.value} sequence is sealed")
        batch = list(items)
        self._emitter.emit(self.event, batch)
        self._items.extend(batch)
        return len(self._items)

    def seal(self) -> None:
        """Reject every later append."""
        self._sealed = True

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"ObservableSequence({self.event.value}, {len(self._items)} items)"
