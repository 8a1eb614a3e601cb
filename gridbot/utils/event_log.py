"""Notification feed for rendering / toast collaborators."""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable

from gridbot.core.enums import NotificationKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GameEvent:
    """A single observable engine output."""

    seq: int
    kind: NotificationKind
    message: str = ""
    duration: float = 0.0                          # Seconds a timed notification stays visible
    data: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[GameEvent], None]


class EventLog:
    """Bounded event log plus synchronous listeners.

    Writers append from the engine; readers snapshot a slice.  Reads may come
    from API worker threads, so buffer access is guarded by a simple lock.
    """

    __slots__ = ("_buffer", "_lock", "_seq", "_listeners")

    def __init__(self, maxlen: int = 2000) -> None:
        self._buffer: deque[GameEvent] = deque(maxlen=maxlen)
        self._lock = threading.Lock()
        self._seq = 0
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(
        self,
        kind: NotificationKind,
        message: str = "",
        duration: float = 0.0,
        **data: Any,
    ) -> GameEvent:
        with self._lock:
            self._seq += 1
            event = GameEvent(seq=self._seq, kind=kind, message=message, duration=duration, data=data)
            self._buffer.append(event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # Listener failures are logged and never propagate into the engine
                logger.exception("Listener %r failed on %s", listener, kind.value)
        return event

    def since(self, seq: int) -> list[GameEvent]:
        """Return all events with seq > *seq*."""
        with self._lock:
            return [e for e in self._buffer if e.seq > seq]

    def latest(self, count: int = 50) -> list[GameEvent]:
        """Return the *count* most recent events."""
        with self._lock:
            items = list(self._buffer)
        return items[-count:]

    def of_kind(self, kind: NotificationKind) -> list[GameEvent]:
        with self._lock:
            return [e for e in self._buffer if e.kind == kind]

    @property
    def last_seq(self) -> int:
        return self._seq

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()
