"""Registry events and the recorder that dispatches them."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock
from typing import Any, Dict, Iterator, Optional, Tuple

Payload = Dict[str, Any]
EventObserver = Callable[["RegistryEvent"], None]

SOURCE_LOADED = "source.loaded"
SOURCE_SKIPPED = "source.skipped"
LOAD_COMPLETE = "load.complete"
TEMPLATE_REGISTERED = "template.registered"


@dataclass(slots=True, frozen=True)
class RegistryEvent:
    """Something that happened while loading or serving templates."""

    timestamp: datetime
    scope: str
    name: str
    payload: Payload = field(default_factory=dict)


def _split_scope(scope: Sequence[str] | str | None) -> Tuple[str, ...]:
    if scope is None:
        return ()
    if isinstance(scope, str):
        return tuple(part for part in scope.split(".") if part)
    return tuple(part for part in scope if part)


class EventRecorder:
    """Dispatches registry events to registered observers.

    Scoped recorders share their root's observer list, so an observer attached
    to the global recorder sees events from every component.
    """

    __slots__ = ("_scope", "_observers", "_lock")

    def __init__(
        self,
        scope: Sequence[str] | str | None = None,
        *,
        parent: "EventRecorder" | None = None,
    ) -> None:
        if parent is None:
            self._scope: Tuple[str, ...] = _split_scope(scope)
            self._observers: list[EventObserver] = []
            self._lock = RLock()
        else:
            self._scope = parent._scope + _split_scope(scope)
            self._observers = parent._observers
            self._lock = parent._lock

    @property
    def scope(self) -> str:
        return ".".join(self._scope)

    def scoped(self, scope: Sequence[str] | str) -> "EventRecorder":
        """Return a child recorder whose events are namespaced under ``scope``."""

        return EventRecorder(scope, parent=self)

    def register(self, observer: EventObserver) -> None:
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def unregister(self, observer: EventObserver) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    @contextmanager
    def temporary_observer(self, observer: EventObserver) -> Iterator[None]:
        """Register an observer for the duration of the context manager."""

        self.register(observer)
        try:
            yield
        finally:
            self.unregister(observer)

    def record(
        self,
        name: str,
        payload: Payload | None = None,
        *,
        timestamp: Optional[datetime] = None,
    ) -> RegistryEvent:
        """Create an event in this recorder's scope and notify observers."""

        event = RegistryEvent(
            timestamp=timestamp or datetime.utcnow(),
            scope=self.scope,
            name=name,
            payload=dict(payload or {}),
        )
        self.emit(event)
        return event

    def emit(self, event: RegistryEvent) -> None:
        with self._lock:
            observers = tuple(self._observers)
        for observer in observers:
            try:
                observer(event)
            except Exception:
                # Observers are best-effort and must not break template loading.
                continue


_GLOBAL_RECORDER = EventRecorder()


def get_event_recorder(scope: Sequence[str] | str | None = None) -> EventRecorder:
    """Return the global event recorder, optionally scoped."""

    if scope is None:
        return _GLOBAL_RECORDER
    return _GLOBAL_RECORDER.scoped(scope)


def set_event_recorder(recorder: EventRecorder) -> None:
    global _GLOBAL_RECORDER
    _GLOBAL_RECORDER = recorder


def reset_event_recorder() -> None:
    """Replace the global recorder with a clean instance."""

    set_event_recorder(EventRecorder())
