"""Observability primitives for the template registry."""

from templar.observability.events import (
    EventObserver,
    EventRecorder,
    LOAD_COMPLETE,
    SOURCE_LOADED,
    SOURCE_SKIPPED,
    TEMPLATE_REGISTERED,
    RegistryEvent,
    get_event_recorder,
    reset_event_recorder,
    set_event_recorder,
)
from templar.observability.storage import (
    EventLogStore,
    attach_persistent_observer,
)

__all__ = [
    "LOAD_COMPLETE",
    "SOURCE_LOADED",
    "SOURCE_SKIPPED",
    "TEMPLATE_REGISTERED",
    "EventObserver",
    "EventRecorder",
    "RegistryEvent",
    "EventLogStore",
    "attach_persistent_observer",
    "get_event_recorder",
    "reset_event_recorder",
    "set_event_recorder",
]
