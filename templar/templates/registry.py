"""Process-wide access to the merged template table."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from templar.configuration import TemplarConfig, configure_logging, default_config
from templar.observability import (
    EventLogStore,
    attach_persistent_observer,
    get_event_recorder,
)
from templar.templates.store import TemplateStore
from templar.templates.types import Template

LOGGER = logging.getLogger(__name__)


class TemplateRegistry:
    """Lists and looks up templates by name."""

    def __init__(self, store: TemplateStore, *, load: bool = True) -> None:
        self._store = store
        self._detach_event_log: Optional[Callable[[], None]] = None
        if load:
            self._store.reload()

    @classmethod
    def from_config(cls, config: TemplarConfig) -> "TemplateRegistry":
        """Build a registry that reads the template files named in ``config``."""

        settings = config.observability
        configure_logging(settings)
        recorder = get_event_recorder("templates")
        detach = None
        if settings.event_log_url and settings.enable_registry_events:
            try:
                event_log = EventLogStore(settings.event_log_url)
            except SQLAlchemyError:
                LOGGER.warning(
                    "Event log at %s is unusable; continuing without it",
                    settings.event_log_url,
                    exc_info=True,
                )
            else:
                detach = attach_persistent_observer(recorder, event_log)
        store = TemplateStore(
            config.templates.source_locations,
            base_dir=config.home,
            recorder=recorder.scoped("store"),
        )
        registry = cls(store)
        registry._detach_event_log = detach
        return registry

    @property
    def store(self) -> TemplateStore:
        return self._store

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        return name in self._store

    def list_names(self) -> list[str]:
        """Return template names in alphabetical order."""
        return sorted(self._store.templates)

    def lookup(self, name: str) -> Optional[Template]:
        """Return the template called ``name``, or ``None`` when there is none."""
        return self._store.get(name)

    def add_template(self, template: Template) -> None:
        self._store.register(template)

    def reset(self) -> "TemplateRegistry":
        """Re-read every template file, dropping templates added since the last load."""
        self._store.reload()
        return self

    def close(self) -> None:
        if self._detach_event_log is not None:
            self._detach_event_log()
            self._detach_event_log = None


_REGISTRY: Optional[TemplateRegistry] = None
_REGISTRY_LOCK = Lock()


def get_template_registry(config: TemplarConfig | None = None) -> TemplateRegistry:
    """
    Return the process-wide registry, building it on first access.

    ``config`` is only consulted when the registry does not exist yet.
    """
    global _REGISTRY
    registry = _REGISTRY
    if registry is not None:
        return registry
    with _REGISTRY_LOCK:
        if _REGISTRY is None:
            LOGGER.debug("Initialising template registry")
            _REGISTRY = TemplateRegistry.from_config(config or default_config())
        return _REGISTRY


def set_template_registry(registry: TemplateRegistry) -> None:
    global _REGISTRY
    with _REGISTRY_LOCK:
        _REGISTRY = registry


def reset_template_registry() -> None:
    """Forget the process-wide registry so the next access rebuilds it."""

    global _REGISTRY
    with _REGISTRY_LOCK:
        if _REGISTRY is not None:
            _REGISTRY.close()
        _REGISTRY = None
