"""Durable trail of what happened to each template source.

Every event is stored, but the template file an event refers to and the number
of templates it produced are lifted into their own columns. That lets a host
ask which configured files were skipped at the last load without replaying
the whole log.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Integer, String, create_engine, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from templar.observability.events import (
    SOURCE_LOADED,
    SOURCE_SKIPPED,
    EventObserver,
    EventRecorder,
    RegistryEvent,
)

LOGGER = logging.getLogger(__name__)

SOURCE_OUTCOMES = (SOURCE_LOADED, SOURCE_SKIPPED)


class Base(DeclarativeBase):
    """Declarative base for event log tables."""


class RegistryEventRow(Base):
    __tablename__ = "registry_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=False))
    scope: Mapped[str] = mapped_column(String, index=True)
    name: Mapped[str] = mapped_column(String, index=True)
    source: Mapped[Optional[str]] = mapped_column(String, index=True, nullable=True)
    template_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    @classmethod
    def from_event(cls, event: RegistryEvent) -> "RegistryEventRow":
        return cls(
            recorded_at=event.timestamp,
            scope=event.scope,
            name=event.name,
            source=event.payload.get("source"),
            template_count=event.payload.get("template_count"),
            payload=dict(event.payload),
        )

    def to_event(self) -> RegistryEvent:
        return RegistryEvent(
            timestamp=self.recorded_at,
            scope=self.scope,
            name=self.name,
            payload=dict(self.payload or {}),
        )


class EventLogStore:
    """Registry events kept in a SQL database, queryable per template source."""

    def __init__(self, database_url: str) -> None:
        self._engine = create_engine(database_url)
        Base.metadata.create_all(self._engine)

    def append(self, event: RegistryEvent) -> None:
        with Session(self._engine) as session, session.begin():
            session.add(RegistryEventRow.from_event(event))

    def events(
        self,
        *,
        scope: str | None = None,
        name: str | None = None,
        limit: int | None = None,
    ) -> list[RegistryEvent]:
        """Return stored events in the order they were recorded."""

        stmt = select(RegistryEventRow).order_by(RegistryEventRow.id)
        if scope:
            stmt = stmt.where(RegistryEventRow.scope == scope)
        if name:
            stmt = stmt.where(RegistryEventRow.name == name)
        if limit:
            stmt = stmt.limit(limit)
        with Session(self._engine) as session:
            return [row.to_event() for row in session.scalars(stmt)]

    def source_history(self, source: str) -> list[RegistryEvent]:
        """Every loaded/skipped outcome recorded for one template file."""

        stmt = (
            select(RegistryEventRow)
            .where(RegistryEventRow.source == source)
            .where(RegistryEventRow.name.in_(SOURCE_OUTCOMES))
            .order_by(RegistryEventRow.id)
        )
        with Session(self._engine) as session:
            return [row.to_event() for row in session.scalars(stmt)]

    def skipped_sources(self) -> dict[str, str]:
        """Map each source whose latest outcome was a skip to the skip reason."""

        stmt = (
            select(RegistryEventRow.source, RegistryEventRow.name, RegistryEventRow.payload)
            .where(RegistryEventRow.name.in_(SOURCE_OUTCOMES))
            .order_by(RegistryEventRow.id)
        )
        latest: dict[str, tuple[str, dict[str, Any]]] = {}
        with Session(self._engine) as session:
            for source, name, payload in session.execute(stmt):
                if source is not None:
                    latest[source] = (name, payload or {})
        return {
            source: str(payload.get("reason", ""))
            for source, (name, payload) in latest.items()
            if name == SOURCE_SKIPPED
        }

    def observer(self) -> EventObserver:
        """Observer that appends each event; failures are logged, not raised."""

        def _append(event: RegistryEvent) -> None:
            try:
                self.append(event)
            except Exception:
                LOGGER.warning("Failed to persist registry event %s", event.name, exc_info=True)

        return _append


def attach_persistent_observer(
    recorder: EventRecorder,
    store: EventLogStore,
) -> Callable[[], None]:
    """Persist every event seen by ``recorder``; returns a detach callback."""

    observer = store.observer()
    recorder.register(observer)
    return lambda: recorder.unregister(observer)
