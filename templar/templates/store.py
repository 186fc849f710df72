"""Merge templates from every configured source into one name-keyed table."""

from __future__ import annotations

import logging
from pathlib import Path
from threading import RLock
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from templar.configuration import split_template_files
from templar.observability import (
    LOAD_COMPLETE,
    SOURCE_LOADED,
    SOURCE_SKIPPED,
    TEMPLATE_REGISTERED,
    EventRecorder,
    get_event_recorder,
)
from templar.templates.errors import TemplateSourceUnavailable
from templar.templates.parser import try_parse_template_file
from templar.templates.types import ParseFailure, Template

LOGGER = logging.getLogger(__name__)

SourceLocations = str | Iterable[str]


class TemplateStore:
    """
    Holds the merged template table.

    Sources are read in order and later sources overwrite earlier ones on name
    collisions. A source that is missing or fails to parse is logged and
    skipped. The table is replaced wholesale on :meth:`reload` and on
    :meth:`register`, so readers always see a complete snapshot.
    """

    def __init__(
        self,
        source_locations: SourceLocations = (),
        *,
        base_dir: Path | str | None = None,
        recorder: EventRecorder | None = None,
    ) -> None:
        self._source_locations = split_template_files(source_locations)
        self._base_dir = Path(base_dir) if base_dir is not None else None
        self._recorder = recorder or get_event_recorder("templates.store")
        self._lock = RLock()
        self._table: Mapping[str, Template] = MappingProxyType({})

    @property
    def source_locations(self) -> tuple[str, ...]:
        return self._source_locations

    @property
    def base_dir(self) -> Path | None:
        return self._base_dir

    @property
    def templates(self) -> Mapping[str, Template]:
        """Read-only snapshot of the current table."""
        return self._table

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._table))

    def get(self, name: str) -> Optional[Template]:
        return self._table.get(name)

    def resolve_location(self, location: str) -> Path:
        """Return the file path for a configured location.

        Locations are relative to ``base_dir`` when one is set, including ones
        written with a leading separator such as ``/bin/templates/templates.xml``.
        """
        if self._base_dir is None:
            return Path(location)
        return self._base_dir / location.lstrip("/\\")

    def load(self, source_locations: SourceLocations) -> dict[str, Template]:
        """Parse and merge ``source_locations`` without touching the current table."""

        merged: dict[str, Template] = {}
        loaded = 0
        for location in split_template_files(source_locations):
            path = self.resolve_location(location)
            result = try_parse_template_file(path)
            if isinstance(result, ParseFailure):
                self._report_skipped(result)
                continue

            parent = path.absolute().parent
            for name, template in result.templates.items():
                merged[name] = template.with_parent(parent) if template.is_relative else template
            loaded += 1
            LOGGER.info("Read %d templates from: %s", len(result.templates), path.absolute())
            self._recorder.record(
                SOURCE_LOADED,
                {"source": str(path), "template_count": len(result.templates)},
            )

        self._recorder.record(
            LOAD_COMPLETE,
            {"source_count": loaded, "template_count": len(merged)},
        )
        return merged

    def reload(self) -> Mapping[str, Template]:
        """Rebuild the table from the configured sources and publish it."""

        with self._lock:
            table = self.load(self._source_locations)
            self._table = MappingProxyType(table)
        LOGGER.info("Template table rebuilt with %d templates", len(table))
        return self._table

    def register(self, template: Template) -> None:
        """Insert or overwrite a single template by name."""

        with self._lock:
            table = dict(self._table)
            table[template.name] = template
            self._table = MappingProxyType(table)
        LOGGER.debug("Registered template: %s", template.name)
        self._recorder.record(TEMPLATE_REGISTERED, {"name": template.name})

    def _report_skipped(self, failure: ParseFailure) -> None:
        source = failure.source.absolute()
        if isinstance(failure.error, TemplateSourceUnavailable):
            LOGGER.warning(
                "Ignoring template file '%s' as it does not exist or is not readable",
                source,
            )
            reason = "unavailable"
        else:
            LOGGER.warning(
                "Ignoring template file '%s', an error occurred parsing the file: %s",
                source,
                failure.reason,
                exc_info=failure.error,
            )
            reason = "malformed"
        self._recorder.record(
            SOURCE_SKIPPED,
            {"source": str(failure.source), "reason": reason, "detail": failure.reason},
        )
