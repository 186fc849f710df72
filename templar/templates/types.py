"""Template records and parse result types."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union

ABSOLUTE_PATH_MARKER = "/"


@dataclass(slots=True, frozen=True)
class Template:
    """A named descriptor pointing at an artifact file plus default parameter values."""

    name: str
    description: str
    file_name: str
    is_test_plan: bool = False
    parameters: Optional[Mapping[str, str]] = field(default=None, hash=False)
    parent_directory: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.parameters is not None and not isinstance(self.parameters, MappingProxyType):
            object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        if self.parent_directory is not None and not isinstance(self.parent_directory, Path):
            object.__setattr__(self, "parent_directory", Path(self.parent_directory))

    @property
    def is_relative(self) -> bool:
        return not self.file_name.startswith(ABSOLUTE_PATH_MARKER)

    @property
    def has_parameters(self) -> bool:
        return bool(self.parameters)

    def with_parent(self, directory: Path | str) -> "Template":
        """Return a copy of this template annotated with its source directory."""

        return replace(self, parent_directory=Path(directory))

    def resolve_artifact_path(self, home: Path | str | None = None) -> Path:
        """
        Return the filesystem path of the artifact this template instantiates.

        Relative templates resolve against their parent directory. Absolute
        templates are anchored under ``home`` when one is given, which mirrors
        how ``/bin/templates/...`` style entries are shipped with a host install.
        """
        if self.parent_directory is not None:
            return self.parent_directory / self.file_name
        if home is not None and not self.is_relative:
            return Path(home) / self.file_name.lstrip(ABSOLUTE_PATH_MARKER)
        return Path(self.file_name)


@dataclass(slots=True, frozen=True)
class ParseSuccess:
    """Templates parsed from one source."""

    source: Path
    templates: Mapping[str, Template]

    @property
    def ok(self) -> bool:
        return True


@dataclass(slots=True, frozen=True)
class ParseFailure:
    """A source that could not be turned into templates."""

    source: Path
    reason: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return False


ParseResult = Union[ParseSuccess, ParseFailure]
