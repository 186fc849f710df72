"""
Configuration primitives for the template registry.

`TemplarConfig` tells the registry where the host installation lives (its
"home" directory) and which template files to read, relative to that home.

Example usage::

    from pathlib import Path
    from templar.configuration import TemplarConfig

    config = TemplarConfig.with_home(
        Path("/opt/host"),
        template_files="/bin/templates/templates.xml,extra/templates.xml",
    )
    print(config.templates.source_locations)

A configuration can also come from a user supplied ``config.py`` file that
defines ``TEMPLAR_CONFIG``, or just ``TEMPLATE_FILES`` and ``TEMPLAR_HOME``::

    from templar.configuration import load_config_from_file

    config = load_config_from_file("/path/to/config.py")

or from environment variables (a ``.env`` file is honoured)::

    from templar.configuration import load_config_from_env

    config = load_config_from_env()
"""

from __future__ import annotations

import logging
import os
import runpy
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from dotenv import load_dotenv


CONFIG_SYMBOL_NAME = "TEMPLAR_CONFIG"
TEMPLATE_FILES_SYMBOL = "TEMPLATE_FILES"
HOME_SYMBOL = "TEMPLAR_HOME"
LOG_LEVEL_SYMBOL = "LOG_LEVEL"
DEFAULT_TEMPLATE_FILES = "/bin/templates/templates.xml"
LOGGER_NAME = "templar"

ENV_HOME = "TEMPLAR_HOME"
ENV_TEMPLATE_FILES = "TEMPLAR_TEMPLATE_FILES"
ENV_LOG_LEVEL = "TEMPLAR_LOG_LEVEL"
ENV_EVENT_LOG_URL = "TEMPLAR_EVENT_LOG_URL"


class ConfigurationError(RuntimeError):
    """Raised when a configuration cannot be loaded or applied."""


def _ensure_path(path: Path | str) -> Path:
    result = Path(path).expanduser()
    if not result.is_absolute():
        result = result.resolve()
    return result


def split_template_files(value: str | Iterable[str] | None) -> tuple[str, ...]:
    """Split a comma separated list of template files, dropping blank entries."""

    if value is None:
        return tuple()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(item.strip() for item in items if item and item.strip())


@dataclass(slots=True)
class TemplateSettings:
    """Where template files are looked up."""

    home: Path
    template_files: tuple[str, ...] = (DEFAULT_TEMPLATE_FILES,)

    def __post_init__(self) -> None:
        self.home = _ensure_path(self.home)
        self.template_files = split_template_files(self.template_files)

    @classmethod
    def from_property(
        cls,
        value: str | None,
        *,
        home: Path | str,
    ) -> "TemplateSettings":
        """Build settings from a ``a.xml,b.xml`` style property value."""
        if value is None:
            return cls(home=home)
        return cls(home=home, template_files=split_template_files(value))

    @property
    def source_locations(self) -> tuple[str, ...]:
        return self.template_files


@dataclass(slots=True)
class ObservabilitySettings:
    """Logging and event configuration."""

    event_log_url: str | None = None
    log_level: str = "INFO"
    enable_registry_events: bool = True


@dataclass(slots=True)
class TemplarConfig:
    """
    Root configuration for the template registry.

    Attributes:
        templates: Home directory and template file locations.
        observability: Logging and event settings.
        extras: User-defined metadata dictionary.
    """

    templates: TemplateSettings
    observability: ObservabilitySettings = field(default_factory=ObservabilitySettings)
    extras: Mapping[str, Any] = field(default_factory=dict)

    @property
    def home(self) -> Path:
        return self.templates.home

    @classmethod
    def with_home(
        cls,
        home: Path | str,
        *,
        template_files: str | Iterable[str] | None = None,
        observability: ObservabilitySettings | None = None,
        extras: Mapping[str, Any] | None = None,
    ) -> "TemplarConfig":
        """
        Create a configuration rooted at ``home``.

        Args:
            home: Base directory that template file locations are relative to.
            template_files: Comma separated string or sequence of locations.
                Defaults to ``/bin/templates/templates.xml``.
            observability: Optional observability settings.
            extras: Optional user-defined metadata.
        """
        if template_files is None:
            templates = TemplateSettings(home=home)
        else:
            templates = TemplateSettings(
                home=home, template_files=split_template_files(template_files)
            )
        return cls(
            templates=templates,
            observability=observability or ObservabilitySettings(),
            extras=MappingProxyType(dict(extras or {})),
        )


def default_config(home: Path | None = None) -> TemplarConfig:
    """Return a default configuration rooted at ``home`` or the working directory."""
    return TemplarConfig.with_home(home if home is not None else Path.cwd())


def load_config_from_file(path: Path | str) -> TemplarConfig:
    """
    Run a user ``config.py`` and build a configuration from what it defines.

    The file either defines ``TEMPLAR_CONFIG`` holding a :class:`TemplarConfig`,
    or plain settings: ``TEMPLATE_FILES`` (comma separated string or list),
    ``TEMPLAR_HOME`` (defaults to the directory containing the file) and
    ``LOG_LEVEL``.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        namespace = runpy.run_path(str(path))
    except Exception as exc:
        raise ConfigurationError(f"Configuration file {path} failed: {exc}") from exc

    if CONFIG_SYMBOL_NAME in namespace:
        config_obj = namespace[CONFIG_SYMBOL_NAME]
        if not isinstance(config_obj, TemplarConfig):
            raise ConfigurationError(
                f"{CONFIG_SYMBOL_NAME} in {path} must be a TemplarConfig, "
                f"got {type(config_obj)!r}"
            )
        return config_obj

    if TEMPLATE_FILES_SYMBOL not in namespace and HOME_SYMBOL not in namespace:
        raise ConfigurationError(
            f"Configuration file {path} must define `{CONFIG_SYMBOL_NAME}` "
            f"or `{TEMPLATE_FILES_SYMBOL}`"
        )
    return TemplarConfig.with_home(
        namespace.get(HOME_SYMBOL) or path.parent,
        template_files=namespace.get(TEMPLATE_FILES_SYMBOL),
        observability=ObservabilitySettings(
            log_level=str(namespace.get(LOG_LEVEL_SYMBOL, "INFO"))
        ),
    )


def load_config_from_env(dotenv_path: Path | str | None = None) -> TemplarConfig:
    """Build a configuration from ``TEMPLAR_*`` environment variables."""

    load_dotenv(dotenv_path=dotenv_path)
    home = os.environ.get(ENV_HOME) or Path.cwd()
    observability = ObservabilitySettings(
        event_log_url=os.environ.get(ENV_EVENT_LOG_URL) or None,
        log_level=os.environ.get(ENV_LOG_LEVEL, "INFO"),
    )
    return TemplarConfig.with_home(
        home,
        template_files=os.environ.get(ENV_TEMPLATE_FILES),
        observability=observability,
    )


def configure_logging(settings: ObservabilitySettings) -> logging.Logger:
    """Apply ``settings.log_level`` to the package logger."""

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {settings.log_level!r}")
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger


__all__ = [
    "CONFIG_SYMBOL_NAME",
    "ConfigurationError",
    "DEFAULT_TEMPLATE_FILES",
    "ObservabilitySettings",
    "TemplarConfig",
    "TemplateSettings",
    "configure_logging",
    "default_config",
    "load_config_from_env",
    "load_config_from_file",
    "split_template_files",
]
