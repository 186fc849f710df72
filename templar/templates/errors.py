"""Exception hierarchy for the template subsystem."""

from __future__ import annotations


class TemplateError(Exception):
    """Base error for template related failures."""


class TemplateSourceUnavailable(TemplateError, FileNotFoundError):
    """Raised when a template source does not exist or cannot be read."""

    def __init__(self, source: str, reason: str | None = None) -> None:
        message = f"Template source '{source}' is not available"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.source = source


class MalformedTemplateDocument(TemplateError, ValueError):
    """Raised when a template document is not well-formed or has an invalid structure."""

    def __init__(self, source: str, reason: str, *, line: int | None = None) -> None:
        location = f"{source}:{line}" if line is not None else source
        super().__init__(f"Malformed template document '{location}': {reason}")
        self.source = source
        self.reason = reason
        self.line = line
