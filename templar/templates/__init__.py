"""Template parsing, merging and lookup."""

from .errors import MalformedTemplateDocument, TemplateError, TemplateSourceUnavailable
from .parser import parse_template_document, parse_template_file, try_parse_template_file
from .registry import (
    TemplateRegistry,
    get_template_registry,
    reset_template_registry,
    set_template_registry,
)
from .store import TemplateStore
from .types import ParseFailure, ParseResult, ParseSuccess, Template

__all__ = [
    "MalformedTemplateDocument",
    "ParseFailure",
    "ParseResult",
    "ParseSuccess",
    "Template",
    "TemplateError",
    "TemplateRegistry",
    "TemplateSourceUnavailable",
    "TemplateStore",
    "get_template_registry",
    "parse_template_document",
    "parse_template_file",
    "reset_template_registry",
    "set_template_registry",
    "try_parse_template_file",
]
