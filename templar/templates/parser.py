"""Parse template XML documents into :class:`Template` records.

The expected document layout is::

    <templates>
      <template isTestPlan="true">
        <name>...</name>
        <description>...</description>
        <fileName>...</fileName>
        <parameters>
          <parameter key="..." defaultValue="..."/>
        </parameters>
      </template>
    </templates>

Required elements are validated; unknown elements are ignored. Errors are
raised as :class:`MalformedTemplateDocument` or
:class:`TemplateSourceUnavailable` and never swallowed here.
"""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import IO, Dict, Union

from templar.templates.errors import (
    MalformedTemplateDocument,
    TemplateError,
    TemplateSourceUnavailable,
)
from templar.templates.types import ParseFailure, ParseResult, ParseSuccess, Template

LOGGER = logging.getLogger(__name__)

ROOT_TAG = "templates"
TEMPLATE_TAG = "template"
PARAMETERS_TAG = "parameters"
PARAMETER_TAG = "parameter"
REQUIRED_CHILDREN = ("name", "description", "fileName")

DocumentSource = Union[str, bytes, IO[bytes]]


def _coerce_bool(value: str | None) -> bool:
    # Only a case-insensitive "true" is True; surrounding whitespace makes it False.
    return value is not None and value.lower() == "true"


def _element_text(element: ET.Element) -> str:
    return "".join(element.itertext())


def _parse_parameters(container: ET.Element, source: str, template_name: str) -> Dict[str, str]:
    parameters: Dict[str, str] = {}
    for parameter in container.findall(PARAMETER_TAG):
        key = parameter.get("key")
        if key is None:
            raise MalformedTemplateDocument(
                source,
                f"parameter without 'key' attribute in template '{template_name}'",
            )
        parameters[key] = parameter.get("defaultValue", "")
    return parameters


def _parse_template_element(element: ET.Element, source: str, index: int) -> Template:
    children: Dict[str, str] = {}
    for tag in REQUIRED_CHILDREN:
        child = element.find(tag)
        if child is None:
            raise MalformedTemplateDocument(
                source, f"template #{index} is missing required element <{tag}>"
            )
        children[tag] = _element_text(child)

    name = children["name"].strip()
    if not name:
        raise MalformedTemplateDocument(source, f"template #{index} has an empty <name>")

    container = element.find(PARAMETERS_TAG)
    parameters = (
        _parse_parameters(container, source, name) if container is not None else None
    )
    return Template(
        name=name,
        description=children["description"],
        file_name=children["fileName"],
        is_test_plan=_coerce_bool(element.get("isTestPlan")),
        parameters=parameters,
    )


def _templates_from_root(root: ET.Element, source: str) -> Dict[str, Template]:
    if root.tag != ROOT_TAG:
        raise MalformedTemplateDocument(
            source, f"expected root element <{ROOT_TAG}>, found <{root.tag}>"
        )
    templates: Dict[str, Template] = {}
    for index, element in enumerate(root.findall(TEMPLATE_TAG), start=1):
        template = _parse_template_element(element, source, index)
        if template.name in templates:
            LOGGER.debug("Template '%s' redefined in %s", template.name, source)
        templates[template.name] = template
    return dict(sorted(templates.items()))


def parse_template_document(
    document: DocumentSource,
    *,
    source_name: str | None = None,
) -> Dict[str, Template]:
    """
    Parse an in-memory template document.

    Args:
        document: XML text, raw bytes, or a binary file object.
        source_name: Label used in error messages.

    Returns:
        Mapping of template name to :class:`Template`, ordered by name.

    Raises:
        MalformedTemplateDocument: If the document is not well-formed or a
            template is missing a required element.
    """
    source = source_name or "<document>"
    try:
        if isinstance(document, (str, bytes)):
            root = ET.fromstring(document)
        else:
            root = ET.parse(document).getroot()
    except ET.ParseError as exc:
        line, _column = exc.position
        raise MalformedTemplateDocument(source, str(exc), line=line) from exc
    except (LookupError, ValueError) as exc:
        # Unknown or undecodable encoding declarations surface outside ParseError.
        raise MalformedTemplateDocument(source, str(exc)) from exc
    return _templates_from_root(root, source)


def parse_template_file(path: Path | str) -> Dict[str, Template]:
    """
    Parse a template XML file from disk.

    Raises:
        TemplateSourceUnavailable: If the file does not exist or cannot be read.
        MalformedTemplateDocument: If the file content is invalid.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise TemplateSourceUnavailable(str(file_path), "no such file")
    if not os.access(file_path, os.R_OK):
        raise TemplateSourceUnavailable(str(file_path), "permission denied")
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise TemplateSourceUnavailable(str(file_path), str(exc)) from exc
    LOGGER.debug("Parsing template file: %s", file_path)
    return parse_template_document(data, source_name=str(file_path))


def try_parse_template_file(path: Path | str) -> ParseResult:
    """Parse a template file and report the outcome as a result value."""

    file_path = Path(path)
    try:
        templates = parse_template_file(file_path)
    except TemplateError as exc:
        return ParseFailure(source=file_path, reason=str(exc), error=exc)
    return ParseSuccess(source=file_path, templates=templates)
