"""Pytest configuration and shared fixtures for templar tests."""

from pathlib import Path
from typing import Callable, Mapping, Optional
from xml.sax.saxutils import quoteattr, escape

import pytest

from templar.observability import reset_event_recorder
from templar.templates import reset_template_registry


FIXTURES_DIR = Path(__file__).parent / "fixtures" / "templates"


def _template_element(
    name: str,
    file_name: str,
    description: str = "",
    is_test_plan: Optional[str] = None,
    parameters: Optional[Mapping[str, str]] = None,
) -> str:
    """Render one <template> element."""
    attrs = f" isTestPlan={quoteattr(is_test_plan)}" if is_test_plan is not None else ""
    lines = [
        f"  <template{attrs}>",
        f"    <name>{escape(name)}</name>",
        f"    <description>{escape(description)}</description>",
        f"    <fileName>{escape(file_name)}</fileName>",
    ]
    if parameters is not None:
        lines.append("    <parameters>")
        for key, value in parameters.items():
            lines.append(
                f"      <parameter key={quoteattr(key)} defaultValue={quoteattr(value)}/>"
            )
        lines.append("    </parameters>")
    lines.append("  </template>")
    return "\n".join(lines)


def _templates_document(*elements: str) -> str:
    return "\n".join(["<templates>", *elements, "</templates>"])


@pytest.fixture(autouse=True)
def clean_globals():
    """Give every test a fresh event recorder and registry singleton."""
    reset_event_recorder()
    reset_template_registry()
    yield
    reset_template_registry()
    reset_event_recorder()


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding the static XML fixtures."""
    return FIXTURES_DIR


@pytest.fixture
def template_element() -> Callable[..., str]:
    return _template_element


@pytest.fixture
def write_templates(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper writing template elements to ``tmp_path/<relative>``."""

    def _write(relative: str, *elements: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_templates_document(*elements), encoding="utf-8")
        return path

    return _write
