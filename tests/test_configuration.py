from __future__ import annotations

import logging
from pathlib import Path

import pytest

from templar.configuration import (
    DEFAULT_TEMPLATE_FILES,
    ConfigurationError,
    ObservabilitySettings,
    TemplarConfig,
    TemplateSettings,
    configure_logging,
    default_config,
    load_config_from_env,
    load_config_from_file,
    split_template_files,
)


def test_templar_config_defaults(tmp_path: Path) -> None:
    config = TemplarConfig.with_home(tmp_path)

    assert config.home == tmp_path
    assert config.templates.source_locations == (DEFAULT_TEMPLATE_FILES,)
    assert config.observability.event_log_url is None
    assert config.observability.log_level == "INFO"
    assert dict(config.extras) == {}


def test_default_config_uses_working_directory(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert default_config().home == tmp_path.resolve()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("a.xml,b.xml", ("a.xml", "b.xml")),
        (" a.xml , ,b.xml,", ("a.xml", "b.xml")),
        ("", ()),
        (None, ()),
        (["a.xml", "  ", "c.xml"], ("a.xml", "c.xml")),
    ],
)
def test_split_template_files(value, expected) -> None:
    assert split_template_files(value) == expected


def test_template_settings_from_property(tmp_path: Path) -> None:
    settings = TemplateSettings.from_property("/bin/a.xml,,extra/b.xml", home=tmp_path)

    assert settings.source_locations == ("/bin/a.xml", "extra/b.xml")
    assert TemplateSettings.from_property(None, home=tmp_path).source_locations == (
        DEFAULT_TEMPLATE_FILES,
    )


def test_relative_home_is_resolved(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = TemplarConfig.with_home("host")

    assert config.home == tmp_path.resolve() / "host"


def test_load_config_from_file(tmp_path: Path) -> None:
    config_py = tmp_path / "config.py"
    config_py.write_text(
        "\n".join(
            [
                "from templar.configuration import TemplarConfig",
                "",
                f"TEMPLAR_CONFIG = TemplarConfig.with_home({str(tmp_path)!r}, template_files='a.xml,b.xml')",
                "",
            ]
        )
    )

    loaded = load_config_from_file(config_py)

    assert loaded.home == tmp_path
    assert loaded.templates.source_locations == ("a.xml", "b.xml")


def test_load_config_from_file_requires_symbol(tmp_path: Path) -> None:
    config_py = tmp_path / "config.py"
    config_py.write_text("OTHER = 1\n")

    with pytest.raises(ConfigurationError):
        load_config_from_file(config_py)
    with pytest.raises(ConfigurationError):
        load_config_from_file(tmp_path / "missing.py")


def test_load_config_from_file_plain_settings(tmp_path: Path) -> None:
    config_py = tmp_path / "config.py"
    config_py.write_text("TEMPLATE_FILES = 'a.xml, b.xml'\nLOG_LEVEL = 'DEBUG'\n")

    loaded = load_config_from_file(config_py)

    assert loaded.home == tmp_path.resolve()
    assert loaded.templates.source_locations == ("a.xml", "b.xml")
    assert loaded.observability.log_level == "DEBUG"


def test_load_config_from_file_plain_home(tmp_path: Path) -> None:
    home = tmp_path / "host"
    config_py = tmp_path / "config.py"
    config_py.write_text(f"TEMPLAR_HOME = {str(home)!r}\n")

    loaded = load_config_from_file(config_py)

    assert loaded.home == home
    assert loaded.templates.source_locations == (DEFAULT_TEMPLATE_FILES,)


def test_load_config_from_file_wraps_errors(tmp_path: Path) -> None:
    config_py = tmp_path / "config.py"
    config_py.write_text("raise RuntimeError('broken setup')\n")

    with pytest.raises(ConfigurationError, match="broken setup"):
        load_config_from_file(config_py)


def test_load_config_from_file_rejects_wrong_type(tmp_path: Path) -> None:
    config_py = tmp_path / "config.py"
    config_py.write_text("TEMPLAR_CONFIG = {'home': '/tmp'}\n")

    with pytest.raises(ConfigurationError, match="must be a TemplarConfig"):
        load_config_from_file(config_py)


def test_load_config_from_env(tmp_path: Path, monkeypatch) -> None:
    for name in ("TEMPLAR_HOME", "TEMPLAR_TEMPLATE_FILES", "TEMPLAR_LOG_LEVEL", "TEMPLAR_EVENT_LOG_URL"):
        monkeypatch.delenv(name, raising=False)
    dotenv = tmp_path / ".env"
    dotenv.write_text(
        "\n".join(
            [
                f"TEMPLAR_HOME={tmp_path}",
                "TEMPLAR_TEMPLATE_FILES=one.xml,two.xml",
                "TEMPLAR_LOG_LEVEL=DEBUG",
            ]
        )
    )

    try:
        config = load_config_from_env(dotenv)
    finally:
        for name in ("TEMPLAR_HOME", "TEMPLAR_TEMPLATE_FILES", "TEMPLAR_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

    assert config.home == tmp_path
    assert config.templates.source_locations == ("one.xml", "two.xml")
    assert config.observability.log_level == "DEBUG"
    assert config.observability.event_log_url is None


def test_configure_logging_sets_package_level() -> None:
    logger = configure_logging(ObservabilitySettings(log_level="warning"))

    assert logger.name == "templar"
    assert logger.level == logging.WARNING
    logger.setLevel(logging.NOTSET)


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ConfigurationError):
        configure_logging(ObservabilitySettings(log_level="chatty"))
