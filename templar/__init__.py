"""
Templar: test plan template registry

Discovers template descriptors in XML files and serves them by name.

Main Components:
- Template: one named template with its artifact file and parameter defaults
- TemplateStore: merges templates from every configured file
- TemplateRegistry: name listing and lookup over the merged table
- TemplarConfig: home directory and template file configuration

Example:
    >>> from templar import TemplarConfig, TemplateRegistry
    >>>
    >>> config = TemplarConfig.with_home("/opt/host", template_files="bin/templates/templates.xml")
    >>> registry = TemplateRegistry.from_config(config)
    >>> registry.list_names()
    >>> template = registry.lookup("Recording")
"""

from templar.configuration import (
    ConfigurationError,
    ObservabilitySettings,
    TemplarConfig,
    TemplateSettings,
    default_config,
    load_config_from_env,
    load_config_from_file,
)
from templar.templates import (
    MalformedTemplateDocument,
    ParseFailure,
    ParseSuccess,
    Template,
    TemplateError,
    TemplateRegistry,
    TemplateSourceUnavailable,
    TemplateStore,
    get_template_registry,
    parse_template_document,
    parse_template_file,
    reset_template_registry,
    set_template_registry,
    try_parse_template_file,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "MalformedTemplateDocument",
    "ObservabilitySettings",
    "ParseFailure",
    "ParseSuccess",
    "TemplarConfig",
    "Template",
    "TemplateError",
    "TemplateRegistry",
    "TemplateSettings",
    "TemplateSourceUnavailable",
    "TemplateStore",
    "default_config",
    "get_template_registry",
    "load_config_from_env",
    "load_config_from_file",
    "parse_template_document",
    "parse_template_file",
    "reset_template_registry",
    "set_template_registry",
    "try_parse_template_file",
]
