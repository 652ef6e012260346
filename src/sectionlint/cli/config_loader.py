"""YAML configuration loader for the CLI.

The analysis core never reads configuration files; this loader turns a
``sectionlint.yaml`` file into an AnalysisConfig.

Example file:

    dialect: csharp
    disable:
      - vague-test-name
    enable:
      - header-description
    severity_overrides:
      naming-prefix: warning
    allow_mocking_after_setup: true
    required_sections: [WHEN, THEN]
    max_workers: 8

``rules`` replaces the default rule set outright; ``enable`` and ``disable``
adjust it (the defaults, or ``rules`` when given).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final

import structlog
import yaml
from pydantic import ValidationError

from sectionlint.config import AnalysisConfig
from sectionlint.errors import ConfigurationError
from sectionlint.rules import DEFAULT_ENABLED_RULES, RULES

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILE: Final[str] = "sectionlint.yaml"


def _rule_list(source: str, data: dict[str, Any], key: str) -> set[str]:
    value = data.pop(key, None) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(source, f"'{key}' must be a list of rule IDs")
    unknown = sorted(set(value) - set(RULES))
    if unknown:
        raise ConfigurationError(source, f"'{key}' lists unknown rule IDs: {', '.join(unknown)}")
    return set(value)


def config_from_mapping(data: dict[str, Any], source: str = "<mapping>") -> AnalysisConfig:
    """Validate a parsed configuration mapping.

    Args:
        data: Parsed YAML document.
        source: Where the mapping came from, for error messages.

    Returns:
        The validated AnalysisConfig.

    Raises:
        ConfigurationError: If the mapping is not a valid configuration.
    """
    data = dict(data)
    enable = _rule_list(source, data, "enable")
    disable = _rule_list(source, data, "disable")
    if enable or disable:
        base = set(data.get("rules") or DEFAULT_ENABLED_RULES)
        data["rules"] = sorted((base | enable) - disable)

    try:
        return AnalysisConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(source, problems) from e


def load_config(path: str | Path | None = None) -> AnalysisConfig:
    """Load configuration from a YAML file.

    Args:
        path: Configuration file. When None, ``sectionlint.yaml`` in the
            working directory is used if it exists, else the defaults.

    Returns:
        The validated AnalysisConfig.

    Raises:
        ConfigurationError: If the file is missing (when given explicitly),
            unreadable, not valid YAML, or not a valid configuration.
    """
    log = logger.bind(component="config_loader")
    if path is None:
        default = Path(DEFAULT_CONFIG_FILE)
        if not default.is_file():
            log.debug("config_defaults_used")
            return AnalysisConfig()
        config_path = default
    else:
        config_path = Path(path)

    source = str(config_path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(source, f"cannot read file: {e.strerror or e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(source, f"invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(source, "top level must be a mapping")

    config = config_from_mapping(data, source)
    log.debug("config_loaded", path=source)
    return config


__all__ = ["DEFAULT_CONFIG_FILE", "config_from_mapping", "load_config"]
