"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into a frozen
``StockKernelSettings``.  Callers obtain settings through
``stock_config.get_active_config()``; this module is its implementation.

Invariants enforced
-------------------
* Required keys have no silent defaults; a missing key raises
  ``ConfigurationError`` naming the key.
* Environment overrides are applied after the file is read and before
  values are validated, so an override is held to the same rules.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from stock_config.schema import StockKernelSettings

# Environment variable -> settings key
ENV_OVERRIDES = {
    "STOCK_KERNEL_DATABASE_URL": "database_url",
    "STOCK_KERNEL_LOG_LEVEL": "log_level",
}

_REQUIRED_KEYS = ("database_url",)

_DEFAULTS: dict[str, Any] = {
    "log_level": "INFO",
    "reference_timezone": "UTC",
    "operation_number_prefix": "SO-",
    "default_page_size": 0,
    "adjustment_type_name": "Adjustment",
}


class ConfigurationError(ValueError):
    """Settings are missing or malformed."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Invalid configuration '{key}': {message}")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("<root>", f"{path} must contain a mapping")
    return data


def apply_env_overrides(
    data: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return a copy of ``data`` with environment overrides applied."""
    environ = os.environ if environ is None else environ
    merged = dict(data)
    for variable, key in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if value:
            merged[key] = value
    return merged


def _parse_timezone(value: Any) -> ZoneInfo:
    try:
        return ZoneInfo(str(value))
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError("reference_timezone", f"unknown time zone {value!r}") from exc


def _parse_log_level(value: Any) -> str:
    level = str(value).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError("log_level", f"unknown log level {value!r}")
    return level


def _parse_page_size(value: Any) -> int:
    try:
        size = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError("default_page_size", f"not an integer: {value!r}") from exc
    if size < 0:
        raise ConfigurationError("default_page_size", "must be >= 0")
    return size


def parse_settings(data: Mapping[str, Any], source_path: str | None = None) -> StockKernelSettings:
    """
    Parse a settings mapping into ``StockKernelSettings``.

    Raises:
        ConfigurationError: a required key is missing or a value is invalid.
    """
    for key in _REQUIRED_KEYS:
        if not data.get(key):
            raise ConfigurationError(key, "required setting is missing")

    values = {**_DEFAULTS, **{k: v for k, v in data.items() if v is not None}}

    unknown = set(values) - set(_DEFAULTS) - set(_REQUIRED_KEYS)
    if unknown:
        raise ConfigurationError(sorted(unknown)[0], "unknown setting")

    prefix = str(values["operation_number_prefix"])
    adjustment_type_name = str(values["adjustment_type_name"]).strip()
    if not adjustment_type_name:
        raise ConfigurationError("adjustment_type_name", "must not be empty")

    return StockKernelSettings(
        database_url=str(values["database_url"]),
        log_level=_parse_log_level(values["log_level"]),
        reference_timezone=_parse_timezone(values["reference_timezone"]),
        operation_number_prefix=prefix,
        default_page_size=_parse_page_size(values["default_page_size"]),
        adjustment_type_name=adjustment_type_name,
        source_path=source_path,
    )


def load_settings(
    path: Path,
    environ: Mapping[str, str] | None = None,
) -> StockKernelSettings:
    """Load, override and parse a settings file."""
    data = apply_env_overrides(load_yaml_file(path), environ)
    return parse_settings(data, source_path=str(path))
