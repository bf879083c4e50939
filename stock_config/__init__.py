"""
stock_config -- single public entrypoint for stock kernel configuration.

Responsibility:
    Provides the only way to obtain settings at runtime through
    ``get_active_config()``.  Returns a frozen ``StockKernelSettings``.

Architecture position:
    Configuration.  This package sits above ``stock_kernel``.  The kernel
    MUST NEVER import from ``stock_config``; ``stock_config.bridges``
    translates settings into kernel objects.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigurationError`` -- missing or invalid settings.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stock_config.loader import ConfigurationError, load_settings
from stock_config.schema import StockKernelSettings

_logger = logging.getLogger("stock_kernel.config")

# Default settings file
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> StockKernelSettings:
    """
    Load the active settings.

    Args:
        path: Settings file.  Defaults to stock_config/sets/default.yaml.

    Returns:
        StockKernelSettings with environment overrides applied.
    """
    settings_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    settings = load_settings(settings_path)

    _logger.info(
        "STOCK_CONFIG_TRACE",
        extra={
            "config_path": str(settings_path),
            "reference_timezone": str(settings.reference_timezone),
            "operation_number_prefix": settings.operation_number_prefix,
            "adjustment_type_name": settings.adjustment_type_name,
        },
    )
    return settings


__all__ = [
    "ConfigurationError",
    "DEFAULT_CONFIG_PATH",
    "StockKernelSettings",
    "get_active_config",
]
