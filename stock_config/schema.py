"""
Configuration schema (``stock_config.schema``).

Frozen dataclasses describing the settings of one stock kernel deployment.
Parsed by ``stock_config.loader``; consumed by ``stock_config.bridges``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo


@dataclass(frozen=True)
class StockKernelSettings:
    """
    Runtime settings for the stock kernel.

    Attributes:
        database_url: SQLAlchemy connection URL.
        log_level: Logging level name for the ``stock_kernel`` logger.
        reference_timezone: Calendar in which operation days are computed.
        operation_number_prefix: Prefix of generated operation numbers.
        default_page_size: Page size used when a caller does not choose one
            (0 disables paging).
        adjustment_type_name: Name of the operation type used for stock-takes.
    """

    database_url: str
    log_level: str
    reference_timezone: tzinfo
    operation_number_prefix: str
    default_page_size: int
    adjustment_type_name: str
    source_path: str | None = None
