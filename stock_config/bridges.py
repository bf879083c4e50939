"""
Config -> Kernel Bridges.

Functions that turn StockKernelSettings into kernel objects.  They live in
stock_config because the kernel must never import stock_config.

Usage:
    from stock_config import get_active_config
    from stock_config.bridges import build_operation_service, init_engine

    settings = get_active_config()
    init_engine(settings)
    with session_scope() as session:
        service = build_operation_service(session, settings)
"""

from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from stock_config.schema import StockKernelSettings
from stock_kernel.db.engine import init_engine_from_url
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.paging import PagingInfo
from stock_kernel.logging_config import configure_logging
from stock_kernel.selectors.operation_type_selector import (
    OperationTypeSelector,
    StockOperationTypeInfo,
)
from stock_kernel.selectors.stock_operation_selector import StockOperationSelector
from stock_kernel.services.stock_operation_service import StockOperationService
from stock_kernel.services.stock_take_service import StockTakeService


def configure_logging_from(settings: StockKernelSettings) -> None:
    configure_logging(level=settings.log_level)


def init_engine(settings: StockKernelSettings, echo: bool = False) -> Engine:
    """Initialize the process-wide engine and logging from settings."""
    configure_logging_from(settings)
    return init_engine_from_url(settings.database_url, echo=echo)


def default_paging(settings: StockKernelSettings, page: int = 1) -> PagingInfo:
    return PagingInfo(page=page, page_size=settings.default_page_size)


def build_selector(session: Session, settings: StockKernelSettings) -> StockOperationSelector:
    return StockOperationSelector(session, reference_tz=settings.reference_timezone)


def build_operation_service(
    session: Session,
    settings: StockKernelSettings,
    clock: Clock | None = None,
) -> StockOperationService:
    """StockOperationService using the configured calendar and number prefix."""
    return StockOperationService(
        session,
        clock or SystemClock(),
        reference_tz=settings.reference_timezone,
        number_prefix=settings.operation_number_prefix,
    )


def build_stock_take_service(
    session: Session,
    settings: StockKernelSettings,
    clock: Clock | None = None,
) -> StockTakeService:
    clock = clock or SystemClock()
    return StockTakeService(
        session,
        clock,
        build_operation_service(session, settings, clock),
    )


def resolve_adjustment_type(
    session: Session,
    settings: StockKernelSettings,
) -> StockOperationTypeInfo | None:
    """The configured Adjustment operation type, or None if not registered."""
    return OperationTypeSelector(session).get_adjustment_type(settings.adjustment_type_name)
