"""
StockOperationService -- lifecycle manager for stock operations.

Responsibility:
    Validates stock operation drafts, stamps them (status, number, calendar
    day, order within the day, creator, creation time) and hands them to the
    session.  Enforces deletion safety: an operation with posted or reserved
    transactions can never be purged.

Architecture position:
    Kernel > Services -- imperative shell.  Reads through
    StockOperationSelector; writes via ``session.flush()`` only.

Invariants enforced:
    - Validate-then-act: every check runs before any row is written or any
      sequence value is consumed.
    - operation_number is unique.  The database unique constraint is the
      backstop for concurrent submissions; this service checks first so the
      common case fails with OperationNumberAlreadyExistsError.
    - A submitted operation starts in status NEW unless the draft already
      carries a status.
    - operation_day is always the calendar day of operation_date in the
      reference calendar.

Failure modes:
    - InvalidArgumentError / OperationValidationError: malformed draft.
    - OperationNumberTooLongError: number exceeds 255 characters.
    - OperationNumberAlreadyExistsError: duplicate number.
    - OperationHasTransactionsError: purge blocked by ledger rows.
    - StockOperationNotFoundError: purge or update of an unknown operation.
"""

from datetime import UTC, tzinfo
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from stock_kernel.db.types import MAX_OPERATION_NUMBER_LENGTH
from stock_kernel.domain.clock import Clock
from stock_kernel.domain.dtos import StockOperationInfo
from stock_kernel.domain.ordering import calendar_day, to_utc
from stock_kernel.exceptions import (
    InvalidArgumentError,
    OperationHasTransactionsError,
    OperationNumberAlreadyExistsError,
    OperationNumberTooLongError,
    OperationValidationError,
    StockOperationNotFoundError,
)
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.models.operation_type import StockOperationType
from stock_kernel.models.stock_operation import StockOperation, StockOperationStatus
from stock_kernel.selectors.stock_operation_selector import StockOperationSelector
from stock_kernel.services.base import BaseService
from stock_kernel.services.sequence_service import SequenceService

logger = get_logger("services.stock_operation")

DEFAULT_NUMBER_PREFIX = "SO-"


def _status_value(status) -> str:
    return getattr(status, "value", status)


def _reference_id(operation: StockOperation, name: str) -> UUID | None:
    """Id of a many-to-one reference set either as object or as foreign key."""
    related = getattr(operation, name)
    if related is not None:
        return related.id
    return getattr(operation, f"{name}_id")


class StockOperationService(BaseService[StockOperation]):
    """
    Lifecycle manager for stock operations.

    Contract:
        Callers build a draft StockOperation and pass it to
        ``submit_operation``.  Drafts are caller-owned until submission;
        afterwards they belong to the session.

    Non-goals:
        - Does NOT check whether the acting user may process the operation
          type.  Callers gate with ``domain.authorization.ensure_can_process``.
        - Does NOT post ledger transactions.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock,
        reference_tz: tzinfo = UTC,
        number_prefix: str = DEFAULT_NUMBER_PREFIX,
    ):
        super().__init__(session)
        self._clock = clock
        self._reference_tz = reference_tz
        self._number_prefix = number_prefix
        self._selector = StockOperationSelector(session, reference_tz)
        self._sequences = SequenceService(session)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _resolve_type(self, operation: StockOperation) -> StockOperationType | None:
        if operation.instance_type is not None:
            return operation.instance_type
        if operation.instance_type_id is None:
            return None
        return self.session.get(StockOperationType, operation.instance_type_id)

    def validate_operation(self, operation: StockOperation) -> None:
        """
        Structural checks run before every create and update.

        An empty operation number is accepted here; submit_operation
        generates one.

        Raises:
            InvalidArgumentError: operation is None.
            OperationNumberTooLongError: number exceeds 255 characters.
            OperationValidationError: any other structural problem.
        """
        self._validate(operation, operation.status if operation is not None else None)

    def _validate(self, operation: StockOperation, status) -> None:
        if operation is None:
            raise InvalidArgumentError("operation", "The operation must be defined.")

        number = operation.operation_number
        if number and len(number) > MAX_OPERATION_NUMBER_LENGTH:
            raise OperationNumberTooLongError(len(number), MAX_OPERATION_NUMBER_LENGTH)

        operation_type = self._resolve_type(operation)
        if operation_type is None:
            raise OperationValidationError("instance_type", "the operation type must be defined")

        if not status:
            raise OperationValidationError("status", "the operation status must be defined")

        if operation.operation_date is None:
            raise OperationValidationError("operation_date", "the operation date must be defined")

        source_id = _reference_id(operation, "source")
        destination_id = _reference_id(operation, "destination")
        if operation_type.has_source and source_id is None:
            raise OperationValidationError(
                "source", f"'{operation_type.name}' operations require a source stockroom"
            )
        if operation_type.has_destination and destination_id is None:
            raise OperationValidationError(
                "destination",
                f"'{operation_type.name}' operations require a destination stockroom",
            )
        if source_id is not None and source_id == destination_id:
            raise OperationValidationError(
                "destination", "source and destination must be different stockrooms"
            )

        for line_no, item in enumerate(operation.items or (), start=1):
            if item.item is None and item.item_id is None:
                raise OperationValidationError("items", f"item {line_no} has no inventory item")
            if item.quantity is None:
                raise OperationValidationError("items", f"item {line_no} has no quantity")

    def _ensure_number_available(self, operation: StockOperation) -> None:
        query = select(StockOperation.id).where(
            StockOperation.operation_number == operation.operation_number
        )
        if operation.id is not None:
            query = query.where(StockOperation.id != operation.id)
        if self.session.execute(query.limit(1)).first() is not None:
            raise OperationNumberAlreadyExistsError(operation.operation_number)

    # ------------------------------------------------------------------
    # Stamping
    # ------------------------------------------------------------------

    def _next_operation_number(self) -> str:
        value = self._sequences.next_value(SequenceService.STOCK_OPERATION)
        return f"{self._number_prefix}{value:06d}"

    def _next_operation_order(self, operation: StockOperation) -> int:
        last = self._selector.get_last_operation_by_date(operation.operation_day)
        return last.operation_order + 1 if last is not None else 0

    def _stamp_dates(self, operation: StockOperation) -> None:
        operation.operation_date = to_utc(operation.operation_date)
        operation.operation_day = calendar_day(operation.operation_date, self._reference_tz)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit_operation(self, operation: StockOperation, actor_id: UUID) -> StockOperationInfo:
        """
        Validate, stamp and persist a new stock operation.

        Preconditions:
            - ``operation`` is a transient draft.
            - The caller has verified that the acting user may process the
              operation's type.

        Postconditions:
            - status defaults to NEW; operation_number is set (generated
              when empty); operation_order is last-on-day + 1 when unset.
            - The operation is flushed within the caller's transaction.

        Returns:
            StockOperationInfo DTO of the stored operation.
        """
        if actor_id is None:
            raise InvalidArgumentError("actor_id", "The acting user must be defined.")

        with LogContext.bind(actor_id=str(actor_id)):
            with self.session.no_autoflush:
                # Nothing on the draft changes until every check has passed.
                status = None
                if operation is not None:
                    status = _status_value(operation.status or StockOperationStatus.NEW)
                self._validate(operation, status)
                if operation.operation_number:
                    self._ensure_number_available(operation)

                operation.status = status
                if not operation.operation_number:
                    operation.operation_number = self._next_operation_number()

                self._stamp_dates(operation)
                if operation.operation_order is None:
                    operation.operation_order = self._next_operation_order(operation)

                operation.created_by_id = actor_id
                operation.created_at = self._clock.now_utc()

            self.session.add(operation)
            self.session.flush()

            logger.info(
                "operation_submitted",
                extra={
                    "operation_id": str(operation.id),
                    "operation_number": operation.operation_number,
                    "instance_type_id": str(operation.instance_type_id),
                    "status": operation.status,
                    "operation_day": operation.operation_day,
                    "operation_order": operation.operation_order,
                    "item_count": len(operation.items),
                },
            )
        return self._selector.get_operation(operation.id)

    def update_operation(self, operation: StockOperation, actor_id: UUID) -> StockOperationInfo:
        """
        Re-validate and flush changes to a stored operation.

        Raises:
            StockOperationNotFoundError: the operation was never stored.
        """
        if operation is None:
            raise InvalidArgumentError("operation", "The operation must be defined.")
        if operation.id is None or self.session.get(StockOperation, operation.id) is None:
            raise StockOperationNotFoundError(str(operation.id))

        with self.session.no_autoflush:
            self.validate_operation(operation)
            if not operation.operation_number:
                raise OperationValidationError(
                    "operation_number", "a stored operation must keep its number"
                )
            self._ensure_number_available(operation)
            self._stamp_dates(operation)
            operation.updated_by_id = actor_id

        self.session.flush()
        logger.info(
            "operation_updated",
            extra={
                "operation_id": str(operation.id),
                "operation_number": operation.operation_number,
                "status": operation.status,
            },
        )
        return self._selector.get_operation(operation.id)

    def purge(self, operation_id: UUID | None) -> None:
        """
        Permanently delete an operation and its items.

        A None id is a no-op.

        Raises:
            StockOperationNotFoundError: no operation has this id.
            OperationHasTransactionsError: the operation has posted or
                reserved transactions.
        """
        if operation_id is None:
            return

        operation = self.session.get(StockOperation, operation_id)
        if operation is None:
            raise StockOperationNotFoundError(str(operation_id))

        transaction_count = self._selector.count_transactions(operation_id)
        reserved_count = self._selector.count_reserved_transactions(operation_id)
        if transaction_count or reserved_count:
            logger.warning(
                "operation_purge_blocked",
                extra={
                    "operation_id": str(operation_id),
                    "operation_number": operation.operation_number,
                    "transaction_count": transaction_count,
                    "reserved_count": reserved_count,
                },
            )
            raise OperationHasTransactionsError(
                str(operation_id),
                operation.operation_number,
                transaction_count,
                reserved_count,
            )

        self.session.delete(operation)
        self.session.flush()
        logger.info(
            "operation_purged",
            extra={
                "operation_id": str(operation_id),
                "operation_number": operation.operation_number,
            },
        )
