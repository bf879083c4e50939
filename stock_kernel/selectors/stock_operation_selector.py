"""
Module: stock_kernel.selectors.stock_operation_selector
Responsibility: Filtered, sorted, paginated lookups over stock operations and
    their items.  Interprets the filter specifications of domain/filters.py
    into SQL and converts results to frozen DTOs.
Architecture position: Kernel > Selectors.  May import from models/, domain/
    and selectors/.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only: No mutations performed on any queried data.
    - Every date-scoped query uses domain.ordering.day_range with the
      selector's reference calendar, so day boundaries agree across queries.
    - Day ordering uses the stamped operation_day column rather than a
      storage-engine date function.
    - Bound instants are normalized to UTC.

Failure modes:
    - InvalidArgumentError when a required input is missing or out of bounds
      (raised by the filter constructors, before any query runs).
    - Returns None or an empty list when nothing matches (never raises on
      absence of data).
"""

from datetime import UTC, date, datetime, tzinfo
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from stock_kernel.domain.dtos import StockOperationInfo, StockOperationItemInfo
from stock_kernel.domain.filters import (
    ByNumber,
    ByOperation,
    BySearch,
    ByStockroom,
    ByUser,
    FutureOf,
    OnDate,
    OperationFilter,
    SinceDate,
)
from stock_kernel.domain.ordering import day_range, to_utc
from stock_kernel.domain.paging import PagingInfo
from stock_kernel.domain.search import DateComparison, StockOperationSearch, StringComparison
from stock_kernel.exceptions import InvalidArgumentError
from stock_kernel.models.stock_operation import (
    ReservedTransaction,
    StockOperation,
    StockOperationItem,
    StockOperationTransaction,
)
from stock_kernel.models.stockroom import Item
from stock_kernel.selectors.authorization_selector import AuthorizationSelector
from stock_kernel.selectors.base import BaseSelector

# Default sort: most recently created first
DEFAULT_SORT = (StockOperation.created_at.desc(),)


def _status_value(status) -> str:
    return getattr(status, "value", status)


class StockOperationSelector(BaseSelector[StockOperation]):
    """
    Selector for stock operation queries.

    Contract:
        All public query methods return StockOperationInfo /
        StockOperationItemInfo instances (or lists thereof).  List queries
        accept an optional PagingInfo; when its load_record_count flag is set,
        total_record_count is filled in before paging is applied.

    Non-goals:
        - This selector does NOT validate drafts or delete operations; see
          StockOperationService.
    """

    def __init__(self, session: Session, reference_tz: tzinfo = UTC):
        super().__init__(session)
        self.reference_tz = reference_tz
        self._authorization = AuthorizationSelector(session)

    # ------------------------------------------------------------------
    # DTO conversion
    # ------------------------------------------------------------------

    def _to_dto(self, operation: StockOperation) -> StockOperationInfo:
        """Convert ORM model to DTO."""
        return StockOperationInfo(
            id=operation.id,
            operation_number=operation.operation_number,
            instance_type_id=operation.instance_type_id,
            instance_type_name=operation.instance_type.name,
            status=operation.status,
            source_id=operation.source_id,
            destination_id=operation.destination_id,
            operation_date=to_utc(operation.operation_date),
            operation_day=operation.operation_day,
            operation_order=operation.operation_order,
            creator_id=operation.created_by_id,
            created_at=to_utc(operation.created_at),
        )

    def _to_item_dto(self, item: StockOperationItem) -> StockOperationItemInfo:
        return StockOperationItemInfo(
            id=item.id,
            operation_id=item.operation_id,
            item_id=item.item_id,
            item_name=item.item.name,
            quantity=item.quantity,
            expiration=item.expiration,
            calculated_expiration=item.calculated_expiration,
            calculated_batch=item.calculated_batch,
            batch_operation_id=item.batch_operation_id,
        )

    # ------------------------------------------------------------------
    # Filter interpretation
    # ------------------------------------------------------------------

    def _day_clause(self, day: date | datetime) -> ColumnElement[bool]:
        start, end = day_range(day, self.reference_tz)
        return StockOperation.operation_date.between(start, end)

    def _search_clauses(self, search: StockOperationSearch) -> list[ColumnElement[bool]]:
        template = search.template
        clauses: list[ColumnElement[bool]] = []

        if template.operation_number:
            column = StockOperation.operation_number
            comparison = search.operation_number_comparison
            if comparison == StringComparison.LIKE:
                clauses.append(column.ilike(f"{template.operation_number}%"))
            elif comparison == StringComparison.NOT_EQUAL:
                clauses.append(column != template.operation_number)
            else:
                clauses.append(column == template.operation_number)
        if template.status is not None:
            clauses.append(StockOperation.status == _status_value(template.status))
        if template.instance_type_id is not None:
            clauses.append(StockOperation.instance_type_id == template.instance_type_id)
        if template.source_id is not None:
            clauses.append(StockOperation.source_id == template.source_id)
        if template.destination_id is not None:
            clauses.append(StockOperation.destination_id == template.destination_id)
        if template.stockroom_id is not None:
            clauses.append(
                or_(
                    StockOperation.source_id == template.stockroom_id,
                    StockOperation.destination_id == template.stockroom_id,
                )
            )
        if template.creator_id is not None:
            clauses.append(StockOperation.created_by_id == template.creator_id)

        if search.date_created is not None:
            created = to_utc(search.date_created)
            if search.date_created_comparison == DateComparison.BEFORE:
                clauses.append(StockOperation.created_at < created)
            else:
                clauses.append(StockOperation.created_at >= created)

        return clauses

    def _where(self, criteria: OperationFilter) -> list[ColumnElement[bool]]:
        """Translate a filter specification into WHERE clauses."""
        if isinstance(criteria, ByNumber):
            return [StockOperation.operation_number == criteria.number]

        if isinstance(criteria, ByStockroom):
            return [
                or_(
                    StockOperation.source_id == criteria.stockroom_id,
                    StockOperation.destination_id == criteria.stockroom_id,
                )
            ]

        if isinstance(criteria, ByUser):
            scope = self._authorization.approvable_types_subquery(
                criteria.user_id, criteria.role_ids
            )
            visible = or_(
                # Operations created by the user
                StockOperation.created_by_id == criteria.user_id,
                StockOperation.instance_type_id.in_(scope),
            )
            if criteria.status is not None:
                return [and_(StockOperation.status == _status_value(criteria.status), visible)]
            return [visible]

        if isinstance(criteria, BySearch):
            return self._search_clauses(criteria.search)

        if isinstance(criteria, SinceDate):
            return [StockOperation.operation_date > to_utc(criteria.instant)]

        if isinstance(criteria, FutureOf):
            _, day_end = day_range(criteria.operation_date, self.reference_tz)
            return [
                or_(
                    and_(
                        self._day_clause(criteria.operation_date),
                        StockOperation.operation_order > criteria.operation_order,
                    ),
                    StockOperation.operation_date > day_end,
                )
            ]

        if isinstance(criteria, OnDate):
            return [self._day_clause(criteria.day)]

        raise TypeError(f"Unsupported stock operation filter: {type(criteria).__name__}")

    def _execute(
        self,
        criteria: OperationFilter | None,
        paging: PagingInfo | None,
        order_by=DEFAULT_SORT,
        max_results: int | None = None,
    ) -> list[StockOperationInfo]:
        clauses = self._where(criteria) if criteria is not None else []

        if paging is not None and paging.load_record_count:
            paging.total_record_count = self.session.execute(
                select(func.count()).select_from(StockOperation).where(*clauses)
            ).scalar_one()

        query = select(StockOperation).where(*clauses).order_by(*order_by)
        offset = paging.offset if paging is not None else 0
        limit = paging.limit if paging is not None else None
        if max_results is not None and max_results > 0:
            # Pages are cut from within the first max_results rows.
            remaining = max_results - offset
            if remaining <= 0:
                return []
            limit = remaining if limit is None else min(limit, remaining)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        operations = self.session.execute(query).unique().scalars().all()
        return [self._to_dto(op) for op in operations]

    # ------------------------------------------------------------------
    # Single-operation lookups
    # ------------------------------------------------------------------

    def get_operation(self, operation_id: UUID) -> StockOperationInfo | None:
        """Get an operation by id, or None."""
        operation = self.session.get(StockOperation, operation_id)
        return self._to_dto(operation) if operation else None

    def get_operation_by_number(self, number: str) -> StockOperationInfo | None:
        """
        Get the operation with the given number.

        Raises:
            InvalidArgumentError: number is empty.
            OperationNumberTooLongError: number exceeds 255 characters.
        """
        criteria = ByNumber(number)
        operation = self.session.execute(
            select(StockOperation).where(*self._where(criteria))
        ).unique().scalar_one_or_none()
        return self._to_dto(operation) if operation else None

    # ------------------------------------------------------------------
    # List queries
    # ------------------------------------------------------------------

    def list_operations(self, paging: PagingInfo | None = None) -> list[StockOperationInfo]:
        """All operations, most recently created first."""
        return self._execute(None, paging)

    def find(
        self,
        criteria: OperationFilter,
        paging: PagingInfo | None = None,
    ) -> list[StockOperationInfo]:
        """
        Run any operation filter with the default sort.

        Raises:
            InvalidArgumentError: criteria is ByOperation, which selects item
                rows; use get_items_by_operation for those.
        """
        if isinstance(criteria, ByOperation):
            raise InvalidArgumentError(
                "criteria", "ByOperation selects item rows, not operations."
            )
        return self._execute(criteria, paging)

    def get_operations_by_room(
        self,
        stockroom_id: UUID,
        paging: PagingInfo | None = None,
    ) -> list[StockOperationInfo]:
        """Operations with the stockroom as source or destination."""
        return self._execute(ByStockroom(stockroom_id), paging)

    def get_items_by_operation(
        self,
        operation_id: UUID,
        paging: PagingInfo | None = None,
    ) -> list[StockOperationItemInfo]:
        """Item rows of an operation, sorted by item name."""
        criteria = ByOperation(operation_id)
        clause = StockOperationItem.operation_id == criteria.operation_id

        if paging is not None and paging.load_record_count:
            paging.total_record_count = self.session.execute(
                select(func.count()).select_from(StockOperationItem).where(clause)
            ).scalar_one()

        query = (
            select(StockOperationItem)
            .join(Item, StockOperationItem.item_id == Item.id)
            .where(clause)
            .order_by(Item.name.asc(), StockOperationItem.id)
        )
        if paging is not None and paging.limit:
            query = query.offset(paging.offset).limit(paging.limit)

        items = self.session.execute(query).unique().scalars().all()
        return [self._to_item_dto(item) for item in items]

    def get_user_operations(
        self,
        user,
        status=None,
        paging: PagingInfo | None = None,
    ) -> list[StockOperationInfo]:
        """
        Operations the user created or may approve, optionally by status.

        Raises:
            InvalidArgumentError: user is None.
        """
        return self._execute(ByUser.for_user(user, status), paging)

    def get_operations(
        self,
        search: StockOperationSearch,
        paging: PagingInfo | None = None,
    ) -> list[StockOperationInfo]:
        """
        Operations matching a search template.

        Raises:
            InvalidArgumentError: search or its template is None.
        """
        return self._execute(BySearch(search), paging)

    def get_operations_since(
        self,
        operation_date: datetime,
        paging: PagingInfo | None = None,
    ) -> list[StockOperationInfo]:
        """Operations strictly after an instant, oldest first."""
        return self._execute(
            SinceDate(operation_date),
            paging,
            order_by=(StockOperation.operation_date.asc(),),
        )

    def get_future_operations(
        self,
        operation,
        paging: PagingInfo | None = None,
    ) -> list[StockOperationInfo]:
        """
        Operations later than ``operation`` in the total order.

        Args:
            operation: Any object with operation_date and operation_order
                (a StockOperationInfo or a StockOperation).
        """
        return self._execute(
            FutureOf.of(operation),
            paging,
            order_by=(
                StockOperation.operation_day.asc(),
                StockOperation.operation_order.asc(),
                StockOperation.operation_date.asc(),
            ),
        )

    def get_operations_by_date(
        self,
        day: date | datetime,
        paging: PagingInfo | None = None,
        max_results: int | None = None,
        order_by=None,
    ) -> list[StockOperationInfo]:
        """Operations within a whole calendar day."""
        return self._execute(
            OnDate(day),
            paging,
            order_by=order_by or (
                StockOperation.operation_order.asc(),
                StockOperation.operation_date.asc(),
            ),
            max_results=max_results,
        )

    def get_last_operation_by_date(self, day: date | datetime) -> StockOperationInfo | None:
        """The latest operation on a day, or None."""
        results = self.get_operations_by_date(
            day,
            max_results=1,
            order_by=(
                StockOperation.operation_order.desc(),
                StockOperation.created_at.desc(),
            ),
        )
        return results[0] if results else None

    def get_first_operation_by_date(self, day: date | datetime) -> StockOperationInfo | None:
        """The earliest operation on a day, or None."""
        results = self.get_operations_by_date(
            day,
            max_results=1,
            order_by=(
                StockOperation.operation_order.asc(),
                StockOperation.created_at.asc(),
            ),
        )
        return results[0] if results else None

    # ------------------------------------------------------------------
    # Ledger associations
    # ------------------------------------------------------------------

    def count_transactions(self, operation_id: UUID) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(StockOperationTransaction)
            .where(StockOperationTransaction.operation_id == operation_id)
        ).scalar_one()

    def count_reserved_transactions(self, operation_id: UUID) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(ReservedTransaction)
            .where(ReservedTransaction.operation_id == operation_id)
        ).scalar_one()

    def has_reserved_transactions(self, operation_id: UUID) -> bool:
        return self.count_reserved_transactions(operation_id) > 0

    def has_transactions(self, operation_id: UUID) -> bool:
        """True if any posted or reserved transaction references the operation."""
        return (
            self.count_transactions(operation_id) > 0
            or self.count_reserved_transactions(operation_id) > 0
        )
