"""
Tests for StockOperationSelector.

Covers:
- Lookup by number, including the 255-character bound
- Stockroom, item, user-scope, search and since-date queries
- Future operations under the day/order total order
- Whole-day queries and first/last operation on a date
- Paging with record counts
"""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from stock_kernel.domain.dtos import StockOperationInfo
from stock_kernel.domain.filters import ByOperation, ByStockroom, OnDate
from stock_kernel.domain.paging import PagingInfo
from stock_kernel.domain.search import (
    DateComparison,
    StockOperationSearch,
    StockOperationTemplate,
    StringComparison,
)
from stock_kernel.exceptions import InvalidArgumentError, OperationNumberTooLongError
from stock_kernel.models import StockOperationStatus
from stock_kernel.selectors.stock_operation_selector import StockOperationSelector

DAY = datetime(2024, 3, 10, 9, 0, tzinfo=UTC)


def _numbers(results: list[StockOperationInfo]) -> list[str]:
    return [op.operation_number for op in results]


class TestGetOperationByNumber:

    def test_found(self, selector, operation_factory):
        operation = operation_factory(operation_number="RCPT-1")

        found = selector.get_operation_by_number("RCPT-1")

        assert found is not None
        assert found.id == operation.id
        assert found.instance_type_name == "Receipt"
        assert found.is_new

    def test_absent_returns_none(self, selector, operation_factory):
        operation_factory(operation_number="RCPT-1")
        assert selector.get_operation_by_number("RCPT-2") is None

    def test_255_character_number_is_a_valid_lookup(self, selector, operation_factory):
        number = "N" * 255
        operation_factory(operation_number=number)
        assert selector.get_operation_by_number(number).operation_number == number

    def test_256_character_number_rejected(self, selector):
        with pytest.raises(OperationNumberTooLongError):
            selector.get_operation_by_number("N" * 256)

    @pytest.mark.parametrize("number", [None, ""])
    def test_missing_number_rejected(self, selector, number):
        with pytest.raises(InvalidArgumentError):
            selector.get_operation_by_number(number)

    def test_dto_dates_are_utc(self, selector, operation_factory):
        operation_factory(operation_number="RCPT-1", operation_date=DAY)
        found = selector.get_operation_by_number("RCPT-1")
        assert found.operation_date == DAY
        assert found.operation_date.tzinfo is not None
        assert found.operation_day == date(2024, 3, 10)


class TestGetOperationsByRoom:

    def test_source_or_destination(
        self, selector, operation_factory, stockroom_factory, operation_type_factory
    ):
        room = stockroom_factory("Ward A")
        other = stockroom_factory("Ward B")
        transfer = operation_type_factory("Transfer", has_source=True, has_destination=True)

        inbound = operation_factory(destination=room)
        outbound = operation_factory(operation_type=transfer, source=room, destination=other)
        operation_factory(destination=other)

        results = selector.get_operations_by_room(room.id)

        assert {op.id for op in results} == {inbound.id, outbound.id}

    def test_sorted_newest_first(self, selector, operation_factory, main_room):
        older = operation_factory(created_at=DAY)
        newer = operation_factory(created_at=DAY + timedelta(hours=1))

        results = selector.get_operations_by_room(main_room.id)

        assert [op.id for op in results] == [newer.id, older.id]

    def test_unset_stockroom_rejected(self, selector):
        with pytest.raises(InvalidArgumentError):
            selector.get_operations_by_room(None)

    def test_paging_with_record_count(self, selector, operation_factory, main_room):
        for minutes in range(5):
            operation_factory(created_at=DAY + timedelta(minutes=minutes))
        paging = PagingInfo(page=2, page_size=2, load_record_count=True)

        results = selector.get_operations_by_room(main_room.id, paging)

        assert paging.total_record_count == 5
        assert len(results) == 2

    def test_find_with_filter_value(self, selector, operation_factory, main_room):
        operation = operation_factory()
        assert [op.id for op in selector.find(ByStockroom(main_room.id))] == [operation.id]

    def test_find_rejects_item_filter(self, selector, operation_factory):
        operation = operation_factory()
        with pytest.raises(InvalidArgumentError) as exc_info:
            selector.find(ByOperation(operation.id))
        assert exc_info.value.argument == "criteria"


class TestGetItemsByOperation:

    def test_sorted_by_item_name(
        self, selector, operation_factory, item_factory, add_operation_item
    ):
        operation = operation_factory()
        add_operation_item(operation, item_factory("Zinc tablets"), 3)
        add_operation_item(operation, item_factory("Amoxicillin"), 10)
        add_operation_item(operation, item_factory("Gauze"), 1)

        items = selector.get_items_by_operation(operation.id)

        assert [i.item_name for i in items] == ["Amoxicillin", "Gauze", "Zinc tablets"]
        assert items[0].quantity == 10
        assert all(i.operation_id == operation.id for i in items)

    def test_only_items_of_the_operation(
        self, selector, operation_factory, item_factory, add_operation_item
    ):
        operation = operation_factory()
        other = operation_factory()
        add_operation_item(operation, item_factory("Gauze"))
        add_operation_item(other, item_factory("Bandage"))

        paging = PagingInfo(load_record_count=True)
        items = selector.get_items_by_operation(operation.id, paging)

        assert [i.item_name for i in items] == ["Gauze"]
        assert paging.total_record_count == 1

    def test_unset_operation_rejected(self, selector):
        with pytest.raises(InvalidArgumentError):
            selector.get_items_by_operation(None)


class TestGetUserOperations:
    """Operations the user created or may approve."""

    @pytest.fixture
    def scenario(self, user_factory, role_factory, operation_type_factory, operation_factory):
        supervisor = role_factory("supervisor")
        clerk = role_factory("clerk", parents=[supervisor])
        user = user_factory("nurse", roles=[clerk])
        stranger = user_factory("stranger")

        by_user = operation_type_factory("Direct", has_destination=True, user=user)
        by_parent_role = operation_type_factory(
            "Inherited", has_destination=True, role=supervisor
        )
        unrelated = operation_type_factory("Unrelated", has_destination=True)

        ops = {
            "created_new": operation_factory(creator_id=user.id, operation_type=unrelated),
            "created_done": operation_factory(
                creator_id=user.id,
                operation_type=unrelated,
                status=StockOperationStatus.COMPLETED.value,
            ),
            "approvable_user": operation_factory(creator_id=stranger.id, operation_type=by_user),
            "approvable_role": operation_factory(
                creator_id=stranger.id,
                operation_type=by_parent_role,
                status=StockOperationStatus.PENDING.value,
            ),
            "invisible": operation_factory(creator_id=stranger.id, operation_type=unrelated),
        }
        return user, ops

    def test_created_or_approvable(self, selector, scenario):
        user, ops = scenario

        results = selector.get_user_operations(user)

        expected = {"created_new", "created_done", "approvable_user", "approvable_role"}
        assert {op.id for op in results} == {ops[k].id for k in expected}

    def test_status_filter(self, selector, scenario):
        user, ops = scenario

        results = selector.get_user_operations(user, StockOperationStatus.NEW)

        assert {op.id for op in results} == {ops["created_new"].id, ops["approvable_user"].id}
        assert all(op.status == "NEW" for op in results)

    @pytest.mark.parametrize("status", ["NEW", "PENDING", "COMPLETED", "CANCELLED"])
    def test_status_results_are_subset_of_unfiltered(self, selector, scenario, status):
        user, _ = scenario

        everything = {op.id for op in selector.get_user_operations(user)}
        filtered = selector.get_user_operations(user, status)

        assert {op.id for op in filtered} <= everything
        assert all(op.status == status for op in filtered)

    def test_user_without_roles_sees_own_and_directly_assigned(
        self, selector, user_factory, operation_type_factory, operation_factory, role_factory
    ):
        user = user_factory("solo")
        direct = operation_type_factory("Solo", has_destination=True, user=user)
        role_only = operation_type_factory(
            "RoleOnly", has_destination=True, role=role_factory("other")
        )
        mine = operation_factory(operation_type=direct)
        operation_factory(operation_type=role_only)

        assert [op.id for op in selector.get_user_operations(user)] == [mine.id]

    def test_unset_user_rejected(self, selector):
        with pytest.raises(InvalidArgumentError):
            selector.get_user_operations(None)


class TestGetOperationsBySearch:

    def test_number_prefix_match(self, selector, operation_factory):
        operation_factory(operation_number="RCPT-001")
        operation_factory(operation_number="RCPT-002")
        operation_factory(operation_number="ADJ-001")
        search = StockOperationSearch(
            template=StockOperationTemplate(operation_number="rcpt-"),
            operation_number_comparison=StringComparison.LIKE,
        )

        assert sorted(_numbers(selector.get_operations(search))) == ["RCPT-001", "RCPT-002"]

    def test_number_not_equal(self, selector, operation_factory):
        operation_factory(operation_number="A")
        operation_factory(operation_number="B")
        search = StockOperationSearch(
            template=StockOperationTemplate(operation_number="A"),
            operation_number_comparison=StringComparison.NOT_EQUAL,
        )

        assert _numbers(selector.get_operations(search)) == ["B"]

    def test_status_and_stockroom(self, selector, operation_factory, stockroom_factory):
        room = stockroom_factory("Ward C")
        match = operation_factory(destination=room, status="PENDING")
        operation_factory(destination=room, status="NEW")
        operation_factory(status="PENDING")
        search = StockOperationSearch(
            template=StockOperationTemplate(status="PENDING", stockroom_id=room.id)
        )

        assert [op.id for op in selector.get_operations(search)] == [match.id]

    def test_date_created_comparisons(self, selector, operation_factory):
        old = operation_factory(created_at=DAY)
        new = operation_factory(created_at=DAY + timedelta(days=1))
        cutoff = DAY + timedelta(hours=12)

        before = StockOperationSearch(
            template=StockOperationTemplate(),
            date_created=cutoff,
            date_created_comparison=DateComparison.BEFORE,
        )
        after = StockOperationSearch(template=StockOperationTemplate(), date_created=cutoff)

        assert [op.id for op in selector.get_operations(before)] == [old.id]
        assert [op.id for op in selector.get_operations(after)] == [new.id]

    def test_empty_template_matches_everything(self, selector, operation_factory):
        operation_factory()
        operation_factory()
        search = StockOperationSearch(template=StockOperationTemplate())
        assert len(selector.get_operations(search)) == 2

    @pytest.mark.parametrize("search", [None, StockOperationSearch(template=None)])
    def test_unset_search_rejected(self, selector, search):
        with pytest.raises(InvalidArgumentError):
            selector.get_operations(search)


class TestGetOperationsSince:

    def test_strictly_after_oldest_first(self, selector, operation_factory):
        at = operation_factory(operation_date=DAY)
        later = operation_factory(operation_date=DAY + timedelta(hours=2))
        soon = operation_factory(operation_date=DAY + timedelta(hours=1))

        results = selector.get_operations_since(at.operation_date)

        assert [op.id for op in results] == [soon.id, later.id]

    def test_unset_instant_rejected(self, selector):
        with pytest.raises(InvalidArgumentError):
            selector.get_operations_since(None)


class TestGetFutureOperations:

    def test_same_date_greater_order(self, selector, operation_factory):
        a = operation_factory(operation_date=DAY, operation_order=0)
        b = operation_factory(operation_date=DAY, operation_order=1)

        assert b.id in {op.id for op in selector.get_future_operations(a)}
        assert a.id not in {op.id for op in selector.get_future_operations(b)}

    def test_equal_order_same_day_excluded(self, selector, operation_factory):
        a = operation_factory(operation_date=DAY, operation_order=1)
        operation_factory(operation_date=DAY + timedelta(hours=3), operation_order=1)

        assert selector.get_future_operations(a) == []

    def test_later_day_included_regardless_of_order(self, selector, operation_factory):
        a = operation_factory(operation_date=DAY, operation_order=5)
        next_day = operation_factory(operation_date=DAY + timedelta(days=1), operation_order=0)
        earlier_day = operation_factory(operation_date=DAY - timedelta(days=1), operation_order=9)

        ids = {op.id for op in selector.get_future_operations(a)}

        assert next_day.id in ids
        assert earlier_day.id not in ids

    def test_sorted_by_day_then_order(self, selector, operation_factory):
        ref = operation_factory(operation_date=DAY, operation_order=0)
        day2_order0 = operation_factory(operation_date=DAY + timedelta(days=1), operation_order=0)
        day1_order2 = operation_factory(operation_date=DAY - timedelta(hours=8), operation_order=2)
        day1_order1 = operation_factory(operation_date=DAY + timedelta(hours=8), operation_order=1)

        results = selector.get_future_operations(ref)

        assert [op.id for op in results] == [day1_order1.id, day1_order2.id, day2_order0.id]

    def test_accepts_dto_reference(self, selector, operation_factory):
        a = operation_factory(operation_date=DAY, operation_order=0)
        b = operation_factory(operation_date=DAY, operation_order=1)
        reference = selector.get_operation(a.id)

        assert [op.id for op in selector.get_future_operations(reference)] == [b.id]

    def test_unset_reference_rejected(self, selector):
        with pytest.raises(InvalidArgumentError):
            selector.get_future_operations(None)

    def test_reference_calendar_defines_the_day(self, session, operation_factory):
        """23:00 UTC on the 10th is still the 10th in New York, 18:00 local."""
        selector = StockOperationSelector(session, ZoneInfo("America/New_York"))
        ref = operation_factory(operation_date=datetime(2024, 1, 10, 15, tzinfo=UTC))
        same_local_day = operation_factory(
            operation_date=datetime(2024, 1, 10, 23, tzinfo=UTC), operation_order=1
        )
        next_local_day = operation_factory(
            operation_date=datetime(2024, 1, 11, 6, tzinfo=UTC), operation_order=0
        )

        ids = [op.id for op in selector.get_future_operations(ref)]

        assert set(ids) == {same_local_day.id, next_local_day.id}


class TestOperationsByDate:

    def test_day_boundary(self, selector, operation_factory):
        boundary = operation_factory(
            operation_date=datetime(2024, 3, 10, 23, 59, 59, 999000, tzinfo=UTC)
        )

        on_day = selector.get_operations_by_date(date(2024, 3, 10))
        next_day = selector.get_operations_by_date(date(2024, 3, 11))

        assert boundary.id in {op.id for op in on_day}
        assert boundary.id not in {op.id for op in next_day}

    def test_start_of_day_included(self, selector, operation_factory):
        midnight = operation_factory(operation_date=datetime(2024, 3, 11, tzinfo=UTC))
        assert [op.id for op in selector.get_operations_by_date(date(2024, 3, 11))] == [midnight.id]
        assert selector.get_operations_by_date(date(2024, 3, 10)) == []

    def test_sorted_by_order_then_date(self, selector, operation_factory):
        second = operation_factory(operation_date=DAY, operation_order=1)
        first_late = operation_factory(operation_date=DAY + timedelta(hours=2), operation_order=0)
        first_early = operation_factory(operation_date=DAY + timedelta(hours=1), operation_order=0)

        results = selector.get_operations_by_date(DAY)

        assert [op.id for op in results] == [first_early.id, first_late.id, second.id]

    def test_max_results(self, selector, operation_factory):
        for order in range(4):
            operation_factory(operation_date=DAY, operation_order=order)

        results = selector.get_operations_by_date(DAY, max_results=2)

        assert [op.operation_order for op in results] == [0, 1]

    def test_max_results_with_paging(self, selector, operation_factory):
        for order in range(5):
            operation_factory(operation_date=DAY, operation_order=order)

        def page(number):
            results = selector.get_operations_by_date(
                DAY, paging=PagingInfo(page=number, page_size=2), max_results=3
            )
            return [op.operation_order for op in results]

        assert page(1) == [0, 1]
        assert page(2) == [2]
        assert page(3) == []

    def test_unset_day_rejected(self, selector):
        with pytest.raises(InvalidArgumentError):
            selector.find(OnDate(None))


class TestFirstAndLastByDate:

    def test_single_operation_is_both(self, selector, operation_factory):
        only = operation_factory(operation_date=DAY)

        first = selector.get_first_operation_by_date(date(2024, 3, 10))
        last = selector.get_last_operation_by_date(date(2024, 3, 10))

        assert first.id == last.id == only.id

    def test_absent_day_returns_none(self, selector, operation_factory):
        operation_factory(operation_date=DAY)

        assert selector.get_first_operation_by_date(date(2024, 3, 11)) is None
        assert selector.get_last_operation_by_date(date(2024, 3, 11)) is None

    def test_order_then_created_at(self, selector, operation_factory):
        low = operation_factory(operation_date=DAY, operation_order=0, created_at=DAY)
        high_old = operation_factory(operation_date=DAY, operation_order=2, created_at=DAY)
        high_new = operation_factory(
            operation_date=DAY, operation_order=2, created_at=DAY + timedelta(seconds=5)
        )

        assert selector.get_first_operation_by_date(DAY).id == low.id
        assert selector.get_last_operation_by_date(DAY).id == high_new.id
        assert high_old.id not in {
            selector.get_first_operation_by_date(DAY).id,
            selector.get_last_operation_by_date(DAY).id,
        }


class TestLedgerAssociations:

    def test_counts(self, selector, operation_factory, add_transaction):
        operation = operation_factory()
        assert not selector.has_transactions(operation.id)

        add_transaction(operation)
        add_transaction(operation, reserved=True)
        add_transaction(operation, reserved=True)

        assert selector.count_transactions(operation.id) == 1
        assert selector.count_reserved_transactions(operation.id) == 2
        assert selector.has_reserved_transactions(operation.id)
        assert selector.has_transactions(operation.id)


class TestListOperations:

    def test_newest_first(self, selector, operation_factory):
        a = operation_factory(created_at=DAY)
        b = operation_factory(created_at=DAY + timedelta(minutes=1))
        c = operation_factory(created_at=DAY + timedelta(minutes=2))

        assert [op.id for op in selector.list_operations()] == [c.id, b.id, a.id]
