# tableflow/modules/tables/tests/test_table_service.py

"""
Tests for table persistence, the close gate and table count changes.
"""

import pytest

from tableflow.core.exceptions import (
    ConcurrentWriteConflictError,
    InvalidStateError,
    TableHasActiveOrdersError,
)
from tableflow.modules.menu.services.catalog_service import snapshot
from tableflow.modules.orders.services.cart_service import Cart
from tableflow.modules.orders.services.order_service import OrderService
from tableflow.modules.tables.models.table_models import TableStatus
from tableflow.modules.tables.services.table_lifecycle import open_table
from tableflow.modules.tables.services.table_service import TableService
from tableflow.modules.tables.services.table_store import TableStore


@pytest.fixture
def table_service(db, feed):
    return TableService(db, feed)


async def _order_for(db, feed, restaurant_id, table, menu_items, *menu_item_ids):
    cart = Cart(table.id)
    for menu_item_id in menu_item_ids:
        cart.add(snapshot(menu_items[menu_item_id]))
    return await OrderService(db, feed).submit_cart(
        restaurant_id, table, table.waiter_id, table.waiter, cart
    )


class TestInitializeTables:
    @pytest.mark.asyncio
    async def test_numbers_tables_from_one(self, tables):
        assert [table.number for table in tables] == list(range(1, 11))
        assert all(table.status == TableStatus.EMPTY for table in tables)

    @pytest.mark.asyncio
    async def test_existing_tables_are_kept(self, table_service, tables, restaurant_id):
        again = await table_service.initialize_tables(restaurant_id, 15)

        assert len(again) == 10


class TestOpenAndClose:
    @pytest.mark.asyncio
    async def test_table_three_scenario(
        self, db, feed, table_service, tables, menu_items, restaurant_id
    ):
        """Open, refuse a second open, refuse close until the order completes"""
        table = await table_service.open_table(restaurant_id, "table-3", 4, "waiter-1", "Alex")
        assert table.status == TableStatus.OCCUPIED
        assert table.guest_count == 4

        with pytest.raises(InvalidStateError):
            await table_service.open_table(restaurant_id, "table-3", 2, "waiter-1")

        order = await _order_for(db, feed, restaurant_id, table, menu_items, "soup")

        with pytest.raises(TableHasActiveOrdersError):
            await table_service.close_table(restaurant_id, "table-3")
        assert (await OrderService(db, feed).get_order(restaurant_id, order.id)).is_active

        await OrderService(db, feed).complete_order(restaurant_id, order.id)
        closed = await table_service.close_table(restaurant_id, "table-3")

        assert closed.status == TableStatus.EMPTY
        assert closed.guest_count == 0

    @pytest.mark.asyncio
    async def test_default_waiter_name(self, table_service, tables, restaurant_id):
        table = await table_service.open_table(restaurant_id, "table-1", 2, "waiter-9")

        assert table.waiter == "Waiter"

    @pytest.mark.asyncio
    async def test_waiter_tables(self, table_service, tables, restaurant_id):
        await table_service.open_table(restaurant_id, "table-1", 2, "waiter-1", "Alex")
        await table_service.open_table(restaurant_id, "table-2", 2, "waiter-2", "Sam")

        mine = await table_service.tables_for_waiter(restaurant_id, "waiter-1")

        assert [table.number for table in mine] == [1]


class TestTableStore:
    @pytest.mark.asyncio
    async def test_store_enforces_close_gate(
        self, db, feed, table_service, tables, menu_items, restaurant_id
    ):
        """A direct write cannot empty a table that still has an active order"""
        table = await table_service.open_table(restaurant_id, "table-2", 2, "waiter-1", "Alex")
        await _order_for(db, feed, restaurant_id, table, menu_items, "cola")
        emptied = table.model_copy(
            update={
                "status": TableStatus.EMPTY,
                "guest_count": 0,
                "waiter": None,
                "waiter_id": None,
                "opened_at": None,
            }
        )

        with pytest.raises(TableHasActiveOrdersError):
            await TableStore(db, feed).update_table(emptied, expected_version=table.version)

    @pytest.mark.asyncio
    async def test_stale_table_write(self, db, feed, tables):
        store = TableStore(db, feed)
        table = tables[0]

        await store.update_table(open_table(table, 2, "w1", "Alex"), table.version)
        with pytest.raises(ConcurrentWriteConflictError):
            await store.update_table(open_table(table, 3, "w2", "Sam"), table.version)

        stored = await store.get_table(table.restaurant_id, table.id)
        assert stored.guest_count == 2

    @pytest.mark.asyncio
    async def test_subscribers_receive_table_snapshots(
        self, db, feed, table_service, tables, restaurant_id
    ):
        received = []
        await TableStore(db, feed).subscribe_tables(restaurant_id, received.append)

        await table_service.open_table(restaurant_id, "table-4", 3, "waiter-1", "Alex")

        assert len(received) == 2
        assert received[-1][3].status == TableStatus.OCCUPIED


class TestTableCount:
    @pytest.mark.asyncio
    async def test_grow(self, table_service, tables, restaurant_id):
        result = await table_service.update_table_count(restaurant_id, 12)

        assert result.created == [11, 12]
        assert len(await table_service.list_tables(restaurant_id)) == 12

    @pytest.mark.asyncio
    async def test_shrink_keeps_occupied_tables(self, table_service, tables, restaurant_id):
        await table_service.open_table(restaurant_id, "table-5", 2, "waiter-1", "Alex")

        result = await table_service.update_table_count(restaurant_id, 3)

        assert result.removed == [4, 6, 7, 8, 9, 10]
        assert result.kept_occupied == [5]
        remaining = await table_service.list_tables(restaurant_id)
        assert [table.number for table in remaining] == [1, 2, 3, 5]


class TestViews:
    @pytest.mark.asyncio
    async def test_priorities_and_overview(
        self, db, feed, table_service, tables, menu_items, restaurant_id
    ):
        table = await table_service.open_table(restaurant_id, "table-2", 2, "waiter-1", "Alex")
        order = await _order_for(db, feed, restaurant_id, table, menu_items, "soup", "cola")
        await OrderService(db, feed).mark_item_ready(restaurant_id, order.id, order.items[1].id)

        priorities = await table_service.priorities(restaurant_id)
        overview = await table_service.overview(restaurant_id)

        assert [(p.table_number, p.rank, p.ready_item_count) for p in priorities] == [(2, 1, 1)]
        row = next(row for row in overview if row.table.number == 2)
        assert row.active_order_count == 1
        assert row.item_count == 2
        assert row.ready_item_count == 1
        assert row.rank == 1
