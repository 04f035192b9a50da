import pytest_asyncio

from tableflow.modules.menu.services.catalog_service import snapshot
from tableflow.modules.orders.services.cart_service import Cart
from tableflow.modules.orders.services.order_service import OrderService
from tableflow.modules.tables.services.table_service import TableService


@pytest_asyncio.fixture
async def order_service(db, feed):
    return OrderService(db, feed)


@pytest_asyncio.fixture
async def seated_tables(db, feed, tables, restaurant_id):
    """Tables 5 and 7 opened for two guests each."""
    service = TableService(db, feed)
    return {
        number: await service.open_table(
            restaurant_id, f"table-{number}", 2, "waiter-1", "Alex"
        )
        for number in (5, 7)
    }


@pytest_asyncio.fixture
async def place_order(order_service, seated_tables, menu_items, restaurant_id):
    """Submit ``[(menu_item_id, quantity, notes), ...]`` for a seated table."""

    async def _place(table_number, lines):
        cart = Cart(f"table-{table_number}")
        for menu_item_id, quantity, notes in lines:
            cart.add(snapshot(menu_items[menu_item_id]), quantity, notes)
        return await order_service.submit_cart(
            restaurant_id, seated_tables[table_number], "waiter-1", "Alex", cart
        )

    return _place
