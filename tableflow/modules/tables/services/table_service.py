# tableflow/modules/tables/services/table_service.py

"""
Waiter-facing table operations: seating guests, closing tables and the
overview and priority views derived from the current snapshot.
"""

from sqlalchemy.orm import Session
from typing import Iterable, List, Optional
import logging

from ..schemas.table_schemas import Table, TableCountResponse, TableOverviewResponse
from . import table_lifecycle
from .table_priority import TablePriority, rank_tables
from .table_store import TableStore
from ...orders.schemas.order_schemas import Order
from ...orders.services.order_store import OrderStore
from ....core.change_feed import ChangeFeed, change_feed
from ....core.config import settings
from ....core.exceptions import APIError

logger = logging.getLogger(__name__)


def table_overview(
    tables: Iterable[Table], orders: Iterable[Order]
) -> List[TableOverviewResponse]:
    """Per-table counts of active orders, items and ready items, with rank"""
    tables = list(tables)
    orders = list(orders)
    ranks = {priority.table_id: priority.rank for priority in rank_tables(tables, orders)}

    overview = []
    for table in tables:
        table_orders = table_lifecycle.active_orders_for(table, orders)
        items = [item for order in table_orders for item in order.items]
        overview.append(
            TableOverviewResponse(
                table=table,
                active_order_count=len(table_orders),
                item_count=len(items),
                ready_item_count=sum(item.quantity for item in items if item.is_ready),
                rank=ranks.get(table.id),
            )
        )
    return overview


class TableService:
    """Service for table occupancy"""

    def __init__(self, db: Session, feed: ChangeFeed = change_feed):
        self.db = db
        self.store = TableStore(db, feed)
        self.order_store = OrderStore(db, feed)

    async def initialize_tables(
        self, restaurant_id: str, count: Optional[int] = None
    ) -> List[Table]:
        return await self.store.initialize_tables(
            restaurant_id, count or settings.default_table_count
        )

    async def list_tables(self, restaurant_id: str) -> List[Table]:
        return await self.store.list_tables(restaurant_id)

    async def get_table(self, restaurant_id: str, table_id: str) -> Table:
        return await self.store.get_table(restaurant_id, table_id)

    async def update_table_count(
        self, restaurant_id: str, new_count: int
    ) -> TableCountResponse:
        return await self.store.update_table_count(restaurant_id, new_count)

    async def open_table(
        self,
        restaurant_id: str,
        table_id: str,
        guest_count: int,
        waiter_id: str,
        waiter: Optional[str] = None,
    ) -> Table:
        table = await self.store.get_table(restaurant_id, table_id)
        opened = table_lifecycle.open_table(
            table, guest_count, waiter_id, waiter or settings.default_waiter_name
        )
        saved = await self.store.update_table(opened, expected_version=table.version)
        logger.info(
            f"Table {table.number} opened for {guest_count} guests by {opened.waiter}"
        )
        return saved

    async def close_table(self, restaurant_id: str, table_id: str) -> Table:
        table = await self.store.get_table(restaurant_id, table_id)
        orders = await self.order_store.list_active_orders_for_table(
            restaurant_id, table_id
        )
        try:
            closed = table_lifecycle.close_table(table, orders)
        except APIError as e:
            logger.warning(f"Refused to close table {table.number}: {e.detail}")
            raise
        saved = await self.store.update_table(closed, expected_version=table.version)
        logger.info(f"Table {table.number} closed")
        return saved

    async def tables_for_waiter(self, restaurant_id: str, waiter_id: str) -> List[Table]:
        """Occupied tables opened by ``waiter_id``"""
        return [
            table
            for table in await self.store.list_tables(restaurant_id)
            if table.is_occupied and table.waiter_id == waiter_id
        ]

    async def priorities(self, restaurant_id: str) -> List[TablePriority]:
        tables = await self.store.list_tables(restaurant_id)
        orders = await self.order_store.list_active_orders(restaurant_id)
        return rank_tables(tables, orders)

    async def overview(self, restaurant_id: str) -> List[TableOverviewResponse]:
        tables = await self.store.list_tables(restaurant_id)
        orders = await self.order_store.list_active_orders(restaurant_id)
        return table_overview(tables, orders)
