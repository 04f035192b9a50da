# tableflow/modules/tables/services/table_store.py

"""
Durable, subscribable table persistence.

Writes are compare-and-swap on the row version. The store refuses to write
an occupied table back to empty while the table still has an active order,
so no caller can bypass the close gate by writing directly.
"""

from sqlalchemy.orm import Session
from typing import Callable, List
import inspect
import logging

from ..models.table_models import TableRecord, TableStatus
from ..schemas.table_schemas import Table, TableCountResponse
from ...orders.enums.order_enums import OrderStatus
from ...orders.models.order_models import OrderRecord
from ....core.change_feed import ChangeFeed, Subscription, change_feed
from ....core.exceptions import (
    ConcurrentWriteConflictError,
    NotFoundError,
    TableHasActiveOrdersError,
)

logger = logging.getLogger(__name__)


def tables_topic(restaurant_id: str):
    return ("tables", restaurant_id)


def table_id_for(number: int) -> str:
    return f"table-{number}"


def to_domain(record: TableRecord) -> Table:
    return Table(
        id=record.id,
        restaurant_id=record.restaurant_id,
        number=record.number,
        status=TableStatus(record.status),
        guest_count=record.guest_count,
        waiter=record.waiter,
        waiter_id=record.waiter_id,
        opened_at=record.opened_at,
        version=record.version,
    )


class TableStore:
    """Table persistence scoped by restaurant"""

    def __init__(self, db: Session, feed: ChangeFeed = change_feed):
        self.db = db
        self.feed = feed

    async def initialize_tables(self, restaurant_id: str, count: int) -> List[Table]:
        """Provision tables 1..count, unless the restaurant already has tables"""
        existing = (
            self.db.query(TableRecord).filter_by(restaurant_id=restaurant_id).count()
        )
        if existing:
            logger.info(
                f"Restaurant {restaurant_id} already has {existing} tables, skipping"
            )
            return await self.list_tables(restaurant_id)

        for number in range(1, count + 1):
            self.db.add(self._new_record(restaurant_id, number))
        self.db.commit()

        logger.info(f"Initialized {count} tables for restaurant {restaurant_id}")
        await self.publish_tables(restaurant_id)
        return await self.list_tables(restaurant_id)

    def _new_record(self, restaurant_id: str, number: int) -> TableRecord:
        return TableRecord(
            id=table_id_for(number),
            restaurant_id=restaurant_id,
            number=number,
            status=TableStatus.EMPTY.value,
            guest_count=0,
            version=1,
        )

    async def list_tables(self, restaurant_id: str) -> List[Table]:
        self.db.expire_all()
        records = (
            self.db.query(TableRecord)
            .filter_by(restaurant_id=restaurant_id)
            .order_by(TableRecord.number)
            .all()
        )
        return [to_domain(record) for record in records]

    async def get_table(self, restaurant_id: str, table_id: str) -> Table:
        self.db.expire_all()
        record = (
            self.db.query(TableRecord)
            .filter_by(restaurant_id=restaurant_id, id=table_id)
            .first()
        )
        if not record:
            raise NotFoundError(f"Table {table_id} not found")
        return to_domain(record)

    def _active_order_ids(self, restaurant_id: str, table_id: str) -> List[str]:
        rows = (
            self.db.query(OrderRecord.id)
            .filter(
                OrderRecord.restaurant_id == restaurant_id,
                OrderRecord.table_id == table_id,
                OrderRecord.status == OrderStatus.ACTIVE.value,
            )
            .all()
        )
        return [row.id for row in rows]

    async def update_table(self, table: Table, expected_version: int) -> Table:
        """Write ``table`` if the stored row is still at ``expected_version``"""
        current = await self.get_table(table.restaurant_id, table.id)
        if current.is_occupied and table.status == TableStatus.EMPTY:
            blocking = self._active_order_ids(table.restaurant_id, table.id)
            if blocking:
                raise TableHasActiveOrdersError(current.number, blocking)

        updated = (
            self.db.query(TableRecord)
            .filter(
                TableRecord.restaurant_id == table.restaurant_id,
                TableRecord.id == table.id,
                TableRecord.version == expected_version,
            )
            .update(
                {
                    TableRecord.status: table.status.value,
                    TableRecord.guest_count: table.guest_count,
                    TableRecord.waiter: table.waiter,
                    TableRecord.waiter_id: table.waiter_id,
                    TableRecord.opened_at: table.opened_at,
                    TableRecord.version: expected_version + 1,
                },
                synchronize_session=False,
            )
        )
        if updated == 0:
            self.db.rollback()
            logger.warning(
                f"Stale write on table {table.id} (expected version {expected_version})"
            )
            raise ConcurrentWriteConflictError("Table", table.id, expected_version)

        self.db.commit()
        await self.publish_tables(table.restaurant_id)
        return await self.get_table(table.restaurant_id, table.id)

    async def update_table_count(
        self, restaurant_id: str, new_count: int
    ) -> TableCountResponse:
        """Grow or shrink the table set; only empty tables are ever removed"""
        tables = await self.list_tables(restaurant_id)
        current_numbers = {table.number for table in tables}
        response = TableCountResponse(table_count=new_count)

        for number in range(1, new_count + 1):
            if number not in current_numbers:
                self.db.add(self._new_record(restaurant_id, number))
                response.created.append(number)

        for table in tables:
            if table.number <= new_count:
                continue
            if table.is_occupied:
                response.kept_occupied.append(table.number)
                continue
            self.db.query(TableRecord).filter_by(
                restaurant_id=restaurant_id, id=table.id
            ).delete(synchronize_session=False)
            response.removed.append(table.number)

        self.db.commit()

        if response.kept_occupied:
            logger.warning(
                f"Kept occupied tables {response.kept_occupied} while reducing "
                f"restaurant {restaurant_id} to {new_count} tables"
            )
        logger.info(
            f"Table count for restaurant {restaurant_id} set to {new_count}: "
            f"created {len(response.created)}, removed {len(response.removed)}"
        )
        await self.publish_tables(restaurant_id)
        return response

    async def publish_tables(self, restaurant_id: str):
        topic = tables_topic(restaurant_id)
        if self.feed.subscriber_count(topic) == 0:
            return
        await self.feed.publish(topic, await self.list_tables(restaurant_id))

    async def subscribe_tables(
        self, restaurant_id: str, on_change: Callable
    ) -> Subscription:
        """Receive the full table list now and after every change"""
        subscription = self.feed.subscribe(tables_topic(restaurant_id), on_change)
        result = on_change(await self.list_tables(restaurant_id))
        if inspect.isawaitable(result):
            await result
        return subscription
