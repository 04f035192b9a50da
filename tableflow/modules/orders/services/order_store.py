# tableflow/modules/orders/services/order_store.py

"""
Durable, subscribable order persistence.

Rows are converted to ``Order`` models at this boundary. Every write is a
compare-and-swap on the row version; a stale write raises
``ConcurrentWriteConflictError`` instead of silently overwriting a newer
item status. After each successful write the full list of active orders
for the restaurant is published on the change feed.
"""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Callable, List, Optional
import inspect
import logging

from ..enums.order_enums import OrderStatus
from ..models.order_models import OrderRecord
from ..schemas.order_schemas import Order, OrderItem
from ....core.change_feed import ChangeFeed, Subscription, change_feed
from ....core.exceptions import ConcurrentWriteConflictError, NotFoundError

logger = logging.getLogger(__name__)


def active_orders_topic(restaurant_id: str):
    return ("active_orders", restaurant_id)


def to_domain(record: OrderRecord) -> Order:
    return Order(
        id=record.id,
        restaurant_id=record.restaurant_id,
        table_id=record.table_id,
        table_number=record.table_number,
        items=[OrderItem.model_validate(item) for item in record.items or []],
        waiter_id=record.waiter_id,
        waiter=record.waiter,
        status=OrderStatus(record.status),
        created_at=record.created_at,
        updated_at=record.updated_at,
        total=record.total,
        version=record.version,
    )


def _dump_items(items: List[OrderItem]) -> list:
    return [item.model_dump(mode="json") for item in items]


class OrderStore:
    """Order persistence scoped by restaurant"""

    def __init__(self, db: Session, feed: ChangeFeed = change_feed):
        self.db = db
        self.feed = feed

    async def create_order(self, order: Order) -> str:
        record = OrderRecord(
            id=order.id,
            restaurant_id=order.restaurant_id,
            table_id=order.table_id,
            table_number=order.table_number,
            waiter_id=order.waiter_id,
            waiter=order.waiter,
            status=order.status.value,
            items=_dump_items(order.items),
            total=order.total,
            version=1,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )
        self.db.add(record)
        self.db.commit()

        logger.info(
            f"Created order {order.id} for table {order.table_number} "
            f"with {len(order.items)} items"
        )
        await self.publish_active_orders(order.restaurant_id)
        return record.id

    async def get_order(self, restaurant_id: str, order_id: str) -> Order:
        # Always read the current row, never a session-cached copy
        self.db.expire_all()
        record = (
            self.db.query(OrderRecord)
            .filter_by(restaurant_id=restaurant_id, id=order_id)
            .first()
        )
        if not record:
            raise NotFoundError(f"Order {order_id} not found")
        return to_domain(record)

    async def update_order_items(
        self,
        restaurant_id: str,
        order_id: str,
        items: List[OrderItem],
        expected_version: int,
        updated_at: Optional[datetime] = None,
    ) -> Order:
        return await self._compare_and_swap(
            restaurant_id,
            order_id,
            expected_version,
            {
                OrderRecord.items: _dump_items(items),
                OrderRecord.updated_at: updated_at or datetime.utcnow(),
            },
        )

    async def update_order_status(
        self,
        restaurant_id: str,
        order_id: str,
        status: OrderStatus,
        expected_version: int,
        updated_at: Optional[datetime] = None,
    ) -> Order:
        return await self._compare_and_swap(
            restaurant_id,
            order_id,
            expected_version,
            {
                OrderRecord.status: status.value,
                OrderRecord.updated_at: updated_at or datetime.utcnow(),
            },
        )

    async def _compare_and_swap(
        self, restaurant_id: str, order_id: str, expected_version: int, values: dict
    ) -> Order:
        values[OrderRecord.version] = expected_version + 1
        updated = (
            self.db.query(OrderRecord)
            .filter(
                OrderRecord.restaurant_id == restaurant_id,
                OrderRecord.id == order_id,
                OrderRecord.version == expected_version,
            )
            .update(values, synchronize_session=False)
        )

        if updated == 0:
            self.db.rollback()
            exists = (
                self.db.query(OrderRecord.id)
                .filter_by(restaurant_id=restaurant_id, id=order_id)
                .first()
            )
            if not exists:
                raise NotFoundError(f"Order {order_id} not found")
            logger.warning(
                f"Stale write on order {order_id} (expected version {expected_version})"
            )
            raise ConcurrentWriteConflictError("Order", order_id, expected_version)

        self.db.commit()
        order = await self.get_order(restaurant_id, order_id)
        await self.publish_active_orders(restaurant_id)
        return order

    async def list_orders(
        self,
        restaurant_id: str,
        status: Optional[OrderStatus] = None,
        waiter_id: Optional[str] = None,
    ) -> List[Order]:
        self.db.expire_all()
        query = self.db.query(OrderRecord).filter(
            OrderRecord.restaurant_id == restaurant_id
        )
        if status is not None:
            query = query.filter(OrderRecord.status == status.value)
        if waiter_id is not None:
            query = query.filter(OrderRecord.waiter_id == waiter_id)
        records = query.order_by(OrderRecord.created_at, OrderRecord.id).all()
        return [to_domain(record) for record in records]

    async def list_active_orders(self, restaurant_id: str) -> List[Order]:
        return await self.list_orders(restaurant_id, OrderStatus.ACTIVE)

    async def list_active_orders_for_table(
        self, restaurant_id: str, table_id: str
    ) -> List[Order]:
        return [
            order
            for order in await self.list_active_orders(restaurant_id)
            if order.table_id == table_id
        ]

    async def publish_active_orders(self, restaurant_id: str):
        topic = active_orders_topic(restaurant_id)
        if self.feed.subscriber_count(topic) == 0:
            return
        await self.feed.publish(topic, await self.list_active_orders(restaurant_id))

    async def subscribe_active_orders(
        self, restaurant_id: str, on_change: Callable
    ) -> Subscription:
        """Receive the full active-order list now and after every change"""
        subscription = self.feed.subscribe(active_orders_topic(restaurant_id), on_change)
        result = on_change(await self.list_active_orders(restaurant_id))
        if inspect.isawaitable(result):
            await result
        return subscription
