# tableflow/modules/orders/services/order_service.py

"""
Order submission and status changes on top of the order store.

Every status change re-reads the order from the store, applies a pure
lifecycle transition and writes it back against the version it read, so a
concurrent change from another terminal surfaces as
``ConcurrentWriteConflictError`` rather than being overwritten. Nothing here
retries on its own.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging
import uuid

from ..enums.order_enums import OrderStatus
from ..schemas.order_schemas import Order, OrderItem, Ticket
from . import order_lifecycle
from .cart_service import Cart, CartLine, compute_order_total
from .order_item_merger import MergedItemGroup
from .order_store import OrderStore
from .ticket_router import build_ticket
from ...menu.models.menu_models import Destination
from ...tables.models.table_models import TableStatus
from ...tables.schemas.table_schemas import Table
from ....core.change_feed import ChangeFeed, change_feed
from ....core.exceptions import (
    APIError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    PartialPropagationError,
)

logger = logging.getLogger(__name__)


@dataclass
class MarkGroupReadyResult:
    """Outcome of propagating a merged group to its owning orders"""

    group_id: str
    updated_order_ids: List[str] = field(default_factory=list)
    unchanged_order_ids: List[str] = field(default_factory=list)
    failed_orders: Dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failed_orders


class OrderService:
    """Service for placing orders and recording preparation progress"""

    def __init__(self, db: Session, feed: ChangeFeed = change_feed):
        self.db = db
        self.store = OrderStore(db, feed)

    # Submission
    async def submit_order(
        self,
        restaurant_id: str,
        table: Table,
        waiter_id: str,
        waiter: str,
        lines: Sequence[CartLine],
    ) -> Order:
        """Turn cart lines into an order for an occupied table"""
        if table.status != TableStatus.OCCUPIED:
            raise InvalidStateError(
                f"Table {table.number} must be opened before ordering"
            )
        if not lines:
            raise InvalidArgumentError("An order needs at least one item")

        now = datetime.utcnow()
        items = []
        for line in lines:
            seat_number = line.seat_number if table.guest_count > 1 else None
            if seat_number is not None and seat_number > table.guest_count:
                raise InvalidArgumentError(
                    f"Seat {seat_number} does not exist at table {table.number} "
                    f"({table.guest_count} guests)"
                )
            items.append(
                OrderItem(
                    id=line.id,
                    menu_item=line.menu_item,
                    quantity=line.quantity,
                    notes=line.notes,
                    seat_number=seat_number,
                    created_at=now,
                )
            )

        order = Order(
            id=uuid.uuid4().hex,
            restaurant_id=restaurant_id,
            table_id=table.id,
            table_number=table.number,
            items=items,
            waiter_id=waiter_id,
            waiter=waiter,
            status=OrderStatus.ACTIVE,
            created_at=now,
            updated_at=now,
            total=compute_order_total(items),
        )
        await self.store.create_order(order)
        return await self.store.get_order(restaurant_id, order.id)

    async def submit_cart(
        self, restaurant_id: str, table: Table, waiter_id: str, waiter: str, cart: Cart
    ) -> Order:
        """Submit a table's cart and empty it once the order is stored"""
        order = await self.submit_order(
            restaurant_id, table, waiter_id, waiter, list(cart.lines)
        )
        cart.clear()
        return order

    # Reads
    async def get_order(self, restaurant_id: str, order_id: str) -> Order:
        return await self.store.get_order(restaurant_id, order_id)

    async def list_orders(
        self,
        restaurant_id: str,
        status: Optional[OrderStatus] = None,
        waiter_id: Optional[str] = None,
    ) -> List[Order]:
        return await self.store.list_orders(restaurant_id, status, waiter_id)

    async def get_ticket(
        self, restaurant_id: str, order_id: str, destination: Destination
    ) -> Ticket:
        order = await self.store.get_order(restaurant_id, order_id)
        ticket = build_ticket(order, destination)
        if ticket is None:
            raise NotFoundError(
                f"Order {order_id} has no {destination.value} items"
            )
        return ticket

    # Transitions
    async def _transition(
        self, restaurant_id: str, order_id: str, transition: Callable[[Order], Order]
    ) -> Tuple[Order, bool]:
        current = await self.store.get_order(restaurant_id, order_id)
        changed = transition(current)
        if changed is current:
            return current, False

        if changed.status != current.status:
            written = await self.store.update_order_status(
                restaurant_id,
                order_id,
                changed.status,
                expected_version=current.version,
                updated_at=changed.updated_at,
            )
        else:
            written = await self.store.update_order_items(
                restaurant_id,
                order_id,
                changed.items,
                expected_version=current.version,
                updated_at=changed.updated_at,
            )
        return written, True

    async def _apply(
        self, restaurant_id: str, order_id: str, transition: Callable[[Order], Order]
    ) -> Order:
        order, _ = await self._transition(restaurant_id, order_id, transition)
        return order

    async def mark_item_ready(
        self, restaurant_id: str, order_id: str, item_id: str
    ) -> Order:
        order = await self._apply(
            restaurant_id,
            order_id,
            lambda o: order_lifecycle.mark_item_ready(o, item_id),
        )
        logger.info(f"Item {item_id} of order {order_id} marked ready")
        return order

    async def mark_destination_ready(
        self, restaurant_id: str, order_id: str, destination: Destination
    ) -> Order:
        order = await self._apply(
            restaurant_id,
            order_id,
            lambda o: order_lifecycle.mark_destination_ready(o, destination),
        )
        logger.info(f"All {destination.value} items of order {order_id} marked ready")
        return order

    async def complete_order(self, restaurant_id: str, order_id: str) -> Order:
        order = await self._apply(restaurant_id, order_id, order_lifecycle.complete_order)
        logger.info(f"Order {order_id} completed")
        return order

    async def cancel_order(self, restaurant_id: str, order_id: str) -> Order:
        order = await self._apply(restaurant_id, order_id, order_lifecycle.cancel_order)
        logger.info(f"Order {order_id} cancelled")
        return order

    async def mark_group_ready(
        self, restaurant_id: str, group: MergedItemGroup
    ) -> MarkGroupReadyResult:
        """Mark every constituent item of a merged group ready.

        Each owning order is written independently. Failures are collected
        per order and raised together as ``PartialPropagationError`` so the
        caller can retry just those orders.
        """
        result = MarkGroupReadyResult(group_id=group.group_id)

        for order_id, item_ids in group.items_by_order().items():
            try:
                _, changed = await self._transition(
                    restaurant_id,
                    order_id,
                    lambda o, ids=item_ids: order_lifecycle.mark_items_ready(o, ids),
                )
            except APIError as e:
                logger.error(
                    f"Failed to mark group {group.group_id} ready in order "
                    f"{order_id}: {e.detail}"
                )
                result.failed_orders[order_id] = e.error_code or str(e.detail)
                continue
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(
                    f"Storage error marking group {group.group_id} ready in order "
                    f"{order_id}: {str(e)}"
                )
                result.failed_orders[order_id] = "STORAGE_ERROR"
                continue

            if changed:
                result.updated_order_ids.append(order_id)
            else:
                result.unchanged_order_ids.append(order_id)

        if result.failed_orders:
            raise PartialPropagationError(
                result.updated_order_ids + result.unchanged_order_ids,
                result.failed_orders,
            )

        logger.info(
            f"Group {group.group_id} marked ready across "
            f"{len(result.updated_order_ids)} order(s)"
        )
        return result
