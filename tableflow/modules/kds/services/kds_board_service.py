# tableflow/modules/kds/services/kds_board_service.py

"""
Bar and kitchen display boards.

A board is rebuilt from the full active-order snapshot every time it is
requested or the change feed fires; no state is carried between builds.
"""

from sqlalchemy.orm import Session
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional
import logging

from ...menu.models.menu_models import Destination
from ...orders.schemas.order_schemas import Order, OrderItem
from ...orders.services.order_item_merger import (
    MergedItemGroup,
    find_group,
    merge_order_items,
    partition_groups,
)
from ...orders.services.order_service import MarkGroupReadyResult, OrderService
from ...orders.services.ticket_router import (
    is_destination_complete,
    items_for,
    pending_count,
)
from ...tables.services.table_priority import is_order_urgent, minutes_since_created
from ....core.change_feed import ChangeFeed, change_feed
from ....core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class OrderTicketView:
    """One order's slip on a preparation screen"""

    order_id: str
    table_number: int
    waiter: str
    created_at: datetime
    minutes_waiting: int
    items: List[OrderItem]
    pending_count: int
    all_ready: bool
    is_urgent: bool


@dataclass
class DestinationBoard:
    destination: Destination
    generated_at: datetime
    tickets: List[OrderTicketView] = field(default_factory=list)
    pending_groups: List[MergedItemGroup] = field(default_factory=list)
    ready_groups: List[MergedItemGroup] = field(default_factory=list)

    @property
    def order_count(self) -> int:
        return len(self.tickets)

    @property
    def pending_item_count(self) -> int:
        return sum(group.pending_quantity for group in self.pending_groups)


def build_destination_board(
    orders: Iterable[Order], destination: Destination, now: Optional[datetime] = None
) -> DestinationBoard:
    now = now or datetime.utcnow()
    active_orders = sorted(
        (order for order in orders if order.is_active),
        key=lambda o: (o.created_at, o.id),
    )

    tickets = []
    for order in active_orders:
        items = items_for(order, destination)
        if not items:
            continue
        tickets.append(
            OrderTicketView(
                order_id=order.id,
                table_number=order.table_number,
                waiter=order.waiter,
                created_at=order.created_at,
                minutes_waiting=minutes_since_created(order, now),
                items=items,
                pending_count=pending_count(order, destination),
                all_ready=is_destination_complete(order, destination),
                is_urgent=is_order_urgent(order, now, destination),
            )
        )

    pending_groups, ready_groups = partition_groups(
        merge_order_items(active_orders, destination)
    )
    return DestinationBoard(
        destination=destination,
        generated_at=now,
        tickets=tickets,
        pending_groups=pending_groups,
        ready_groups=ready_groups,
    )


class KDSBoardService:
    """Service for reading boards and acting on merged groups"""

    def __init__(self, db: Session, feed: ChangeFeed = change_feed):
        self.db = db
        self.order_service = OrderService(db, feed)

    async def get_board(
        self, restaurant_id: str, destination: Destination
    ) -> DestinationBoard:
        orders = await self.order_service.store.list_active_orders(restaurant_id)
        return build_destination_board(orders, destination)

    async def mark_group_ready(
        self, restaurant_id: str, destination: Destination, group_id: str
    ) -> MarkGroupReadyResult:
        """Resolve ``group_id`` against the current snapshot and propagate"""
        orders = await self.order_service.store.list_active_orders(restaurant_id)
        group = find_group(merge_order_items(orders, destination), group_id)
        if group is None:
            raise NotFoundError(
                f"No {destination.value} group {group_id} among active orders"
            )
        return await self.order_service.mark_group_ready(restaurant_id, group)
