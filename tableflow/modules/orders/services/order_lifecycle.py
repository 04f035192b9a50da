# tableflow/modules/orders/services/order_lifecycle.py

"""
Order state machine.

    active -> completed
    active -> cancelled

Completed and cancelled are terminal: no status change and no item
mutation is accepted afterwards. Transitions are pure: each returns a new
``Order`` and leaves the argument untouched. A transition that changes
nothing returns the very same object so callers can skip the write.

Items becoming ready never completes an order on its own; "all items ready"
is a preparation signal, while completion is an explicit action.
"""

from datetime import datetime
from typing import Optional

from ..enums.order_enums import OrderItemStatus, OrderStatus
from ..schemas.order_schemas import Order
from .ticket_router import items_for
from ...menu.models.menu_models import Destination
from ....core.exceptions import InvalidStateError, ItemNotFoundError


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.utcnow()


def ensure_active(order: Order, action: str):
    if not order.is_active:
        raise InvalidStateError(
            f"Cannot {action}: order {order.id} is {order.status.value}"
        )


def _with_ready_items(order: Order, item_ids, now: Optional[datetime]) -> Order:
    to_mark = {
        item.id for item in order.items if item.id in item_ids and not item.is_ready
    }
    if not to_mark:
        return order

    items = [
        item.model_copy(update={"status": OrderItemStatus.READY})
        if item.id in to_mark
        else item
        for item in order.items
    ]
    return order.model_copy(update={"items": items, "updated_at": _now(now)})


def mark_item_ready(order: Order, item_id: str, now: Optional[datetime] = None) -> Order:
    """Set one item to ready. Marking a ready item again is a no-op."""
    ensure_active(order, "mark item ready")
    if order.get_item(item_id) is None:
        raise ItemNotFoundError(order.id, item_id)
    return _with_ready_items(order, {item_id}, now)


def mark_items_ready(order: Order, item_ids, now: Optional[datetime] = None) -> Order:
    """Set several items ready in one write; every id must belong to the order."""
    ensure_active(order, "mark items ready")
    for item_id in item_ids:
        if order.get_item(item_id) is None:
            raise ItemNotFoundError(order.id, item_id)
    return _with_ready_items(order, set(item_ids), now)


def mark_destination_ready(
    order: Order, destination: Destination, now: Optional[datetime] = None
) -> Order:
    """Set every item routed to ``destination`` ready; other items untouched"""
    ensure_active(order, f"mark {destination.value} ready")
    return _with_ready_items(
        order, {item.id for item in items_for(order, destination)}, now
    )


def complete_order(order: Order, now: Optional[datetime] = None) -> Order:
    ensure_active(order, "complete order")
    return order.model_copy(
        update={"status": OrderStatus.COMPLETED, "updated_at": _now(now)}
    )


def cancel_order(order: Order, now: Optional[datetime] = None) -> Order:
    ensure_active(order, "cancel order")
    return order.model_copy(
        update={"status": OrderStatus.CANCELLED, "updated_at": _now(now)}
    )
