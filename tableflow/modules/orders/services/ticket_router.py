# tableflow/modules/orders/services/ticket_router.py

"""
Splitting of an order into bar and kitchen preparation tickets.

Every order item has exactly one destination, so the per-destination
subsets partition the order. An order with no items for a destination
contributes nothing to that destination, and that destination counts as
complete for the order.
"""

from typing import List, Optional

from ..schemas.order_schemas import Order, OrderItem, Ticket, TicketLine
from ...menu.models.menu_models import Destination


def items_for(order: Order, destination: Destination) -> List[OrderItem]:
    """Items of ``order`` routed to ``destination``, in original order"""
    return [item for item in order.items if item.menu_item.destination == destination]


def is_destination_complete(order: Order, destination: Destination) -> bool:
    """True when every item for ``destination`` is ready, or there are none"""
    return all(item.is_ready for item in items_for(order, destination))


def has_items_for(order: Order, destination: Destination) -> bool:
    return any(item.menu_item.destination == destination for item in order.items)


def destinations_for(order: Order) -> List[Destination]:
    """Destinations that receive a ticket for this order"""
    return [d for d in Destination if has_items_for(order, d)]


def is_order_ready(order: Order) -> bool:
    """Every item of the order is ready, across both destinations"""
    return all(is_destination_complete(order, d) for d in Destination)


def pending_count(order: Order, destination: Destination) -> int:
    return sum(1 for item in items_for(order, destination) if not item.is_ready)


def build_ticket(order: Order, destination: Destination) -> Optional[Ticket]:
    """Slip content for one destination, or None when nothing is routed there"""
    items = items_for(order, destination)
    if not items:
        return None

    return Ticket(
        destination=destination,
        order_id=order.id,
        order_reference=order.id[-6:].upper(),
        table_number=order.table_number,
        waiter=order.waiter,
        created_at=order.created_at,
        lines=[
            TicketLine(
                quantity=item.quantity,
                name=item.menu_item.name,
                notes=item.notes,
                seat_number=item.seat_number,
            )
            for item in items
        ],
    )
