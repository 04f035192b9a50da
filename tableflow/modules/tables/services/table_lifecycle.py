# tableflow/modules/tables/services/table_lifecycle.py

"""
Table occupancy state machine: empty -> occupied -> empty.

Closing is refused while any active order exists for the table. The orders
are never cancelled on the caller's behalf; losing in-flight bar or kitchen
work to a premature reset is exactly what the gate prevents.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from ..models.table_models import TableStatus
from ..schemas.table_schemas import Table
from ...orders.schemas.order_schemas import Order
from ....core.exceptions import (
    InvalidArgumentError,
    InvalidStateError,
    TableHasActiveOrdersError,
)


def active_orders_for(table: Table, orders: Iterable[Order]) -> List[Order]:
    return [order for order in orders if order.table_id == table.id and order.is_active]


def open_table(
    table: Table,
    guest_count: int,
    waiter_id: str,
    waiter: str,
    now: Optional[datetime] = None,
) -> Table:
    """Seat ``guest_count`` guests at an empty table"""
    if table.status != TableStatus.EMPTY:
        raise InvalidStateError(
            f"Table {table.number} is already {table.status.value}"
        )
    if guest_count < 1:
        raise InvalidArgumentError(
            f"Guest count must be at least 1, got {guest_count}"
        )

    return table.model_copy(
        update={
            "status": TableStatus.OCCUPIED,
            "guest_count": guest_count,
            "waiter": waiter,
            "waiter_id": waiter_id,
            "opened_at": now or datetime.utcnow(),
        }
    )


def close_table(table: Table, orders: Iterable[Order]) -> Table:
    """Reset an occupied table once none of its orders is active.

    ``orders`` is the current order snapshot; only active orders of this
    table are considered.
    """
    if table.status != TableStatus.OCCUPIED:
        raise InvalidStateError(f"Table {table.number} is not occupied")

    blocking = active_orders_for(table, orders)
    if blocking:
        raise TableHasActiveOrdersError(table.number, [order.id for order in blocking])

    return table.model_copy(
        update={
            "status": TableStatus.EMPTY,
            "guest_count": 0,
            "waiter": None,
            "waiter_id": None,
            "opened_at": None,
        }
    )
