# tableflow/modules/tables/services/table_priority.py

"""
Service-attention ranking for occupied tables, plus per-order urgency.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..schemas.table_schemas import Table
from ...menu.models.menu_models import Destination
from ...orders.schemas.order_schemas import Order
from ...orders.services.ticket_router import has_items_for
from ....core.config import settings


class PriorityTreatment(str, Enum):
    """Visual treatment for a ranked table"""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    NONE = "none"


@dataclass
class TablePriority:
    """Ranked table waiting for ready items to be served"""

    table_id: str
    table_number: int
    ready_item_count: int
    oldest_active_order_at: datetime
    rank: int = 0
    treatment: PriorityTreatment = PriorityTreatment.NONE


def treatment_for_rank(rank: int, secondary_max_rank: Optional[int] = None) -> PriorityTreatment:
    if secondary_max_rank is None:
        secondary_max_rank = settings.priority_secondary_max_rank
    if rank == 1:
        return PriorityTreatment.PRIMARY
    if 1 < rank <= secondary_max_rank:
        return PriorityTreatment.SECONDARY
    return PriorityTreatment.NONE


def rank_tables(
    tables: Iterable[Table],
    orders: Iterable[Order],
    secondary_max_rank: Optional[int] = None,
) -> List[TablePriority]:
    """Rank occupied tables that have ready items, oldest active order first.

    Age wins over the number of ready items: a table that has been waiting
    longer outranks a newer table with more food on the pass. Ties go to the
    lower table number.
    """
    active_by_table: Dict[str, List[Order]] = {}
    for order in orders:
        if order.is_active:
            active_by_table.setdefault(order.table_id, []).append(order)

    candidates = []
    for table in tables:
        if not table.is_occupied:
            continue
        table_orders = active_by_table.get(table.id, [])
        if not table_orders:
            continue

        ready_item_count = sum(
            item.quantity
            for order in table_orders
            for item in order.items
            if item.is_ready
        )
        if ready_item_count <= 0:
            continue

        candidates.append(
            TablePriority(
                table_id=table.id,
                table_number=table.number,
                ready_item_count=ready_item_count,
                oldest_active_order_at=min(o.created_at for o in table_orders),
            )
        )

    candidates.sort(key=lambda p: (p.oldest_active_order_at, p.table_number))
    for rank, priority in enumerate(candidates, start=1):
        priority.rank = rank
        priority.treatment = treatment_for_rank(rank, secondary_max_rank)
    return candidates


def minutes_since_created(order: Order, now: Optional[datetime] = None) -> int:
    now = now or datetime.utcnow()
    return max(0, int((now - order.created_at).total_seconds() // 60))


def urgency_threshold(order: Order, destination: Optional[Destination] = None) -> int:
    """Minutes after which an order needs escalation.

    Bar-only concerns use the bar threshold; anything involving the kitchen
    uses the kitchen threshold.
    """
    if destination is None:
        destination = (
            Destination.KITCHEN
            if has_items_for(order, Destination.KITCHEN)
            else Destination.BAR
        )
    if destination == Destination.BAR:
        return settings.bar_urgency_minutes
    return settings.kitchen_urgency_minutes


def is_order_urgent(
    order: Order,
    now: Optional[datetime] = None,
    destination: Optional[Destination] = None,
) -> bool:
    """Visual escalation flag; does not affect ranking"""
    return minutes_since_created(order, now) > urgency_threshold(order, destination)
