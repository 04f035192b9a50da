# tableflow/modules/orders/services/order_item_merger.py

"""
Consolidated bar/kitchen view across all active orders.

Staff prepare against aggregate demand ("7x Soup") rather than per-table
slips, so identical note-free items are merged by menu item id. An item with
notes is prepared differently and always stays in its own group.

The merge is a pure function of the snapshot it is given; it is rebuilt from
scratch on every change-feed event.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from ..schemas.order_schemas import Order, OrderItem
from ...menu.models.menu_models import Destination
from ...menu.schemas.menu_schemas import MenuItemSnapshot


@dataclass(frozen=True)
class GroupMember:
    """Reference to one constituent item inside its owning order"""

    order_id: str
    table_number: int
    item: OrderItem

    @property
    def item_id(self) -> str:
        return self.item.id


@dataclass
class MergedItemGroup:
    """One display row on a preparation screen"""

    group_id: str
    destination: Destination
    menu_item: MenuItemSnapshot
    notes: Optional[str] = None
    members: List[GroupMember] = field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(member.item.quantity for member in self.members)

    @property
    def pending_quantity(self) -> int:
        return sum(
            member.item.quantity for member in self.members if not member.item.is_ready
        )

    @property
    def all_ready(self) -> bool:
        return all(member.item.is_ready for member in self.members)

    @property
    def items(self) -> List[OrderItem]:
        return [member.item for member in self.members]

    @property
    def table_numbers(self) -> List[int]:
        return sorted({member.table_number for member in self.members})

    def items_by_order(self) -> Dict[str, List[str]]:
        """Constituent item ids keyed by owning order id"""
        by_order: Dict[str, List[str]] = {}
        for member in self.members:
            by_order.setdefault(member.order_id, []).append(member.item_id)
        return by_order


def group_id_for(order: Order, item: OrderItem) -> str:
    if item.notes:
        return f"note:{order.id}:{item.id}"
    return f"item:{item.menu_item.id}"


def merge_order_items(
    orders: Iterable[Order], destination: Destination
) -> List[MergedItemGroup]:
    """Merge the ``destination`` items of every active order into groups.

    Orders are visited oldest first so the output order is stable for the
    same snapshot regardless of the order the store delivered it in.
    """
    active_orders = sorted(
        (order for order in orders if order.is_active),
        key=lambda o: (o.created_at, o.id),
    )

    groups: Dict[str, MergedItemGroup] = {}
    for order in active_orders:
        for item in order.items:
            if item.menu_item.destination != destination:
                continue

            group_id = group_id_for(order, item)
            group = groups.get(group_id)
            if group is None:
                group = MergedItemGroup(
                    group_id=group_id,
                    destination=destination,
                    menu_item=item.menu_item,
                    notes=item.notes,
                )
                groups[group_id] = group
            group.members.append(
                GroupMember(order_id=order.id, table_number=order.table_number, item=item)
            )

    return list(groups.values())


def partition_groups(
    groups: Iterable[MergedItemGroup],
) -> Tuple[List[MergedItemGroup], List[MergedItemGroup]]:
    """Split into ("to prepare", "done") sections"""
    pending, ready = [], []
    for group in groups:
        (ready if group.all_ready else pending).append(group)
    return pending, ready


def find_group(
    groups: Iterable[MergedItemGroup], group_id: str
) -> Optional[MergedItemGroup]:
    for group in groups:
        if group.group_id == group_id:
            return group
    return None
