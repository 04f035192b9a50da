# tableflow/modules/kds/schemas/kds_schemas.py

"""
Pydantic schemas for the bar and kitchen display boards.
"""

from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

from ...menu.models.menu_models import Destination
from ...orders.enums.order_enums import OrderItemStatus
from ...orders.schemas.order_schemas import OrderItem


class GroupMemberResponse(BaseModel):
    order_id: str
    table_number: int
    item_id: str
    quantity: int
    seat_number: Optional[int] = None
    status: OrderItemStatus


class MergedGroupResponse(BaseModel):
    """One merged row on a preparation screen"""

    group_id: str
    destination: Destination
    menu_item_id: str
    name: str
    notes: Optional[str] = None
    total_quantity: int
    pending_quantity: int
    all_ready: bool
    table_numbers: List[int]
    members: List[GroupMemberResponse]

    @classmethod
    def from_group(cls, group) -> "MergedGroupResponse":
        return cls(
            group_id=group.group_id,
            destination=group.destination,
            menu_item_id=group.menu_item.id,
            name=group.menu_item.name,
            notes=group.notes,
            total_quantity=group.total_quantity,
            pending_quantity=group.pending_quantity,
            all_ready=group.all_ready,
            table_numbers=group.table_numbers,
            members=[
                GroupMemberResponse(
                    order_id=member.order_id,
                    table_number=member.table_number,
                    item_id=member.item.id,
                    quantity=member.item.quantity,
                    seat_number=member.item.seat_number,
                    status=member.item.status,
                )
                for member in group.members
            ],
        )


class OrderTicketResponse(BaseModel):
    order_id: str
    table_number: int
    waiter: str
    created_at: datetime
    minutes_waiting: int
    items: List[OrderItem]
    pending_count: int
    all_ready: bool
    is_urgent: bool

    model_config = ConfigDict(from_attributes=True)


class BoardResponse(BaseModel):
    """Full board for one destination"""

    destination: Destination
    generated_at: datetime
    order_count: int
    pending_item_count: int
    tickets: List[OrderTicketResponse]
    pending_groups: List[MergedGroupResponse]
    ready_groups: List[MergedGroupResponse]

    @classmethod
    def from_board(cls, board) -> "BoardResponse":
        return cls(
            destination=board.destination,
            generated_at=board.generated_at,
            order_count=board.order_count,
            pending_item_count=board.pending_item_count,
            tickets=[OrderTicketResponse.model_validate(t) for t in board.tickets],
            pending_groups=[MergedGroupResponse.from_group(g) for g in board.pending_groups],
            ready_groups=[MergedGroupResponse.from_group(g) for g in board.ready_groups],
        )


class GroupReadyRequest(BaseModel):
    group_id: str


class GroupReadyResponse(BaseModel):
    group_id: str
    updated_order_ids: List[str]
    unchanged_order_ids: List[str]

    model_config = ConfigDict(from_attributes=True)


class KDSWebSocketMessage(BaseModel):
    """Message pushed to board clients"""

    type: str  # board, new_order
    restaurant_id: str
    destination: Destination
    data: Optional[dict] = None
    timestamp: datetime
