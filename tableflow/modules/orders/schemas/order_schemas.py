# tableflow/modules/orders/schemas/order_schemas.py

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..enums.order_enums import OrderItemStatus, OrderStatus
from ...menu.models.menu_models import Destination
from ...menu.schemas.menu_schemas import MenuItemSnapshot


def _clean_notes(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class OrderItem(BaseModel):
    """Single line of an order, owned by exactly one order"""

    id: str
    menu_item: MenuItemSnapshot
    quantity: int = Field(..., ge=1)
    notes: Optional[str] = None
    seat_number: Optional[int] = Field(None, ge=1)
    status: OrderItemStatus = OrderItemStatus.PENDING
    created_at: datetime

    @field_validator("notes", mode="before")
    @classmethod
    def normalize_notes(cls, v):
        return _clean_notes(v)

    @property
    def destination(self) -> Destination:
        return self.menu_item.destination

    @property
    def is_ready(self) -> bool:
        return self.status == OrderItemStatus.READY


class Order(BaseModel):
    """Order as seen by the lifecycle, routing and merge logic"""

    id: str
    restaurant_id: str
    table_id: str
    table_number: int
    items: List[OrderItem]
    waiter_id: str
    waiter: str
    status: OrderStatus = OrderStatus.ACTIVE
    created_at: datetime
    updated_at: datetime
    total: float = 0.0
    version: int = 0

    @model_validator(mode="after")
    def check_unique_item_ids(self):
        item_ids = [item.id for item in self.items]
        if len(item_ids) != len(set(item_ids)):
            raise ValueError("Order item ids must be unique within an order")
        return self

    @property
    def is_active(self) -> bool:
        return self.status == OrderStatus.ACTIVE

    def get_item(self, item_id: str) -> Optional[OrderItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class OrderLineCreate(BaseModel):
    """Line of a submitted cart, referencing the live catalog"""

    menu_item_id: str
    quantity: int = Field(1, ge=1)
    notes: Optional[str] = Field(None, max_length=500)
    seat_number: Optional[int] = Field(None, ge=1)


class OrderCreate(BaseModel):
    """Schema for submitting a table's cart as an order"""

    table_id: str
    waiter_id: str
    waiter: Optional[str] = None
    lines: List[OrderLineCreate] = Field(..., min_length=1)


class OrderResponse(Order):
    """Order with its routing aggregates"""

    bar_complete: bool = True
    kitchen_complete: bool = True
    is_ready: bool = False

    model_config = ConfigDict(from_attributes=True)


class TicketLine(BaseModel):
    quantity: int
    name: str
    notes: Optional[str] = None
    seat_number: Optional[int] = None


class Ticket(BaseModel):
    """Content of a bar or kitchen slip for one order"""

    destination: Destination
    order_id: str
    order_reference: str
    table_number: int
    waiter: str
    created_at: datetime
    lines: List[TicketLine]

    def render_text(self) -> str:
        """Plain-text rendering for receipt printers"""
        header = [
            self.destination.value.upper(),
            f"Table: {self.table_number}",
            f"Waiter: {self.waiter}",
            f"Time: {self.created_at.strftime('%H:%M')}",
            "-" * 24,
        ]
        body = []
        for line in self.lines:
            seat = f" (seat {line.seat_number})" if line.seat_number else ""
            body.append(f"{line.quantity}x {line.name}{seat}")
            if line.notes:
                body.append(f"   * {line.notes}")
        footer = ["-" * 24, f"Order #{self.order_reference}"]
        return "\n".join(header + body + footer)
