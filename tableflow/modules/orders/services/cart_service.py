# tableflow/modules/orders/services/cart_service.py

"""
Per-table carts a waiter fills before submitting an order.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional
import logging
import uuid

from pydantic import BaseModel, Field

from ..schemas.order_schemas import _clean_notes
from ...menu.models.menu_models import Destination
from ...menu.schemas.menu_schemas import MenuItemSnapshot
from ....core.exceptions import InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)


class CartLine(BaseModel):
    id: str
    menu_item: MenuItemSnapshot
    quantity: int = Field(..., ge=1)
    notes: Optional[str] = None
    seat_number: Optional[int] = Field(None, ge=1)
    added_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def line_total(self) -> float:
        if self.menu_item.price is None:
            return 0.0
        return self.menu_item.price * self.quantity


def compute_order_total(lines: Iterable) -> float:
    """Sum of price x quantity; items without a price are free"""
    return round(
        sum(
            line.menu_item.price * line.quantity
            for line in lines
            if line.menu_item.price is not None
        ),
        2,
    )


class Cart:
    """Unsubmitted lines for one table"""

    def __init__(self, table_id: str):
        self.table_id = table_id
        self.lines: List[CartLine] = []

    def add(
        self,
        menu_item: MenuItemSnapshot,
        quantity: int = 1,
        notes: Optional[str] = None,
        seat_number: Optional[int] = None,
    ) -> CartLine:
        """Add an item, folding it into a line with the same item, notes and seat"""
        if quantity < 1:
            raise InvalidArgumentError(f"Quantity must be at least 1, got {quantity}")

        notes = _clean_notes(notes)
        for index, line in enumerate(self.lines):
            if (
                line.menu_item.id == menu_item.id
                and line.notes == notes
                and line.seat_number == seat_number
            ):
                merged = line.model_copy(update={"quantity": line.quantity + quantity})
                self.lines[index] = merged
                return merged

        line = CartLine(
            id=f"{menu_item.id}-{uuid.uuid4().hex[:8]}",
            menu_item=menu_item,
            quantity=quantity,
            notes=notes,
            seat_number=seat_number,
        )
        self.lines.append(line)
        return line

    def remove(self, line_id: str):
        before = len(self.lines)
        self.lines = [line for line in self.lines if line.id != line_id]
        if len(self.lines) == before:
            raise NotFoundError(f"Cart line {line_id} not found")

    def update_quantity(self, line_id: str, quantity: int):
        """Change a line's quantity; below 1 removes the line"""
        if quantity < 1:
            self.remove(line_id)
            return
        for index, line in enumerate(self.lines):
            if line.id == line_id:
                self.lines[index] = line.model_copy(update={"quantity": quantity})
                return
        raise NotFoundError(f"Cart line {line_id} not found")

    def clear(self):
        self.lines = []

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total(self) -> float:
        return compute_order_total(self.lines)

    def destination_counts(self) -> Dict[Destination, int]:
        counts = {destination: 0 for destination in Destination}
        for line in self.lines:
            counts[line.menu_item.destination] += 1
        return counts


class CartRegistry:
    """Carts keyed by table so switching tables keeps unsent lines"""

    def __init__(self):
        self.carts: Dict[str, Cart] = {}

    def cart_for(self, table_id: str) -> Cart:
        if table_id not in self.carts:
            self.carts[table_id] = Cart(table_id)
        return self.carts[table_id]

    def discard(self, table_id: str):
        self.carts.pop(table_id, None)
