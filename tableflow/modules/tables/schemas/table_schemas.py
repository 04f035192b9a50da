# tableflow/modules/tables/schemas/table_schemas.py

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from ..models.table_models import TableStatus


class Table(BaseModel):
    """Table as seen by the lifecycle and ranking logic"""

    id: str
    restaurant_id: str
    number: int = Field(..., ge=1)
    status: TableStatus = TableStatus.EMPTY
    guest_count: int = Field(0, ge=0)
    waiter: Optional[str] = None
    waiter_id: Optional[str] = None
    opened_at: Optional[datetime] = None
    version: int = 0

    @model_validator(mode="after")
    def check_occupancy(self):
        if self.status == TableStatus.EMPTY:
            if self.guest_count != 0:
                raise ValueError("An empty table cannot have guests")
            if self.waiter or self.waiter_id or self.opened_at:
                raise ValueError("An empty table cannot have a waiter or opening time")
        elif self.guest_count < 1:
            raise ValueError("An occupied table needs at least one guest")
        return self

    @property
    def is_occupied(self) -> bool:
        return self.status == TableStatus.OCCUPIED


class TableOpenRequest(BaseModel):
    """Schema for seating guests at a table"""

    guest_count: int
    waiter_id: str
    waiter: Optional[str] = None


class TableCountUpdate(BaseModel):
    table_count: int = Field(..., ge=0, le=500)


class TableCountResponse(BaseModel):
    table_count: int
    created: List[int] = []
    removed: List[int] = []
    kept_occupied: List[int] = []


class TableInitializeRequest(BaseModel):
    table_count: Optional[int] = Field(None, ge=1, le=500)


class TablePriorityResponse(BaseModel):
    table_id: str
    table_number: int
    rank: int
    treatment: str
    ready_item_count: int
    oldest_active_order_at: datetime


class TableOverviewResponse(BaseModel):
    table: Table
    active_order_count: int
    item_count: int
    ready_item_count: int
    rank: Optional[int] = None
