# tableflow/modules/menu/schemas/menu_schemas.py

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.menu_models import Destination


class MenuItemSnapshot(BaseModel):
    """Copy of a menu item embedded in each order item.

    Frozen: an order keeps the name and price it was placed with even if the
    catalog entry changes later.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: Optional[float] = None
    category: str = ""
    sub_category: str = ""
    destination: Destination


class MenuItemCreate(BaseModel):
    """Schema for adding an item to the catalog"""

    id: Optional[str] = Field(None, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: str = Field("", max_length=100)
    sub_category: str = Field("", max_length=100)
    destination: Destination = Destination.KITCHEN
    is_active: bool = True


class MenuItemUpdate(BaseModel):
    """Schema for updating a catalog item"""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=100)
    sub_category: Optional[str] = Field(None, max_length=100)
    destination: Optional[Destination] = None
    is_active: Optional[bool] = None

    @field_validator("name", "category", "sub_category", "destination", "is_active")
    @classmethod
    def not_null(cls, v):
        # Only price may be cleared; a missing price means the item is free
        if v is None:
            raise ValueError("Field cannot be set to null")
        return v


class MenuItemResponse(BaseModel):
    """Response schema for a catalog item"""

    id: str
    restaurant_id: str
    name: str
    description: Optional[str] = None
    price: Optional[float] = None
    category: str
    sub_category: str
    destination: Destination
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
