# tableflow/modules/menu/models/menu_models.py

"""
Menu catalog models. Orders never reference these rows after creation;
they carry an embedded snapshot instead.
"""

from sqlalchemy import Boolean, Column, DateTime, Float, Index, String, Text
from sqlalchemy.sql import func
import enum

from ....core.database import Base


class Destination(str, enum.Enum):
    """Preparation station a menu item is routed to"""

    BAR = "bar"
    KITCHEN = "kitchen"


class MenuItemRecord(Base):
    """Menu item offered by a restaurant"""

    __tablename__ = "menu_items"

    # Item ids are unique within a restaurant
    id = Column(String(64), primary_key=True)
    restaurant_id = Column(String(64), primary_key=True)

    name = Column(String(200), nullable=False)
    description = Column(Text)
    price = Column(Float, nullable=True)  # NULL means free item
    category = Column(String(100), nullable=False, default="")
    sub_category = Column(String(100), nullable=False, default="")
    destination = Column(String(20), nullable=False, default=Destination.KITCHEN.value)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        Index("idx_menu_item_restaurant_active", "restaurant_id", "is_active"),
    )
