# tableflow/modules/orders/models/order_models.py

"""
Order persistence model. Items are stored as an embedded document list,
each carrying its own menu item snapshot.
"""

from sqlalchemy import Column, DateTime, Float, Index, Integer, JSON, String

from ....core.database import Base
from ..enums.order_enums import OrderStatus


class OrderRecord(Base):
    """Order submitted by a waiter for a table"""

    __tablename__ = "orders"

    id = Column(String(64), primary_key=True, index=True)
    restaurant_id = Column(String(64), nullable=False, index=True)

    table_id = Column(String(64), nullable=False, index=True)
    table_number = Column(Integer, nullable=False)  # denormalized for display

    waiter_id = Column(String(64), nullable=False)
    waiter = Column(String(100), nullable=False)

    status = Column(String(20), nullable=False, default=OrderStatus.ACTIVE.value)
    items = Column(JSON, nullable=False, default=list)
    total = Column(Float, nullable=False, default=0.0)

    # Compare-and-swap token, bumped on every write
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_order_restaurant_status", "restaurant_id", "status"),
        Index("idx_order_table_status", "restaurant_id", "table_id", "status"),
    )
