# tableflow/modules/tables/models/table_models.py

"""
Dining table persistence model.
"""

from sqlalchemy import Column, DateTime, Index, Integer, String, UniqueConstraint
import enum

from ....core.database import Base


class TableStatus(str, enum.Enum):
    """Table occupancy"""

    EMPTY = "empty"
    OCCUPIED = "occupied"


class TableRecord(Base):
    """Table provisioned for a restaurant, one per configured table number"""

    __tablename__ = "restaurant_tables"

    id = Column(String(64), primary_key=True)
    restaurant_id = Column(String(64), primary_key=True)
    number = Column(Integer, nullable=False)

    status = Column(String(20), nullable=False, default=TableStatus.EMPTY.value)
    guest_count = Column(Integer, nullable=False, default=0)

    # Set only while occupied
    waiter = Column(String(100))
    waiter_id = Column(String(64))
    opened_at = Column(DateTime)

    # Compare-and-swap token, bumped on every write
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("restaurant_id", "number", name="uq_restaurant_table_number"),
        Index("idx_table_restaurant_status", "restaurant_id", "status"),
    )
