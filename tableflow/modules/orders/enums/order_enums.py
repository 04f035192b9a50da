from enum import Enum


class OrderStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderItemStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"  # not-ready, kept for stored documents
    READY = "ready"
    SERVED = "served"  # not tracked by the preparation screens
