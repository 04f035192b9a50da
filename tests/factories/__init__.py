# tests/factories/__init__.py

from .menu import MenuItemSnapshotFactory, MenuItemRecordFactory
from .order import OrderItemFactory, OrderFactory
from .table import TableFactory, OccupiedTableFactory

__all__ = [
    "MenuItemSnapshotFactory",
    "MenuItemRecordFactory",
    "OrderItemFactory",
    "OrderFactory",
    "TableFactory",
    "OccupiedTableFactory",
]
