# tableflow/modules/menu/services/catalog_service.py

"""
Menu catalog lookups and the snapshots embedded into order items.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
import uuid

from ..models.menu_models import Destination, MenuItemRecord
from ..schemas.menu_schemas import MenuItemCreate, MenuItemSnapshot, MenuItemUpdate
from ....core.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def snapshot(menu_item: MenuItemRecord) -> MenuItemSnapshot:
    """Freeze the order-relevant fields of a catalog item"""
    return MenuItemSnapshot(
        id=menu_item.id,
        name=menu_item.name,
        price=menu_item.price,
        category=menu_item.category or "",
        sub_category=menu_item.sub_category or "",
        destination=Destination(menu_item.destination),
    )


class MenuCatalog:
    """Service for reading and maintaining a restaurant's menu"""

    def __init__(self, db: Session):
        self.db = db

    def get_active_menu_items(self, restaurant_id: str) -> List[MenuItemSnapshot]:
        """Snapshots of every active item, grouped by category for menu display"""
        items = (
            self.db.query(MenuItemRecord)
            .filter(
                MenuItemRecord.restaurant_id == restaurant_id,
                MenuItemRecord.is_active.is_(True),
            )
            .order_by(
                MenuItemRecord.category,
                MenuItemRecord.sub_category,
                MenuItemRecord.name,
            )
            .all()
        )
        return [snapshot(item) for item in items]

    def get_menu_item(self, restaurant_id: str, item_id: str) -> MenuItemRecord:
        item = (
            self.db.query(MenuItemRecord)
            .filter_by(restaurant_id=restaurant_id, id=item_id)
            .first()
        )
        if not item:
            raise NotFoundError(f"Menu item {item_id} not found")
        return item

    def get_snapshot(self, restaurant_id: str, item_id: str) -> MenuItemSnapshot:
        return snapshot(self.get_menu_item(restaurant_id, item_id))

    def create_menu_item(
        self, restaurant_id: str, item_data: MenuItemCreate
    ) -> MenuItemRecord:
        """Add an item to the catalog"""
        data = item_data.model_dump()
        data["id"] = data.get("id") or uuid.uuid4().hex
        data["destination"] = item_data.destination.value

        existing = (
            self.db.query(MenuItemRecord.id)
            .filter_by(restaurant_id=restaurant_id, id=data["id"])
            .first()
        )
        if existing:
            raise ConflictError(
                f"Menu item {data['id']} already exists",
                error_code="MENU_ITEM_EXISTS",
            )

        item = MenuItemRecord(restaurant_id=restaurant_id, **data)
        self.db.add(item)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                f"Menu item {data['id']} already exists",
                error_code="MENU_ITEM_EXISTS",
            )
        self.db.refresh(item)

        logger.info(
            f"Created menu item {item.name} ({item.destination}) "
            f"for restaurant {restaurant_id}"
        )
        return item

    def update_menu_item(
        self, restaurant_id: str, item_id: str, update_data: MenuItemUpdate
    ) -> MenuItemRecord:
        """Update a catalog item; existing orders keep their snapshots"""
        item = self.get_menu_item(restaurant_id, item_id)

        for field, value in update_data.model_dump(exclude_unset=True).items():
            if isinstance(value, Destination):
                value = value.value
            setattr(item, field, value)

        self.db.commit()
        self.db.refresh(item)

        logger.info(f"Updated menu item {item_id}")
        return item

    def set_menu_item_active(
        self, restaurant_id: str, item_id: str, is_active: bool
    ) -> MenuItemRecord:
        return self.update_menu_item(
            restaurant_id, item_id, MenuItemUpdate(is_active=is_active)
        )
