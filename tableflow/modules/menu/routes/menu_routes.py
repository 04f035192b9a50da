# tableflow/modules/menu/routes/menu_routes.py

"""
API routes for the menu catalog.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ....core.database import get_db
from ..services.catalog_service import MenuCatalog
from ..schemas.menu_schemas import (
    MenuItemCreate,
    MenuItemResponse,
    MenuItemSnapshot,
    MenuItemUpdate,
)

router = APIRouter(prefix="/api/v1/restaurants/{restaurant_id}/menu", tags=["Menu"])


@router.get("", response_model=List[MenuItemSnapshot])
async def list_active_menu_items(restaurant_id: str, db: Session = Depends(get_db)):
    """List active menu items"""
    return MenuCatalog(db).get_active_menu_items(restaurant_id)


@router.post("", response_model=MenuItemResponse, status_code=201)
async def create_menu_item(
    restaurant_id: str, item_data: MenuItemCreate, db: Session = Depends(get_db)
):
    """Add an item to the menu"""
    return MenuCatalog(db).create_menu_item(restaurant_id, item_data)


@router.patch("/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    restaurant_id: str,
    item_id: str,
    update_data: MenuItemUpdate,
    db: Session = Depends(get_db),
):
    """Update a menu item"""
    return MenuCatalog(db).update_menu_item(restaurant_id, item_id, update_data)
