# tableflow/modules/orders/routes/order_routes.py

"""
API routes for order submission and preparation progress.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session
from typing import List, Optional

from ....core.database import get_db
from ....core.exceptions import InvalidArgumentError
from ...menu.models.menu_models import Destination
from ...menu.services.catalog_service import MenuCatalog, snapshot
from ...tables.services.table_store import TableStore
from ..enums.order_enums import OrderStatus
from ..schemas.order_schemas import Order, OrderCreate, OrderResponse, Ticket
from ..services.cart_service import Cart
from ..services.order_service import OrderService
from ..services.ticket_router import is_destination_complete, is_order_ready

router = APIRouter(prefix="/api/v1/restaurants/{restaurant_id}/orders", tags=["Orders"])


def to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        **order.model_dump(),
        bar_complete=is_destination_complete(order, Destination.BAR),
        kitchen_complete=is_destination_complete(order, Destination.KITCHEN),
        is_ready=is_order_ready(order),
    )


@router.post("", response_model=OrderResponse, status_code=201)
async def submit_order(
    restaurant_id: str, order_data: OrderCreate, db: Session = Depends(get_db)
):
    """Submit a table's lines as a new order"""
    catalog = MenuCatalog(db)
    table = await TableStore(db).get_table(restaurant_id, order_data.table_id)

    cart = Cart(table.id)
    for line in order_data.lines:
        record = catalog.get_menu_item(restaurant_id, line.menu_item_id)
        if not record.is_active:
            raise InvalidArgumentError(f"Menu item {record.name} is not available")
        cart.add(snapshot(record), line.quantity, line.notes, line.seat_number)

    service = OrderService(db)
    order = await service.submit_cart(
        restaurant_id,
        table,
        order_data.waiter_id,
        order_data.waiter or table.waiter or "",
        cart,
    )
    return to_response(order)


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    restaurant_id: str,
    status: Optional[OrderStatus] = Query(None),
    waiter_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List orders, oldest first; a waiter's own orders with waiter_id"""
    orders = await OrderService(db).list_orders(restaurant_id, status, waiter_id)
    return [to_response(order) for order in orders]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(restaurant_id: str, order_id: str, db: Session = Depends(get_db)):
    order = await OrderService(db).get_order(restaurant_id, order_id)
    return to_response(order)


@router.post("/{order_id}/items/{item_id}/ready", response_model=OrderResponse)
async def mark_item_ready(
    restaurant_id: str, order_id: str, item_id: str, db: Session = Depends(get_db)
):
    """Mark a single item ready; repeating the call changes nothing"""
    order = await OrderService(db).mark_item_ready(restaurant_id, order_id, item_id)
    return to_response(order)


@router.post(
    "/{order_id}/destinations/{destination}/ready", response_model=OrderResponse
)
async def mark_destination_ready(
    restaurant_id: str,
    order_id: str,
    destination: Destination,
    db: Session = Depends(get_db),
):
    """Mark every bar or kitchen item of the order ready"""
    order = await OrderService(db).mark_destination_ready(
        restaurant_id, order_id, destination
    )
    return to_response(order)


@router.post("/{order_id}/complete", response_model=OrderResponse)
async def complete_order(
    restaurant_id: str, order_id: str, db: Session = Depends(get_db)
):
    order = await OrderService(db).complete_order(restaurant_id, order_id)
    return to_response(order)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(restaurant_id: str, order_id: str, db: Session = Depends(get_db)):
    order = await OrderService(db).cancel_order(restaurant_id, order_id)
    return to_response(order)


@router.get("/{order_id}/tickets/{destination}", response_model=Ticket)
async def get_ticket(
    restaurant_id: str,
    order_id: str,
    destination: Destination,
    format: str = Query("json", pattern="^(json|text)$"),
    db: Session = Depends(get_db),
):
    """Bar or kitchen slip for an order, as JSON or printer text"""
    ticket = await OrderService(db).get_ticket(restaurant_id, order_id, destination)
    if format == "text":
        return PlainTextResponse(ticket.render_text())
    return ticket
