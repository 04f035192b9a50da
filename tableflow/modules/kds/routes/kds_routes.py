# tableflow/modules/kds/routes/kds_routes.py

"""
API routes for the bar and kitchen display boards.
"""

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session
import logging

from ....core.database import get_db
from ...menu.models.menu_models import Destination
from ...orders.services.order_store import OrderStore
from ..schemas.kds_schemas import BoardResponse, GroupReadyRequest, GroupReadyResponse
from ..services.kds_board_service import KDSBoardService
from ..services.kds_websocket_manager import kds_websocket_manager

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/restaurants/{restaurant_id}/kds", tags=["Kitchen Display System"]
)


@router.get("/{destination}", response_model=BoardResponse)
async def get_board(
    restaurant_id: str, destination: Destination, db: Session = Depends(get_db)
):
    """Current board for the bar or the kitchen"""
    service = KDSBoardService(db)
    board = await service.get_board(restaurant_id, destination)
    return BoardResponse.from_board(board)


@router.post("/{destination}/groups/ready", response_model=GroupReadyResponse)
async def mark_group_ready(
    restaurant_id: str,
    destination: Destination,
    request: GroupReadyRequest,
    db: Session = Depends(get_db),
):
    """Mark a merged group ready in every order that contributed to it"""
    service = KDSBoardService(db)
    result = await service.mark_group_ready(restaurant_id, destination, request.group_id)
    return GroupReadyResponse.model_validate(result)


@router.websocket("/{destination}/ws")
async def board_websocket(
    websocket: WebSocket,
    restaurant_id: str,
    destination: Destination,
    db: Session = Depends(get_db),
):
    """Push the board on connect and after every order change"""
    await kds_websocket_manager.connect(websocket, restaurant_id, destination)

    try:
        orders = await OrderStore(db).list_active_orders(restaurant_id)
        await kds_websocket_manager.send_board(
            websocket, restaurant_id, orders, destination
        )

        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")

    except WebSocketDisconnect:
        kds_websocket_manager.disconnect(websocket, restaurant_id, destination)
    except Exception as e:
        logger.error(f"WebSocket error for {destination.value} board: {str(e)}")
        kds_websocket_manager.disconnect(websocket, restaurant_id, destination)
