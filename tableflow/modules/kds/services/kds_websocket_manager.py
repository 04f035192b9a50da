# tableflow/modules/kds/services/kds_websocket_manager.py

"""
WebSocket manager pushing rebuilt bar/kitchen boards to connected screens.
"""

from fastapi import WebSocket
from typing import Dict, List, Tuple
from datetime import datetime
import asyncio
import logging

from .kds_board_service import build_destination_board
from ..schemas.kds_schemas import BoardResponse, KDSWebSocketMessage
from ...menu.models.menu_models import Destination
from ...orders.services.order_store import active_orders_topic
from ....core.change_feed import ChangeFeed, Subscription, change_feed

logger = logging.getLogger(__name__)

ScreenKey = Tuple[str, Destination]


class KDSWebSocketManager:
    """Manages board connections per (restaurant, destination)"""

    def __init__(self, feed: ChangeFeed = change_feed):
        self.feed = feed
        self.active_connections: Dict[ScreenKey, List[WebSocket]] = {}
        self.subscriptions: Dict[str, Subscription] = {}
        self.order_counts: Dict[ScreenKey, int] = {}
        self.lock = asyncio.Lock()

    async def connect(
        self, websocket: WebSocket, restaurant_id: str, destination: Destination
    ):
        """Accept a screen and start following the restaurant's orders"""
        await websocket.accept()
        key = (restaurant_id, destination)

        async with self.lock:
            self.active_connections.setdefault(key, []).append(websocket)
            if restaurant_id not in self.subscriptions:
                self.subscriptions[restaurant_id] = self.feed.subscribe(
                    active_orders_topic(restaurant_id),
                    lambda orders, rid=restaurant_id: self.on_orders_changed(rid, orders),
                )

        logger.info(
            f"WebSocket connected for {destination.value} of restaurant {restaurant_id}. "
            f"Total connections: {len(self.active_connections.get(key, []))}"
        )

    def disconnect(
        self, websocket: WebSocket, restaurant_id: str, destination: Destination
    ):
        key = (restaurant_id, destination)
        try:
            self.active_connections[key].remove(websocket)
            if not self.active_connections[key]:
                del self.active_connections[key]
                self.order_counts.pop(key, None)
            logger.info(
                f"WebSocket disconnected for {destination.value} of restaurant {restaurant_id}"
            )
        except (KeyError, ValueError):
            logger.warning(
                f"WebSocket not found in active connections for {key}"
            )

        if not any(rid == restaurant_id for rid, _ in self.active_connections):
            subscription = self.subscriptions.pop(restaurant_id, None)
            if subscription:
                subscription.cancel()

    async def send_board(self, websocket: WebSocket, restaurant_id: str, orders, destination):
        """Send a freshly built board to a single screen"""
        board = build_destination_board(orders, destination)
        self.order_counts[(restaurant_id, destination)] = board.order_count
        await websocket.send_text(
            self._message("board", restaurant_id, destination, board).model_dump_json()
        )

    def _message(
        self, message_type: str, restaurant_id: str, destination, board=None
    ) -> KDSWebSocketMessage:
        return KDSWebSocketMessage(
            type=message_type,
            restaurant_id=restaurant_id,
            destination=destination,
            data=(
                BoardResponse.from_board(board).model_dump(mode="json")
                if board is not None
                else None
            ),
            timestamp=datetime.utcnow(),
        )

    async def on_orders_changed(self, restaurant_id: str, orders):
        """Change-feed callback: rebuild and push every connected board"""
        for destination in Destination:
            key = (restaurant_id, destination)
            if key not in self.active_connections:
                continue

            board = build_destination_board(orders, destination)
            previous = self.order_counts.get(key, 0)
            self.order_counts[key] = board.order_count

            if board.order_count > previous:
                await self.broadcast(key, self._message("new_order", restaurant_id, destination))
            await self.broadcast(key, self._message("board", restaurant_id, destination, board))

    async def broadcast(self, key: ScreenKey, message: KDSWebSocketMessage):
        """Broadcast a message to all screens for a key"""
        if key not in self.active_connections:
            return

        dead_connections = []
        message_text = message.model_dump_json(exclude_none=True)

        for websocket in list(self.active_connections[key]):
            try:
                await websocket.send_text(message_text)
            except Exception as e:
                logger.error(f"Error broadcasting to {key}: {str(e)}")
                dead_connections.append(websocket)

        for websocket in dead_connections:
            self.disconnect(websocket, *key)

    def get_connection_count(self, restaurant_id: str, destination: Destination) -> int:
        return len(self.active_connections.get((restaurant_id, destination), []))

    async def close_all_connections(self):
        """Close all WebSocket connections"""
        tasks = []
        for connections in self.active_connections.values():
            for websocket in connections:
                tasks.append(websocket.close())

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self.active_connections.clear()
        self.order_counts.clear()
        for subscription in self.subscriptions.values():
            subscription.cancel()
        self.subscriptions.clear()
        logger.info("All WebSocket connections closed")


# Global instance
kds_websocket_manager = KDSWebSocketManager()
