# tableflow/modules/kds/services/__init__.py

"""
Kitchen Display System services.
"""

from .kds_board_service import KDSBoardService, DestinationBoard, build_destination_board
from .kds_websocket_manager import KDSWebSocketManager, kds_websocket_manager

__all__ = [
    "KDSBoardService",
    "DestinationBoard",
    "build_destination_board",
    "KDSWebSocketManager",
    "kds_websocket_manager",
]
