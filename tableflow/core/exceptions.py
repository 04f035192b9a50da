"""
Domain exceptions and handlers for consistent API error responses.

Every error the order and table lifecycles raise is recoverable: it is
rendered to the staff member as an actionable message and never treated as
fatal. Errors derive from ``APIError`` so services can raise them directly
and the API layer renders them with a single handler.
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Base API error with consistent structure"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

    def __str__(self) -> str:
        return str(self.detail)


class NotFoundError(APIError):
    """Resource not found error"""

    def __init__(
        self, detail: str = "Resource not found", error_code: str = "NOT_FOUND"
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail=detail, error_code=error_code
        )


class ItemNotFoundError(NotFoundError):
    """Order item id not present in the order"""

    def __init__(self, order_id: str, item_id: str):
        super().__init__(
            detail=f"Item {item_id} not found in order {order_id}",
            error_code="ITEM_NOT_FOUND",
        )
        self.order_id = order_id
        self.item_id = item_id


class InvalidArgumentError(APIError):
    """Argument outside its allowed range"""

    def __init__(
        self, detail: str = "Invalid argument", error_code: str = "INVALID_ARGUMENT"
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )


class ConflictError(APIError):
    """Resource conflict error"""

    def __init__(self, detail: str = "Resource conflict", error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT, detail=detail, error_code=error_code
        )


class InvalidStateError(ConflictError):
    """Lifecycle transition attempted from the wrong state"""

    def __init__(self, detail: str = "Invalid state transition"):
        super().__init__(detail=detail, error_code="INVALID_STATE")


class TableHasActiveOrdersError(ConflictError):
    """Table close blocked by outstanding orders"""

    def __init__(self, table_number: int, active_order_ids: List[str]):
        super().__init__(
            detail=(
                f"Table {table_number} still has {len(active_order_ids)} active "
                f"order(s), complete them before closing the table"
            ),
            error_code="TABLE_HAS_ACTIVE_ORDERS",
        )
        self.table_number = table_number
        self.active_order_ids = list(active_order_ids)


class ConcurrentWriteConflictError(ConflictError):
    """The store detected a write against a stale version"""

    def __init__(self, entity: str, entity_id: str, expected_version: int):
        super().__init__(
            detail=(
                f"{entity} {entity_id} was modified by another terminal "
                f"(expected version {expected_version}), reload and try again"
            ),
            error_code="CONCURRENT_WRITE_CONFLICT",
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version


class PartialPropagationError(ConflictError):
    """A merged group was only partially marked ready"""

    def __init__(self, updated_order_ids: List[str], failed_orders: Dict[str, str]):
        super().__init__(
            detail=(
                f"Marked ready in {len(updated_order_ids)} order(s), failed in "
                f"{len(failed_orders)}: {', '.join(sorted(failed_orders))}"
            ),
            error_code="PARTIAL_PROPAGATION",
        )
        self.updated_order_ids = list(updated_order_ids)
        self.failed_orders = dict(failed_orders)

    @property
    def failed_order_ids(self) -> List[str]:
        return sorted(self.failed_orders)


async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors"""
    logger.warning(f"{type(exc).__name__} at {request.url.path}: {exc.detail}")
    content = {
        "detail": exc.detail,
        "error_code": exc.error_code,
        "path": str(request.url.path),
    }
    if isinstance(exc, PartialPropagationError):
        content["updated_order_ids"] = exc.updated_order_ids
        content["failed_orders"] = exc.failed_orders
    elif isinstance(exc, TableHasActiveOrdersError):
        content["active_order_ids"] = exc.active_order_ids
    return JSONResponse(
        status_code=exc.status_code, content=content, headers=exc.headers
    )


async def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
    """Convert ValueError to consistent API response"""
    logger.warning(f"ValueError at {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": str(exc),
            "error_code": "VALIDATION_ERROR",
            "path": str(request.url.path),
        },
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app"""
    app.add_exception_handler(APIError, handle_api_error)
    app.add_exception_handler(ValueError, handle_value_error)
