# tableflow/modules/tables/routes/table_routes.py

"""
API routes for table occupancy and service priority.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from ....core.database import get_db
from ..schemas.table_schemas import (
    Table,
    TableCountResponse,
    TableCountUpdate,
    TableInitializeRequest,
    TableOpenRequest,
    TableOverviewResponse,
    TablePriorityResponse,
)
from ..services.table_service import TableService

router = APIRouter(prefix="/api/v1/restaurants/{restaurant_id}/tables", tags=["Tables"])


@router.post("/initialize", response_model=List[Table])
async def initialize_tables(
    restaurant_id: str,
    request: Optional[TableInitializeRequest] = None,
    db: Session = Depends(get_db),
):
    """Provision the restaurant's tables if it has none yet"""
    count = request.table_count if request else None
    return await TableService(db).initialize_tables(restaurant_id, count)


@router.get("", response_model=List[TableOverviewResponse])
async def list_tables(restaurant_id: str, db: Session = Depends(get_db)):
    """All tables with their active order counts"""
    return await TableService(db).overview(restaurant_id)


@router.put("/count", response_model=TableCountResponse)
async def update_table_count(
    restaurant_id: str, update: TableCountUpdate, db: Session = Depends(get_db)
):
    """Change the number of tables; occupied tables are never removed"""
    return await TableService(db).update_table_count(restaurant_id, update.table_count)


@router.post("/{table_id}/open", response_model=Table)
async def open_table(
    restaurant_id: str,
    table_id: str,
    request: TableOpenRequest,
    db: Session = Depends(get_db),
):
    """Seat guests at an empty table"""
    return await TableService(db).open_table(
        restaurant_id, table_id, request.guest_count, request.waiter_id, request.waiter
    )


@router.post("/{table_id}/close", response_model=Table)
async def close_table(restaurant_id: str, table_id: str, db: Session = Depends(get_db)):
    """Free a table once all of its orders are completed or cancelled"""
    return await TableService(db).close_table(restaurant_id, table_id)


@router.get("/priority", response_model=List[TablePriorityResponse])
async def get_priorities(restaurant_id: str, db: Session = Depends(get_db)):
    """Tables with ready items, in the order they should be served"""
    priorities = await TableService(db).priorities(restaurant_id)
    return [
        TablePriorityResponse(
            table_id=priority.table_id,
            table_number=priority.table_number,
            rank=priority.rank,
            treatment=priority.treatment.value,
            ready_item_count=priority.ready_item_count,
            oldest_active_order_at=priority.oldest_active_order_at,
        )
        for priority in priorities
    ]


@router.get("/waiter/{waiter_id}", response_model=List[Table])
async def get_waiter_tables(
    restaurant_id: str, waiter_id: str, db: Session = Depends(get_db)
):
    return await TableService(db).tables_for_waiter(restaurant_id, waiter_id)
