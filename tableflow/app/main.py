from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tableflow.core.config import settings
from tableflow.core.database import init_db
from tableflow.core.exceptions import register_exception_handlers
from tableflow.core.logging_config import configure_logging

# ========== Menu ==========
from tableflow.modules.menu.routes.menu_routes import router as menu_router

# ========== Tables ==========
from tableflow.modules.tables.routes.table_routes import router as table_router

# ========== Orders ==========
from tableflow.modules.orders.routes.order_routes import router as order_router

# ========== Kitchen Display System (KDS) ==========
from tableflow.modules.kds.routes.kds_routes import router as kds_router
from tableflow.modules.kds.services.kds_websocket_manager import kds_websocket_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging and storage on startup, close screens on shutdown"""
    configure_logging()
    init_db()
    logger.info(f"Tableflow started ({settings.environment})")
    yield
    await kds_websocket_manager.close_all_connections()
    logger.info("Tableflow stopped")


app = FastAPI(
    title="Tableflow - Restaurant Service API",
    description="""
    Waiter, bar and kitchen coordination for a single restaurant floor.

    ## Features

    * **Tables** - Seat guests, close tables, rank tables waiting to be served
    * **Orders** - Submit orders, mark items ready, complete or cancel orders
    * **Kitchen Display System** - Live bar and kitchen boards with merged items
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(menu_router)
app.include_router(table_router)
app.include_router(order_router)
app.include_router(kds_router)


@app.get("/")
def read_root():
    return {"message": "Tableflow backend is running"}


def run():
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
