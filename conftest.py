import os

os.environ.setdefault("TABLEFLOW_DATABASE_URL", "sqlite://")
os.environ.setdefault("TABLEFLOW_ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from tableflow.core.change_feed import ChangeFeed, change_feed
from tableflow.core.database import Base, SessionLocal, engine, get_db
from tableflow.modules.menu.models.menu_models import Destination, MenuItemRecord
from tableflow.modules.orders.models.order_models import OrderRecord  # noqa: F401
from tableflow.modules.tables.models.table_models import TableRecord  # noqa: F401
from tableflow.modules.tables.services.table_store import TableStore
from tests.factories.base import BaseFactory

RESTAURANT_ID = "resto-1"


@pytest.fixture(scope="function")
def db():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    BaseFactory.use_session(session)
    try:
        yield session
    finally:
        BaseFactory.reset_session()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def feed():
    """Isolated change feed so tests do not see each other's subscribers."""
    return ChangeFeed()


@pytest.fixture(autouse=True)
def reset_global_feed():
    yield
    change_feed.clear()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database dependency override."""
    from tableflow.app.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def restaurant_id():
    return RESTAURANT_ID


@pytest.fixture
def menu_items(db):
    """Soup and burger from the kitchen, cola and beer from the bar."""
    records = [
        MenuItemRecord(
            id="soup", restaurant_id=RESTAURANT_ID, name="Soup", price=6.5,
            category="Starters", destination=Destination.KITCHEN.value,
        ),
        MenuItemRecord(
            id="burger", restaurant_id=RESTAURANT_ID, name="Burger", price=14.0,
            category="Mains", destination=Destination.KITCHEN.value,
        ),
        MenuItemRecord(
            id="cola", restaurant_id=RESTAURANT_ID, name="Cola", price=3.0,
            category="Drinks", sub_category="Soft", destination=Destination.BAR.value,
        ),
        MenuItemRecord(
            id="beer", restaurant_id=RESTAURANT_ID, name="Beer", price=5.5,
            category="Drinks", sub_category="Draft", destination=Destination.BAR.value,
        ),
    ]
    db.add_all(records)
    db.commit()
    return {record.id: record for record in records}


@pytest_asyncio.fixture
async def tables(db, feed):
    """Ten empty tables for the test restaurant."""
    return await TableStore(db, feed).initialize_tables(RESTAURANT_ID, 10)
