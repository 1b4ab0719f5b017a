import os

# Settings are read at import time
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LOG_DIR", "test_logs")
os.environ.setdefault("LOCAL_LEDGER_PATH", "test_data/local_orders.json")

import httpx
import pytest
from datetime import datetime, timedelta, UTC
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.orm import Session
from typing import Generator

from main import app
from core.config import settings
from core.database import Base, create_backend
from models.products import Product
from services.courier_service import CourierClient
from services.ledger import MemoryLedger
from utils.deps import get_db, get_ledger, get_courier

# SYNC SQLite for testing (matches sync service layer), foreign keys enforced
test_backend = create_backend("sqlite:///./test.db")
engine = test_backend.engine
TestingSessionLocal = test_backend.session_factory


def make_courier(handler=None, api_key="test-api-key", secret_key="test-secret-key") -> CourierClient:
    """Courier client whose HTTP calls are answered by handler instead of the network."""
    transport = httpx.MockTransport(handler) if handler else None
    return CourierClient(
        api_key=api_key,
        secret_key=secret_key,
        base_url="https://courier.test/api/v1",
        timeout=5,
        note="test",
        transport=transport,
    )


def make_token(role: str = "admin", sub: str = "admin-1", expires_in: timedelta = timedelta(minutes=15)) -> str:
    payload = {
        "sub": sub,
        "email": f"{sub}@example.com",
        "role": role,
        "exp": datetime.now(UTC) + expires_in,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    Uses SYNC SQLAlchemy to match the service layer.
    """
    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    # Drop all tables (cleanup)
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def ledger() -> MemoryLedger:
    return MemoryLedger()


@pytest.fixture
async def client(session: Session, ledger: MemoryLedger):
    """
    Yields an HTTP client that interacts with the app using the test database,
    an in-memory ledger and an unconfigured courier.
    The client is async (for FastAPI), but the DB session is sync.
    """
    # Override the get_db dependency to use our test session
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_courier] = lambda: make_courier(api_key="", secret_key="")

    # Create async client for FastAPI
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    # Clean up
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def customer_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(role='customer', sub='customer-1')}"}


@pytest.fixture
def products(session: Session) -> list[Product]:
    """Two products: a shirt with plenty of stock and a panjabi with little."""
    shirt = Product(name="Cotton Shirt", category="Men", price=990, cost_price=600,
                    stock=10, min_stock_level=3, sku="SH-001", unit="pcs")
    panjabi = Product(name="Eid Panjabi", category="Men", price=2500, cost_price=1500,
                      stock=1, sku="PJ-001", unit="pcs")
    session.add_all([shirt, panjabi])
    session.commit()
    session.refresh(shirt)
    session.refresh(panjabi)
    return [shirt, panjabi]


@pytest.fixture
def checkout_payload(products) -> dict:
    """A valid checkout: two shirts inside Dhaka with SAVE10 applied (total 1862)."""
    shirt = products[0]
    return {
        "name": "Rahim Uddin",
        "phone": "01712345678",
        "address": "House 12, Road 5, Dhanmondi, Dhaka",
        "items": [{"product_id": shirt.id, "quantity": 2, "price": 990, "name": shirt.name}],
        "total": 1862,
        "payment_method": "cash_on_delivery",
    }
