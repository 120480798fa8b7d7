"""Test configuration and fixtures"""

import os

# Point the application engine at SQLite before pos_app is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from pos_app.main import app
from pos_app.database import Base, get_db
from pos_app.models.table import Table, TableStatus
from pos_app.models.user import User, UserRole
from pos_app.api.auth import create_access_token, get_password_hash
from pos_app.api.reservations import get_reservation_manager
from pos_app.services.reservations import ReservationManager
from pos_app.services.unit_of_work import unit_of_work_factory


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Frozen "now" for booking-time rules
NOW = datetime(2030, 6, 1, 12, 0)
BOOKING_DATE = "2030-06-02"


class FixedClock:
    """Clock that always reports the same moment"""

    def __init__(self, now: datetime = NOW):
        self._now = now

    def now(self) -> datetime:
        return self._now


@pytest.fixture
async def engine():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def manager(session_factory, clock):
    return ReservationManager(unit_of_work_factory(session_factory), clock=clock)


@pytest.fixture
async def test_tables(test_db):
    """T01 seats 2, T02 and T03 seat 4, T04 seats 8"""
    tables = [
        Table(table_number="T01", capacity=2, status=TableStatus.AVAILABLE),
        Table(table_number="T02", capacity=4, status=TableStatus.AVAILABLE),
        Table(table_number="T03", capacity=4, status=TableStatus.AVAILABLE),
        Table(table_number="T04", capacity=8, status=TableStatus.AVAILABLE),
    ]

    for table in tables:
        test_db.add(table)

    await test_db.commit()
    return {table.table_number: table for table in tables}


@pytest.fixture
def reservation_payload():
    """Build a create-reservation request body"""
    def build(pax=2, date=BOOKING_DATE, time="19:00", table_id=None, phone="+628111000111", notes=None):
        return {
            "customer": {
                "title": "Ms",
                "first_name": "Alice",
                "last_name": "Wong",
                "phone": phone,
                "email": "alice@example.com",
            },
            "reservation": {
                "pax_number": pax,
                "reservation_date": date,
                "reservation_time": time,
                "table_id": table_id,
                "notes": notes,
            },
        }
    return build


@pytest.fixture
async def test_user(test_db):
    """Create a staff user"""
    user = User(
        email="host@example.com",
        hashed_password=get_password_hash("hostpass123"),
        full_name="Front Desk",
        role=UserRole.STAFF,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_admin_user(test_db):
    """Create an admin user"""
    user = User(
        email="admin@example.com",
        hashed_password=get_password_hash("adminpass123"),
        full_name="Floor Manager",
        role=UserRole.ADMIN,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def client(session_factory, manager):
    """Create test client wired to the test database and clock"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reservation_manager] = lambda: manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(client, test_user):
    """Create staff authenticated test client"""
    token = create_access_token(test_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client


@pytest.fixture
async def admin_client(client, test_admin_user):
    """Create admin authenticated test client"""
    token = create_access_token(test_admin_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client
