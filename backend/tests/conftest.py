"""
Pytest fixtures for test database, client, catalog and authentication.

Each test gets a fresh SQLite database file. Fixtures seed through their own
session; every HTTP request gets a new session from the same factory, the way
get_db hands them out in production, so rollbacks inside a request never
touch fixture objects.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from event_registration.main import app
from event_registration.db.base import Base
from event_registration.db.session import get_db
from event_registration.core.security import create_access_token
from event_registration.models import (
    Event, EventSession, Member, Product, ProductSessionMap, ProductType, Venue,
)

SESSION_COUNT = 5
SESSION_CAPACITY = 10


@dataclass
class Catalog:
    """Ids of the seeded catalog plus request-building helpers."""

    event_id: int
    session_ids: list[int]
    member_id: int
    entry_product_id: int
    food_product_id: int
    entry_types: dict[str, int] = field(default_factory=dict)
    dine_in_types: dict[str, int] = field(default_factory=dict)
    packet_type_id: int = 0
    other_event_session_id: int = 0

    def entry(self, quantity: int = 1, size: str = "Adult") -> dict:
        return {
            "product_id": self.entry_product_id,
            "product_type_id": self.entry_types[size],
            "quantity": quantity,
        }

    def dine_in(self, quantity: int, size: str = "Adult") -> dict:
        return {
            "product_id": self.food_product_id,
            "product_type_id": self.dine_in_types[size],
            "quantity": quantity,
        }

    def packet(self, quantity: int) -> dict:
        return {
            "product_id": self.food_product_id,
            "product_type_id": self.packet_type_id,
            "quantity": quantity,
        }

    def guest_payload(self, selections: list[dict], **overrides) -> dict:
        payload = {
            "guest_name": "Asha Rao",
            "guest_email": "asha@example.com",
            "adults": 1,
            "children": 0,
            "infants": 0,
            "elder": 0,
            "member_id": self.member_id,
            "event_id": self.event_id,
            "session_selections": selections,
        }
        payload.update(overrides)
        return payload



@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables in a per-test database, yield a session factory, then dispose."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'registration_test.db'}",
        poolclass=NullPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests each get a fresh session from the test database."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def catalog(db_session: AsyncSession) -> Catalog:
    """
    One event with five future sessions of 10 seats each. Every session sells:
      ENTRY  - Adult $50, Children $25, Elder $40
      DINNER - DINE-IN Adult $20, Children $10, Elder $15; PACKET Adult $12
    Plus a second event with one session, for foreign-session checks.
    """
    venue = Venue(name="Community Hall", address="12 Park Road")
    member = Member(member_name="Ravi Menon", email="ravi@example.com")
    db_session.add_all([venue, member])
    await db_session.flush()

    start = date.today() + timedelta(days=30)
    event = Event(
        event_name="Durga Puja 2026",
        start_date=start,
        end_date=start + timedelta(days=SESSION_COUNT - 1),
        venue_id=venue.id,
    )
    other_event = Event(event_name="Winter Social", start_date=start, end_date=start)
    db_session.add_all([event, other_event])
    await db_session.flush()

    entry = Product(product_code="ENTRY", product_name="Entry Pass", product_type="Entry")
    dinner = Product(product_code="DINNER", product_name="Dinner", product_type="Food")
    db_session.add_all([entry, dinner])
    await db_session.flush()

    entry_types = {
        "Adult": ProductType(product_id=entry.id, product_size="Adult", product_price=Decimal("50.00")),
        "Children": ProductType(product_id=entry.id, product_size="Children", product_price=Decimal("25.00")),
        "Elder": ProductType(product_id=entry.id, product_size="Elder", product_price=Decimal("40.00")),
    }
    dine_in_types = {
        "Adult": ProductType(
            product_id=dinner.id, product_size="Adult", product_choice="NON-VEG",
            product_pref="CHICKEN", product_subtype="DINE-IN", product_price=Decimal("20.00"),
        ),
        "Children": ProductType(
            product_id=dinner.id, product_size="Children", product_choice="VEG",
            product_subtype="DINE-IN", product_price=Decimal("10.00"),
        ),
        "Elder": ProductType(
            product_id=dinner.id, product_size="Elder", product_choice="VEG",
            product_subtype="DINE-IN", product_price=Decimal("15.00"),
        ),
    }
    packet = ProductType(
        product_id=dinner.id, product_size="Adult", product_choice="VEG",
        product_subtype="PACKET", product_price=Decimal("12.00"),
    )
    db_session.add_all([*entry_types.values(), *dine_in_types.values(), packet])

    sessions = [
        EventSession(
            event_id=event.id,
            session_name=f"Day {i + 1}",
            session_date=start + timedelta(days=i),
            start_time=time(18, 0),
            end_time=time(22, 0),
            session_balance_capacity=SESSION_CAPACITY,
        )
        for i in range(SESSION_COUNT)
    ]
    other_session = EventSession(
        event_id=other_event.id,
        session_name="Social Night",
        session_date=start,
        start_time=time(19, 0),
        end_time=time(23, 0),
        session_balance_capacity=SESSION_CAPACITY,
    )
    db_session.add_all([*sessions, other_session])
    await db_session.flush()

    for s in [*sessions, other_session]:
        db_session.add_all([
            ProductSessionMap(session_id=s.id, product_id=entry.id),
            ProductSessionMap(session_id=s.id, product_id=dinner.id),
        ])

    await db_session.commit()

    return Catalog(
        event_id=event.id,
        session_ids=[s.id for s in sessions],
        member_id=member.id,
        entry_product_id=entry.id,
        food_product_id=dinner.id,
        entry_types={size: pt.id for size, pt in entry_types.items()},
        dine_in_types={size: pt.id for size, pt in dine_in_types.items()},
        packet_type_id=packet.id,
        other_event_session_id=other_session.id,
    )


@pytest_asyncio.fixture
async def member_headers(catalog: Catalog) -> dict:
    token = create_access_token(data={"sub": "7", "role": "MEMBER", "member_id": catalog.member_id})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_headers() -> dict:
    token = create_access_token(data={"sub": "1", "role": "ADMIN"})
    return {"Authorization": f"Bearer {token}"}
