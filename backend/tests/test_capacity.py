"""
Tests for seat accounting and the capacity guards.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select, update

from event_registration.core.exceptions import CapacityExceededError
from event_registration.models.event import EventSession
from event_registration.models.order import OrderLine, OrderMaster
from event_registration.services import strategy_factory
from event_registration.services.capacity_service import (
    available_spots,
    is_full,
    count_entry_registrations,
    count_entry_registrations_bulk,
    session_availability,
)
from event_registration.services.catalog_service import get_session
from event_registration.services.interfaces import (
    LockingCapacityGuard,
    OptimisticCapacityGuard,
    SeatClaimConflict,
)
from event_registration.services.interfaces import optimistic_guard
from tests.factories import book_entries


@pytest.mark.asyncio
async def test_count_ignores_food_lines(db_session, catalog):
    session_id = catalog.session_ids[0]
    db_session.add(
        OrderMaster(
            registrant_kind="MEMBER",
            member_id=catalog.member_id,
            total_cost=Decimal("40.00"),
            transaction_id="MBR-1-FOOD",
            order_lines=[
                OrderLine(
                    product_id=catalog.entry_product_id,
                    product_type_id=catalog.entry_types["Adult"],
                    session_id=session_id,
                    quantity=2,
                    unit_price=Decimal("50.00"),
                ),
                OrderLine(
                    product_id=catalog.food_product_id,
                    product_type_id=catalog.dine_in_types["Adult"],
                    session_id=session_id,
                    quantity=2,
                    unit_price=Decimal("20.00"),
                ),
            ],
        )
    )
    await db_session.commit()

    assert await count_entry_registrations(db_session, session_id) == 2


@pytest.mark.asyncio
async def test_count_includes_every_order_status(db_session, catalog):
    session_id = catalog.session_ids[0]
    await book_entries(db_session, catalog, session_id, 3, status="CONFIRMED")
    await book_entries(db_session, catalog, session_id, 2, status="CANCELLED")

    assert await count_entry_registrations(db_session, session_id) == 5


@pytest.mark.asyncio
async def test_bulk_count_defaults_to_zero(db_session, catalog):
    first, second = catalog.session_ids[:2]
    await book_entries(db_session, catalog, first, 4)

    counts = await count_entry_registrations_bulk(db_session, [first, second])

    assert counts == {first: 4, second: 0}


@pytest.mark.asyncio
async def test_availability_of_full_session(db_session, catalog):
    session_id = catalog.session_ids[0]
    await book_entries(db_session, catalog, session_id, 10)

    session = await get_session(db_session, session_id)
    availability = await session_availability(db_session, session)

    assert availability.current_registrations == 10
    assert availability.available_spots == 0
    assert availability.is_full


@pytest.mark.asyncio
async def test_optimistic_claim_bumps_version(db_session, catalog):
    session = await get_session(db_session, catalog.session_ids[0])
    start_version = session.version

    available = await OptimisticCapacityGuard().claim(db_session, session, 3)
    await db_session.commit()

    assert available == 10
    result = await db_session.execute(
        select(EventSession.version).where(EventSession.id == catalog.session_ids[0])
    )
    assert result.scalar_one() == start_version + 1


@pytest.mark.asyncio
async def test_optimistic_claim_rejects_over_capacity(db_session, catalog):
    session_id = catalog.session_ids[0]
    await book_entries(db_session, catalog, session_id, 9)
    session = await get_session(db_session, session_id)

    with pytest.raises(CapacityExceededError) as exc_info:
        await OptimisticCapacityGuard().claim(db_session, session, 2)

    assert exc_info.value.status_code == 409
    assert exc_info.value.context["available_spots"] == 1
    assert exc_info.value.context["requested"] == 2


@pytest.mark.asyncio
async def test_optimistic_claim_conflicts_when_version_moves(db_session, session_factory, catalog, monkeypatch):
    """A claim committed by another transaction between our count and our update is a conflict."""
    session_id = catalog.session_ids[0]
    real_count = optimistic_guard.count_entry_registrations

    async def count_while_competitor_claims(db, sid):
        async with session_factory() as competitor:
            await competitor.execute(
                update(EventSession)
                .where(EventSession.id == sid)
                .values(version=EventSession.version + 1)
            )
            await competitor.commit()
        return await real_count(db, sid)

    monkeypatch.setattr(optimistic_guard, "count_entry_registrations", count_while_competitor_claims)
    session = await get_session(db_session, session_id)

    with pytest.raises(SeatClaimConflict) as exc_info:
        await OptimisticCapacityGuard().claim(db_session, session, 1)

    assert exc_info.value.session_id == session_id


@pytest.mark.asyncio
async def test_locking_claim_checks_capacity(db_session, catalog):
    session_id = catalog.session_ids[0]
    await book_entries(db_session, catalog, session_id, 10)
    session = await get_session(db_session, session_id)

    with pytest.raises(CapacityExceededError) as exc_info:
        await LockingCapacityGuard().claim(db_session, session, 1)

    assert exc_info.value.context["available_spots"] == 0


@pytest.mark.asyncio
async def test_locking_claim_returns_available(db_session, catalog):
    session = await get_session(db_session, catalog.session_ids[1])

    assert await LockingCapacityGuard().claim(db_session, session, 10) == 10


def test_strategy_factory_selects_configured_guard(monkeypatch):
    settings = strategy_factory.get_settings()

    monkeypatch.setattr(settings, "CAPACITY_STRATEGY", "locking")
    assert isinstance(strategy_factory.get_capacity_guard_strategy(), LockingCapacityGuard)

    monkeypatch.setattr(settings, "CAPACITY_STRATEGY", "optimistic")
    assert isinstance(strategy_factory.get_capacity_guard_strategy(), OptimisticCapacityGuard)

    monkeypatch.setattr(settings, "CAPACITY_STRATEGY", "lua")
    with pytest.raises(ValueError):
        strategy_factory.get_capacity_guard_strategy()


@pytest.mark.asyncio
async def test_available_spots_after_bookings(db_session, catalog):
    session_id = catalog.session_ids[0]
    await book_entries(db_session, catalog, session_id, 7)
    session = await get_session(db_session, session_id)

    spots = await available_spots(db_session, session)

    assert spots == 3
    assert not is_full(spots)
    assert is_full(0)
    assert is_full(-2)
