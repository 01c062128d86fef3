"""
Capacity accounting for sessions.

Seats in use are derived, not stored: the sum of quantities on order lines
whose product is an Entry ticket. Food lines never consume seats.

  available_spots = session_balance_capacity - entry quantities booked
  is_full         = available_spots <= 0

Read-only. The registration path calls this from inside its capacity guard so
the count and the order insert share a transaction.
"""

from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.models.event import EventSession
from event_registration.models.order import OrderLine
from event_registration.models.product import Product, PRODUCT_ENTRY


@dataclass(frozen=True)
class SessionAvailability:
    session_id: int
    session_balance_capacity: int
    current_registrations: int

    @property
    def available_spots(self) -> int:
        return self.session_balance_capacity - self.current_registrations

    @property
    def is_full(self) -> bool:
        return is_full(self.available_spots)


def is_full(available_spots: int) -> bool:
    return available_spots <= 0


async def count_entry_registrations(db: AsyncSession, session_id: int) -> int:
    result = await db.execute(
        select(func.coalesce(func.sum(OrderLine.quantity), 0))
        .join(Product, Product.id == OrderLine.product_id)
        .where(
            OrderLine.session_id == session_id,
            Product.product_type == PRODUCT_ENTRY,
        )
    )
    return int(result.scalar_one())


async def count_entry_registrations_bulk(
    db: AsyncSession,
    session_ids: Iterable[int],
) -> dict[int, int]:
    """Entry quantities for many sessions in one query. Sessions with no lines map to 0."""
    session_ids = list(session_ids)
    if not session_ids:
        return {}

    result = await db.execute(
        select(OrderLine.session_id, func.sum(OrderLine.quantity))
        .join(Product, Product.id == OrderLine.product_id)
        .where(
            OrderLine.session_id.in_(session_ids),
            Product.product_type == PRODUCT_ENTRY,
        )
        .group_by(OrderLine.session_id)
    )
    counts = {session_id: 0 for session_id in session_ids}
    counts.update({session_id: int(total or 0) for session_id, total in result.all()})
    return counts


async def available_spots(db: AsyncSession, session: EventSession) -> int:
    booked = await count_entry_registrations(db, session.id)
    return session.session_balance_capacity - booked


async def session_availability(db: AsyncSession, session: EventSession) -> SessionAvailability:
    return SessionAvailability(
        session_id=session.id,
        session_balance_capacity=session.session_balance_capacity,
        current_registrations=await count_entry_registrations(db, session.id),
    )
