"""
Pessimistic capacity guard - row lock on the session.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.exceptions import CapacityExceededError
from event_registration.models.event import EventSession
from event_registration.services.capacity_service import count_entry_registrations
from event_registration.services.interfaces.capacity_guard import CapacityGuard


class LockingCapacityGuard(CapacityGuard):
    """
    SELECT ... FOR UPDATE on the session row, then count and compare.

    The lock serializes every registration for the same session until the
    registration transaction ends, so no conflict is ever reported.

    Use when:
    - Few concurrent registrations per session
    - Retries are undesirable
    """

    async def claim(self, db: AsyncSession, session: EventSession, requested: int) -> int:
        result = await db.execute(
            select(EventSession.session_balance_capacity)
            .where(EventSession.id == session.id)
            .with_for_update()
        )
        capacity = result.scalar_one()

        booked = await count_entry_registrations(db, session.id)
        available = capacity - booked
        if requested > available:
            raise CapacityExceededError(
                session_id=session.id,
                session_name=session.session_name,
                available_spots=available,
                requested=requested,
            )
        return available
