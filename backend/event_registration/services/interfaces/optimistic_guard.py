"""
Optimistic capacity guard - version-checked seat claims.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.exceptions import CapacityExceededError
from event_registration.core.logging import get_logger
from event_registration.models.event import EventSession
from event_registration.services.capacity_service import count_entry_registrations
from event_registration.services.interfaces.capacity_guard import CapacityGuard, SeatClaimConflict

logger = get_logger(__name__)


class OptimisticCapacityGuard(CapacityGuard):
    """
    Count, compare, then claim with a version check:

      UPDATE event_sessions SET version = version + 1
      WHERE id = :session_id AND version = :seen_version

    If rows_affected == 0 a concurrent registration claimed seats after we
    counted; its order lines may not be in our count, so the caller must roll
    back and re-run admission. The row lock taken by the UPDATE is held until
    commit, so a competing claim waits and then sees the new version.

    Use when:
    - Moderate contention per session
    - Throughput matters more than strict serialization
    """

    async def claim(self, db: AsyncSession, session: EventSession, requested: int) -> int:
        result = await db.execute(
            select(EventSession.version, EventSession.session_balance_capacity)
            .where(EventSession.id == session.id)
        )
        seen_version, capacity = result.one()

        booked = await count_entry_registrations(db, session.id)
        available = capacity - booked
        if requested > available:
            raise CapacityExceededError(
                session_id=session.id,
                session_name=session.session_name,
                available_spots=available,
                requested=requested,
            )

        update_result = await db.execute(
            update(EventSession)
            .where(
                EventSession.id == session.id,
                EventSession.version == seen_version,
            )
            .values(version=EventSession.version + 1)
            .execution_options(synchronize_session=False)
        )
        if update_result.rowcount == 0:
            logger.info(
                "seat_claim_conflict",
                session_id=session.id,
                seen_version=seen_version,
            )
            raise SeatClaimConflict(session.id)

        return available
