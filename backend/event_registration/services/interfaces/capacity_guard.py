"""
Capacity guard strategy interface.
Allows swapping between different concurrency control approaches for seat claims.
"""

from abc import ABC, abstractmethod

from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.models.event import EventSession


class SeatClaimConflict(Exception):
    """Another transaction claimed seats in the session between our count and our claim."""

    def __init__(self, session_id: int):
        self.session_id = session_id
        super().__init__(f"Concurrent seat claim on session {session_id}")


class CapacityGuard(ABC):
    """
    Interface for claiming Entry seats in a session.

    Implementations:
    - OptimisticCapacityGuard: version-checked claim, caller retries on conflict
    - LockingCapacityGuard: SELECT FOR UPDATE on the session row

    `claim` runs inside the registration transaction. Once it returns, the
    caller may insert order lines for `requested` Entry units; the claim holds
    until that transaction commits or rolls back.
    """

    @abstractmethod
    async def claim(self, db: AsyncSession, session: EventSession, requested: int) -> int:
        """
        Check capacity and claim seats for this transaction.

        Args:
            db: Session of the registration transaction
            session: Session the seats are requested in
            requested: Entry units requested

        Returns:
            Available spots before the claim

        Raises:
            CapacityExceededError: requested exceeds available spots
            SeatClaimConflict: a concurrent registration won the race; retry
        """
        pass
