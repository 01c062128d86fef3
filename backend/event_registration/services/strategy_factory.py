"""
Capacity guard factory.
Configures which seat-claim strategy registrations use.
"""

from typing import Optional

from event_registration.services.interfaces.capacity_guard import CapacityGuard
from event_registration.services.interfaces.optimistic_guard import OptimisticCapacityGuard
from event_registration.services.interfaces.locking_guard import LockingCapacityGuard
from event_registration.core.config import get_settings


def get_capacity_guard_strategy() -> CapacityGuard:
    """
    Build the configured capacity guard.

    Selected via the CAPACITY_STRATEGY setting:
    - optimistic (default): OptimisticCapacityGuard
    - locking: LockingCapacityGuard
    """
    strategy = get_settings().CAPACITY_STRATEGY.lower()

    if strategy == 'locking':
        return LockingCapacityGuard()
    elif strategy == 'optimistic':
        return OptimisticCapacityGuard()
    raise ValueError(f"Unknown CAPACITY_STRATEGY: {strategy}")


# Singleton instance
_guard: Optional[CapacityGuard] = None

def get_capacity_guard() -> CapacityGuard:
    """Get capacity guard singleton."""
    global _guard
    if _guard is None:
        _guard = get_capacity_guard_strategy()
    return _guard
