"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .capacity_guard import CapacityGuard, SeatClaimConflict
from .optimistic_guard import OptimisticCapacityGuard
from .locking_guard import LockingCapacityGuard

__all__ = ['CapacityGuard', 'SeatClaimConflict', 'OptimisticCapacityGuard', 'LockingCapacityGuard']
