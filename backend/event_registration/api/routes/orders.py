"""
Order endpoints: administrative adjustment and reconciliation lookups.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.security import Identity, get_current_admin, get_current_identity
from event_registration.db.session import get_db
from event_registration.schemas.order import OrderCountResponse, OrderResponse, OrderUpdate
from event_registration.services.cache_service import invalidate_session_cache
from event_registration.services.order_service import (
    adjust_order,
    count_orders,
    get_order_by_transaction,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("/count", response_model=OrderCountResponse)
async def order_count_endpoint(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Number of registrations recorded."""
    return OrderCountResponse(count=await count_orders(db))


@router.get("/by-transaction/{transaction_id}", response_model=OrderResponse)
async def order_by_transaction_endpoint(
    transaction_id: str,
    identity: Identity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Look up an order by its transaction id for support and reconciliation."""
    return await get_order_by_transaction(db, transaction_id)


@router.patch("/{order_id}", response_model=OrderResponse)
async def adjust_order_endpoint(
    order_id: int,
    changes: OrderUpdate,
    identity: Identity = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace an order's lines and/or status (admin override).

    The total is recomputed from live prices without discount; capacity and
    dine-in rules are not re-run.
    """
    order = await adjust_order(db, order_id, changes)
    await invalidate_session_cache()
    return order
