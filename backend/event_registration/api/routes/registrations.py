"""
Registration endpoints: guest, member and price quotes.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.security import Identity, get_current_member
from event_registration.db.session import get_db
from event_registration.schemas.registration import (
    GuestRegistrationCreate,
    MemberRegistrationCreate,
    PriceQuoteResponse,
    QuoteRequest,
    RegistrationResponse,
)
from event_registration.services.cache_service import invalidate_session_cache
from event_registration.services.registration_service import (
    RegistrationOutcome,
    quote_registration,
    register_guest,
    register_member,
)

router = APIRouter(prefix="/registrations", tags=["Registrations"])


def _registration_response(outcome: RegistrationOutcome) -> RegistrationResponse:
    order = outcome.order
    return RegistrationResponse(
        transaction_id=order.transaction_id,
        order_id=order.id,
        registrant_kind=order.registrant_kind,
        status=order.status,
        **outcome.pricing.rounded(),
    )


@router.post("/guest", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_guest_endpoint(
    payload: GuestRegistrationCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a guest sponsored by a member.

    All sessions are validated (dine-in meals, seat capacity) before anything
    is written; the first violation rejects the whole request.
    """
    outcome = await register_guest(db, payload)
    await invalidate_session_cache(payload.event_id)
    return _registration_response(outcome)


@router.post("/member", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_member_endpoint(
    payload: MemberRegistrationCreate,
    identity: Identity = Depends(get_current_member),
    db: AsyncSession = Depends(get_db),
):
    """Register the authenticated member. Entry is free; food is charged."""
    outcome = await register_member(db, identity.member_id, payload)
    await invalidate_session_cache(payload.event_id)
    return _registration_response(outcome)


@router.post("/quote", response_model=PriceQuoteResponse)
async def quote_endpoint(
    payload: QuoteRequest,
    db: AsyncSession = Depends(get_db),
):
    """Price a prospective registration with the same schedule registrations use. Writes nothing."""
    pricing = await quote_registration(db, payload)
    return PriceQuoteResponse(**pricing.rounded())
