"""
Session listing endpoints with live seat availability.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.db.session import get_db
from event_registration.models.event import EventSession
from event_registration.models.product import STATUS_ACTIVE
from event_registration.schemas.session import (
    ProductResponse,
    ProductTypeResponse,
    SessionAvailabilityResponse,
    SessionListResponse,
    SessionResponse,
)
from event_registration.services.capacity_service import (
    SessionAvailability,
    count_entry_registrations_bulk,
    session_availability,
)
from event_registration.services.catalog_service import get_session, list_event_sessions
from event_registration.services.cache_service import get_cached_sessions, set_cached_sessions
from event_registration.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["Sessions"])


def _session_response(session: EventSession, availability: SessionAvailability) -> SessionResponse:
    products = [
        ProductResponse(
            id=m.product.id,
            product_code=m.product.product_code,
            product_name=m.product.product_name,
            product_type=m.product.product_type,
            product_types=[
                ProductTypeResponse.model_validate(pt)
                for pt in m.product.product_types
                if pt.status == STATUS_ACTIVE
            ],
        )
        for m in session.product_maps
        if m.product.status == STATUS_ACTIVE
    ]
    return SessionResponse(
        id=session.id,
        event_id=session.event_id,
        session_name=session.session_name,
        session_date=session.session_date,
        start_time=session.start_time,
        end_time=session.end_time,
        session_detail=session.session_detail,
        session_balance_capacity=session.session_balance_capacity,
        current_registrations=availability.current_registrations,
        available_spots=availability.available_spots,
        is_full=availability.is_full,
        products=products,
    )


@router.get("/events/{event_id}/sessions", response_model=SessionListResponse)
async def list_sessions_endpoint(
    event_id: int,
    upcoming_only: bool = Query(True),
    db: AsyncSession = Depends(get_db),
):
    """
    List an event's sessions with remaining seats and products on sale.
    Results are cached in Redis and dropped when a registration for the event is accepted.
    """
    cached = await get_cached_sessions(event_id, upcoming_only)
    if cached:
        logger.info("sessions_list_cache_hit", event_id=event_id)
        cached["cached"] = True
        return SessionListResponse(**cached)

    sessions = await list_event_sessions(db, event_id, upcoming_only)
    counts = await count_entry_registrations_bulk(db, [s.id for s in sessions])

    response = SessionListResponse(
        event_id=event_id,
        sessions=[
            _session_response(
                s,
                SessionAvailability(
                    session_id=s.id,
                    session_balance_capacity=s.session_balance_capacity,
                    current_registrations=counts[s.id],
                ),
            )
            for s in sessions
        ],
    )

    await set_cached_sessions(event_id, upcoming_only, response.model_dump(mode="json"))
    return response


@router.get("/sessions/{session_id}/availability", response_model=SessionAvailabilityResponse)
async def session_availability_endpoint(
    session_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Live seat availability for one session. Not cached."""
    session = await get_session(db, session_id)
    availability = await session_availability(db, session)
    return SessionAvailabilityResponse(
        session_id=availability.session_id,
        session_balance_capacity=availability.session_balance_capacity,
        current_registrations=availability.current_registrations,
        available_spots=availability.available_spots,
        is_full=availability.is_full,
    )
