"""
Catalog reads used by the registration engine and the session listings.
"""

from datetime import date
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.exceptions import NotFoundError
from event_registration.models.event import Event, EventSession
from event_registration.models.product import ProductType
from event_registration.models.registrant import Member


async def get_event_with_sessions(db: AsyncSession, event_id: int) -> Event:
    """Load an event with its sessions and their product maps, fresh from the database."""
    result = await db.execute(
        select(Event)
        .where(Event.id == event_id)
        .execution_options(populate_existing=True)
    )
    event = result.scalar_one_or_none()

    if not event:
        raise NotFoundError("Event", event_id)
    return event


async def get_member(db: AsyncSession, member_id: int) -> Member:
    result = await db.execute(select(Member).where(Member.id == member_id))
    member = result.scalar_one_or_none()

    if not member:
        raise NotFoundError("Member", member_id)
    return member


async def get_session(db: AsyncSession, session_id: int) -> EventSession:
    result = await db.execute(
        select(EventSession)
        .where(EventSession.id == session_id)
        .execution_options(populate_existing=True)
    )
    session = result.scalar_one_or_none()

    if not session:
        raise NotFoundError("Session", session_id)
    return session


async def get_product_types(db: AsyncSession, ids: Iterable[int]) -> dict[int, ProductType]:
    """Product types keyed by id, each with its parent product loaded. Unknown ids are absent."""
    ids = set(ids)
    if not ids:
        return {}

    result = await db.execute(
        select(ProductType)
        .where(ProductType.id.in_(ids))
        .execution_options(populate_existing=True)
    )
    return {pt.id: pt for pt in result.unique().scalars().all()}


async def list_event_sessions(
    db: AsyncSession,
    event_id: int,
    upcoming_only: bool = True,
) -> list[EventSession]:
    """
    Sessions of one event ordered by date and start time.
    Uses the ix_event_sessions_event_date index.
    """
    await get_event_with_sessions(db, event_id)

    query = select(EventSession).where(EventSession.event_id == event_id)
    if upcoming_only:
        query = query.where(EventSession.session_date >= date.today())

    result = await db.execute(
        query.order_by(EventSession.session_date.asc(), EventSession.start_time.asc())
    )
    return list(result.scalars().all())
