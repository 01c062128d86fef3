"""
Registration admission controller.

ADMISSION FLOW
==============

Every registration (guest or member) runs the same pipeline inside one
database transaction:

  1. Load the event with its sessions; resolve the registrant
  2. Resolve every session/product selection against the catalog
  3. Dine-in rules for every selected session
  4. Capacity guard claim for every session with Entry units
  5. Price the registration
  6. Assemble and commit the order

Steps 1-4 write nothing except the guard's claim, so any rejection leaves no
trace once the transaction rolls back. The whole request is rejected on the
first violation; there is no partial acceptance.

CONCURRENCY
===========

Capacity is checked and claimed through a CapacityGuard in the same
transaction that inserts the order lines. With the optimistic guard a
concurrent claim on the same session surfaces as SeatClaimConflict: we roll
back and re-run admission from step 1 so the re-count sees the winner's
lines, up to REGISTRATION_MAX_RETRY_ATTEMPTS. Deadlocks and serialization
failures are retried the same way; other database errors become
OrderPersistenceError. Validation and capacity rejections are never retried.

Sessions are claimed in ascending id order whatever order the request lists
them in, so two registrations over the same sessions take row locks in the
same order.
"""

import time
from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.config import get_settings
from event_registration.core.exceptions import (
    DineInMismatchError,
    FoodOptOutViolationError,
    OrderPersistenceError,
    RegistrationConflictError,
    RegistrationError,
)
from event_registration.core.logging import bind_registration_context, get_logger
from event_registration.core.metrics import (
    capacity_conflicts,
    record_admission,
    record_registration,
    registration_latency,
)
from event_registration.models.order import OrderMaster
from event_registration.schemas.registration import (
    GuestRegistrationCreate,
    MemberRegistrationCreate,
    QuoteRequest,
    SessionSelection,
)
from event_registration.services.catalog_service import get_event_with_sessions, get_member
from event_registration.services.dine_in_validator import FOOD_OPT_OUT, validate_meals
from event_registration.services.order_service import assemble_order
from event_registration.services.pricing_service import PriceBreakdown, price_registration
from event_registration.services.selection import (
    GuestRegistrant,
    Headcounts,
    MemberRegistrant,
    Registrant,
    ResolvedSession,
    resolve_selections,
)
from event_registration.services.interfaces.capacity_guard import CapacityGuard, SeatClaimConflict
from event_registration.services.strategy_factory import get_capacity_guard

logger = get_logger(__name__)
settings = get_settings()

# Postgres deadlock_detected, serialization_failure
TRANSIENT_SQLSTATES = {"40P01", "40001"}
TRANSIENT_MESSAGES = ("deadlock detected", "could not serialize access")


@dataclass(frozen=True)
class RegistrationOutcome:
    order: OrderMaster
    pricing: PriceBreakdown


def check_meals(sessions: list[ResolvedSession], headcounts: Headcounts) -> None:
    """Raise the matching error for the first session that breaks a meal rule."""
    result = validate_meals(sessions, headcounts)
    if result.ok:
        return
    if result.kind == FOOD_OPT_OUT:
        raise FoodOptOutViolationError(result.session_id)
    raise DineInMismatchError(
        session_id=result.session_id,
        category=result.category,
        required=result.required,
        selected=result.selected,
    )


async def claim_capacity(
    db: AsyncSession,
    guard: CapacityGuard,
    sessions: list[ResolvedSession],
) -> None:
    """Claim seats session by session in ascending id order, so concurrent claims lock rows in one order."""
    for session in sorted(sessions, key=lambda s: s.session_id):
        requested = session.entry_quantity
        if requested == 0:
            continue
        available = await guard.claim(db, session.session, requested)
        logger.debug(
            "seats_claimed",
            session_id=session.session_id,
            requested=requested,
            available=available,
        )


def is_transient_db_error(error: DBAPIError) -> bool:
    """Deadlocks and serialization failures; the transaction can be re-run as is."""
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in TRANSIENT_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in TRANSIENT_MESSAGES)


async def admit_registration(
    db: AsyncSession,
    registrant: Registrant,
    event_id: int,
    selections: list[SessionSelection],
    guard: CapacityGuard,
) -> RegistrationOutcome:
    """
    Run admission, pricing and assembly.

    Seat-claim conflicts, deadlocks and serialization failures are retried;
    any other database error during admission surfaces as OrderPersistenceError.
    """
    max_attempts = max(settings.REGISTRATION_MAX_RETRY_ATTEMPTS, 1)

    for attempt in range(1, max_attempts + 1):
        try:
            event = await get_event_with_sessions(db, event_id)
            if isinstance(registrant, GuestRegistrant):
                await get_member(db, registrant.sponsor_member_id)
            else:
                await get_member(db, registrant.member_id)

            sessions = await resolve_selections(db, event, selections)
            check_meals(sessions, registrant.headcounts)
            await claim_capacity(db, guard, sessions)
        except SeatClaimConflict as conflict:
            await db.rollback()
            capacity_conflicts.inc()
            logger.info(
                "registration_retry",
                session_id=conflict.session_id,
                attempt=attempt,
                reason="seat_claim_conflict",
            )
            if attempt == max_attempts:
                raise RegistrationConflictError(conflict.session_id)
            continue
        except DBAPIError as e:
            await db.rollback()
            if not is_transient_db_error(e):
                logger.error("admission_storage_failed", attempt=attempt, error=str(e))
                raise OrderPersistenceError() from e
            capacity_conflicts.inc()
            logger.info(
                "registration_retry",
                attempt=attempt,
                reason="transient_db_error",
                error=str(e.orig),
            )
            if attempt == max_attempts:
                raise OrderPersistenceError() from e
            continue

        pricing = price_registration(sessions, len(event.sessions), registrant.kind)
        order = await assemble_order(db, registrant, sessions, pricing)
        return RegistrationOutcome(order=order, pricing=pricing)

    # Should not reach here, but just in case
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Registration failed unexpectedly",
    )


async def _register(
    db: AsyncSession,
    flow: str,
    registrant: Registrant,
    event_id: int,
    selections: list[SessionSelection],
) -> RegistrationOutcome:
    bind_registration_context(flow=flow, event_id=event_id, registrant_kind=registrant.kind)
    started = time.perf_counter()
    try:
        outcome = await admit_registration(db, registrant, event_id, selections, get_capacity_guard())
    except RegistrationConflictError:
        record_registration(flow, "conflict")
        raise
    except RegistrationError as e:
        await db.rollback()
        status_label = "error" if e.status_code >= 500 else "rejected"
        record_registration(flow, status_label)
        record_admission(e.code.lower())
        logger.warning(
            "registration_rejected",
            flow=flow,
            event_id=event_id,
            code=e.code,
            reason=e.message,
            context=e.context,
        )
        raise
    finally:
        registration_latency.labels(flow=flow).observe(time.perf_counter() - started)

    record_registration(flow, "accepted")
    record_admission("accepted")
    logger.info(
        "registration_accepted",
        flow=flow,
        event_id=event_id,
        order_id=outcome.order.id,
        transaction_id=outcome.order.transaction_id,
        total_cost=str(outcome.order.total_cost),
        selected_sessions=outcome.pricing.selected_sessions,
        discount_factor=str(outcome.pricing.discount_factor),
    )
    return outcome


async def register_guest(db: AsyncSession, payload: GuestRegistrationCreate) -> RegistrationOutcome:
    """Register a guest sponsored by a member; entry is charged with the volume discount."""
    registrant = GuestRegistrant(
        sponsor_member_id=payload.member_id,
        guest_name=payload.guest_name,
        guest_email=payload.guest_email,
        guest_phone=payload.guest_phone,
        guest_location=payload.guest_location,
        headcounts=Headcounts(
            adults=payload.adults,
            children=payload.children,
            infants=payload.infants,
            elder=payload.elder,
        ),
    )
    return await _register(db, "guest", registrant, payload.event_id, payload.session_selections)


async def register_member(
    db: AsyncSession,
    member_id: int,
    payload: MemberRegistrationCreate,
) -> RegistrationOutcome:
    """Register an authenticated member; entry is free, food is charged."""
    registrant = MemberRegistrant(
        member_id=member_id,
        headcounts=Headcounts(
            adults=payload.adults,
            children=payload.children,
            infants=payload.infants,
            elder=payload.elder,
        ),
    )
    return await _register(db, "member", registrant, payload.event_id, payload.session_selections)


async def quote_registration(db: AsyncSession, payload: QuoteRequest) -> PriceBreakdown:
    """Price a prospective registration without admission checks or writes."""
    event = await get_event_with_sessions(db, payload.event_id)
    sessions = await resolve_selections(db, event, payload.session_selections)
    return price_registration(sessions, len(event.sessions), payload.registrant_kind)
