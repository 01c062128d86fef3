"""
Order assembly and administrative order maintenance.

ASSEMBLY
========

A validated, priced registration becomes, in one transaction:
  1. a Guest row (guest flow) or a link to the existing Member (member flow)
  2. a transaction id: <PREFIX>-<epoch ms>-<8 upper-case hex chars>
  3. the OrderMaster with the quantized total cost
  4. one OrderLine per selected tuple, carrying the product type's price at
     this moment as `unit_price`

The capacity claim made earlier in the same transaction is committed together
with the lines. Any storage failure rolls the whole unit back and surfaces as
OrderPersistenceError, which clients can tell apart from validation errors.
"""

import secrets
import time
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.config import get_settings
from event_registration.core.exceptions import (
    InvalidSelectionError,
    NotFoundError,
    OrderPersistenceError,
)
from event_registration.core.logging import get_logger
from event_registration.core.metrics import order_adjustments
from event_registration.models.event import EventSession
from event_registration.models.order import OrderLine, OrderMaster
from event_registration.models.registrant import Guest
from event_registration.schemas.order import OrderUpdate
from event_registration.services.catalog_service import get_product_types
from event_registration.services.pricing_service import PriceBreakdown, to_money
from event_registration.services.selection import GuestRegistrant, Registrant, ResolvedSession

logger = get_logger(__name__)
settings = get_settings()


def generate_transaction_id(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


def _transaction_prefix(registrant: Registrant) -> str:
    if isinstance(registrant, GuestRegistrant):
        return settings.GUEST_TRANSACTION_PREFIX
    return settings.MEMBER_TRANSACTION_PREFIX


async def assemble_order(
    db: AsyncSession,
    registrant: Registrant,
    sessions: list[ResolvedSession],
    pricing: PriceBreakdown,
) -> OrderMaster:
    """Persist the registrant, order header and lines, then commit."""
    try:
        guest_id = None
        member_id = None
        if isinstance(registrant, GuestRegistrant):
            guest = Guest(
                member_id=registrant.sponsor_member_id,
                guest_name=registrant.guest_name,
                guest_email=registrant.guest_email,
                guest_phone=registrant.guest_phone,
                guest_location=registrant.guest_location,
                adults=registrant.headcounts.adults,
                children=registrant.headcounts.children,
                infants=registrant.headcounts.infants,
                elder=registrant.headcounts.elder,
            )
            db.add(guest)
            await db.flush()
            guest_id = guest.id
        else:
            member_id = registrant.member_id

        order = OrderMaster(
            registrant_kind=registrant.kind,
            guest_id=guest_id,
            member_id=member_id,
            total_cost=to_money(pricing.total_cost),
            transaction_id=generate_transaction_id(_transaction_prefix(registrant)),
            status="PENDING",
            order_lines=[
                OrderLine(
                    product_id=line.product.id,
                    product_type_id=line.product_type.id,
                    session_id=session.session_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for session in sessions
                for line in session.lines
                if line.quantity > 0
            ],
        )
        db.add(order)
        await db.flush()
        await db.refresh(order)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "order_persistence_failed",
            registrant_kind=registrant.kind,
            error=str(e),
        )
        raise OrderPersistenceError() from e

    logger.info(
        "order_created",
        order_id=order.id,
        transaction_id=order.transaction_id,
        registrant_kind=order.registrant_kind,
        lines=len(order.order_lines),
        total_cost=str(order.total_cost),
    )
    return order


async def get_order(db: AsyncSession, order_id: int) -> OrderMaster:
    result = await db.execute(select(OrderMaster).where(OrderMaster.id == order_id))
    order = result.scalar_one_or_none()

    if not order:
        raise NotFoundError("Order", order_id)
    return order


async def get_order_by_transaction(db: AsyncSession, transaction_id: str) -> OrderMaster:
    """Reconciliation lookup by the externally visible transaction id."""
    result = await db.execute(
        select(OrderMaster).where(OrderMaster.transaction_id == transaction_id)
    )
    order = result.scalar_one_or_none()

    if not order:
        raise NotFoundError("Order", transaction_id)
    return order


async def count_orders(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(OrderMaster))
    return int(result.scalar_one())


async def adjust_order(db: AsyncSession, order_id: int, changes: OrderUpdate) -> OrderMaster:
    """
    Administrative override of an order.

    When `order_lines` is given, all existing lines are replaced, each new line
    snapshots the product type's live price, and total_cost becomes the plain
    sum of live price x quantity (no volume discount) unless `total_cost` is
    given explicitly. Capacity and dine-in rules are not re-run.
    """
    order = await get_order(db, order_id)
    new_total = changes.total_cost

    if changes.order_lines is not None:
        product_types = await get_product_types(
            db, {line.product_type_id for line in changes.order_lines}
        )
        session_ids = {line.session_id for line in changes.order_lines}
        if session_ids:
            result = await db.execute(
                select(EventSession.id).where(EventSession.id.in_(session_ids))
            )
            missing = session_ids - set(result.scalars().all())
            if missing:
                raise NotFoundError("Session", min(missing))

        new_lines = []
        computed_total = Decimal("0")
        for line in changes.order_lines:
            product_type = product_types.get(line.product_type_id)
            if product_type is None:
                raise NotFoundError("Product type", line.product_type_id)
            if product_type.product_id != line.product_id:
                raise InvalidSelectionError(
                    "Product type does not belong to the selected product",
                    product_id=line.product_id,
                    product_type_id=line.product_type_id,
                )

            price = Decimal(product_type.product_price)
            computed_total += price * line.quantity
            new_lines.append(
                OrderLine(
                    product_id=line.product_id,
                    product_type_id=line.product_type_id,
                    session_id=line.session_id,
                    quantity=line.quantity,
                    unit_price=price,
                )
            )

        order.order_lines = new_lines
        if new_total is None:
            new_total = computed_total

    if new_total is not None:
        order.total_cost = to_money(new_total)
    if changes.status is not None:
        order.status = changes.status

    try:
        await db.flush()
        await db.refresh(order)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("order_adjustment_failed", order_id=order_id, error=str(e))
        raise OrderPersistenceError() from e

    order_adjustments.labels(lines_replaced="yes" if changes.order_lines is not None else "no").inc()
    logger.info(
        "order_adjusted",
        order_id=order.id,
        transaction_id=order.transaction_id,
        lines=len(order.order_lines),
        total_cost=str(order.total_cost),
        status=order.status,
    )
    return order
