"""
Test data builders.

The ResolvedLine builders return transient ORM rows for the pure rule
engines; the request and booking helpers serve the database tests.
"""

from decimal import Decimal

from event_registration.models.event import EventSession
from event_registration.models.order import OrderLine, OrderMaster
from event_registration.models.product import Product, ProductType
from event_registration.services.selection import ResolvedLine, ResolvedSession

ENTRY = Product(id=1, product_code="ENTRY", product_name="Entry Pass", product_type="Entry", status="ACTIVE")
DINNER = Product(id=2, product_code="DINNER", product_name="Dinner", product_type="Food", status="ACTIVE")


def entry_line(quantity: int, price: str = "50.00", size: str = "Adult") -> ResolvedLine:
    product_type = ProductType(
        product_id=ENTRY.id, product_size=size, product_subtype="NONE",
        product_price=Decimal(price), status="ACTIVE",
    )
    return ResolvedLine(product=ENTRY, product_type=product_type, quantity=quantity)


def food_line(quantity: int, price: str = "20.00", size: str = "Adult", subtype: str = "DINE-IN") -> ResolvedLine:
    product_type = ProductType(
        product_id=DINNER.id, product_size=size, product_subtype=subtype,
        product_price=Decimal(price), status="ACTIVE",
    )
    return ResolvedLine(product=DINNER, product_type=product_type, quantity=quantity)


def resolved_session(session_id: int, *lines: ResolvedLine, opt_out_of_food: bool = False) -> ResolvedSession:
    session = EventSession(id=session_id, session_name=f"Day {session_id}", session_balance_capacity=10)
    return ResolvedSession(session=session, opt_out_of_food=opt_out_of_food, lines=list(lines))


def select_session(session_id: int, *lines: dict, opt_out_of_food: bool = False) -> dict:
    """One `session_selections` entry of a registration request."""
    return {
        "session_id": session_id,
        "opt_out_of_food": opt_out_of_food,
        "product_selections": list(lines),
    }


async def book_entries(db, catalog, session_id: int, quantity: int, status: str = "CONFIRMED") -> int:
    """Record an existing member order holding `quantity` adult entries in a session."""
    order = OrderMaster(
        registrant_kind="MEMBER",
        member_id=catalog.member_id,
        total_cost=Decimal("0"),
        transaction_id=f"SEED-{session_id}-{quantity}-{status}",
        status=status,
        order_lines=[
            OrderLine(
                product_id=catalog.entry_product_id,
                product_type_id=catalog.entry_types["Adult"],
                session_id=session_id,
                quantity=quantity,
                unit_price=Decimal("50.00"),
            )
        ],
    )
    db.add(order)
    await db.commit()
    return order.id
