"""
Registrants and resolved selections.

A registration request names sessions and (product, product type, quantity)
tuples by id. Before any rule runs, every tuple is resolved against the
catalog into a ResolvedLine holding the actual rows, so the validators and
the pricing engine work on plain objects without touching the database.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.core.exceptions import (
    EmptySelectionError,
    InvalidSelectionError,
    NotFoundError,
)
from event_registration.models.event import Event, EventSession
from event_registration.models.order import REGISTRANT_GUEST, REGISTRANT_MEMBER
from event_registration.models.product import (
    Product,
    ProductType,
    SIZE_ADULT,
    SIZE_CHILDREN,
    SIZE_ELDER,
    STATUS_ACTIVE,
)
from event_registration.schemas.registration import SessionSelection
from event_registration.services.catalog_service import get_product_types


@dataclass(frozen=True)
class Headcounts:
    adults: int = 0
    children: int = 0
    infants: int = 0
    elder: int = 0

    def for_category(self, category: str) -> int:
        """Headcount a dine-in meal size must match. Infants have no meal category."""
        return {
            SIZE_ADULT: self.adults,
            SIZE_CHILDREN: self.children,
            SIZE_ELDER: self.elder,
        }.get(category, 0)


@dataclass(frozen=True)
class GuestRegistrant:
    sponsor_member_id: int
    guest_name: str
    headcounts: Headcounts
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_location: Optional[str] = None

    kind = REGISTRANT_GUEST


@dataclass(frozen=True)
class MemberRegistrant:
    member_id: int
    headcounts: Headcounts

    kind = REGISTRANT_MEMBER


Registrant = Union[GuestRegistrant, MemberRegistrant]


@dataclass
class ResolvedLine:
    product: Product
    product_type: ProductType
    quantity: int

    @property
    def is_entry(self) -> bool:
        return self.product.is_entry

    @property
    def is_food(self) -> bool:
        return self.product.is_food

    @property
    def is_dine_in(self) -> bool:
        return self.is_food and self.product_type.is_dine_in

    @property
    def unit_price(self) -> Decimal:
        return Decimal(self.product_type.product_price)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class ResolvedSession:
    session: EventSession
    opt_out_of_food: bool = False
    lines: list[ResolvedLine] = field(default_factory=list)

    @property
    def session_id(self) -> int:
        return self.session.id

    @property
    def entry_quantity(self) -> int:
        return sum(line.quantity for line in self.lines if line.is_entry)

    @property
    def has_selection(self) -> bool:
        return any(line.quantity > 0 for line in self.lines)


async def resolve_selections(
    db: AsyncSession,
    event: Event,
    selections: list[SessionSelection],
) -> list[ResolvedSession]:
    """
    Resolve session selections against the event's catalog.

    Raises InvalidSelectionError for sessions outside the event, repeated
    sessions, product types that don't belong to the stated product or aren't
    sold in the session, and inactive products. Raises NotFoundError for
    unknown product types and EmptySelectionError when nothing is selected.
    """
    sessions_by_id = {s.id: s for s in event.sessions}

    seen: set[int] = set()
    for selection in selections:
        if selection.session_id not in sessions_by_id:
            raise InvalidSelectionError(
                "Invalid session selection",
                session_id=selection.session_id,
                event_id=event.id,
            )
        if selection.session_id in seen:
            raise InvalidSelectionError(
                "Session selected more than once",
                session_id=selection.session_id,
            )
        seen.add(selection.session_id)

    type_ids = {p.product_type_id for s in selections for p in s.product_selections}
    product_types = await get_product_types(db, type_ids)

    resolved: list[ResolvedSession] = []
    for selection in selections:
        session = sessions_by_id[selection.session_id]
        offered = session.product_ids
        resolved_session = ResolvedSession(session=session, opt_out_of_food=selection.opt_out_of_food)

        for product_selection in selection.product_selections:
            product_type = product_types.get(product_selection.product_type_id)
            if product_type is None:
                raise NotFoundError("Product type", product_selection.product_type_id)

            if product_type.product_id != product_selection.product_id:
                raise InvalidSelectionError(
                    "Product type does not belong to the selected product",
                    product_id=product_selection.product_id,
                    product_type_id=product_selection.product_type_id,
                )
            if product_type.product_id not in offered:
                raise InvalidSelectionError(
                    "Product is not offered in this session",
                    session_id=session.id,
                    product_id=product_type.product_id,
                )
            if product_type.status != STATUS_ACTIVE or product_type.product.status != STATUS_ACTIVE:
                raise InvalidSelectionError(
                    "Product is not available for sale",
                    product_type_id=product_type.id,
                )

            resolved_session.lines.append(
                ResolvedLine(
                    product=product_type.product,
                    product_type=product_type,
                    quantity=product_selection.quantity,
                )
            )

        resolved.append(resolved_session)

    if not any(rs.has_selection for rs in resolved):
        raise EmptySelectionError()

    return resolved
