"""
Discount pricing for registrations.

DISCOUNT SCHEDULE
=================

Entry fees are discounted by how many of the event's sessions the
registration covers. Food is never discounted.

  sessions selected                  entry factor
  ---------------------------------  ------------
  all of the event's sessions        0.70  (30% off)
  4 or more, but not all             0.80  (20% off)
  2 or 3, but not all                0.90  (10% off)
  1                                  1.00

Members never pay for entry (factor 0); they only pay for food.

Money is Decimal end to end. Nothing is rounded mid-calculation; only the
totals handed to storage and to clients are quantized to cents.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from event_registration.models.order import REGISTRANT_MEMBER
from event_registration.services.selection import ResolvedSession

CENTS = Decimal("0.01")
ZERO = Decimal("0")
ONE = Decimal("1")

ALL_SESSIONS_FACTOR = Decimal("0.70")
MEMBER_ENTRY_FACTOR = Decimal("0")

# (minimum sessions selected, factor) for registrations that don't cover every session
VOLUME_TIERS = (
    (4, Decimal("0.80")),
    (2, Decimal("0.90")),
)


def to_money(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)


def discount_factor(selected_sessions: int, total_sessions: int) -> Decimal:
    """Entry multiplier for a registration covering `selected_sessions` of `total_sessions`."""
    if selected_sessions <= 0:
        return ONE
    if selected_sessions >= total_sessions:
        return ALL_SESSIONS_FACTOR
    for minimum, factor in VOLUME_TIERS:
        if selected_sessions >= minimum:
            return factor
    return ONE


@dataclass(frozen=True)
class PriceBreakdown:
    entry_subtotal: Decimal
    entry_cost: Decimal
    food_cost: Decimal
    discount_factor: Decimal
    discount_applied: bool
    discount_amount: Decimal
    selected_sessions: int
    total_sessions: int

    @property
    def total_cost(self) -> Decimal:
        return self.entry_cost + self.food_cost

    def rounded(self) -> dict:
        """Client-facing view: money quantized to cents."""
        return {
            "entry_subtotal": to_money(self.entry_subtotal),
            "entry_cost": to_money(self.entry_cost),
            "food_cost": to_money(self.food_cost),
            "total_cost": to_money(self.total_cost),
            "discount_applied": self.discount_applied,
            "discount_amount": to_money(self.discount_amount),
            "discount_factor": self.discount_factor,
            "selected_sessions": self.selected_sessions,
            "total_sessions": self.total_sessions,
        }


def price_registration(
    sessions: list[ResolvedSession],
    total_sessions: int,
    registrant_kind: str,
) -> PriceBreakdown:
    entry_subtotal = ZERO
    food_cost = ZERO

    for session in sessions:
        for line in session.lines:
            if line.is_entry:
                entry_subtotal += line.line_total
            elif line.is_food and not session.opt_out_of_food:
                food_cost += line.line_total

    selected = sum(1 for session in sessions if session.has_selection)

    if registrant_kind == REGISTRANT_MEMBER:
        return PriceBreakdown(
            entry_subtotal=entry_subtotal,
            entry_cost=ZERO,
            food_cost=food_cost,
            discount_factor=MEMBER_ENTRY_FACTOR,
            discount_applied=False,
            discount_amount=ZERO,
            selected_sessions=selected,
            total_sessions=total_sessions,
        )

    factor = discount_factor(selected, total_sessions)
    entry_cost = entry_subtotal * factor
    discounted = factor < ONE and entry_subtotal > ZERO

    return PriceBreakdown(
        entry_subtotal=entry_subtotal,
        entry_cost=entry_cost,
        food_cost=food_cost,
        discount_factor=factor,
        discount_applied=discounted,
        discount_amount=entry_subtotal - entry_cost if discounted else ZERO,
        selected_sessions=selected,
        total_sessions=total_sessions,
    )
