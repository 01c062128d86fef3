"""
Dine-in meal validation.

Per session, DINE-IN food quantities must equal the registrant's headcount
for each person category (Adult, Children, Elder) exactly. Categories with a
zero headcount are not constrained, even when dine-in lines exist for them.
PACKET and NONE subtype food is free-quantity. A session opted out of food
must not carry any food at all.

Pure functions: callers pass resolved selections and get a DineInResult back.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

from event_registration.models.product import PERSON_CATEGORIES
from event_registration.services.selection import Headcounts, ResolvedSession

FOOD_OPT_OUT = "FOOD_OPT_OUT"
DINE_IN_MISMATCH = "DINE_IN_MISMATCH"


@dataclass(frozen=True)
class DineInResult:
    session_id: int
    ok: bool = True
    kind: Optional[str] = None
    reason: Optional[str] = None
    category: Optional[str] = None
    required: Optional[int] = None
    selected: Optional[int] = None


def dine_in_totals(session: ResolvedSession) -> dict[str, int]:
    """Dine-in meal quantities per person category."""
    totals: dict[str, int] = defaultdict(int)
    for line in session.lines:
        if line.is_dine_in:
            totals[line.product_type.product_size] += line.quantity
    return dict(totals)


def validate_session_meals(session: ResolvedSession, headcounts: Headcounts) -> DineInResult:
    if session.opt_out_of_food:
        if any(line.is_food for line in session.lines):
            return DineInResult(
                session_id=session.session_id,
                ok=False,
                kind=FOOD_OPT_OUT,
                reason="Cannot select food products when opted out of food for a session",
            )
        return DineInResult(session_id=session.session_id)

    totals = dine_in_totals(session)
    for category in PERSON_CATEGORIES:
        if category not in totals:
            continue
        required = headcounts.for_category(category)
        selected = totals[category]
        if required > 0 and selected != required:
            return DineInResult(
                session_id=session.session_id,
                ok=False,
                kind=DINE_IN_MISMATCH,
                reason=(
                    f"For dine-in meals, you must select exactly {required} "
                    f"{category.lower()} meal(s) per session. Currently selected: {selected}."
                ),
                category=category,
                required=required,
                selected=selected,
            )

    return DineInResult(session_id=session.session_id)


def validate_meals(sessions: list[ResolvedSession], headcounts: Headcounts) -> DineInResult:
    """First failing session's result, or a passing result for the last session checked."""
    result = DineInResult(session_id=0)
    for session in sessions:
        result = validate_session_meals(session, headcounts)
        if not result.ok:
            return result
    return result
