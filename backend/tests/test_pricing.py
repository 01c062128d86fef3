"""
Tests for the discount schedule and registration pricing.
"""

from decimal import Decimal

import pytest

from event_registration.services.pricing_service import discount_factor, price_registration, to_money
from tests.factories import entry_line, food_line, resolved_session


@pytest.mark.parametrize(
    "selected,total,expected",
    [
        (1, 5, "1.00"),
        (2, 5, "0.90"),
        (3, 5, "0.90"),
        (4, 5, "0.80"),
        (5, 5, "0.70"),
        (4, 6, "0.80"),
        (1, 1, "0.70"),
        (3, 3, "0.70"),
        (0, 5, "1.00"),
    ],
)
def test_discount_factor_schedule(selected, total, expected):
    assert discount_factor(selected, total) == Decimal(expected)


def test_discount_factor_never_increases_with_more_sessions():
    total = 8
    factors = [discount_factor(n, total) for n in range(1, total + 1)]
    assert factors == sorted(factors, reverse=True)


def test_guest_all_sessions_gets_thirty_percent_off():
    """$50 entry in each of 5 sessions: 250.00 subtotal, 175.00 charged."""
    sessions = [resolved_session(i, entry_line(1)) for i in range(1, 6)]

    pricing = price_registration(sessions, total_sessions=5, registrant_kind="GUEST")

    assert pricing.entry_subtotal == Decimal("250.00")
    assert to_money(pricing.entry_cost) == Decimal("175.00")
    assert pricing.discount_factor == Decimal("0.70")
    assert pricing.discount_applied is True
    assert to_money(pricing.discount_amount) == Decimal("75.00")
    assert pricing.selected_sessions == 5


def test_single_session_has_no_discount():
    pricing = price_registration([resolved_session(1, entry_line(2))], 5, "GUEST")

    assert pricing.entry_cost == Decimal("100.00")
    assert pricing.discount_applied is False
    assert pricing.discount_amount == Decimal("0")


def test_food_is_never_discounted():
    sessions = [
        resolved_session(1, entry_line(1), food_line(1)),
        resolved_session(2, entry_line(1), food_line(1)),
    ]

    pricing = price_registration(sessions, 5, "GUEST")

    assert pricing.entry_cost == Decimal("90.00")
    assert pricing.food_cost == Decimal("40.00")
    assert to_money(pricing.total_cost) == Decimal("130.00")


def test_member_entry_is_free_and_food_is_charged():
    sessions = [resolved_session(i, entry_line(2), food_line(2)) for i in range(1, 6)]

    pricing = price_registration(sessions, 5, "MEMBER")

    assert pricing.entry_cost == Decimal("0")
    assert pricing.food_cost == Decimal("200.00")
    assert pricing.total_cost == Decimal("200.00")
    assert pricing.discount_applied is False
    assert pricing.discount_amount == Decimal("0")


def test_food_in_opted_out_session_is_not_charged():
    pricing = price_registration(
        [resolved_session(1, entry_line(1), food_line(1), opt_out_of_food=True)], 5, "GUEST"
    )
    assert pricing.food_cost == Decimal("0")


def test_session_with_only_zero_quantities_does_not_count_towards_discount():
    sessions = [
        resolved_session(1, entry_line(1)),
        resolved_session(2, entry_line(0)),
    ]

    pricing = price_registration(sessions, 5, "GUEST")

    assert pricing.selected_sessions == 1
    assert pricing.discount_factor == Decimal("1.00")


def test_rounding_happens_once_on_the_total():
    """0.90 x 3 x 33.35 = 90.045 rounds half-up to 90.05, not 3 x 30.02."""
    sessions = [resolved_session(i, entry_line(1, price="33.35")) for i in range(1, 4)]

    pricing = price_registration(sessions, 5, "GUEST")

    assert pricing.rounded()["entry_cost"] == Decimal("90.05")
    assert pricing.rounded()["total_cost"] == Decimal("90.05")
