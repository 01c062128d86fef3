"""
Tests for dine-in meal validation.
"""

import pytest

from event_registration.services.dine_in_validator import (
    DINE_IN_MISMATCH,
    FOOD_OPT_OUT,
    dine_in_totals,
    validate_meals,
    validate_session_meals,
)
from event_registration.services.selection import Headcounts
from tests.factories import entry_line, food_line, resolved_session

FAMILY = Headcounts(adults=2, children=0, infants=0, elder=1)


def test_exact_dine_in_counts_pass():
    session = resolved_session(1, entry_line(3), food_line(2, size="Adult"), food_line(1, size="Elder"))

    assert validate_session_meals(session, FAMILY).ok


def test_short_adult_dine_in_fails_with_counts():
    session = resolved_session(1, food_line(1, size="Adult"), food_line(1, size="Elder"))

    result = validate_session_meals(session, FAMILY)

    assert not result.ok
    assert result.kind == DINE_IN_MISMATCH
    assert result.category == "Adult"
    assert result.required == 2
    assert result.selected == 1
    assert result.session_id == 1


def test_too_many_dine_in_meals_fail():
    session = resolved_session(1, food_line(3, size="Adult"), food_line(1, size="Elder"))

    result = validate_session_meals(session, FAMILY)

    assert result.kind == DINE_IN_MISMATCH
    assert result.selected == 3


def test_zero_headcount_category_is_not_constrained():
    session = resolved_session(
        1,
        food_line(2, size="Adult"),
        food_line(1, size="Elder"),
        food_line(4, size="Children", price="10.00"),
    )

    assert validate_session_meals(session, FAMILY).ok


def test_packet_food_is_free_quantity():
    session = resolved_session(1, food_line(5, subtype="PACKET", price="12.00"))

    assert validate_session_meals(session, FAMILY).ok
    assert dine_in_totals(session) == {}


def test_headcount_without_dine_in_lines_passes():
    session = resolved_session(1, entry_line(3))

    assert validate_session_meals(session, FAMILY).ok


def test_opted_out_session_with_food_fails():
    session = resolved_session(1, food_line(1, subtype="PACKET"), opt_out_of_food=True)

    result = validate_session_meals(session, FAMILY)

    assert not result.ok
    assert result.kind == FOOD_OPT_OUT


def test_opted_out_session_with_only_entry_passes():
    session = resolved_session(1, entry_line(3), opt_out_of_food=True)

    assert validate_session_meals(session, FAMILY).ok


def test_first_failing_session_is_reported():
    sessions = [
        resolved_session(1, food_line(2), food_line(1, size="Elder")),
        resolved_session(2, food_line(1), food_line(1, size="Elder")),
        resolved_session(3, food_line(1, subtype="PACKET"), opt_out_of_food=True),
    ]

    result = validate_meals(sessions, FAMILY)

    assert result.session_id == 2
    assert result.kind == DINE_IN_MISMATCH


@pytest.mark.parametrize("selected,ok", [(2, False), (3, True), (4, False)])
def test_dine_in_must_equal_headcount_exactly(selected, ok):
    session = resolved_session(1, food_line(selected, size="Adult"))

    result = validate_session_meals(session, Headcounts(adults=3))

    assert result.ok is ok
