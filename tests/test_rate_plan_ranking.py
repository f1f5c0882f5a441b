"""
Tests for rate plan eligibility and ranking (no database)
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

from rental_pricing.errors import InvalidInput, InvalidRange
from rental_pricing.services.rate_plan_ranking import (
    StayParams,
    compare_rate_plans,
    compute_nights,
    days_in_advance,
    is_eligible,
    rank_rate_plans,
    select_default_plan,
)

NOW = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)


def make_plan(plan_id, adjustment_value=0, priority=0, **constraints):
    fields = dict(
        id=plan_id,
        adjustment_value=Decimal(str(adjustment_value)),
        priority=priority,
        is_active=True,
        min_stay=None,
        max_stay=None,
        min_guests=None,
        max_guests=None,
        min_advance_booking=None,
        max_advance_booking=None,
    )
    fields.update(constraints)
    return SimpleNamespace(**fields)


def stay(check_in="2025-03-10", check_out="2025-03-13", guests=2):
    return StayParams.build(check_in=check_in, check_out=check_out, num_guests=guests)


class TestNights:

    def test_full_day_nights(self):
        assert compute_nights(stay()) == 3

    def test_half_day_is_half_night(self):
        half = StayParams.build(single_date="2025-03-14", num_guests=2, is_half_day=True)
        assert compute_nights(half) == Decimal("0.5")
        assert half.check_in == date(2025, 3, 14)

    def test_same_day_checkout(self):
        with pytest.raises(InvalidRange):
            compute_nights(stay("2025-03-10", "2025-03-10"))

    def test_missing_dates(self):
        with pytest.raises(InvalidInput):
            StayParams.build(check_in="2025-03-10", num_guests=2)

    def test_needs_a_guest(self):
        with pytest.raises(InvalidInput):
            stay(guests=0)


class TestEligibility:

    def test_days_in_advance_rounds_up(self):
        # 2025-03-10 00:00 is 8 days 14 hours away
        assert days_in_advance(date(2025, 3, 10), NOW) == 9
        assert days_in_advance(date(2025, 3, 1), NOW) == 0

    def test_inactive_plan(self):
        assert not is_eligible(make_plan("a", is_active=False), stay(), 3, NOW)

    def test_stay_length(self):
        assert is_eligible(make_plan("a", min_stay=3, max_stay=3), stay(), 3, NOW)
        assert not is_eligible(make_plan("a", min_stay=4), stay(), 3, NOW)
        assert not is_eligible(make_plan("a", max_stay=2), stay(), 3, NOW)

    def test_half_day_fails_min_stay(self):
        half = StayParams.build(single_date="2025-03-14", num_guests=2, is_half_day=True)
        assert not is_eligible(make_plan("a", min_stay=1), half, compute_nights(half), NOW)

    def test_guest_count(self):
        assert not is_eligible(make_plan("a", min_guests=3), stay(guests=2), 3, NOW)
        assert not is_eligible(make_plan("a", max_guests=1), stay(guests=2), 3, NOW)
        assert is_eligible(make_plan("a", min_guests=2, max_guests=2), stay(guests=2), 3, NOW)

    def test_advance_booking(self):
        assert is_eligible(make_plan("a", min_advance_booking=9), stay(), 3, NOW)
        assert not is_eligible(make_plan("a", min_advance_booking=10), stay(), 3, NOW)
        assert not is_eligible(make_plan("a", max_advance_booking=7), stay(), 3, NOW)

    def test_zero_means_unset(self):
        assert is_eligible(make_plan("a", min_stay=0, max_stay=0, max_guests=0), stay(), 3, NOW)


class TestRanking:

    def test_larger_discount_first_regardless_of_priority(self):
        ten = make_plan("ten", -10, priority=0)
        twenty = make_plan("twenty", -20, priority=9)
        assert [p.id for p in rank_rate_plans([ten, twenty], stay(), NOW)] == ["twenty", "ten"]

    def test_non_negative_falls_through_to_priority(self):
        zero = make_plan("zero", 0, priority=2)
        five = make_plan("five", 5, priority=1)
        assert [p.id for p in rank_rate_plans([zero, five], stay(), NOW)] == ["five", "zero"]

    def test_discount_beats_better_priority(self):
        premium = make_plan("premium", 15, priority=0)
        discount = make_plan("discount", -5, priority=5)
        assert compare_rate_plans(discount, premium) < 0
        assert compare_rate_plans(premium, discount) > 0

    def test_equal_discount_uses_priority(self):
        a = make_plan("a", -10, priority=3)
        b = make_plan("b", -10, priority=1)
        assert [p.id for p in rank_rate_plans([a, b], stay(), NOW)] == ["b", "a"]

    def test_full_tie_keeps_input_order(self):
        plans = [make_plan("first", 0, 1), make_plan("second", 0, 1)]
        assert [p.id for p in rank_rate_plans(plans, stay(), NOW)] == ["first", "second"]

    def test_ineligible_plans_removed(self):
        plans = [make_plan("long", -30, min_stay=7), make_plan("ok", 0)]
        assert [p.id for p in rank_rate_plans(plans, stay(), NOW)] == ["ok"]


class TestDefaultSelection:

    def test_first_ranked_plan(self):
        ranked = [make_plan("best"), make_plan("other")]
        assert select_default_plan(ranked).id == "best"

    def test_previous_selection_kept_while_eligible(self):
        ranked = [make_plan("best"), make_plan("chosen")]
        assert select_default_plan(ranked, "chosen").id == "chosen"

    def test_previous_selection_replaced(self):
        ranked = [make_plan("best")]
        assert select_default_plan(ranked, "gone").id == "best"

    def test_nothing_eligible(self):
        assert select_default_plan([], "gone") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
