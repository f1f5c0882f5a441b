"""
Rate plan eligibility and ranking

Pure functions, no database access. The booking calculator and the
booking-options preview both rank through this module, so the default
offer shown to a guest is the one the server honors.

Ranking (first decisive tier wins):
1. A discount (negative adjustment) sorts before a non-negative one
2. Between two discounts, the larger discount sorts first
3. Otherwise ascending priority
Python's sort is stable, so fully tied plans keep their input order.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from functools import cmp_to_key
from typing import Any, Iterable, List, Optional, Union

from ..errors import InvalidInput, InvalidRange
from ..utils.dates import days_between, format_date_local, parse_date

HALF_DAY_NIGHTS = Decimal("0.5")

Nights = Union[int, Decimal]


@dataclass(frozen=True)
class StayParams:
    """
    A prospective stay.

    Full-day stays use check_in/check_out; half-day stays use single_date
    (check_in is set to the same date).
    """
    check_in: date
    check_out: Optional[date]
    num_guests: int
    is_half_day: bool = False
    single_date: Optional[date] = None

    @classmethod
    def build(
        cls,
        check_in: Any = None,
        check_out: Any = None,
        num_guests: int = 1,
        is_half_day: bool = False,
        single_date: Any = None,
    ) -> "StayParams":
        if num_guests is None or num_guests < 1:
            raise InvalidInput("At least one guest is required")

        if is_half_day:
            day = single_date if single_date is not None else check_in
            if day is None:
                raise InvalidInput("A date is required for a half-day booking")
            day = parse_date(day)
            return cls(check_in=day, check_out=None, num_guests=num_guests, is_half_day=True, single_date=day)

        if check_in is None or check_out is None:
            raise InvalidInput("Check-in and check-out dates are required")
        return cls(
            check_in=parse_date(check_in),
            check_out=parse_date(check_out),
            num_guests=num_guests,
        )


def compute_nights(stay: StayParams) -> Nights:
    """0.5 for a half-day booking, otherwise the whole nights between the dates."""
    if stay.is_half_day:
        return HALF_DAY_NIGHTS

    nights = days_between(stay.check_in, stay.check_out)
    if nights <= 0:
        raise InvalidRange(
            "Check-out date must be after check-in date",
            details={
                "check_in_date": format_date_local(stay.check_in),
                "check_out_date": format_date_local(stay.check_out),
            },
        )
    return nights


def days_in_advance(check_in: date, now: datetime) -> int:
    """ceil((check-in at UTC midnight - now) / 1 day)"""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    arrival = datetime.combine(check_in, time.min, tzinfo=timezone.utc)
    return math.ceil((arrival - now).total_seconds() / 86400)


def is_eligible(plan: Any, stay: StayParams, nights: Nights, now: datetime) -> bool:
    """Constraints that are unset (None or 0) do not restrict the plan."""
    if not plan.is_active:
        return False

    if plan.min_stay and nights < plan.min_stay:
        return False
    if plan.max_stay and nights > plan.max_stay:
        return False

    if plan.min_guests and stay.num_guests < plan.min_guests:
        return False
    if plan.max_guests and stay.num_guests > plan.max_guests:
        return False

    if plan.min_advance_booking or plan.max_advance_booking:
        ahead = days_in_advance(stay.check_in, now)
        if plan.min_advance_booking and ahead < plan.min_advance_booking:
            return False
        if plan.max_advance_booking and ahead > plan.max_advance_booking:
            return False

    return True


def _adjustment(plan: Any) -> Decimal:
    return Decimal(str(plan.adjustment_value or 0))


def compare_rate_plans(a: Any, b: Any) -> int:
    a_value, b_value = _adjustment(a), _adjustment(b)
    a_discount, b_discount = a_value < 0, b_value < 0

    if a_discount and not b_discount:
        return -1
    if b_discount and not a_discount:
        return 1
    if a_discount and b_discount and a_value != b_value:
        return -1 if a_value < b_value else 1

    return (a.priority or 0) - (b.priority or 0)


rate_plan_sort_key = cmp_to_key(compare_rate_plans)


def rank_rate_plans(plans: Iterable[Any], stay: StayParams, now: datetime) -> List[Any]:
    """Eligible plans, best offer first."""
    nights = compute_nights(stay)
    eligible = [plan for plan in plans if is_eligible(plan, stay, nights, now)]
    return sorted(eligible, key=rate_plan_sort_key)


def select_default_plan(ranked: List[Any], previous_id: Optional[str] = None) -> Optional[Any]:
    """
    Keep the previous selection while it is still eligible, otherwise
    fall back to the best ranked plan (None when nothing is eligible).
    """
    if previous_id is not None:
        for plan in ranked:
            if plan.id == previous_id:
                return plan
    return ranked[0] if ranked else None
