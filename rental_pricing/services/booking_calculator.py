"""
Booking Calculator Service

Prices a prospective stay under every eligible rate plan.

For each night:
    base  = pricing calendar (override or weekly base)
    final = rate plan ledger price for that date, if one exists
            else base adjusted by the plan (Percentage / FixedAmount)

Half-day bookings price a single date at its half-day price. Ledger
prices are full-day amounts, so a half-day stay always uses the plan's
adjustment.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..errors import InvalidInput, NotFound
from ..models.rate_plan import AdjustmentType, RatePlan, RatePlanType
from ..utils.clock import SystemClock, system_clock
from ..utils.dates import add_days, format_date_local
from ..utils.money import quantize
from .ownership import get_property
from .price_ledger import PriceLedgerService
from .pricing_calendar import PricingCalendarService
from .rate_plan_ranking import StayParams, compute_nights, rank_rate_plans, select_default_plan

logger = logging.getLogger(__name__)

STANDARD_RATE_NAME = "Standard Rate"


def apply_adjustment(base_price: Decimal, plan: RatePlan) -> Decimal:
    value = Decimal(str(plan.adjustment_value or 0))
    if plan.adjustment_type == AdjustmentType.FIXED_AMOUNT.value:
        return max(Decimal("0.00"), quantize(base_price + value))
    return quantize(base_price * (1 + value / Decimal("100")))


def _plain_number(value: Decimal) -> str:
    return f"{abs(value).normalize():f}"


def describe_adjustment(adjustment_type: str, value: Decimal, currency: str) -> str:
    """Human-readable adjustment, e.g. "10% discount" or "+AED 50 per night"."""
    value = Decimal(str(value or 0))
    if value == 0:
        return "No price adjustment"

    amount = _plain_number(value)
    if adjustment_type == AdjustmentType.FIXED_AMOUNT.value:
        if value > 0:
            return f"+{currency} {amount} per night"
        return f"{currency} {amount} discount per night"

    if value > 0:
        return f"+{amount}% premium"
    return f"{amount}% discount"


class BookingCalculatorService:

    def __init__(self, db: Session, clock: SystemClock = system_clock):
        self.db = db
        self.clock = clock
        self.calendar = PricingCalendarService(db, clock)
        self.ledger = PriceLedgerService(db, clock)

    def _nightly_base_prices(self, property_id: str, stay: StayParams) -> List[Dict[str, Any]]:
        if stay.is_half_day:
            day = self.calendar.get_nightly_calendar(property_id, stay.single_date, stay.single_date)[0]
            return [{
                "date": day.date,
                "base_price": day.half_day_price,
                "is_override": day.is_override,
                "reason": day.reason,
            }]

        last_night = add_days(stay.check_out, -1)
        return [
            {
                "date": day.date,
                "base_price": day.full_day_price,
                "is_override": day.is_override,
                "reason": day.reason,
            }
            for day in self.calendar.get_nightly_calendar(property_id, stay.check_in, last_night)
        ]

    def _plan_option(
        self,
        plan: RatePlan,
        stay: StayParams,
        nightly: List[Dict[str, Any]],
        base_total: Decimal,
        currency: str,
    ) -> Dict[str, Any]:
        ledger: Dict[Any, Decimal] = {}
        if not stay.is_half_day:
            ledger = self.ledger.get_prices_by_date(plan.id, nightly[0]["date"], nightly[-1]["date"])

        nights = []
        for night in nightly:
            explicit = ledger.get(night["date"])
            if explicit is not None:
                final, source = quantize(explicit), "ledger"
            else:
                final, source = apply_adjustment(night["base_price"], plan), "adjustment"
            nights.append({**night, "final_price": final, "price_source": source})

        total = quantize(sum((n["final_price"] for n in nights), Decimal("0")))
        return {
            "rate_plan_id": plan.id,
            "name": plan.name,
            "description": plan.description,
            "plan_type": plan.plan_type,
            "total_price": total,
            "price_per_night": quantize(total / len(nights)),
            "savings": quantize(base_total - total),
            "priority": plan.priority or 0,
            "adjustment": {
                "type": plan.adjustment_type,
                "value": Decimal(str(plan.adjustment_value or 0)),
                "description": describe_adjustment(plan.adjustment_type, plan.adjustment_value, currency),
            },
            "nightly_prices": nights,
        }

    def calculate_booking_options(
        self,
        property_id: str,
        check_in: Any = None,
        check_out: Any = None,
        num_guests: int = 1,
        is_half_day: bool = False,
        single_date: Any = None,
        previous_rate_plan_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Price a stay under the standard rate and every eligible rate plan.

        Options are ordered best offer first (see rate_plan_ranking);
        `selected_option` keeps previous_rate_plan_id while it is still
        eligible.
        """
        prop = get_property(self.db, property_id)
        if not prop.is_live:
            raise InvalidInput("Property is not available for booking", details={"property_id": property_id})

        stay = StayParams.build(
            check_in=check_in,
            check_out=check_out,
            num_guests=num_guests,
            is_half_day=is_half_day,
            single_date=single_date,
        )
        nights = compute_nights(stay)

        if prop.maximum_guests and stay.num_guests > prop.maximum_guests:
            raise InvalidInput(
                f"Maximum {prop.maximum_guests} guests allowed",
                details={"maximum_guests": prop.maximum_guests},
            )

        currency = prop.currency or settings.default_currency
        nightly = self._nightly_base_prices(property_id, stay)
        base_total = quantize(sum((n["base_price"] for n in nightly), Decimal("0")))

        plans = self.db.query(RatePlan).filter(
            RatePlan.property_id == property_id,
            RatePlan.is_active == True  # noqa: E712
        ).order_by(RatePlan.priority).all()
        ranked = rank_rate_plans(plans, stay, self.clock.now())
        options = [self._plan_option(plan, stay, nightly, base_total, currency) for plan in ranked]

        selected = select_default_plan(ranked, previous_rate_plan_id)
        selected_option = None
        if selected is not None:
            selected_option = next(o for o in options if o["rate_plan_id"] == selected.id)

        standard_rate = {
            "rate_plan_id": None,
            "name": STANDARD_RATE_NAME,
            "description": "Direct property booking with flexible cancellation",
            "plan_type": RatePlanType.FULLY_FLEXIBLE.value,
            "total_price": base_total,
            "price_per_night": quantize(base_total / len(nightly)),
            "savings": Decimal("0.00"),
            "priority": None,
            "adjustment": None,
            "nightly_prices": [
                {**n, "final_price": n["base_price"], "price_source": "base"} for n in nightly
            ],
        }

        logger.info(
            "Booking options for property %s %s: %d eligible of %d plans, selected=%s",
            property_id,
            format_date_local(stay.check_in),
            len(ranked),
            len(plans),
            selected.id if selected is not None else None,
        )

        return {
            "property_id": property_id,
            "check_in_date": stay.check_in,
            "check_out_date": stay.check_out,
            "single_date": stay.single_date,
            "nights": nights,
            "num_guests": stay.num_guests,
            "is_half_day": stay.is_half_day,
            "currency": currency,
            "base_total": base_total,
            "standard_rate": standard_rate,
            "options": options,
            "selected_rate_plan_id": selected.id if selected is not None else None,
            "selected_option": selected_option,
        }

    def calculate_booking_price(self, property_id: str, rate_plan_id: Optional[str] = None, **stay: Any) -> Dict[str, Any]:
        """Price of one option; no rate_plan_id means the standard rate."""
        result = self.calculate_booking_options(property_id, **stay)
        if rate_plan_id is None:
            return result["standard_rate"]

        for option in result["options"]:
            if option["rate_plan_id"] == rate_plan_id:
                return option
        raise NotFound(
            "Rate plan is not available for this booking",
            details={"rate_plan_id": rate_plan_id},
        )
