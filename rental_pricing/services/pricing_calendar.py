"""
Pricing Calendar Compositor

Merges weekly base pricing, date overrides and (for the owner and public
views) availability into a day-by-day calendar.

Resolution per date:
1. DateOverride for that date (is_override=True, reason propagated)
2. WeeklyBasePricing value for the date's weekday

A property without weekly base pricing has no calendar (NotFound), it is
never zero-filled.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict

from sqlalchemy.orm import Session

from ..config import settings
from ..errors import InvalidRange
from ..models.availability import AvailabilityStatus
from ..utils.clock import SystemClock, system_clock
from ..utils.dates import (
    LocalDateMap,
    check_span,
    enumerate_dates,
    format_date_local,
    parse_date,
    weekday_name,
)
from .availability_service import AvailabilityService
from .ownership import get_owned_property, get_property
from .property_pricing import PropertyPricingService, override_half_day_price


@dataclass
class PricingCalendarDay:
    """Resolved prices for a single day"""
    date: date
    full_day_price: Decimal
    half_day_price: Decimal
    is_override: bool
    day_of_week: str
    reason: Optional[str] = None
    is_available: bool = True
    availability_status: str = AvailabilityStatus.AVAILABLE.value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class PricingCalendarService:
    """
    Read-only calendar composition.

    Owner calendar: ownership checked, up to MAX_RANGE_DAYS.
    Public calendar: any existing property, up to PUBLIC_CALENDAR_MAX_DAYS,
    includes availability and is keyed by YYYY-MM-DD.
    """

    def __init__(self, db: Session, clock: SystemClock = system_clock):
        self.db = db
        self.clock = clock
        self.pricing = PropertyPricingService(db, clock)
        self.availability = AvailabilityService(db, clock)

    def _resolve_range(self, start: Any, end: Any, max_days: int) -> tuple:
        start_d, end_d = parse_date(start), parse_date(end)
        if start_d >= end_d:
            raise InvalidRange(
                "Start date must be before end date",
                details={"start_date": format_date_local(start_d), "end_date": format_date_local(end_d)},
            )
        check_span(start_d, end_d, max_days)
        return start_d, end_d

    def get_pricing_calendar(self, property_id: str, start: Any, end: Any) -> List[PricingCalendarDay]:
        """Calendar for [start, end], both inclusive."""
        start_d, end_d = self._resolve_range(start, end, settings.max_range_days)
        return self._compose(property_id, start_d, end_d)

    def get_nightly_calendar(self, property_id: str, first_night: Any, last_night: Any) -> List[PricingCalendarDay]:
        """Calendar for the nights of a stay; a single night is allowed."""
        first_d, last_d = parse_date(first_night), parse_date(last_night)
        check_span(first_d, last_d, settings.max_range_days, "Stay")
        return self._compose(property_id, first_d, last_d)

    def _compose(self, property_id: str, start_d: date, end_d: date) -> List[PricingCalendarDay]:
        weekly = self.pricing.get_weekly_pricing(property_id)
        overrides = LocalDateMap(
            (o.date, o) for o in self.pricing.get_overrides_in_range(property_id, start_d, end_d)
        )

        calendar = []
        for day in enumerate_dates(start_d, end_d):
            weekday = weekday_name(day)
            override = overrides.get(day)
            if override is not None:
                calendar.append(PricingCalendarDay(
                    date=day,
                    full_day_price=Decimal(str(override.full_day_price)),
                    half_day_price=override_half_day_price(override),
                    is_override=True,
                    day_of_week=weekday,
                    reason=override.reason,
                ))
            else:
                calendar.append(PricingCalendarDay(
                    date=day,
                    full_day_price=weekly.full_day_price(weekday),
                    half_day_price=weekly.half_day_price(weekday),
                    is_override=False,
                    day_of_week=weekday,
                ))
        return calendar

    def _mark_availability(self, property_id: str, calendar: List[PricingCalendarDay]) -> List[PricingCalendarDay]:
        """Overlay stored availability; a date without a record stays available."""
        if not calendar:
            return calendar

        slots = LocalDateMap(
            (slot.date, slot)
            for slot in self.availability.get_public_range(property_id, calendar[0].date, calendar[-1].date)
        )
        for day in calendar:
            slot = slots.get(format_date_local(day.date))
            if slot is not None:
                day.availability_status = slot.status
                day.is_available = slot.status == AvailabilityStatus.AVAILABLE.value
        return calendar

    def get_owner_pricing_calendar(
        self,
        property_id: str,
        owner_id: str,
        start: Any,
        end: Any,
    ) -> List[PricingCalendarDay]:
        """Owner view: prices plus the stored availability of each date."""
        get_owned_property(self.db, property_id, owner_id)
        return self._mark_availability(property_id, self.get_pricing_calendar(property_id, start, end))

    def get_public_pricing_calendar(self, property_id: str, start: Any, end: Any) -> Dict[str, Dict[str, Any]]:
        """
        Guest-facing calendar.

        Returns:
            {"2025-03-14": {"date", "full_day_price", "half_day_price",
             "is_override", "reason", "day_of_week", "is_available",
             "availability_status", "currency"}, ...}
        """
        prop = get_property(self.db, property_id)
        start_d, end_d = self._resolve_range(start, end, settings.public_calendar_max_days)

        calendar = self._mark_availability(property_id, self._compose(property_id, start_d, end_d))
        currency = prop.currency or settings.default_currency

        result: Dict[str, Dict[str, Any]] = {}
        for day in calendar:
            entry = day.to_dict()
            entry["currency"] = currency
            result[format_date_local(day.date)] = entry
        return result
