# Services package
from .ownership import get_property, get_owned_property, get_owned_rate_plan, get_owned_price
from .property_pricing import PropertyPricingService, derive_half_day_price
from .availability_service import AvailabilityService
from .price_ledger import PriceLedgerService
from .pricing_calendar import PricingCalendarService, PricingCalendarDay
from .rate_plan_ranking import (
    StayParams,
    compute_nights,
    is_eligible,
    compare_rate_plans,
    rank_rate_plans,
    select_default_plan
)
from .booking_calculator import BookingCalculatorService

__all__ = [
    "get_property", "get_owned_property", "get_owned_rate_plan", "get_owned_price",
    "PropertyPricingService", "derive_half_day_price",
    "AvailabilityService",
    "PriceLedgerService",
    "PricingCalendarService", "PricingCalendarDay",
    "StayParams", "compute_nights", "is_eligible", "compare_rate_plans",
    "rank_rate_plans", "select_default_plan",
    "BookingCalculatorService"
]
