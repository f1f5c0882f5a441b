# Models package
from .property import Property, PropertyStatus
from .rate_plan import RatePlan, RatePlanType, AdjustmentType
from .pricing import WeeklyBasePricing, DateOverride
from .price import Price
from .availability import AvailabilitySlot, AvailabilityStatus, OWNER_WRITABLE_STATUSES

__all__ = [
    "Property", "PropertyStatus",
    "RatePlan", "RatePlanType", "AdjustmentType",
    "WeeklyBasePricing", "DateOverride",
    "Price",
    "AvailabilitySlot", "AvailabilityStatus", "OWNER_WRITABLE_STATUSES",
]
