"""
Booking Options Schemas
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field


class BookingOptionsRequest(BaseModel):
    """Full-day stays send check-in/check-out; half-day stays send single_date"""
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    single_date: Optional[date] = None
    num_guests: int = Field(default=1, ge=1)
    is_half_day: bool = False
    previous_rate_plan_id: Optional[str] = None


class NightlyPriceResponse(BaseModel):
    date: date
    base_price: Decimal
    final_price: Decimal
    price_source: str  # base / ledger / adjustment
    is_override: bool
    reason: Optional[str] = None


class AdjustmentResponse(BaseModel):
    type: str
    value: Decimal
    description: str


class BookingOptionResponse(BaseModel):
    rate_plan_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    plan_type: Optional[str] = None
    total_price: Decimal
    price_per_night: Decimal
    savings: Decimal  # positive = discount, negative = premium
    priority: Optional[int] = None
    adjustment: Optional[AdjustmentResponse] = None
    nightly_prices: List[NightlyPriceResponse]


class BookingOptionsResponse(BaseModel):
    property_id: str
    check_in_date: date
    check_out_date: Optional[date] = None
    single_date: Optional[date] = None
    nights: float
    num_guests: int
    is_half_day: bool
    currency: str
    base_total: Decimal
    standard_rate: BookingOptionResponse
    options: List[BookingOptionResponse]
    selected_rate_plan_id: Optional[str] = None
    selected_option: Optional[BookingOptionResponse] = None
