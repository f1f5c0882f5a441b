"""
Pricing Schemas

Pydantic models for weekly base pricing, date overrides and the pricing
calendar. Range and amount rules are enforced by the services so that
every violation is reported in one error body.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class WeeklyPrices(BaseModel):
    """One price per weekday"""
    monday: Decimal
    tuesday: Decimal
    wednesday: Decimal
    thursday: Decimal
    friday: Decimal
    saturday: Decimal
    sunday: Decimal


class WeeklyPricingRequest(BaseModel):
    """Full replacement of a property's weekly base pricing"""
    full_day: WeeklyPrices
    half_day: WeeklyPrices


class WeeklyPricingResponse(BaseModel):
    id: str
    property_id: str
    full_day: Dict[str, Decimal]
    half_day: Dict[str, Decimal]
    currency: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DateOverrideItem(BaseModel):
    date: date
    full_day_price: Decimal
    half_day_price: Optional[Decimal] = Field(None, description="Defaults to 70% of full_day_price")
    reason: Optional[str] = Field(None, max_length=255)


class DateOverrideRequest(BaseModel):
    overrides: List[DateOverrideItem]


class DateOverrideResponse(BaseModel):
    id: str
    date: date
    full_day_price: Decimal
    half_day_price: Optional[Decimal] = None
    reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DateOverrideDeleteResponse(BaseModel):
    deleted_count: int


class PricingCalendarDayResponse(BaseModel):
    """Schema for a single resolved day"""
    date: date
    full_day_price: Decimal
    half_day_price: Decimal
    is_override: bool
    day_of_week: str
    reason: Optional[str] = None
    is_available: bool = True
    availability_status: str = "available"


class PricingCalendarResponse(BaseModel):
    property_id: str
    start_date: date
    end_date: date
    days: List[PricingCalendarDayResponse]


class PublicCalendarDayResponse(PricingCalendarDayResponse):
    currency: str


class PublicPricingCalendarResponse(BaseModel):
    """Guest-facing calendar keyed by YYYY-MM-DD"""
    property_id: str
    start_date: date
    end_date: date
    calendar: Dict[str, PublicCalendarDayResponse]
