"""
Property Pricing API Router

Weekly base pricing, date overrides and the pricing calendar of a
property. Everything except the public calendar is owner-only.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..config import settings
from ..utils.clock import SystemClock, get_clock
from ..utils.dependencies import get_current_user_id
from ..utils.rate_limiter import limiter, get_rate_limit
from ..services.property_pricing import (
    PropertyPricingService,
    serialize_override,
    serialize_weekly_pricing,
)
from ..services.pricing_calendar import PricingCalendarService
from ..schemas.errors import ERROR_RESPONSES
from ..schemas.pricing import (
    WeeklyPricingRequest,
    WeeklyPricingResponse,
    DateOverrideRequest,
    DateOverrideResponse,
    DateOverrideDeleteResponse,
    PricingCalendarResponse,
    PublicPricingCalendarResponse,
)

router = APIRouter(
    prefix="/api/properties/{property_id}/pricing",
    tags=["Property Pricing"],
    responses=ERROR_RESPONSES,
)


# ==================
# Weekly base pricing
# ==================

@router.get("/weekly", response_model=WeeklyPricingResponse)
async def get_weekly_pricing(
    property_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Get the weekly base pricing of a property"""
    pricing = PropertyPricingService(db).get_owner_weekly_pricing(property_id, user_id)
    return serialize_weekly_pricing(pricing)


@router.put("/weekly", response_model=WeeklyPricingResponse)
async def set_weekly_pricing(
    property_id: str,
    pricing_data: WeeklyPricingRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Create or replace the weekly base pricing (all 14 prices)"""
    service = PropertyPricingService(db, clock)
    pricing = service.set_weekly_pricing(property_id, user_id, pricing_data.model_dump())
    return serialize_weekly_pricing(pricing)


# ==================
# Date overrides
# ==================

@router.get("/overrides", response_model=List[DateOverrideResponse])
async def list_date_overrides(
    property_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """List date overrides, optionally limited to a date range"""
    overrides = PropertyPricingService(db).list_date_overrides(property_id, user_id, start_date, end_date)
    return [serialize_override(o) for o in overrides]


@router.post("/overrides", response_model=List[DateOverrideResponse])
async def set_date_overrides(
    property_id: str,
    override_data: DateOverrideRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """
    Create or update date overrides.

    All-or-nothing: if any entry is invalid nothing is saved and the
    response lists every invalid entry.
    """
    service = PropertyPricingService(db, clock)
    overrides = service.set_date_overrides(
        property_id, user_id, [o.model_dump() for o in override_data.overrides]
    )
    return [serialize_override(o) for o in overrides]


@router.delete("/overrides", response_model=DateOverrideDeleteResponse)
async def delete_date_overrides(
    property_id: str,
    dates: List[date] = Query(..., description="Dates to clear (YYYY-MM-DD), repeatable"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Delete the overrides on the given dates"""
    deleted = PropertyPricingService(db, clock).delete_date_overrides(property_id, user_id, dates)
    return {"deleted_count": deleted}


# ==================
# Calendar
# ==================

@router.get("/calendar", response_model=PricingCalendarResponse)
async def get_pricing_calendar(
    property_id: str,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Resolved prices per day (override or weekly base), owner view"""
    days = PricingCalendarService(db, clock).get_owner_pricing_calendar(
        property_id, user_id, start_date, end_date
    )
    return {
        "property_id": property_id,
        "start_date": start_date,
        "end_date": end_date,
        "days": [day.to_dict() for day in days],
    }


@router.get("/public-calendar", response_model=PublicPricingCalendarResponse)
@limiter.limit(get_rate_limit("public_calendar"))
async def get_public_pricing_calendar(
    request: Request,
    property_id: str,
    start_date: date = Query(...),
    end_date: date = Query(..., description=f"At most {settings.public_calendar_max_days} days after start_date"),
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock)
):
    """Guest-facing calendar with availability, keyed by date"""
    calendar = PricingCalendarService(db, clock).get_public_pricing_calendar(
        property_id, start_date, end_date
    )
    return {
        "property_id": property_id,
        "start_date": start_date,
        "end_date": end_date,
        "calendar": calendar,
    }
