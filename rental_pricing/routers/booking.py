"""
Booking Options API Router

Guest-facing stay quote: standard rate plus every eligible rate plan,
best offer first, with the auto-selected plan.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..utils.clock import SystemClock, get_clock
from ..utils.rate_limiter import limiter, get_rate_limit
from ..services.booking_calculator import BookingCalculatorService
from ..schemas.errors import ERROR_RESPONSES
from ..schemas.booking import BookingOptionsRequest, BookingOptionsResponse

router = APIRouter(prefix="/api/properties", tags=["Booking"], responses=ERROR_RESPONSES)


@router.post("/{property_id}/booking-options", response_model=BookingOptionsResponse)
@limiter.limit(get_rate_limit("booking_options"))
async def get_booking_options(
    request: Request,
    property_id: str,
    stay: BookingOptionsRequest,
    db: Session = Depends(get_db),
    clock: SystemClock = Depends(get_clock)
):
    """
    Price a stay under every eligible rate plan.

    Send `previous_rate_plan_id` to keep the guest's current selection
    while it is still eligible.
    """
    return BookingCalculatorService(db, clock).calculate_booking_options(
        property_id,
        check_in=stay.check_in_date,
        check_out=stay.check_out_date,
        num_guests=stay.num_guests,
        is_half_day=stay.is_half_day,
        single_date=stay.single_date,
        previous_rate_plan_id=stay.previous_rate_plan_id,
    )
