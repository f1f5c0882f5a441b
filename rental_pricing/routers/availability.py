"""
Availability API Router

Owner calendar maintenance (single date, bulk, range, weekends) plus the
guest-facing availability reads.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..utils.clock import SystemClock, get_clock
from ..utils.dependencies import get_current_user_id
from ..utils.rate_limiter import limiter, get_rate_limit
from ..services.availability_service import AvailabilityService
from ..schemas.errors import ERROR_RESPONSES
from ..schemas.availability import (
    AvailabilityResponse,
    AvailabilityUpdate,
    AvailabilityCheckResponse,
    BulkAvailabilityRequest,
    BulkAvailabilityResponse,
    PublicAvailabilityDay,
    RangeAvailabilityRequest,
)

router = APIRouter(
    prefix="/api/properties/{property_id}/availability",
    tags=["Availability"],
    responses=ERROR_RESPONSES,
)


# ==================
# Reads
# ==================

@router.get("", response_model=List[AvailabilityResponse])
async def get_availability(
    property_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Stored availability records (dates without a record are available)"""
    return AvailabilityService(db).get_range(property_id, user_id, start_date, end_date)


@router.get("/public", response_model=List[PublicAvailabilityDay])
@limiter.limit(get_rate_limit("public_availability"))
async def get_public_availability(
    request: Request,
    property_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db)
):
    """Guest-facing availability records"""
    return AvailabilityService(db).get_public_range(property_id, start_date, end_date)


@router.get("/check", response_model=AvailabilityCheckResponse)
@limiter.limit(get_rate_limit("public_availability"))
async def check_availability(
    request: Request,
    property_id: str,
    check_in_date: date = Query(...),
    check_out_date: date = Query(...),
    num_guests: int = Query(1, ge=1),
    db: Session = Depends(get_db)
):
    """
    Can the stay be booked? Lists the nights that are not available.
    Stays longer than MAX_RANGE_DAYS nights are rejected.
    """
    return AvailabilityService(db).check_stay(property_id, check_in_date, check_out_date, num_guests)


# ==================
# Owner writes
# ==================

@router.put("/{availability_date}", response_model=AvailabilityResponse)
async def set_date_availability(
    property_id: str,
    availability_date: date,
    update: AvailabilityUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Set the status of one date"""
    return AvailabilityService(db, clock).set_one(
        property_id, user_id, availability_date, update.resolved_status(), update.reason
    )


@router.post("/bulk", response_model=BulkAvailabilityResponse)
async def bulk_update_availability(
    property_id: str,
    bulk_data: BulkAvailabilityRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """
    Update many dates. Each entry is applied on its own; failures are
    returned in `failed` and do not stop the others.
    """
    updates = [u.model_dump(exclude_none=True) for u in bulk_data.updates]
    return AvailabilityService(db, clock).set_many(property_id, user_id, updates)


@router.post("/range", response_model=BulkAvailabilityResponse)
async def set_range_availability(
    property_id: str,
    range_data: RangeAvailabilityRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Apply one status to every date in the range"""
    return AvailabilityService(db, clock).set_range_status(
        property_id,
        user_id,
        range_data.start_date,
        range_data.end_date,
        range_data.status,
        range_data.reason,
    )


@router.post("/block-weekends", response_model=BulkAvailabilityResponse)
async def block_weekends(
    property_id: str,
    range_data: RangeAvailabilityRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Apply a status to the weekend days (WEEKEND_DAYS) in the range"""
    return AvailabilityService(db, clock).block_weekends(
        property_id,
        user_id,
        range_data.start_date,
        range_data.end_date,
        range_data.status,
        range_data.reason,
    )
