"""
Rate Plan Prices API Router

Explicit per-date prices of a rate plan. Bulk create and copy report
per-entry failures instead of failing the request.
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
from ..services.price_ledger import PriceLedgerService
from ..schemas.errors import ERROR_RESPONSES
from ..schemas.price import (
    PriceCreate,
    PriceUpdate,
    PriceResponse,
    BulkPriceRequest,
    BulkPriceResponse,
    PriceRangeDeleteResponse,
    PriceStatisticsResponse,
    PriceGapsResponse,
    CopyPricesRequest,
    CopyPricesResponse,
)

router = APIRouter(prefix="/api", tags=["Rate Plan Prices"], responses=ERROR_RESPONSES)


@router.get("/rate-plans/{rate_plan_id}/prices", response_model=List[PriceResponse])
async def get_prices(
    rate_plan_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(settings.max_bulk_items, ge=1, le=settings.max_bulk_items),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Prices of a rate plan ordered by date"""
    return PriceLedgerService(db).get_prices(rate_plan_id, user_id, start_date, end_date, limit, offset)


@router.post("/rate-plans/{rate_plan_id}/prices", response_model=PriceResponse)
async def create_price(
    rate_plan_id: str,
    price_data: PriceCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Create the price of a date, or update it if one exists"""
    return PriceLedgerService(db, clock).create_price(rate_plan_id, user_id, price_data.date, price_data.amount)


@router.post("/rate-plans/{rate_plan_id}/prices/bulk", response_model=BulkPriceResponse)
@limiter.limit(get_rate_limit("bulk_write"))
async def bulk_create_prices(
    request: Request,
    rate_plan_id: str,
    bulk_data: BulkPriceRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Upsert up to 365 prices; unchanged entries are counted as skipped"""
    return PriceLedgerService(db, clock).bulk_create_prices(
        rate_plan_id, user_id, [p.model_dump() for p in bulk_data.prices]
    )


@router.delete("/rate-plans/{rate_plan_id}/prices", response_model=PriceRangeDeleteResponse)
async def bulk_delete_prices(
    rate_plan_id: str,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Delete every price in [start_date, end_date]"""
    deleted = PriceLedgerService(db, clock).bulk_delete_prices(rate_plan_id, user_id, start_date, end_date)
    return {"deleted_count": deleted}


@router.get("/rate-plans/{rate_plan_id}/prices/statistics", response_model=PriceStatisticsResponse)
async def get_price_statistics(
    rate_plan_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    return PriceLedgerService(db).get_price_statistics(rate_plan_id, user_id, start_date, end_date)


@router.get("/rate-plans/{rate_plan_id}/prices/gaps", response_model=PriceGapsResponse)
async def get_price_gaps(
    rate_plan_id: str,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """Dates with no explicit price (priced by the plan's adjustment)"""
    gaps = PriceLedgerService(db).get_price_gaps(rate_plan_id, user_id, start_date, end_date)
    return {
        "rate_plan_id": rate_plan_id,
        "start_date": start_date,
        "end_date": end_date,
        "total_gaps": len(gaps),
        "gaps": gaps,
    }


@router.post("/rate-plans/{rate_plan_id}/prices/copy", response_model=CopyPricesResponse)
async def copy_prices(
    rate_plan_id: str,
    copy_data: CopyPricesRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    """Copy a range of prices to a new start date, keeping day offsets"""
    return PriceLedgerService(db, clock).copy_prices(
        rate_plan_id,
        user_id,
        copy_data.source_start_date,
        copy_data.source_end_date,
        copy_data.target_start_date,
    )


@router.put("/prices/{price_id}", response_model=PriceResponse)
async def update_price(
    price_id: str,
    price_data: PriceUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    return PriceLedgerService(db, clock).update_price(price_id, user_id, price_data.amount)


@router.delete("/prices/{price_id}")
async def delete_price(
    price_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    clock: SystemClock = Depends(get_clock)
):
    PriceLedgerService(db, clock).delete_price(price_id, user_id)
    return {"message": "Price deleted successfully"}
