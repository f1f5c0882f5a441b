"""
Rate Plan Price Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field


class PriceCreate(BaseModel):
    date: date
    amount: Decimal


class PriceUpdate(BaseModel):
    amount: Decimal


class PriceResponse(BaseModel):
    id: str
    rate_plan_id: str
    date: date
    amount: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BulkPriceItem(BaseModel):
    # Kept as a string so a bad date fails only its own entry
    date: str
    amount: Decimal


class BulkPriceRequest(BaseModel):
    prices: List[BulkPriceItem]


class BulkEntryError(BaseModel):
    date: Optional[str] = None
    error: str


class BulkPriceResponse(BaseModel):
    success: int
    skipped: int
    errors: List[BulkEntryError]
    prices: List[PriceResponse]


class PriceRangeDeleteResponse(BaseModel):
    deleted_count: int


class PriceDateRange(BaseModel):
    start: Optional[date] = None
    end: Optional[date] = None


class PriceStatisticsResponse(BaseModel):
    total_prices: int
    average_price: Decimal
    min_price: Decimal
    max_price: Decimal
    price_range: PriceDateRange


class PriceGapsResponse(BaseModel):
    rate_plan_id: str
    start_date: date
    end_date: date
    total_gaps: int
    gaps: List[date]


class CopyPricesRequest(BaseModel):
    source_start_date: date
    source_end_date: date
    target_start_date: date = Field(..., description="Each price keeps its day offset from the source start")


class CopyPricesResponse(BaseModel):
    copied_count: int
    errors: List[BulkEntryError]
    target_start: date
    target_end: date
