"""
Availability Schemas

`status` is one of available / blocked / maintenance for owner writes;
`booked` is read-only. The legacy boolean `is_available` is still
accepted on input.
"""

from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator


class AvailabilityResponse(BaseModel):
    id: str
    property_id: str
    date: date
    status: str
    is_available: bool
    reason: Optional[str] = None
    reservation_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicAvailabilityDay(BaseModel):
    date: date
    status: str
    is_available: bool

    class Config:
        from_attributes = True


class AvailabilityUpdate(BaseModel):
    status: Optional[str] = None
    is_available: Optional[bool] = None
    reason: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def require_status(self):
        if self.status is None and self.is_available is None:
            raise ValueError("Either status or is_available is required")
        return self

    def resolved_status(self):
        return self.status if self.status is not None else self.is_available


class BulkAvailabilityItem(BaseModel):
    date: str
    status: Optional[str] = None
    is_available: Optional[bool] = None
    reason: Optional[str] = Field(None, max_length=255)


class BulkAvailabilityRequest(BaseModel):
    updates: List[BulkAvailabilityItem]


class AvailabilityFailure(BaseModel):
    date: Optional[str] = None
    error: str


class BulkAvailabilityResponse(BaseModel):
    updated: int
    failed: List[AvailabilityFailure]


class RangeAvailabilityRequest(BaseModel):
    """Applies one status to every date (or every weekend day) in the range"""
    start_date: date
    end_date: date
    status: str = "blocked"
    reason: Optional[str] = Field(None, max_length=255)


class AvailabilityCheckResponse(BaseModel):
    property_id: str
    check_in_date: date
    check_out_date: date
    num_guests: int
    is_available: bool
    unavailable_dates: List[date]
    reason: Optional[str] = None
