"""
Property Pricing Models

- WeeklyBasePricing: one row per property, 7 full-day + 7 half-day prices
- DateOverride: a price for one specific date that supersedes the weekly base
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import Column, String, Numeric, ForeignKey, DateTime, Date, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base
from ..utils.dates import WEEKDAY_NAMES


class WeeklyBasePricing(Base):
    """
    Default price per weekday for a property.

    Replaced as a whole on every save (no partial merge).
    """
    __tablename__ = "weekly_base_pricing"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, unique=True)

    # Full day prices
    price_monday = Column(Numeric(10, 2), nullable=False)
    price_tuesday = Column(Numeric(10, 2), nullable=False)
    price_wednesday = Column(Numeric(10, 2), nullable=False)
    price_thursday = Column(Numeric(10, 2), nullable=False)
    price_friday = Column(Numeric(10, 2), nullable=False)
    price_saturday = Column(Numeric(10, 2), nullable=False)
    price_sunday = Column(Numeric(10, 2), nullable=False)

    # Half day prices
    half_day_price_monday = Column(Numeric(10, 2), nullable=False)
    half_day_price_tuesday = Column(Numeric(10, 2), nullable=False)
    half_day_price_wednesday = Column(Numeric(10, 2), nullable=False)
    half_day_price_thursday = Column(Numeric(10, 2), nullable=False)
    half_day_price_friday = Column(Numeric(10, 2), nullable=False)
    half_day_price_saturday = Column(Numeric(10, 2), nullable=False)
    half_day_price_sunday = Column(Numeric(10, 2), nullable=False)

    currency = Column(String(3), default="AED")

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    property = relationship("Property", back_populates="weekly_pricing")

    def full_day_price(self, weekday: str) -> Decimal:
        return Decimal(str(getattr(self, f"price_{weekday}")))

    def half_day_price(self, weekday: str) -> Decimal:
        return Decimal(str(getattr(self, f"half_day_price_{weekday}")))

    def as_weekly_maps(self) -> dict:
        """{"full_day": {monday: ..}, "half_day": {monday: ..}}"""
        return {
            "full_day": {day: self.full_day_price(day) for day in WEEKDAY_NAMES},
            "half_day": {day: self.half_day_price(day) for day in WEEKDAY_NAMES},
        }

    def __repr__(self):
        return f"<WeeklyBasePricing property_id={self.property_id}>"


class DateOverride(Base):
    __tablename__ = "date_overrides"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)

    full_day_price = Column(Numeric(10, 2), nullable=False)
    half_day_price = Column(Numeric(10, 2), nullable=True)  # None = derived from full day
    reason = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint('property_id', 'date', name='uq_date_override_property_date'),
        Index('ix_date_override_property_date', 'property_id', 'date'),
    )

    def __repr__(self):
        return f"<DateOverride {self.property_id} {self.date} {self.full_day_price}>"
