"""
Rate Plan Model

A named pricing/cancellation policy attached to a property. Each plan has
its own price ledger (see price.py) and eligibility constraints.
"""

import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Numeric, Integer, Boolean, ForeignKey, DateTime, Index
from sqlalchemy.orm import relationship
from ..database import Base


class RatePlanType(str, enum.Enum):
    FULLY_FLEXIBLE = "FullyFlexible"
    NON_REFUNDABLE = "NonRefundable"
    CUSTOM = "Custom"


class AdjustmentType(str, enum.Enum):
    """How adjustment_value modifies the base price"""
    PERCENTAGE = "Percentage"    # base * (1 + value/100)
    FIXED_AMOUNT = "FixedAmount"  # base + value, per night


class RatePlan(Base):
    __tablename__ = "rate_plans"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    plan_type = Column(String(20), default=RatePlanType.FULLY_FLEXIBLE.value)

    # Negative values are discounts
    adjustment_type = Column(String(20), default=AdjustmentType.PERCENTAGE.value)
    adjustment_value = Column(Numeric(10, 2), default=0)

    # Eligibility constraints (None = not configured)
    min_stay = Column(Integer, nullable=True)
    max_stay = Column(Integer, nullable=True)
    min_guests = Column(Integer, nullable=True)
    max_guests = Column(Integer, nullable=True)
    min_advance_booking = Column(Integer, nullable=True)  # days
    max_advance_booking = Column(Integer, nullable=True)  # days

    # Lower = preferred
    priority = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    property = relationship("Property", back_populates="rate_plans")
    prices = relationship("Price", back_populates="rate_plan", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_rate_plans_property_active', 'property_id', 'is_active'),
    )

    def __repr__(self):
        return f"<RatePlan {self.name} {self.adjustment_type}={self.adjustment_value} priority={self.priority}>"
