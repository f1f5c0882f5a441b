"""
Rate Plan Price Ledger Model

Explicit per-date prices for a rate plan. Dates without an entry fall back
to the plan's adjustment over the property's base price.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Numeric, ForeignKey, DateTime, Date, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base


class Price(Base):
    __tablename__ = "rate_plan_prices"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    rate_plan_id = Column(String(36), ForeignKey("rate_plans.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    rate_plan = relationship("RatePlan", back_populates="prices")

    __table_args__ = (
        UniqueConstraint('rate_plan_id', 'date', name='uq_price_rate_plan_date'),
        Index('ix_price_rate_plan_date', 'rate_plan_id', 'date'),
    )

    def __repr__(self):
        return f"<Price {self.rate_plan_id} {self.date} {self.amount}>"
