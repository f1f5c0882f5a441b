"""
Property Model

Owned and edited by the property service; this engine only reads it to
resolve ownership and bookability.
"""

import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import relationship
from ..database import Base


class PropertyStatus(str, enum.Enum):
    DRAFT = "Draft"
    LIVE = "Live"
    INACTIVE = "Inactive"


class Property(Base):
    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    status = Column(String(20), default=PropertyStatus.DRAFT.value)
    maximum_guests = Column(Integer, default=2)
    currency = Column(String(3), default="AED")

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    rate_plans = relationship("RatePlan", back_populates="property", cascade="all, delete-orphan")
    weekly_pricing = relationship(
        "WeeklyBasePricing", back_populates="property", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def is_live(self) -> bool:
        return self.status == PropertyStatus.LIVE.value

    def __repr__(self):
        return f"<Property {self.id} owner={self.owner_id} status={self.status}>"
