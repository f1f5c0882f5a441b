"""
Availability Model

Per-property, per-date availability state. A date without a row is
available.
"""

import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, Index, UniqueConstraint
from ..database import Base


class AvailabilityStatus(str, enum.Enum):
    AVAILABLE = "available"
    BLOCKED = "blocked"          # Manual owner block
    BOOKED = "booked"            # Written by a confirmed reservation
    MAINTENANCE = "maintenance"  # Manual owner block for upkeep

    @classmethod
    def from_legacy(cls, value) -> "AvailabilityStatus":
        """Accept legacy booleans: True -> available, False -> blocked."""
        if isinstance(value, bool):
            return cls.AVAILABLE if value else cls.BLOCKED
        return cls(value)


# Statuses an owner may set directly
OWNER_WRITABLE_STATUSES = frozenset({
    AvailabilityStatus.AVAILABLE,
    AvailabilityStatus.BLOCKED,
    AvailabilityStatus.MAINTENANCE,
})


class AvailabilitySlot(Base):
    __tablename__ = "availability_slots"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)

    status = Column(String(20), nullable=False, default=AvailabilityStatus.AVAILABLE.value)
    reason = Column(String(255), nullable=True)

    # Set only for status=booked
    reservation_id = Column(String(36), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint('property_id', 'date', name='uq_availability_property_date'),
        Index('ix_availability_property_date', 'property_id', 'date'),
    )

    @property
    def is_available(self) -> bool:
        return self.status == AvailabilityStatus.AVAILABLE.value

    def __repr__(self):
        return f"<AvailabilitySlot {self.property_id} {self.date} {self.status}>"
