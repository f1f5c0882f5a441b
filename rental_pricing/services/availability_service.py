"""
Availability Service

Per-property, per-date availability state.

Key responsibilities:
- Owner range reads and single/bulk status upserts
- Guest-facing range reads (no ownership check)
- Owner quick actions: weekend blocking, range maintenance
- Reservation lifecycle writes (booked / released)

A date with no row is available.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import InvalidInput, InvalidRange, PastDateError, PricingEngineError, RangeTooLarge
from ..models.availability import AvailabilitySlot, AvailabilityStatus, OWNER_WRITABLE_STATUSES
from ..utils.clock import SystemClock, system_clock
from ..utils.dates import add_days, check_span, enumerate_dates, format_date_local, parse_date
from ..utils.db_helpers import upsert_by_keys
from ..utils.logging_config import get_logger
from .ownership import get_owned_property, get_property

logger = get_logger(__name__)

StatusInput = Union[AvailabilityStatus, str, bool]


def _range_filter(query, start: Optional[Any], end: Optional[Any]):
    if start is not None:
        query = query.filter(AvailabilitySlot.date >= parse_date(start))
    if end is not None:
        query = query.filter(AvailabilitySlot.date <= parse_date(end))
    return query


class AvailabilityService:

    def __init__(self, db: Session, clock: SystemClock = system_clock):
        self.db = db
        self.clock = clock

    # ==================
    # Reads
    # ==================

    def get_range(
        self,
        property_id: str,
        user_id: str,
        start: Optional[Any] = None,
        end: Optional[Any] = None,
    ) -> List[AvailabilitySlot]:
        """Stored slots for an owned property, ordered by date."""
        get_owned_property(self.db, property_id, user_id)
        query = self.db.query(AvailabilitySlot).filter(AvailabilitySlot.property_id == property_id)
        return _range_filter(query, start, end).order_by(AvailabilitySlot.date).all()

    def get_public_range(
        self,
        property_id: str,
        start: Optional[Any] = None,
        end: Optional[Any] = None,
    ) -> List[AvailabilitySlot]:
        """Stored slots for any existing property (guest-facing calendar)."""
        get_property(self.db, property_id)
        query = self.db.query(AvailabilitySlot).filter(AvailabilitySlot.property_id == property_id)
        return _range_filter(query, start, end).order_by(AvailabilitySlot.date).all()

    def check_stay(
        self,
        property_id: str,
        check_in: Any,
        check_out: Any,
        num_guests: int,
    ) -> Dict[str, Any]:
        """Whether every night in [check_in, check_out) is open for num_guests."""
        prop = get_property(self.db, property_id)
        check_in_d = parse_date(check_in)
        check_out_d = parse_date(check_out)
        if check_out_d <= check_in_d:
            raise InvalidRange("Check-out date must be after check-in date")
        check_span(check_in_d, check_out_d, settings.max_range_days, "Stay")

        result = {
            "property_id": property_id,
            "check_in_date": check_in_d,
            "check_out_date": check_out_d,
            "num_guests": num_guests,
            "unavailable_dates": [],
        }

        if prop.maximum_guests and num_guests > prop.maximum_guests:
            result.update(is_available=False, reason=f"Maximum {prop.maximum_guests} guests allowed")
            return result

        nights = enumerate_dates(check_in_d, add_days(check_out_d, -1))
        slots = self.db.query(AvailabilitySlot).filter(
            AvailabilitySlot.property_id == property_id,
            AvailabilitySlot.date >= check_in_d,
            AvailabilitySlot.date < check_out_d
        ).all()
        closed = {slot.date for slot in slots if not slot.is_available}
        unavailable = [night for night in nights if night in closed]

        result.update(
            is_available=not unavailable,
            unavailable_dates=unavailable,
            reason="Some dates are not available" if unavailable else None,
        )
        return result

    # ==================
    # Owner writes
    # ==================

    def _owner_status(self, status: StatusInput) -> AvailabilityStatus:
        try:
            resolved = AvailabilityStatus.from_legacy(status)
        except ValueError:
            raise InvalidInput(f"Invalid availability status: {status!r}")
        if resolved not in OWNER_WRITABLE_STATUSES:
            raise InvalidInput("Booked dates are set by reservations, not by owners")
        return resolved

    def _write(
        self,
        property_id: str,
        day: date,
        status: AvailabilityStatus,
        reason: Optional[str] = None,
    ) -> AvailabilitySlot:
        if day < self.clock.today():
            raise PastDateError(f"Cannot change availability for past date {format_date_local(day)}")

        existing = self.db.query(AvailabilitySlot).filter(
            AvailabilitySlot.property_id == property_id,
            AvailabilitySlot.date == day
        ).first()
        if existing and existing.status == AvailabilityStatus.BOOKED.value:
            raise InvalidInput(f"{format_date_local(day)} is booked and cannot be changed")

        record, _ = upsert_by_keys(
            self.db,
            AvailabilitySlot,
            {"property_id": property_id, "date": day},
            {"status": status.value, "reason": reason, "reservation_id": None},
        )
        return record

    def set_one(
        self,
        property_id: str,
        user_id: str,
        day: Any,
        status: StatusInput,
        reason: Optional[str] = None,
    ) -> AvailabilitySlot:
        """Upsert the status of a single date."""
        get_owned_property(self.db, property_id, user_id)
        record = self._write(property_id, parse_date(day), self._owner_status(status), reason)
        self.db.commit()
        self.db.refresh(record)

        logger.log_with_context(
            logging.INFO,
            f"Availability {format_date_local(record.date)} -> {record.status}",
            entity_type="property",
            entity_id=property_id,
        )
        return record

    def set_many(
        self,
        property_id: str,
        user_id: str,
        updates: Sequence[Mapping[str, Any]],
    ) -> Dict[str, Any]:
        """
        Upsert many dates. Each update: {"date", "status" | "is_available", "reason"?}.

        Entries are applied independently; failures are reported in
        `failed` and never stop the rest of the batch.
        """
        get_owned_property(self.db, property_id, user_id)

        if len(updates) > settings.max_bulk_items:
            raise RangeTooLarge(f"Cannot update more than {settings.max_bulk_items} dates at once")

        return self._apply_updates(property_id, updates)

    def _apply_updates(self, property_id: str, updates: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        updated = 0
        failed: List[Dict[str, Any]] = []

        for update in updates:
            raw_date = update.get("date")
            label = raw_date if isinstance(raw_date, str) else (
                format_date_local(raw_date) if raw_date is not None else None
            )
            try:
                status = update.get("status")
                if status is None:
                    status = update.get("is_available")
                if status is None:
                    raise InvalidInput("status is required")
                self._write(property_id, parse_date(raw_date), self._owner_status(status), update.get("reason"))
                self.db.commit()
                updated += 1
            except PricingEngineError as e:
                self.db.rollback()
                failed.append({"date": label, "error": e.message})
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception("Availability write failed for %s on %s", property_id, label)
                failed.append({"date": label, "error": "Could not save availability for this date"})

        logger.bulk_result("availability.set_many", "property", property_id, updated, len(failed))
        return {"updated": updated, "failed": failed}

    def set_range_status(
        self,
        property_id: str,
        user_id: str,
        start: Any,
        end: Any,
        status: StatusInput,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Apply one status to every date in [start, end]."""
        get_owned_property(self.db, property_id, user_id)
        dates = self._bounded_range(start, end)
        resolved = self._owner_status(status)
        return self._apply_updates(
            property_id,
            [{"date": d, "status": resolved, "reason": reason} for d in dates],
        )

    def block_weekends(
        self,
        property_id: str,
        user_id: str,
        start: Any,
        end: Any,
        status: StatusInput = AvailabilityStatus.BLOCKED,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Apply a status to the configured weekend days in [start, end]."""
        get_owned_property(self.db, property_id, user_id)
        weekend = set(settings.weekend_day_numbers)
        dates = [d for d in self._bounded_range(start, end) if d.weekday() in weekend]
        resolved = self._owner_status(status)
        return self._apply_updates(
            property_id,
            [{"date": d, "status": resolved, "reason": reason} for d in dates],
        )

    def _bounded_range(self, start: Any, end: Any) -> List[date]:
        start_d, end_d = parse_date(start), parse_date(end)
        check_span(start_d, end_d, settings.max_range_days)
        return enumerate_dates(start_d, end_d)

    # ==================
    # Reservation lifecycle
    # ==================

    def mark_booked(self, property_id: str, reservation_id: str, check_in: Any, check_out: Any) -> int:
        """
        Mark the nights [check_in, check_out) as booked for a confirmed
        reservation. Returns count of dates marked.
        """
        get_property(self.db, property_id)
        check_in_d, check_out_d = parse_date(check_in), parse_date(check_out)
        if check_out_d <= check_in_d:
            raise InvalidRange("Check-out date must be after check-in date")
        check_span(check_in_d, check_out_d, settings.max_range_days, "Stay")

        count = 0
        for night in enumerate_dates(check_in_d, add_days(check_out_d, -1)):
            upsert_by_keys(
                self.db,
                AvailabilitySlot,
                {"property_id": property_id, "date": night},
                {"status": AvailabilityStatus.BOOKED.value, "reason": None, "reservation_id": reservation_id},
            )
            count += 1
        self.db.commit()

        logger.log_with_context(
            logging.INFO,
            f"Marked {count} nights booked",
            entity_type="reservation",
            entity_id=reservation_id,
            property_id=property_id,
        )
        return count

    def release_booking(self, reservation_id: str) -> int:
        """Return a cancelled reservation's nights to available."""
        slots = self.db.query(AvailabilitySlot).filter(
            AvailabilitySlot.reservation_id == reservation_id,
            AvailabilitySlot.status == AvailabilityStatus.BOOKED.value
        ).all()
        for slot in slots:
            slot.status = AvailabilityStatus.AVAILABLE.value
            slot.reservation_id = None
        self.db.commit()

        logger.log_with_context(
            logging.INFO,
            f"Released {len(slots)} nights",
            entity_type="reservation",
            entity_id=reservation_id,
        )
        return len(slots)
