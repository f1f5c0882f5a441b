"""
Property Pricing Service

Weekly base pricing and date overrides for a property.

- Weekly base: exactly one record per property, replaced as a whole.
- Date overrides: at most one per (property, date); a batch is validated
  completely before anything is written, and one bad entry rejects the
  whole batch.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from ..config import settings
from ..errors import InvalidInput, NotFound, PastDateError, PricingEngineError, RangeTooLarge
from ..models.pricing import DateOverride, WeeklyBasePricing
from ..utils.clock import SystemClock, system_clock
from ..utils.dates import WEEKDAY_NAMES, format_date_local, parse_date, weekday_name
from ..utils.db_helpers import upsert_by_keys
from ..utils.money import quantize, validate_base_price, validate_price
from .ownership import get_owned_property

logger = logging.getLogger(__name__)


def derive_half_day_price(full_day_price: Decimal) -> Decimal:
    """Half-day price for an override that does not set one."""
    return quantize(Decimal(str(full_day_price)) * settings.half_day_ratio)


def override_half_day_price(override: DateOverride) -> Decimal:
    if override.half_day_price is not None:
        return Decimal(str(override.half_day_price))
    return derive_half_day_price(override.full_day_price)


def serialize_weekly_pricing(pricing: WeeklyBasePricing) -> Dict[str, Any]:
    maps = pricing.as_weekly_maps()
    return {
        "id": pricing.id,
        "property_id": pricing.property_id,
        "full_day": maps["full_day"],
        "half_day": maps["half_day"],
        "currency": pricing.currency,
        "created_at": pricing.created_at,
        "updated_at": pricing.updated_at,
    }


def serialize_override(override: DateOverride) -> Dict[str, Any]:
    return {
        "id": override.id,
        "date": override.date,
        "full_day_price": Decimal(str(override.full_day_price)),
        "half_day_price": Decimal(str(override.half_day_price)) if override.half_day_price is not None else None,
        "reason": override.reason,
        "created_at": override.created_at,
        "updated_at": override.updated_at,
    }


class PropertyPricingService:
    """
    Weekly base pricing and date override store.

    Every mutating call verifies that the caller owns the property.
    """

    def __init__(self, db: Session, clock: SystemClock = system_clock):
        self.db = db
        self.clock = clock

    # ==================
    # Weekly base
    # ==================

    def _validate_weekly(self, pricing: Mapping[str, Mapping[str, Any]]) -> Dict[str, Decimal]:
        """Validate all 14 values; returns column -> value."""
        columns: Dict[str, Decimal] = {}
        errors: List[Dict[str, str]] = []
        full_day = pricing.get("full_day") or {}
        half_day = pricing.get("half_day") or {}

        for day in WEEKDAY_NAMES:
            for kind, source, column in (
                ("full_day", full_day, f"price_{day}"),
                ("half_day", half_day, f"half_day_price_{day}"),
            ):
                field = f"{kind}.{day}"
                if day not in source:
                    errors.append({"field": field, "error": "Price is required"})
                    continue
                try:
                    columns[column] = validate_base_price(source[day], field)
                except PricingEngineError as e:
                    errors.append({"field": field, "error": e.message})

            full = columns.get(f"price_{day}")
            half = columns.get(f"half_day_price_{day}")
            if full is not None and half is not None and half > full:
                errors.append({
                    "field": f"half_day.{day}",
                    "error": "Half-day price should not exceed full-day price",
                })

        if errors:
            raise InvalidInput.from_entries("Invalid weekly pricing", errors)
        return columns

    def set_weekly_pricing(
        self,
        property_id: str,
        owner_id: str,
        pricing: Mapping[str, Mapping[str, Any]],
    ) -> WeeklyBasePricing:
        """
        Create or fully replace the weekly base pricing of a property.

        Args:
            pricing: {"full_day": {"monday": 100, ...}, "half_day": {"monday": 70, ...}}
        """
        prop = get_owned_property(self.db, property_id, owner_id)
        columns = self._validate_weekly(pricing)
        columns["currency"] = prop.currency or settings.default_currency

        record, is_new = upsert_by_keys(
            self.db, WeeklyBasePricing, {"property_id": property_id}, columns
        )
        self.db.commit()
        self.db.refresh(record)

        logger.info(
            "Weekly pricing %s for property %s",
            "created" if is_new else "replaced",
            property_id,
        )
        return record

    def get_weekly_pricing(self, property_id: str) -> WeeklyBasePricing:
        pricing = self.db.query(WeeklyBasePricing).filter(
            WeeklyBasePricing.property_id == property_id
        ).first()
        if not pricing:
            raise NotFound(
                f"No base pricing configured for property {property_id}",
                details={"property_id": property_id},
            )
        return pricing

    def get_owner_weekly_pricing(self, property_id: str, owner_id: str) -> WeeklyBasePricing:
        get_owned_property(self.db, property_id, owner_id)
        return self.get_weekly_pricing(property_id)

    def get_base_price(self, property_id: str, for_date, is_half_day: bool = False) -> Decimal:
        """Price of one date: override first, weekly base second."""
        day = parse_date(for_date)
        override = self.db.query(DateOverride).filter(
            DateOverride.property_id == property_id,
            DateOverride.date == day
        ).first()

        if override:
            if is_half_day:
                return override_half_day_price(override)
            return Decimal(str(override.full_day_price))

        pricing = self.get_weekly_pricing(property_id)
        weekday = weekday_name(day)
        return pricing.half_day_price(weekday) if is_half_day else pricing.full_day_price(weekday)

    # ==================
    # Date overrides
    # ==================

    def _validate_overrides(self, overrides: Sequence[Mapping[str, Any]]) -> Dict[date, Dict[str, Any]]:
        """
        Validate the whole batch. Returns date -> column values; later
        entries for the same date replace earlier ones.
        """
        today = self.clock.today()
        validated: Dict[date, Dict[str, Any]] = {}
        errors: List[Dict[str, Any]] = []
        past_only = True

        for index, entry in enumerate(overrides):
            raw_date = entry.get("date")
            try:
                day = parse_date(raw_date)
                if day < today:
                    raise PastDateError(
                        f"Cannot set price override for past date: {format_date_local(day)}"
                    )
                full = validate_price(entry.get("full_day_price"), "full_day_price")
                half = entry.get("half_day_price")
                if half is not None:
                    half = validate_price(half, "half_day_price")
                    if half > full:
                        raise InvalidInput("Half-day price should not exceed full-day price")
            except PricingEngineError as e:
                if not isinstance(e, PastDateError):
                    past_only = False
                errors.append({
                    "index": index,
                    "date": raw_date if isinstance(raw_date, str) else (
                        format_date_local(raw_date) if raw_date is not None else None
                    ),
                    "error": e.message,
                })
                continue

            validated[day] = {
                "full_day_price": full,
                "half_day_price": half,
                "reason": entry.get("reason"),
            }

        if errors:
            error_cls = PastDateError if past_only else InvalidInput
            raise error_cls.from_entries(
                f"{len(errors)} invalid override(s); nothing was saved", errors
            )
        return validated

    def set_date_overrides(
        self,
        property_id: str,
        owner_id: str,
        overrides: Sequence[Mapping[str, Any]],
    ) -> List[DateOverride]:
        """
        Upsert up to MAX_BULK_ITEMS date overrides.

        Each entry: {"date", "full_day_price", "half_day_price"?, "reason"?}.
        Fail-fast: any invalid entry rejects the call and nothing is
        written; the raised error lists every invalid entry.
        """
        get_owned_property(self.db, property_id, owner_id)

        if not overrides:
            raise InvalidInput("No override data provided")
        if len(overrides) > settings.max_bulk_items:
            raise RangeTooLarge(
                f"Cannot set more than {settings.max_bulk_items} date overrides at once",
                details={"count": len(overrides)},
            )

        validated = self._validate_overrides(overrides)

        results = []
        for day, values in sorted(validated.items()):
            record, _ = upsert_by_keys(
                self.db, DateOverride, {"property_id": property_id, "date": day}, values
            )
            results.append(record)
        self.db.commit()
        for record in results:
            self.db.refresh(record)

        logger.info("Saved %d date overrides for property %s", len(results), property_id)
        return results

    def delete_date_overrides(self, property_id: str, owner_id: str, dates: Sequence[Any]) -> int:
        """Delete overrides on the given dates; missing ones are ignored."""
        get_owned_property(self.db, property_id, owner_id)

        if not dates:
            raise InvalidInput("No dates provided for deletion")
        if len(dates) > settings.max_bulk_items:
            raise RangeTooLarge(f"Cannot delete more than {settings.max_bulk_items} overrides at once")

        parsed = {parse_date(d) for d in dates}
        today = self.clock.today()
        past = sorted(format_date_local(d) for d in parsed if d < today)
        if past:
            raise PastDateError(
                "Cannot delete price overrides for past dates",
                details={"dates": past},
            )

        deleted = self.db.query(DateOverride).filter(
            DateOverride.property_id == property_id,
            DateOverride.date.in_(parsed)
        ).delete(synchronize_session=False)
        self.db.commit()

        logger.info("Deleted %d date overrides for property %s", deleted, property_id)
        return deleted

    def get_overrides_in_range(self, property_id: str, start: date, end: date) -> List[DateOverride]:
        return self.db.query(DateOverride).filter(
            DateOverride.property_id == property_id,
            DateOverride.date >= start,
            DateOverride.date <= end
        ).order_by(DateOverride.date).all()

    def list_date_overrides(
        self,
        property_id: str,
        owner_id: str,
        start: Optional[Any] = None,
        end: Optional[Any] = None,
    ) -> List[DateOverride]:
        get_owned_property(self.db, property_id, owner_id)
        query = self.db.query(DateOverride).filter(DateOverride.property_id == property_id)
        if start is not None:
            query = query.filter(DateOverride.date >= parse_date(start))
        if end is not None:
            query = query.filter(DateOverride.date <= parse_date(end))
        return query.order_by(DateOverride.date).all()
