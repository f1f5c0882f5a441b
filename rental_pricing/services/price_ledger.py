"""
Rate Plan Price Ledger

Explicit per-date prices for a rate plan, independent of the property's
base pricing. Dates with no entry (gaps) fall back to the plan's
adjustment when a stay is priced.

Bulk create and copy are partial-success: every entry is validated and
written on its own, failures are collected and returned, and the call
never aborts on a single bad entry.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import (
    InvalidInput,
    InvalidRange,
    NoPricesFound,
    PastDateError,
    PricingEngineError,
    RangeTooLarge,
)
from ..models.price import Price
from ..utils.clock import SystemClock, system_clock
from ..utils.dates import add_days, check_span, days_between, enumerate_dates, format_date_local, parse_date
from ..utils.db_helpers import upsert_by_keys
from ..utils.logging_config import get_logger
from ..utils.money import quantize, validate_price
from .ownership import get_owned_price, get_owned_rate_plan

logger = get_logger(__name__)


def serialize_price(price: Price) -> Dict[str, Any]:
    return {
        "id": price.id,
        "rate_plan_id": price.rate_plan_id,
        "date": price.date,
        "amount": Decimal(str(price.amount)),
        "created_at": price.created_at,
        "updated_at": price.updated_at,
    }


def _entry_date_label(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    return format_date_local(raw)


class PriceLedgerService:

    def __init__(self, db: Session, clock: SystemClock = system_clock):
        self.db = db
        self.clock = clock

    # ==================
    # Validation
    # ==================

    def _ensure_not_past(self, day: date, action: str = "set") -> None:
        if day < self.clock.today():
            raise PastDateError(
                f"Cannot {action} prices for past dates",
                details={"date": format_date_local(day)},
            )

    def _ordered_range(self, start: Any, end: Any) -> tuple:
        """start < end and at most MAX_RANGE_DAYS apart."""
        start_d, end_d = parse_date(start), parse_date(end)
        if start_d >= end_d:
            raise InvalidRange("Start date must be before end date")
        check_span(start_d, end_d, settings.max_range_days)
        return start_d, end_d

    # ==================
    # Reads
    # ==================

    def get_prices(
        self,
        rate_plan_id: str,
        owner_id: str,
        start_date: Optional[Any] = None,
        end_date: Optional[Any] = None,
        limit: int = 365,
        offset: int = 0,
    ) -> List[Price]:
        get_owned_rate_plan(self.db, rate_plan_id, owner_id)

        query = self.db.query(Price).filter(Price.rate_plan_id == rate_plan_id)
        if start_date is not None:
            query = query.filter(Price.date >= parse_date(start_date))
        if end_date is not None:
            query = query.filter(Price.date <= parse_date(end_date))

        limit = max(0, min(limit, settings.max_bulk_items))
        return query.order_by(Price.date).offset(max(0, offset)).limit(limit).all()

    def get_prices_by_date(self, rate_plan_id: str, start: date, end: date) -> Dict[date, Decimal]:
        """Ledger amounts in [start, end] keyed by date (no ownership check)."""
        rows = self.db.query(Price.date, Price.amount).filter(
            Price.rate_plan_id == rate_plan_id,
            Price.date >= start,
            Price.date <= end
        ).all()
        return {row.date: Decimal(str(row.amount)) for row in rows}

    # ==================
    # Single-record writes
    # ==================

    def create_price(self, rate_plan_id: str, owner_id: str, day: Any, amount: Any) -> Price:
        """Create or update the price of one date."""
        get_owned_rate_plan(self.db, rate_plan_id, owner_id)
        value = validate_price(amount)
        target = parse_date(day)
        self._ensure_not_past(target)

        price, is_new = upsert_by_keys(
            self.db, Price, {"rate_plan_id": rate_plan_id, "date": target}, {"amount": value}
        )
        self.db.commit()
        self.db.refresh(price)

        logger.log_with_context(
            logging.INFO,
            f"Price {'created' if is_new else 'updated'} for {format_date_local(target)}",
            entity_type="rate_plan",
            entity_id=rate_plan_id,
            amount=str(value),
        )
        return price

    def update_price(self, price_id: str, owner_id: str, amount: Any) -> Price:
        price = get_owned_price(self.db, price_id, owner_id)
        value = validate_price(amount)
        self._ensure_not_past(price.date, "update")

        price.amount = value
        self.db.commit()
        self.db.refresh(price)
        return price

    def delete_price(self, price_id: str, owner_id: str) -> None:
        price = get_owned_price(self.db, price_id, owner_id)
        self._ensure_not_past(price.date, "delete")

        self.db.delete(price)
        self.db.commit()
        logger.log_with_context(logging.INFO, "Price deleted", entity_type="price", entity_id=price_id)

    # ==================
    # Bulk operations
    # ==================

    def bulk_create_prices(
        self,
        rate_plan_id: str,
        owner_id: str,
        updates: Sequence[Mapping[str, Any]],
    ) -> Dict[str, Any]:
        """
        Upsert many prices. Each update: {"date", "amount"}.

        Returns:
            {"success": n, "skipped": n, "errors": [{"date", "error"}], "prices": [Price]}
            `skipped` counts entries whose stored amount already matched;
            their existing rows are still returned in `prices`.
        """
        get_owned_rate_plan(self.db, rate_plan_id, owner_id)

        if not updates:
            raise InvalidInput("No price updates provided")
        if len(updates) > settings.max_bulk_items:
            raise RangeTooLarge(f"Cannot update more than {settings.max_bulk_items} prices at once")

        prices: List[Price] = []
        errors: List[Dict[str, Any]] = []
        written = 0
        skipped = 0

        for update in updates:
            raw_date = update.get("date")
            try:
                target = parse_date(raw_date)
                value = validate_price(update.get("amount"))
                self._ensure_not_past(target)

                existing = self.db.query(Price).filter(
                    Price.rate_plan_id == rate_plan_id,
                    Price.date == target
                ).first()
                if existing is not None and quantize(Decimal(str(existing.amount))) == value:
                    skipped += 1
                    prices.append(existing)
                    continue

                price, _ = upsert_by_keys(
                    self.db, Price, {"rate_plan_id": rate_plan_id, "date": target}, {"amount": value}
                )
                self.db.commit()
                written += 1
                prices.append(price)
            except PricingEngineError as e:
                self.db.rollback()
                errors.append({"date": _entry_date_label(raw_date), "error": e.message})
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception("Price write failed for rate plan %s on %s", rate_plan_id, raw_date)
                errors.append({"date": _entry_date_label(raw_date), "error": "Could not save price for this date"})

        for price in prices:
            self.db.refresh(price)

        logger.bulk_result(
            "prices.bulk_create", "rate_plan", rate_plan_id, written, len(errors), skipped=skipped
        )
        return {"success": written, "skipped": skipped, "errors": errors, "prices": prices}

    def bulk_delete_prices(self, rate_plan_id: str, owner_id: str, start: Any, end: Any) -> int:
        """Delete every price in [start, end]. Returns deleted count."""
        get_owned_rate_plan(self.db, rate_plan_id, owner_id)
        start_d, end_d = self._ordered_range(start, end)
        self._ensure_not_past(start_d, "delete")

        deleted = self.db.query(Price).filter(
            Price.rate_plan_id == rate_plan_id,
            Price.date >= start_d,
            Price.date <= end_d
        ).delete(synchronize_session=False)
        self.db.commit()

        logger.log_with_context(
            logging.INFO,
            f"Deleted {deleted} prices",
            entity_type="rate_plan",
            entity_id=rate_plan_id,
            start=format_date_local(start_d),
            end=format_date_local(end_d),
        )
        return deleted

    # ==================
    # Analysis
    # ==================

    def get_price_statistics(
        self,
        rate_plan_id: str,
        owner_id: str,
        start: Optional[Any] = None,
        end: Optional[Any] = None,
    ) -> Dict[str, Any]:
        get_owned_rate_plan(self.db, rate_plan_id, owner_id)

        query = self.db.query(
            func.count(Price.id),
            func.avg(Price.amount),
            func.min(Price.amount),
            func.max(Price.amount),
            func.min(Price.date),
            func.max(Price.date),
        ).filter(Price.rate_plan_id == rate_plan_id)
        if start is not None:
            query = query.filter(Price.date >= parse_date(start))
        if end is not None:
            query = query.filter(Price.date <= parse_date(end))

        count, avg, min_amount, max_amount, min_date, max_date = query.one()

        def as_amount(value) -> Decimal:
            return quantize(Decimal(str(value))) if value is not None else Decimal("0.00")

        return {
            "total_prices": count or 0,
            "average_price": as_amount(avg),
            "min_price": as_amount(min_amount),
            "max_price": as_amount(max_amount),
            "price_range": {
                "start": parse_date(min_date) if min_date is not None else None,
                "end": parse_date(max_date) if max_date is not None else None,
            },
        }

    def get_price_gaps(self, rate_plan_id: str, owner_id: str, start: Any, end: Any) -> List[date]:
        """Every date in [start, end] without an explicit ledger price."""
        get_owned_rate_plan(self.db, rate_plan_id, owner_id)
        start_d, end_d = self._ordered_range(start, end)

        existing = set(self.get_prices_by_date(rate_plan_id, start_d, end_d))
        return [d for d in enumerate_dates(start_d, end_d) if d not in existing]

    def copy_prices(
        self,
        rate_plan_id: str,
        owner_id: str,
        source_start: Any,
        source_end: Any,
        target_start: Any,
    ) -> Dict[str, Any]:
        """
        Copy the prices of [source_start, source_end] so each one lands at
        the same day offset from target_start.
        """
        get_owned_rate_plan(self.db, rate_plan_id, owner_id)
        source_start_d, source_end_d = self._ordered_range(source_start, source_end)
        target_start_d = parse_date(target_start)
        target_end_d = add_days(target_start_d, days_between(source_start_d, source_end_d))

        if target_start_d < self.clock.today():
            raise PastDateError("Cannot copy prices to past dates")

        source_prices = self.db.query(Price).filter(
            Price.rate_plan_id == rate_plan_id,
            Price.date >= source_start_d,
            Price.date <= source_end_d
        ).order_by(Price.date).all()

        if not source_prices:
            raise NoPricesFound(
                "No prices found in the source date range",
                details={
                    "source_start": format_date_local(source_start_d),
                    "source_end": format_date_local(source_end_d),
                },
            )

        # Read everything first: copying onto an overlapping range must use
        # the original source amounts
        plan = [(p.date, Decimal(str(p.amount))) for p in source_prices]

        copied = 0
        errors: List[Dict[str, Any]] = []
        for source_date, amount in plan:
            target = add_days(target_start_d, days_between(source_start_d, source_date))
            try:
                self._ensure_not_past(target)
                upsert_by_keys(
                    self.db, Price, {"rate_plan_id": rate_plan_id, "date": target}, {"amount": amount}
                )
                self.db.commit()
                copied += 1
            except PricingEngineError as e:
                self.db.rollback()
                errors.append({"date": format_date_local(source_date), "error": e.message})
            except SQLAlchemyError:
                self.db.rollback()
                logger.exception("Price copy failed for rate plan %s onto %s", rate_plan_id, target)
                errors.append({"date": format_date_local(source_date), "error": "Could not copy price for this date"})

        logger.bulk_result("prices.copy", "rate_plan", rate_plan_id, copied, len(errors))
        return {
            "copied_count": copied,
            "errors": errors,
            "target_start": target_start_d,
            "target_end": target_end_d,
        }