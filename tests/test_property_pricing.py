"""
Tests for weekly base pricing and date overrides

Clock: 2025-03-01 (see conftest)
"""

import pytest
from datetime import date
from decimal import Decimal

from rental_pricing.errors import (
    InvalidInput,
    NotAuthorized,
    NotFound,
    PastDateError,
    RangeTooLarge,
)
from rental_pricing.models import DateOverride, WeeklyBasePricing
from rental_pricing.services.property_pricing import PropertyPricingService, derive_half_day_price

from .conftest import FULL_DAY, HALF_DAY, OTHER_OWNER_ID, OWNER_ID, PROPERTY_ID


@pytest.fixture
def service(db_session, clock):
    return PropertyPricingService(db_session, clock)


class TestWeeklyPricing:

    def test_create_weekly_pricing(self, service, live_property):
        pricing = service.set_weekly_pricing(
            PROPERTY_ID, OWNER_ID, {"full_day": FULL_DAY, "half_day": HALF_DAY}
        )

        assert pricing.full_day_price("friday") == Decimal("500.00")
        assert pricing.half_day_price("saturday") == Decimal("420.00")
        assert pricing.currency == "AED"

    def test_save_replaces_whole_record(self, service, db_session, weekly_pricing):
        full_day = dict(FULL_DAY, monday=450)
        service.set_weekly_pricing(PROPERTY_ID, OWNER_ID, {"full_day": full_day, "half_day": HALF_DAY})

        rows = db_session.query(WeeklyBasePricing).filter_by(property_id=PROPERTY_ID).all()
        assert len(rows) == 1
        assert rows[0].full_day_price("monday") == Decimal("450.00")

    def test_reports_every_invalid_field(self, service, live_property):
        full_day = dict(FULL_DAY, monday=-1)
        half_day = {k: v for k, v in HALF_DAY.items() if k != "sunday"}
        half_day["friday"] = 900  # above the full-day price

        with pytest.raises(InvalidInput) as exc:
            service.set_weekly_pricing(PROPERTY_ID, OWNER_ID, {"full_day": full_day, "half_day": half_day})

        fields = {e["field"] for e in exc.value.details["errors"]}
        assert fields == {"full_day.monday", "half_day.sunday", "half_day.friday"}

    def test_zero_base_price_allowed(self, service, live_property):
        full_day = dict(FULL_DAY, monday=0)
        half_day = dict(HALF_DAY, monday=0)
        pricing = service.set_weekly_pricing(PROPERTY_ID, OWNER_ID, {"full_day": full_day, "half_day": half_day})
        assert pricing.full_day_price("monday") == Decimal("0.00")

    def test_non_owner_cannot_save(self, service, live_property):
        with pytest.raises(NotAuthorized):
            service.set_weekly_pricing(PROPERTY_ID, OTHER_OWNER_ID, {"full_day": FULL_DAY, "half_day": HALF_DAY})

    def test_not_authorized_is_not_found(self, service, live_property):
        """A foreign property is indistinguishable from a missing one"""
        with pytest.raises(NotFound):
            service.get_owner_weekly_pricing(PROPERTY_ID, OTHER_OWNER_ID)

    def test_missing_weekly_pricing(self, service, live_property):
        with pytest.raises(NotFound, match="No base pricing configured"):
            service.get_weekly_pricing(PROPERTY_ID)


class TestBasePrice:

    def test_weekday_price(self, service, weekly_pricing):
        assert service.get_base_price(PROPERTY_ID, date(2025, 3, 14)) == Decimal("500.00")
        assert service.get_base_price(PROPERTY_ID, date(2025, 3, 14), is_half_day=True) == Decimal("350.00")

    def test_override_wins(self, service, weekly_pricing):
        service.set_date_overrides(
            PROPERTY_ID, OWNER_ID, [{"date": "2025-03-15", "full_day_price": 750, "reason": "Eid"}]
        )

        assert service.get_base_price(PROPERTY_ID, "2025-03-15") == Decimal("750.00")
        # No half-day price on the override: 70% of 750
        assert service.get_base_price(PROPERTY_ID, "2025-03-15", is_half_day=True) == Decimal("525.00")

    def test_derived_half_day_rounds_half_up(self):
        assert derive_half_day_price(Decimal("100.05")) == Decimal("70.04")
        assert derive_half_day_price(Decimal("0.05")) == Decimal("0.04")


class TestDateOverrides:

    def test_set_and_list(self, service, weekly_pricing):
        saved = service.set_date_overrides(PROPERTY_ID, OWNER_ID, [
            {"date": "2025-03-16", "full_day_price": 700, "half_day_price": 450},
            {"date": "2025-03-15", "full_day_price": 750, "reason": "Eid"},
        ])

        assert [o.date for o in saved] == [date(2025, 3, 15), date(2025, 3, 16)]
        listed = service.list_date_overrides(PROPERTY_ID, OWNER_ID, "2025-03-15", "2025-03-15")
        assert len(listed) == 1
        assert listed[0].reason == "Eid"

    def test_upsert_same_date(self, service, db_session, weekly_pricing):
        service.set_date_overrides(PROPERTY_ID, OWNER_ID, [{"date": "2025-03-15", "full_day_price": 750}])
        service.set_date_overrides(PROPERTY_ID, OWNER_ID, [{"date": "2025-03-15", "full_day_price": 800}])

        rows = db_session.query(DateOverride).filter_by(property_id=PROPERTY_ID).all()
        assert len(rows) == 1
        assert Decimal(str(rows[0].full_day_price)) == Decimal("800.00")

    def test_last_duplicate_wins(self, service, weekly_pricing):
        saved = service.set_date_overrides(PROPERTY_ID, OWNER_ID, [
            {"date": "2025-03-15", "full_day_price": 750},
            {"date": "2025-03-15", "full_day_price": 780},
        ])
        assert len(saved) == 1
        assert Decimal(str(saved[0].full_day_price)) == Decimal("780.00")

    def test_past_date_rejects_whole_batch(self, service, db_session, weekly_pricing):
        with pytest.raises(PastDateError) as exc:
            service.set_date_overrides(PROPERTY_ID, OWNER_ID, [
                {"date": "2025-03-15", "full_day_price": 750},
                {"date": "2025-02-28", "full_day_price": 750},
            ])

        assert exc.value.details["errors"][0]["index"] == 1
        assert db_session.query(DateOverride).count() == 0

    def test_today_is_not_past(self, service, weekly_pricing):
        saved = service.set_date_overrides(PROPERTY_ID, OWNER_ID, [{"date": "2025-03-01", "full_day_price": 650}])
        assert saved[0].date == date(2025, 3, 1)

    def test_every_invalid_entry_reported(self, service, db_session, weekly_pricing):
        with pytest.raises(InvalidInput) as exc:
            service.set_date_overrides(PROPERTY_ID, OWNER_ID, [
                {"date": "2025-03-15", "full_day_price": 0},
                {"date": "2025-02-01", "full_day_price": 500},
                {"date": "2025-03-16", "full_day_price": 500, "half_day_price": 600},
                {"date": "2025-03-17", "full_day_price": 500},
            ])

        assert not isinstance(exc.value, PastDateError)
        assert [e["index"] for e in exc.value.details["errors"]] == [0, 1, 2]
        assert db_session.query(DateOverride).count() == 0

    def test_amount_ceiling(self, service, weekly_pricing):
        with pytest.raises(InvalidInput):
            service.set_date_overrides(PROPERTY_ID, OWNER_ID, [{"date": "2025-03-15", "full_day_price": "100000"}])

    def test_empty_batch(self, service, weekly_pricing):
        with pytest.raises(InvalidInput):
            service.set_date_overrides(PROPERTY_ID, OWNER_ID, [])

    def test_batch_too_large(self, service, weekly_pricing):
        overrides = [{"date": "2025-04-01", "full_day_price": 500}] * 366
        with pytest.raises(RangeTooLarge):
            service.set_date_overrides(PROPERTY_ID, OWNER_ID, overrides)

    def test_delete_overrides(self, service, weekly_pricing):
        service.set_date_overrides(PROPERTY_ID, OWNER_ID, [
            {"date": "2025-03-15", "full_day_price": 750},
            {"date": "2025-03-16", "full_day_price": 700},
        ])

        deleted = service.delete_date_overrides(PROPERTY_ID, OWNER_ID, ["2025-03-15", "2025-03-20"])

        assert deleted == 1
        assert [o.date for o in service.list_date_overrides(PROPERTY_ID, OWNER_ID)] == [date(2025, 3, 16)]

    def test_delete_past_override_rejected(self, service, weekly_pricing):
        with pytest.raises(PastDateError):
            service.delete_date_overrides(PROPERTY_ID, OWNER_ID, ["2025-02-20"])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
