"""
Tests for the availability store

Clock: 2025-03-01 (see conftest). Weekend days default to Friday/Saturday.
"""

import pytest
from datetime import date
from sqlalchemy.exc import IntegrityError

from rental_pricing.errors import InvalidInput, InvalidRange, NotAuthorized, PastDateError, RangeTooLarge
from rental_pricing.models import AvailabilitySlot, AvailabilityStatus
from rental_pricing.services import availability_service
from rental_pricing.services.availability_service import AvailabilityService

from .conftest import OTHER_OWNER_ID, OWNER_ID, PROPERTY_ID


@pytest.fixture
def service(db_session, clock):
    return AvailabilityService(db_session, clock)


class TestOwnerWrites:

    def test_set_one(self, service, live_property):
        slot = service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-10", "blocked", reason="Family visit")

        assert slot.status == AvailabilityStatus.BLOCKED.value
        assert slot.reason == "Family visit"
        assert slot.is_available is False

    def test_set_one_upserts(self, service, db_session, live_property):
        service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-10", "blocked")
        service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-10", "maintenance")

        rows = db_session.query(AvailabilitySlot).all()
        assert len(rows) == 1
        assert rows[0].status == "maintenance"

    def test_legacy_boolean(self, service, live_property):
        assert service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-10", False).status == "blocked"
        assert service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-10", True).status == "available"

    def test_owner_cannot_write_booked(self, service, live_property):
        with pytest.raises(InvalidInput):
            service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-10", "booked")

    def test_unknown_status(self, service, live_property):
        with pytest.raises(InvalidInput, match="Invalid availability status"):
            service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-10", "closed")

    def test_past_date(self, service, live_property):
        with pytest.raises(PastDateError):
            service.set_one(PROPERTY_ID, OWNER_ID, "2025-02-28", "blocked")

    def test_non_owner(self, service, live_property):
        with pytest.raises(NotAuthorized):
            service.set_one(PROPERTY_ID, OTHER_OWNER_ID, "2025-03-10", "blocked")


class TestBulkWrites:

    def test_partial_success(self, service, live_property):
        result = service.set_many(PROPERTY_ID, OWNER_ID, [
            {"date": "2025-03-10", "status": "blocked"},
            {"date": "2025-02-10", "status": "blocked"},
            {"date": "2025-03-11", "is_available": False},
            {"date": "not-a-date", "status": "blocked"},
            {"date": "2025-03-12"},
        ])

        assert result["updated"] == 2
        assert [f["date"] for f in result["failed"]] == ["2025-02-10", "not-a-date", "2025-03-12"]

    def test_booked_date_not_overwritten(self, service, live_property):
        service.mark_booked(PROPERTY_ID, "res-1", "2025-03-10", "2025-03-12")

        result = service.set_many(PROPERTY_ID, OWNER_ID, [
            {"date": "2025-03-10", "status": "available"},
            {"date": "2025-03-12", "status": "blocked"},
        ])

        assert result["updated"] == 1
        assert result["failed"][0]["date"] == "2025-03-10"

    def test_block_weekends(self, service, live_property):
        result = service.block_weekends(PROPERTY_ID, OWNER_ID, "2025-03-03", "2025-03-16")

        assert result == {"updated": 4, "failed": []}
        blocked = [s.date for s in service.get_range(PROPERTY_ID, OWNER_ID)]
        assert blocked == [date(2025, 3, 7), date(2025, 3, 8), date(2025, 3, 14), date(2025, 3, 15)]

    def test_set_range_status(self, service, live_property):
        result = service.set_range_status(
            PROPERTY_ID, OWNER_ID, "2025-03-20", "2025-03-22", "maintenance", reason="Painting"
        )

        assert result["updated"] == 3
        slots = service.get_range(PROPERTY_ID, OWNER_ID, "2025-03-21", "2025-03-21")
        assert slots[0].reason == "Painting"

    def test_range_too_large(self, service, live_property):
        with pytest.raises(RangeTooLarge):
            service.set_range_status(PROPERTY_ID, OWNER_ID, "2025-03-01", "2026-03-05", "blocked")

    def test_range_ceiling_matches_other_ranges(self, service, live_property):
        result = service.set_range_status(PROPERTY_ID, OWNER_ID, "2025-03-01", "2026-03-01", "blocked")
        assert result["updated"] == 366
        assert result["failed"] == []

        with pytest.raises(RangeTooLarge):
            service.set_range_status(PROPERTY_ID, OWNER_ID, "2025-03-01", "2026-03-02", "blocked")

    def test_database_error_fails_only_that_date(self, service, live_property, monkeypatch):
        real_upsert = availability_service.upsert_by_keys

        def upsert(db, model, keys, values):
            if keys["date"] == date(2025, 3, 11):
                raise IntegrityError("INSERT", {}, Exception("duplicate key"))
            return real_upsert(db, model, keys, values)

        monkeypatch.setattr(availability_service, "upsert_by_keys", upsert)

        result = service.set_many(PROPERTY_ID, OWNER_ID, [
            {"date": "2025-03-10", "status": "blocked"},
            {"date": "2025-03-11", "status": "blocked"},
            {"date": "2025-03-12", "status": "blocked"},
        ])

        assert result["updated"] == 2
        assert [f["date"] for f in result["failed"]] == ["2025-03-11"]
        blocked = [s.date for s in service.get_range(PROPERTY_ID, OWNER_ID)]
        assert blocked == [date(2025, 3, 10), date(2025, 3, 12)]


class TestReads:

    def test_public_range_without_ownership(self, service, live_property):
        service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-10", "blocked")
        slots = service.get_public_range(PROPERTY_ID, "2025-03-01", "2025-03-31")
        assert [s.date for s in slots] == [date(2025, 3, 10)]

    def test_check_stay_open_by_default(self, service, live_property):
        result = service.check_stay(PROPERTY_ID, "2025-03-10", "2025-03-13", 2)
        assert result["is_available"] is True
        assert result["unavailable_dates"] == []

    def test_check_stay_ignores_checkout_night(self, service, live_property):
        service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-13", "blocked")
        service.set_one(PROPERTY_ID, OWNER_ID, "2025-03-11", "maintenance")

        result = service.check_stay(PROPERTY_ID, "2025-03-10", "2025-03-13", 2)

        assert result["is_available"] is False
        assert result["unavailable_dates"] == [date(2025, 3, 11)]

    def test_check_stay_guest_limit(self, service, live_property):
        result = service.check_stay(PROPERTY_ID, "2025-03-10", "2025-03-13", 6)
        assert result["is_available"] is False
        assert result["reason"] == "Maximum 4 guests allowed"

    def test_check_stay_invalid_range(self, service, live_property):
        with pytest.raises(InvalidRange):
            service.check_stay(PROPERTY_ID, "2025-03-13", "2025-03-13", 2)

    def test_check_stay_length_ceiling(self, service, live_property):
        assert service.check_stay(PROPERTY_ID, "2025-03-01", "2026-03-01", 2)["is_available"] is True

        with pytest.raises(RangeTooLarge):
            service.check_stay(PROPERTY_ID, "2025-03-01", "2026-03-02", 2)
        with pytest.raises(RangeTooLarge):
            service.check_stay(PROPERTY_ID, "2025-03-01", "9999-12-30", 2)


class TestReservationLifecycle:

    def test_mark_booked_and_release(self, service, live_property):
        assert service.mark_booked(PROPERTY_ID, "res-1", "2025-03-10", "2025-03-13") == 3

        slots = service.get_range(PROPERTY_ID, OWNER_ID)
        assert {s.status for s in slots} == {"booked"}
        assert {s.reservation_id for s in slots} == {"res-1"}

        assert service.release_booking("res-1") == 3
        slots = service.get_range(PROPERTY_ID, OWNER_ID)
        assert all(s.is_available for s in slots)
        assert all(s.reservation_id is None for s in slots)

    def test_mark_booked_length_ceiling(self, service, live_property):
        with pytest.raises(RangeTooLarge):
            service.mark_booked(PROPERTY_ID, "res-2", "2025-03-01", "2026-03-02")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
