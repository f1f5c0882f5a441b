"""
Shared fixtures

- In-memory SQLite shared through a StaticPool
- A clock frozen at 2025-03-01 10:00 UTC (a Saturday)
- A live property with weekly base pricing and one rate plan
- A TestClient with get_db / get_clock overridden
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rental_pricing.database import Base, get_db
from rental_pricing.main import app
from rental_pricing.models import (
    AdjustmentType,
    Property,
    PropertyStatus,
    RatePlan,
    WeeklyBasePricing,
)
from rental_pricing.utils.clock import FixedClock, get_clock
from rental_pricing.utils.rate_limiter import limiter
from rental_pricing.utils.security import create_access_token

OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"
PROPERTY_ID = "prop-1"
RATE_PLAN_ID = "rp-1"

FULL_DAY = {
    "monday": 400, "tuesday": 400, "wednesday": 400, "thursday": 400,
    "friday": 500, "saturday": 600, "sunday": 600,
}
HALF_DAY = {
    "monday": 280, "tuesday": 280, "wednesday": 280, "thursday": 280,
    "friday": 350, "saturday": 420, "sunday": 420,
}

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def live_property(db_session):
    prop = Property(
        id=PROPERTY_ID,
        owner_id=OWNER_ID,
        name="Marina View 2BR",
        status=PropertyStatus.LIVE.value,
        maximum_guests=4,
        currency="AED",
    )
    db_session.add(prop)
    db_session.commit()
    return prop


@pytest.fixture
def weekly_pricing(db_session, live_property):
    columns = {f"price_{day}": Decimal(value) for day, value in FULL_DAY.items()}
    columns.update({f"half_day_price_{day}": Decimal(value) for day, value in HALF_DAY.items()})
    pricing = WeeklyBasePricing(property_id=live_property.id, currency="AED", **columns)
    db_session.add(pricing)
    db_session.commit()
    return pricing


@pytest.fixture
def rate_plan(db_session, live_property):
    plan = RatePlan(
        id=RATE_PLAN_ID,
        property_id=live_property.id,
        name="Non-refundable",
        adjustment_type=AdjustmentType.PERCENTAGE.value,
        adjustment_value=Decimal("-10"),
        priority=1,
        is_active=True,
    )
    db_session.add(plan)
    db_session.commit()
    return plan


@pytest.fixture
def client(db_session, clock):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True


@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": OWNER_ID})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers():
    token = create_access_token({"sub": OTHER_OWNER_ID})
    return {"Authorization": f"Bearer {token}"}
