"""
Ownership lookups

Resolve a property / rate plan / price for a user through the
price -> rate plan -> property -> owner chain. A record that exists but
belongs to someone else is reported exactly like a missing one.
"""

from sqlalchemy.orm import Session

from ..errors import NotAuthorized, NotFound
from ..models.price import Price
from ..models.property import Property
from ..models.rate_plan import RatePlan


def get_property(db: Session, property_id: str) -> Property:
    """Public lookup, no ownership check."""
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise NotFound("Property not found", details={"property_id": property_id})
    return prop


def get_owned_property(db: Session, property_id: str, user_id: str) -> Property:
    prop = db.query(Property).filter(
        Property.id == property_id,
        Property.owner_id == user_id
    ).first()
    if not prop:
        raise NotAuthorized(
            "Property not found or you do not have permission to manage it",
            details={"property_id": property_id},
        )
    return prop


def get_owned_rate_plan(db: Session, rate_plan_id: str, user_id: str) -> RatePlan:
    rate_plan = db.query(RatePlan).join(Property).filter(
        RatePlan.id == rate_plan_id,
        Property.owner_id == user_id
    ).first()
    if not rate_plan:
        raise NotAuthorized(
            "Rate plan not found or you do not have permission to access it",
            details={"rate_plan_id": rate_plan_id},
        )
    return rate_plan


def get_owned_price(db: Session, price_id: str, user_id: str) -> Price:
    price = db.query(Price).join(RatePlan).join(Property).filter(
        Price.id == price_id,
        Property.owner_id == user_id
    ).first()
    if not price:
        raise NotAuthorized(
            "Price not found or you do not have permission to modify it",
            details={"price_id": price_id},
        )
    return price
