"""
Decimal helpers for prices

All amounts are Decimals in the property's single currency and are rounded
to 2 places with ROUND_HALF_UP.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from ..config import settings
from ..errors import InvalidAmount, InvalidInput

CENT = Decimal("0.01")


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """Convert a number or numeric string to a finite Decimal."""
    if isinstance(value, bool) or value is None:
        raise InvalidInput(f"{field} must be a number", details={"field": field})
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"{field} must be a number", details={"field": field})
    if not result.is_finite():
        raise InvalidInput(f"{field} must be a finite number", details={"field": field})
    return result


def validate_price(value: Any, field: str = "amount") -> Decimal:
    """0 < price <= MAX_PRICE"""
    amount = to_decimal(value, field)
    if amount <= 0:
        raise InvalidAmount("Amount must be greater than 0", details={"field": field})
    if amount > settings.max_price:
        raise InvalidAmount(
            f"Amount cannot exceed {settings.max_price}",
            details={"field": field},
        )
    return quantize(amount)


def validate_base_price(value: Any, field: str) -> Decimal:
    """0 <= price <= MAX_PRICE (weekly base allows zero)"""
    amount = to_decimal(value, field)
    if amount < 0:
        raise InvalidAmount(f"{field} must not be negative", details={"field": field})
    if amount > settings.max_price:
        raise InvalidAmount(f"{field} cannot exceed {settings.max_price}", details={"field": field})
    return quantize(amount)
