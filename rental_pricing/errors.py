"""
Pricing Engine Exceptions

Every service raises one of these. The HTTP layer maps them to responses
through a single exception handler (see main.py), so services never import
FastAPI.

Ownership failures are reported as NotAuthorized, which is a NotFound:
callers must not be able to tell "does not exist" from "not yours".
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Stable error codes returned to API clients"""
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    NO_PRICES_FOUND = "NO_PRICES_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    PAST_DATE = "PAST_DATE"
    RANGE_TOO_LARGE = "RANGE_TOO_LARGE"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"


class PricingEngineError(Exception):
    """Base exception for all pricing/availability errors."""

    default_code = ErrorCode.INVALID_INPUT
    status_code = 400

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[ErrorCode] = None,
    ):
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.default_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__,
            }
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


class NotFound(PricingEngineError):
    default_code = ErrorCode.RESOURCE_NOT_FOUND
    status_code = 404


class NotAuthorized(NotFound):
    """Ownership check failed. Rendered exactly like NotFound."""


class NoPricesFound(NotFound):
    default_code = ErrorCode.NO_PRICES_FOUND


class InvalidInput(PricingEngineError):
    default_code = ErrorCode.INVALID_INPUT

    @classmethod
    def from_entries(cls, message: str, errors: List[Dict[str, Any]]) -> "InvalidInput":
        """Build an error carrying a per-entry error list."""
        return cls(message, details={"errors": errors})


class InvalidAmount(InvalidInput):
    default_code = ErrorCode.INVALID_AMOUNT


class PastDateError(InvalidInput):
    default_code = ErrorCode.PAST_DATE


class RangeTooLarge(InvalidInput):
    default_code = ErrorCode.RANGE_TOO_LARGE


class InvalidRange(InvalidInput):
    default_code = ErrorCode.INVALID_DATE_RANGE
