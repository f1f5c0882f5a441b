"""
Error response body, as rendered by the PricingEngineError handler.
"""

from typing import Any, Dict
from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    message: str
    code: str
    details: Dict[str, Any] = Field(default_factory=dict)
    type: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    404: {"model": ErrorResponse, "description": "Not found or not owned by the caller"},
}
