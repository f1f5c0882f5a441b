"""
Rate Limiter Configuration

Supports both in-memory and Redis storage for rate limiting.
Redis is recommended for production (multiple instances).
"""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from ..config import settings

logger = logging.getLogger(__name__)


def get_real_client_ip(request: Request) -> str:
    """Get real client IP behind a reverse proxy"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP (original client)
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    """
    Create a rate limiter with appropriate storage backend.
    Uses Redis when REDIS_URL is set, otherwise in-memory.
    """
    if settings.redis_url:
        logger.info("Using redis rate limiter storage")
        return Limiter(
            key_func=get_real_client_ip,
            storage_uri=settings.redis_url,
            default_limits=[settings.default_rate_limit]
        )

    logger.info("Using in-memory rate limiter storage")
    return Limiter(
        key_func=get_real_client_ip,
        default_limits=[settings.default_rate_limit]
    )


# Global rate limiter instance
limiter = create_limiter()


RATE_LIMITS = {
    # Guest-facing reads - the only unauthenticated surface
    "public_calendar": settings.public_calendar_rate_limit,
    "public_availability": settings.public_calendar_rate_limit,
    "booking_options": "60/minute",

    # Owner bulk writes - resource intensive
    "bulk_write": "30/minute",
}


def get_rate_limit(operation: str) -> str:
    """Get rate limit for a specific operation."""
    return RATE_LIMITS.get(operation, settings.default_rate_limit)
