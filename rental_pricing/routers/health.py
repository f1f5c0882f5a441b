"""
Health Endpoints

- /health       - status and version, no authentication
- /health/live  - process is up
- /health/ready - database reachable and pricing schema present
"""

from datetime import datetime, timezone
import time

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import __version__
from ..config import settings
from ..database import Base, get_db

router = APIRouter(prefix="/health", tags=["Health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_database(db: Session) -> dict:
    """Round-trip latency plus any model tables missing from the schema."""
    try:
        started = time.perf_counter()
        db.execute(text("SELECT 1"))
        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        existing = set(inspect(db.get_bind()).get_table_names())
    except SQLAlchemyError as e:
        return {"status": "down", "error": str(e)[:100]}

    missing = sorted(set(Base.metadata.tables) - existing)
    return {
        "status": "up" if not missing else "schema_incomplete",
        "dialect": db.get_bind().dialect.name,
        "latency_ms": latency_ms,
        "missing_tables": missing,
    }


@router.get("")
@router.get("/")
async def health():
    return {
        "status": "healthy",
        "timestamp": _now(),
        "version": __version__,
        "environment": settings.environment,
    }


@router.get("/live")
async def liveness():
    return {"status": "alive", "timestamp": _now()}


@router.get("/ready")
def readiness(db: Session = Depends(get_db)):
    """503 until the database answers and every pricing table exists."""
    database = check_database(db)
    if database["status"] != "up":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "not_ready", "timestamp": _now(), "checks": {"database": database}},
        )

    return {
        "status": "ready",
        "timestamp": _now(),
        "checks": {
            "database": database,
            "rate_limit_storage": "redis" if settings.redis_url else "memory",
        },
    }
