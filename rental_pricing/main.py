from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from slowapi.errors import RateLimitExceeded
import logging
import uuid

from . import __version__
from .config import settings
from .database import create_tables
from .errors import PricingEngineError
from .utils.logging_config import setup_logging, set_request_context, clear_request_context
from .utils.rate_limiter import limiter

from .routers import pricing, availability, prices, booking, health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    setup_logging(level=settings.log_level, json_format=settings.log_json)

    logger.info("Starting rental-pricing-engine (environment=%s)", settings.environment)
    logger.info("CORS origins: %s", settings.cors_origins)

    # Production schemas are managed by alembic
    if not settings.is_production:
        create_tables()

    logger.info("Database ready")
    yield
    logger.info("Shutting down rental-pricing-engine")


app = FastAPI(
    title="Rental Pricing & Availability Engine",
    description="Weekly base pricing, date overrides, rate plan prices, availability and booking options",
    version=__version__,
    lifespan=lifespan
)

# Rate limiter state
app.state.limiter = limiter


# ================================
# CORS MIDDLEWARE - MUST BE FIRST!
# ================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


# Request ID Middleware
class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        request.state.request_id = request_id
        set_request_context(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["X-Request-ID"] = request_id
        return response


# Add other middleware AFTER CORS
app.add_middleware(RequestIdMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


@app.exception_handler(PricingEngineError)
async def pricing_engine_error_handler(request: Request, exc: PricingEngineError):
    level = logging.INFO if exc.status_code < 500 else logging.ERROR
    logger.log(level, "%s %s -> %s: %s", request.method, request.url.path, exc.error_code.value, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Rate limit handler
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "message": "Too many requests, try again later",
                "code": "RATE_LIMITED",
                "details": {"limit": str(exc.detail)},
                "type": "RateLimitExceeded",
            }
        }
    )


# Include routers
app.include_router(pricing.router)
app.include_router(availability.router)
app.include_router(prices.router)
app.include_router(booking.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "name": "Rental Pricing & Availability Engine",
        "version": __version__,
        "docs": "/docs"
    }
