"""FastAPI application entry point."""

import logging
import logging.config
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from papertrade.api.routes import confidence, health, lessons, portfolio, profiles, progress, trades
from papertrade.core.config import settings
from papertrade.core.exceptions import AppException, app_exception_handler
from papertrade.core.middleware import RequestLoggingMiddleware
from papertrade.core.rate_limit import limiter, rate_limit_exceeded_handler
from papertrade.db.base import Base
from papertrade.db.session import engine

# Configure logging
logging.config.dictConfig(settings.LOGGING_CONFIG)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")

    async with engine.begin() as conn:
        # Create tables (use Alembic in production)
        if settings.ENVIRONMENT == "development":
            await conn.run_sync(Base.metadata.create_all)

    yield

    logger.info("Shutting down")
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_CREDENTIALS,
    allow_methods=settings.CORS_METHODS,
    allow_headers=settings.CORS_HEADERS,
)

# Outermost layer: middleware is applied in reverse order
app.add_middleware(RequestLoggingMiddleware)

# Register exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(profiles.router, prefix="/api/v1/profiles", tags=["profiles"])

USER_PREFIX = "/api/v1/users/{user_id}"
app.include_router(trades.router, prefix=USER_PREFIX, tags=["trades"])
app.include_router(portfolio.router, prefix=USER_PREFIX, tags=["portfolio"])
app.include_router(confidence.router, prefix=USER_PREFIX, tags=["confidence"])
app.include_router(lessons.router, prefix=USER_PREFIX, tags=["lessons"])
app.include_router(progress.router, prefix=USER_PREFIX, tags=["progress"])
