"""
Event Registration API

Registration admission and pricing for multi-session events:
- Per-session seat capacity enforced inside the registration transaction
- Dine-in meal quantities matched to party headcounts
- Volume discount on entry fees by number of sessions selected
- Atomic order assembly with a unique transaction id
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from event_registration.api.middleware import RequestLoggingMiddleware
from event_registration.api.router import api_router
from event_registration.core.config import get_settings
from event_registration.core.logging import get_logger, setup_logging
from event_registration.core.metrics import metrics_endpoint
from event_registration.db.session import engine, get_db
from event_registration.infrastructure.redis_client import close_redis, get_redis
from event_registration.services.cache_service import get_cache_stats
from event_registration.services.strategy_factory import get_capacity_guard

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    # Fail at startup, not on the first registration, if the strategy is misconfigured
    guard = get_capacity_guard()
    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        capacity_guard=type(guard).__name__,
        max_retry_attempts=settings.REGISTRATION_MAX_RETRY_ATTEMPTS,
    )

    if await get_redis():
        logger.info("session_cache_ready")
    else:
        logger.warning("session_cache_unavailable", message="Session listings served from the database")

    yield

    await close_redis()
    await engine.dispose()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Registration admission and pricing engine for multi-session events",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
app.include_router(api_router)


async def _database_status(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("health_database_unreachable", error=str(e))
        return "unreachable"
    return "ok"


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus database and cache status. Reports degraded while the database is down."""
    database = await _database_status(db)
    return {
        "status": "healthy" if database == "ok" else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "capacity_strategy": settings.CAPACITY_STRATEGY,
        "database": database,
        "cache": await get_cache_stats(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
