"""
Shuttle Booking API.

Employee shuttle service:
- Multi-date seat booking with duplicate suppression
- Booking lifecycle and QR check-in
- Route catalog cached in Redis, vehicle details editable by staff
- Daily reports and CSV export
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shuttle.api.middleware import RequestLoggingMiddleware
from shuttle.api.router import api_router
from shuttle.core.config import get_settings
from shuttle.core.logging import get_logger, setup_logging
from shuttle.core.metrics import metrics_endpoint
from shuttle.db.session import SessionLocal, get_db
from shuttle.services.cache_service import close_redis, get_cache_stats, get_redis
from shuttle.services.catalog_service import seed_catalog

settings = get_settings()
logger = get_logger(__name__)


async def _connect_cache() -> None:
    if await get_redis():
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Route catalog served without cache")


async def _seed_defaults() -> None:
    # A fresh database gets the built-in routes and stations
    try:
        async with SessionLocal() as db:
            await seed_catalog(db)
    except SQLAlchemyError as e:
        logger.warning("catalog_seed_skipped", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        seat_policy=settings.SEAT_POLICY,
        timezone=settings.TIMEZONE,
    )
    await _connect_cache()
    await _seed_defaults()

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Employee shuttle booking and check-in API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # kiosk and rider web app are served from other hosts
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus database and cache reachability."""
    try:
        await db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.error("health_database_error", error=str(e))
        database = "error"

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "version": settings.APP_VERSION,
        "seat_policy": settings.SEAT_POLICY,
        "database": database,
        "cache": await get_cache_stats(),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {"service": settings.APP_NAME, "version": settings.APP_VERSION, "docs": "/docs"}
