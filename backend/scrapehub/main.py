"""ScrapeHub -- FastAPI application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from scrapehub import __version__
from scrapehub.api.v1.router import api_v1_router
from scrapehub.config import settings
from scrapehub.core.logging import configure_logging
from scrapehub.db.session import async_session_factory, init_db
from scrapehub.scrapers.register_adapters import build_default_registry
from scrapehub.scrapers.scheduler import ScraperScheduler

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
    logger.info("app_starting", environment=settings.ENVIRONMENT, debug=settings.DEBUG)

    try:
        await init_db()
        logger.info("database_tables_ready")
    except Exception as e:
        logger.error("database_init_failed", error=str(e), exc_info=True)

    app.state.registry = build_default_registry()

    scheduler = None
    if settings.ENVIRONMENT != "test":
        scheduler = ScraperScheduler(async_session_factory, app.state.registry)
        scheduler.start()
        jobs_count = scheduler.load_default_jobs()
        logger.info("scheduler_ready", jobs=jobs_count)
    else:
        logger.info("scheduler_disabled", reason="test environment")
    app.state.scheduler = scheduler

    yield

    logger.info("app_stopping")
    if scheduler:
        scheduler.stop()


app = FastAPI(
    title="ScrapeHub API",
    description="Multi-platform e-commerce product scraper",
    version=__version__,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "ScrapeHub API",
        "version": __version__,
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/api/v1/health",
    }
