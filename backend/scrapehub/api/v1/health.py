"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from scrapehub.dependencies import get_db, get_registry
from scrapehub.scrapers.registry import ScraperRegistry
from scrapehub.scrapers.utils.proxy_manager import ProxyPool
from scrapehub.schemas import HealthCheckResponse

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    registry: ScraperRegistry = Depends(get_registry),
):
    """Return service health status.

    Reports database connectivity, proxy pool health and the platforms
    the registry can scrape.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    pool = registry.proxy_pool() or ProxyPool()

    return HealthCheckResponse(
        status="ok" if db_status == "ok" else "degraded",
        database=db_status,
        proxy_count=registry.proxy_count(),
        proxies=pool.get_stats(),
        scrapers=registry.platforms(),
    )
