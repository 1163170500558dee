"""Proxy pool endpoints for external workers sharing the same egress pool."""

from fastapi import APIRouter, Depends

from scrapehub.dependencies import get_registry
from scrapehub.scrapers.registry import ScraperRegistry
from scrapehub.schemas import ApiResponse, ProxyResponse

router = APIRouter()


@router.get("/random", response_model=ApiResponse)
async def random_proxy(registry: ScraperRegistry = Depends(get_registry)):
    """Hand out one proxy endpoint; data.proxy is null when the pool is empty."""
    pool = registry.proxy_pool()
    proxy = pool.select_random() if pool is not None else None
    return ApiResponse(status="success", data=ProxyResponse(proxy=proxy))
