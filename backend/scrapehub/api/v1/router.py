"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from scrapehub.api.v1 import health, products, proxies

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(products.router, prefix="/products", tags=["products"])
api_v1_router.include_router(proxies.router, prefix="/proxies", tags=["proxies"])
