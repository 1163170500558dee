"""Pydantic schemas for API responses."""

from scrapehub.schemas.common import ApiResponse, ListMeta
from scrapehub.schemas.health import HealthCheckResponse, ProxyResponse
from scrapehub.schemas.product import ProductResponse, ProductStatsResponse

__all__ = [
    "ApiResponse",
    "ListMeta",
    "HealthCheckResponse",
    "ProxyResponse",
    "ProductResponse",
    "ProductStatsResponse",
]
