"""Health check schema."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    status: str
    database: str
    proxy_count: int
    proxies: Dict[str, Any]
    scrapers: List[str]


class ProxyResponse(BaseModel):
    proxy: Optional[str] = None
