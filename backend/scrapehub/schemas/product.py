"""Product Pydantic schemas."""

from datetime import datetime
from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ProductResponse(BaseModel):
    """Product response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    external_id: str
    title: str
    price: Optional[str] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    platform: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProductStatsResponse(BaseModel):
    total_products: int
    by_platform: Dict[str, int]
    last_updated_at: Optional[datetime] = None
