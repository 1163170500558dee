"""Product service: the storage collaborator of the scraping pipeline.

Upserts are keyed by external_id and committed one record at a time,
so everything stored before a crashed or timed-out run stays stored.
"""

from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from scrapehub.models.product import Product
from scrapehub.scrapers.base import ProductRecord

logger = structlog.get_logger(__name__)


class ProductService:
    """Service for storing and querying scraped products."""

    def __init__(self, db: AsyncSession):
        """Initialize product service.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="product_service")

    async def upsert(self, record: ProductRecord) -> Product:
        """Insert or update a product based on external_id.

        Args:
            record: ProductRecord from an extractor

        Returns:
            Created or updated Product object
        """
        product = await self.find_by_external_id(record.external_id)

        if product:
            self.logger.debug("updating_existing_product", product_id=str(product.id))
            product.title = record.title
            product.price = record.price
            product.image_url = record.image_url
            product.product_url = record.product_url or product.product_url
            product.platform = record.platform or product.platform
        else:
            self.logger.debug("creating_new_product", external_id=record.external_id)
            product = Product(
                external_id=record.external_id,
                title=record.title,
                price=record.price,
                image_url=record.image_url,
                product_url=record.product_url,
                platform=record.platform,
            )
            self.db.add(product)

        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(product)

        self.logger.info(
            "product_upserted",
            product_id=str(product.id),
            external_id=record.external_id,
        )
        return product

    async def list_all(self) -> List[Product]:
        """All stored products, newest first."""
        result = await self.db.execute(
            select(Product).order_by(Product.created_at.desc(), Product.title)
        )
        return list(result.scalars().all())

    async def find_by_external_id(self, external_id: str) -> Optional[Product]:
        result = await self.db.execute(
            select(Product).where(Product.external_id == external_id)
        )
        return result.scalar_one_or_none()

    async def get_statistics(self) -> dict:
        """Aggregate counts for monitoring.

        Returns:
            Dict with total count, per-platform counts and the most
            recent update time
        """
        total = (await self.db.execute(select(func.count(Product.id)))).scalar() or 0

        rows = await self.db.execute(
            select(Product.platform, func.count(Product.id)).group_by(Product.platform)
        )
        by_platform = {platform or "unknown": count for platform, count in rows.all()}

        last_updated: Optional[datetime] = (
            await self.db.execute(select(func.max(Product.updated_at)))
        ).scalar()

        return {
            "total_products": total,
            "by_platform": by_platform,
            "last_updated_at": last_updated.isoformat() if last_updated else None,
        }
