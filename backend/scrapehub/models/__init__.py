"""SQLAlchemy models for ScrapeHub.

All models are imported here so metadata.create_all sees them.
"""

from scrapehub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from scrapehub.models.product import Product
from scrapehub.models.scrape_job import ScrapeJob

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Product",
    "ScrapeJob",
]
