"""Database-backed services."""

from scrapehub.services.product_service import ProductService

__all__ = ["ProductService"]
