"""Product model representing items scraped from e-commerce platforms."""

from typing import Optional

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from scrapehub.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Product(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Product scraped from an e-commerce platform.

    Uniquely identified by external_id; re-scrapes update in place.
    Price is stored exactly as displayed on the page.
    """

    __tablename__ = "products"

    external_id: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        unique=True,
        comment="Platform product ID, or URL hash when none is found",
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    price: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    product_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    platform: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)

    __table_args__ = (
        Index("idx_products_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, external_id='{self.external_id}', title='{self.title[:50]}')>"
