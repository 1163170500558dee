"""FastAPI dependency injection providers."""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from scrapehub.db.session import async_session_factory
from scrapehub.scrapers.registry import ScraperRegistry


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request-scoped usage.

    The session is automatically committed on success or rolled back on error.
    Always closed after the request completes.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_registry(request: Request) -> ScraperRegistry:
    """Return the extractor registry built during application startup."""
    return request.app.state.registry
