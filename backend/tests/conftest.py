"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import Callable, Dict, Optional, Union  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from scrapehub.models import Base  # noqa: E402
from scrapehub.scrapers.fetcher import Fetcher  # noqa: E402
from scrapehub.scrapers.register_adapters import build_default_registry  # noqa: E402
from scrapehub.scrapers.utils.proxy_manager import ProxyPool  # noqa: E402

# A route is either (status, html), an exception instance to raise, or a
# callable taking the request and returning a Response.
Route = Union[tuple, Exception, Callable]


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


# ============================================================================
# NETWORK FIXTURES
# ============================================================================

def make_transport(routes: Dict[str, Route], calls: Optional[list] = None) -> httpx.MockTransport:
    """MockTransport answering from a URL -> route table (404 for unknown URLs)."""

    async def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if calls is not None:
            calls.append(request)
        route = routes.get(url)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            result = route(request)
            if not isinstance(result, httpx.Response):
                result = await result
            return result
        status, body = route
        return httpx.Response(status, text=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def fetcher_factory():
    """Build a Fetcher backed by an in-memory route table."""

    def _factory(
        routes: Dict[str, Route],
        calls: Optional[list] = None,
        proxy_pool: Optional[ProxyPool] = None,
        attempts: int = 1,
    ) -> Fetcher:
        return Fetcher(
            proxy_pool=proxy_pool,
            timeout=5.0,
            attempts=attempts,
            transport=make_transport(routes, calls),
        )

    return _factory


@pytest.fixture
def registry_factory(fetcher_factory):
    """Build the default registry over a mocked fetcher."""

    def _factory(routes: Dict[str, Route], calls: Optional[list] = None):
        return build_default_registry(fetcher_factory(routes, calls))

    return _factory


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest_asyncio.fixture
async def session_factory():
    """Session factory over an in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(session_factory):
    """Create an in-memory SQLite session for testing."""
    async with session_factory() as session:
        yield session
