"""Build the default registry with every available extractor.

Order matters: resolution is first match in registration order.
"""

from typing import Optional

import structlog

from scrapehub.config import settings
from scrapehub.scrapers.adapters import AmazonExtractor, JumiaExtractor
from scrapehub.scrapers.fetcher import Fetcher
from scrapehub.scrapers.registry import ScraperRegistry
from scrapehub.scrapers.utils.proxy_manager import ProxyPool

logger = structlog.get_logger(__name__)

EXTRACTOR_CLASSES = (
    AmazonExtractor,
    JumiaExtractor,
)


def build_fetcher(proxy_pool: Optional[ProxyPool] = None) -> Fetcher:
    """Create a Fetcher configured from settings.

    Args:
        proxy_pool: Explicit pool; loaded from PROXY_FILE if omitted
    """
    if proxy_pool is None:
        proxy_pool = ProxyPool.from_file(
            settings.PROXY_FILE,
            max_failures=settings.PROXY_MAX_FAILURES,
            cooldown_minutes=settings.PROXY_COOLDOWN_MINUTES,
        )
    return Fetcher(
        proxy_pool=proxy_pool,
        timeout=settings.SCRAPER_TIMEOUT_SECONDS,
        verify_tls=settings.SCRAPER_VERIFY_TLS,
        attempts=settings.SCRAPER_FETCH_ATTEMPTS,
    )


def build_default_registry(fetcher: Optional[Fetcher] = None) -> ScraperRegistry:
    """Register all available extractors, sharing one fetcher.

    Args:
        fetcher: Fetcher injected into each extractor; built from
            settings if omitted
    """
    fetcher = fetcher or build_fetcher()
    registry = ScraperRegistry(cls(fetcher) for cls in EXTRACTOR_CLASSES)

    logger.info(
        "all_extractors_registered",
        count=registry.count(),
        platforms=registry.platforms(),
        proxies=fetcher.proxy_pool.count(),
    )
    return registry
