"""Registry dispatching URLs to the extractor that supports them."""

from typing import Iterable, List, Optional

import structlog

from scrapehub.core.exceptions import UnsupportedSourceError
from scrapehub.scrapers.base import BaseExtractor
from scrapehub.scrapers.utils.normalizer import validate_url
from scrapehub.scrapers.utils.proxy_manager import ProxyPool


logger = structlog.get_logger(__name__)


class ScraperRegistry:
    """Ordered list of extractors resolved by first match.

    Registration order is the tie-break: if two extractors claim the
    same URL, the earlier one wins.
    """

    def __init__(self, extractors: Iterable[BaseExtractor] = ()):
        self._extractors: List[BaseExtractor] = []
        for extractor in extractors:
            self.register(extractor)

    def register(self, extractor: BaseExtractor) -> None:
        """Append an extractor to the resolution order.

        Args:
            extractor: Extractor instance (must inherit from BaseExtractor)
        """
        if not isinstance(extractor, BaseExtractor):
            raise ValueError(f"Extractor must inherit from BaseExtractor: {extractor!r}")

        self._extractors.append(extractor)
        logger.debug("extractor_registered", platform=extractor.platform, position=len(self._extractors))

    def resolve(self, url: str) -> BaseExtractor:
        """Find the extractor for a URL.

        Raises:
            InvalidInputError: If the URL is malformed (checked first)
            UnsupportedSourceError: If no extractor supports the URL
        """
        url = validate_url(url)
        for extractor in self._extractors:
            if extractor.supports(url):
                return extractor

        logger.warning("unsupported_source", url=url)
        raise UnsupportedSourceError(url)

    def is_supported(self, url: str) -> bool:
        """Like resolve, but answers False instead of raising."""
        try:
            self.resolve(url)
            return True
        except Exception:
            return False

    def count(self) -> int:
        return len(self._extractors)

    def all(self) -> List[BaseExtractor]:
        return list(self._extractors)

    def platforms(self) -> List[str]:
        return [e.platform for e in self._extractors]

    def proxy_pool(self) -> Optional[ProxyPool]:
        """Proxy pool of the first registered extractor that has a fetcher."""
        for extractor in self._extractors:
            if extractor.fetcher is not None:
                return extractor.fetcher.proxy_pool
        return None

    def proxy_count(self) -> int:
        pool = self.proxy_pool()
        return pool.count() if pool is not None else 0
