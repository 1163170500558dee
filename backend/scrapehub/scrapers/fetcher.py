"""HTTP page fetcher with proxy/identity rotation and failure classification."""

from typing import Optional

import httpx
import structlog
from bs4 import BeautifulSoup

from scrapehub.core.exceptions import FetchError, NetworkError
from scrapehub.scrapers.utils.normalizer import validate_url
from scrapehub.scrapers.utils.proxy_manager import ProxyPool
from scrapehub.scrapers.utils.retry import fetch_retry
from scrapehub.scrapers.utils.user_agents import build_browser_headers


logger = structlog.get_logger(__name__)


class Fetcher:
    """Fetches HTML pages and returns parsed, queryable documents.

    Every attempt picks a fresh proxy from the pool and a fresh
    User-Agent; nothing is sticky across calls or retries. An empty pool
    means a direct connection.
    """

    def __init__(
        self,
        proxy_pool: Optional[ProxyPool] = None,
        timeout: float = 15.0,
        verify_tls: bool = True,
        attempts: int = 1,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize fetcher.

        Args:
            proxy_pool: Egress proxies; None behaves like an empty pool
            timeout: Per-request timeout in seconds
            verify_tls: Verify target certificates (disable only for
                targets with broken certificates)
            attempts: Total attempts per fetch for transient network errors
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.proxy_pool = proxy_pool or ProxyPool()
        self.timeout = timeout
        self.verify_tls = verify_tls
        self.attempts = attempts
        self._transport = transport
        self.logger = logger.bind(component="fetcher")

        if not verify_tls:
            self.logger.warning("tls_verification_disabled")

    async def fetch(self, url: str) -> BeautifulSoup:
        """Fetch a URL and parse the body into a document tree.

        Args:
            url: Absolute http(s) URL

        Returns:
            BeautifulSoup document (lxml parser, tolerant of bad markup)

        Raises:
            InvalidInputError: If the URL is malformed
            FetchError: If the server answers with a non-2xx status
            NetworkError: On timeout or transport failure
        """
        url = validate_url(url)
        async for attempt in fetch_retry(self.attempts):
            with attempt:
                html = await self._fetch_once(url)
        return BeautifulSoup(html, "lxml")

    async def _fetch_once(self, url: str) -> str:
        proxy = self.proxy_pool.select_random()
        headers = build_browser_headers()

        self.logger.info("fetching_url", url=url, proxy=proxy)

        try:
            async with self._build_client(proxy, headers) as client:
                response = await client.get(url)
        except httpx.TimeoutException as e:
            if proxy:
                self.proxy_pool.mark_failed(proxy)
            self.logger.warning("fetch_timeout", url=url, proxy=proxy, timeout=self.timeout)
            raise NetworkError(url, f"timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            if proxy:
                self.proxy_pool.mark_failed(proxy)
            self.logger.warning("fetch_transport_error", url=url, proxy=proxy, error=str(e))
            raise NetworkError(url, str(e) or type(e).__name__) from e

        if not response.is_success:
            self.logger.warning("fetch_bad_status", url=url, status=response.status_code)
            raise FetchError(url, response.status_code)

        if proxy:
            self.proxy_pool.mark_success(proxy)
        return response.text

    def _build_client(self, proxy: Optional[str], headers: dict) -> httpx.AsyncClient:
        # One short-lived client per attempt so each attempt can egress through a
        # different proxy; connections are never reused across attempts.
        kwargs = {
            "headers": headers,
            "timeout": self.timeout,
            "verify": self.verify_tls,
            "follow_redirects": True,
            "proxy": proxy,
        }
        if self._transport is not None:
            # Mounted transports take precedence over proxy routing
            kwargs["mounts"] = {"all://": self._transport}
        return httpx.AsyncClient(**kwargs)
