"""Base extractor interface.

All platform-specific scrapers inherit from BaseExtractor and declare
their URL conventions and selectors as class attributes. Adding a
platform means adding a subclass and registering it; nothing else
changes.
"""

from abc import ABC
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, List, Optional, Pattern, Sequence, Tuple
from urllib.parse import urlsplit

import structlog
from bs4 import BeautifulSoup, Tag

from scrapehub.core.exceptions import BlockedPageError, ExtractionError
from scrapehub.scrapers.utils.normalizer import (
    absolutize,
    strip_query,
    url_digest,
)

if TYPE_CHECKING:
    from scrapehub.scrapers.fetcher import Fetcher


# Lowercase markers of anti-bot interstitials and challenge pages
BLOCK_MARKERS: Tuple[str, ...] = (
    "captcha",
    "robot check",
    "verify you are a human",
    "access denied",
    "request has been blocked",
    "unusual traffic",
    "pardon our interruption",
    "automated access",
)


@dataclass
class ProductRecord:
    """Normalized product data structure returned by all extractors."""

    external_id: str
    title: str
    price: str  # kept as displayed, e.g. "EGP 12,999.00"
    image_url: str
    product_url: str = ""
    platform: str = ""

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.external_id or not self.external_id.strip():
            raise ValueError("external_id is required")
        if not self.title or not self.title.strip():
            raise ValueError("title is required")

    def to_dict(self) -> dict:
        return asdict(self)


class BaseExtractor(ABC):
    """Abstract base class for all platform extractors.

    Subclasses override the class attributes below; override the
    methods only when a site needs more than selector lookups.
    """

    platform: str = ""  # e.g. "amazon"
    origin: str = ""  # Absolute origin used to resolve relative links
    host_marker: str = ""  # Substring identifying the platform's hostnames

    id_pattern: Optional[Pattern[str]] = None  # First matching group is the product id

    title_selectors: Sequence[str] = ()
    price_selectors: Sequence[str] = ()
    image_selectors: Sequence[str] = ()

    listing_selector: str = ""  # Anchors (or containers) on listing pages
    listing_link_selector: Optional[str] = None  # Anchor inside each container
    product_path_pattern: Optional[Pattern[str]] = None  # Searched in the canonical link path

    def __init__(self, fetcher: Optional["Fetcher"] = None):
        """Initialize the extractor.

        Args:
            fetcher: Page fetcher used by scrape_product/scrape_category
        """
        self.fetcher = fetcher
        self.logger = structlog.get_logger(__name__).bind(platform=self.platform)

    def supports(self, url: str) -> bool:
        """Cheap syntactic hostname check; never touches the network."""
        if not self.host_marker or not url:
            return False
        try:
            host = urlsplit(url).hostname or ""
        except ValueError:
            return False
        return self.host_marker in host

    async def scrape_product(self, url: str) -> ProductRecord:
        """Fetch a product page and extract it."""
        doc = await self._require_fetcher().fetch(url)
        return self.extract_product(doc, url)

    async def scrape_category(self, url: str) -> List[str]:
        """Fetch a listing page and extract its product URLs."""
        doc = await self._require_fetcher().fetch(url)
        return self.extract_category_links(doc, url)

    def extract_product(self, doc: BeautifulSoup, url: str) -> ProductRecord:
        """Extract a product record from a parsed product page.

        All three of title, price and image must be present.

        Raises:
            ExtractionError: If any required element is missing
            BlockedPageError: If elements are missing and the page looks
                like an anti-bot challenge
        """
        title_node = self._select_first(doc, self.title_selectors)
        price_node = self._select_first(doc, self.price_selectors)
        image_node = self._select_first(doc, self.image_selectors)

        title = title_node.get_text().strip() if title_node else ""
        price = price_node.get_text().strip() if price_node else ""
        image_url = self._image_src(image_node) if image_node else ""

        missing = [
            name
            for name, value in (("title", title), ("price", price), ("image", image_url))
            if not value
        ]
        if missing:
            marker = self._detect_block(doc)
            if marker:
                raise BlockedPageError(url, missing, self.platform, marker)
            raise ExtractionError(url, missing, self.platform)

        return ProductRecord(
            external_id=self.derive_external_id(url),
            title=title,
            price=price,
            image_url=image_url,
            product_url=url,
            platform=self.platform,
        )

    def extract_category_links(self, doc: BeautifulSoup, url: str) -> List[str]:
        """Collect canonical product URLs from a listing page, in page order.

        Duplicates pass through. An empty list is a valid outcome.
        """
        links: List[str] = []
        for node in doc.select(self.listing_selector):
            anchor = node.select_one(self.listing_link_selector) if self.listing_link_selector else node
            if anchor is None:
                continue
            href = (anchor.get("href") or "").strip()
            if not href:
                continue
            link = strip_query(absolutize(href, self.origin))
            pattern = self.product_path_pattern
            if pattern is not None and not pattern.search(urlsplit(link).path):
                continue
            links.append(link)

        self.logger.debug("category_links_extracted", url=url, count=len(links))
        return links

    def derive_external_id(self, url: str) -> str:
        """Platform id from the URL, or a stable hash of the URL."""
        if self.id_pattern is not None:
            match = self.id_pattern.search(url)
            if match:
                product_id = next((group for group in match.groups() if group), None)
                if product_id:
                    return product_id
        return url_digest(url)

    @staticmethod
    def _select_first(doc: BeautifulSoup, selectors: Sequence[str]) -> Optional[Tag]:
        for selector in selectors:
            node = doc.select_one(selector)
            if node is not None:
                return node
        return None

    def _image_src(self, node: Tag) -> str:
        # Lazy-loaded images carry a data: placeholder in src
        for attr in ("src", "data-src"):
            src = (node.get(attr) or "").strip()
            if src and not src.startswith("data:"):
                return absolutize(src, self.origin)
        return ""

    @staticmethod
    def _detect_block(doc: BeautifulSoup) -> Optional[str]:
        text = doc.get_text(" ").lower()
        for marker in BLOCK_MARKERS:
            if marker in text:
                return marker
        return None

    def _require_fetcher(self) -> "Fetcher":
        if self.fetcher is None:
            raise RuntimeError(f"{type(self).__name__} has no fetcher configured")
        return self.fetcher

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(platform={self.platform!r})>"
