"""Category fan-out pipeline.

Turns one category URL into many stored product records. Category-level
steps (resolve, fetch listing, extract links) propagate their errors;
per-product failures are logged, counted and skipped so one bad page
never aborts the run. Products are processed one at a time in listing
order.
"""

from dataclasses import dataclass, field
from typing import Any, List, Protocol, Tuple

import structlog

from scrapehub.core.exceptions import ScrapeHubException
from scrapehub.scrapers.base import ProductRecord
from scrapehub.scrapers.registry import ScraperRegistry

logger = structlog.get_logger(__name__)


class ProductSink(Protocol):
    """Storage collaborator: create-or-update keyed by external_id."""

    async def upsert(self, record: ProductRecord) -> Any:
        ...


@dataclass
class PipelineReport:
    """Outcome of one category run."""

    url: str
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (product_url, error)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": [{"product_url": u, "error": e} for u, e in self.failures],
        }


class CategoryPipeline:
    """Resolve → fetch category → extract links → per-product fetch/extract/store."""

    def __init__(self, registry: ScraperRegistry, sink: ProductSink):
        """Initialize the pipeline.

        Args:
            registry: Extractor registry used to resolve URLs
            sink: Storage collaborator receiving each record as produced
        """
        self.registry = registry
        self.sink = sink
        self.logger = logger.bind(service="category_pipeline")

    async def scrape_category(self, url: str) -> PipelineReport:
        """Scrape every product listed on a category page.

        Returns:
            PipelineReport with total/succeeded/failed counts

        Raises:
            InvalidInputError, UnsupportedSourceError, FetchError,
            NetworkError: If a category-level step fails
        """
        self.logger.info("category_scrape_started", url=url)

        extractor = self.registry.resolve(url)
        self.logger.info("using_extractor", url=url, platform=extractor.platform)

        product_urls = await extractor.scrape_category(url)
        report = PipelineReport(url=url, total=len(product_urls))
        self.logger.info("category_links_found", url=url, product_count=report.total)

        for product_url in product_urls:
            try:
                record = await extractor.scrape_product(product_url)
                await self.sink.upsert(record)
            except Exception as e:
                report.failed += 1
                report.failures.append((product_url, str(e)))
                context = e.to_context() if isinstance(e, ScrapeHubException) else {"error": str(e)}
                context.pop("url", None)
                self.logger.warning("product_scrape_failed", product_url=product_url, **context)
                continue

            report.succeeded += 1
            self.logger.info(
                "product_scraped",
                product_url=product_url,
                external_id=record.external_id,
            )

        self.logger.info(
            "category_scrape_completed",
            url=url,
            total_products=report.total,
            successful=report.succeeded,
            failed=report.failed,
        )
        return report

    async def scrape_product(self, url: str) -> ProductRecord:
        """Scrape and store a single product; every failure propagates."""
        extractor = self.registry.resolve(url)
        self.logger.info("single_product_scrape", url=url, platform=extractor.platform)

        record = await extractor.scrape_product(url)
        await self.sink.upsert(record)
        return record
