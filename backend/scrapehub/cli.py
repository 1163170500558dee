"""Command-line entry point for manual scraping.

Usage:
    scrapehub scrape-product https://www.amazon.com/dp/B0TEST1234
    scrapehub scrape-category https://www.jumia.com.eg/laptops/
    scrapehub scrape-category https://www.amazon.com/s?k=laptop --attempts 3
"""

import argparse
import asyncio
import sys
from typing import List, Optional

import structlog

from scrapehub.config import settings
from scrapehub.core.exceptions import ScrapeHubException
from scrapehub.core.logging import configure_logging
from scrapehub.db.session import async_session_factory, init_db
from scrapehub.scrapers.pipeline import CategoryPipeline
from scrapehub.scrapers.register_adapters import build_default_registry
from scrapehub.scrapers.scheduler import CategoryScrapeJob
from scrapehub.services.product_service import ProductService

logger = structlog.get_logger(__name__)


async def scrape_product(url: str) -> int:
    """Scrape one product page and store it.

    Returns:
        Process exit code (0 on success, 1 on any scraping error)
    """
    await init_db()
    registry = build_default_registry()

    async with async_session_factory() as db:
        pipeline = CategoryPipeline(registry, ProductService(db))
        try:
            record = await pipeline.scrape_product(url)
        except ScrapeHubException as e:
            logger.error("cli_scrape_product_failed", **e.to_context())
            print(f"Error: {e}")
            return 1

    print("Product scraped successfully!")
    print(f"Title: {record.title}")
    print(f"Price: {record.price}")
    print(f"External ID: {record.external_id}")
    return 0


async def scrape_category(url: str, attempts: int, timeout: float) -> int:
    """Run one category job and print its report.

    Returns:
        Process exit code (0 when the job completed, 1 when it failed)
    """
    await init_db()
    job = CategoryScrapeJob(
        url=url,
        registry=build_default_registry(),
        session_factory=async_session_factory,
        max_attempts=attempts,
        timeout_seconds=timeout,
        retry_delay_seconds=settings.JOB_RETRY_DELAY_SECONDS,
    )

    try:
        report = await job.run()
    except Exception as e:
        print(f"Error: {e}")
        return 1

    print(f"\n{'=' * 70}")
    print(f"  Category: {report.url}")
    print(f"{'=' * 70}")
    print(f"  Products found:     {report.total}")
    print(f"  Scraped and stored: {report.succeeded}")
    print(f"  Failed:             {report.failed}")
    for product_url, error in report.failures:
        print(f"    - {product_url}: {error}")
    print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scrapehub",
        description="Scrape product data from supported e-commerce platforms",
    )
    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        help=f"Log level (default: {settings.LOG_LEVEL})",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    product_parser = subparsers.add_parser("scrape-product", help="Scrape a single product page")
    product_parser.add_argument("url", help="Product page URL")

    category_parser = subparsers.add_parser(
        "scrape-category", help="Scrape every product listed on a category page"
    )
    category_parser.add_argument("url", help="Category page URL")
    category_parser.add_argument(
        "--attempts",
        type=int,
        default=1,
        help="Job attempts before giving up (default: 1)",
    )
    category_parser.add_argument(
        "--timeout",
        type=float,
        default=settings.JOB_TIMEOUT_SECONDS,
        help=f"Seconds allowed per attempt (default: {settings.JOB_TIMEOUT_SECONDS})",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, json_output=settings.LOG_JSON)

    if args.command == "scrape-product":
        return asyncio.run(scrape_product(args.url))
    return asyncio.run(scrape_category(args.url, args.attempts, args.timeout))


if __name__ == "__main__":
    sys.exit(main())
