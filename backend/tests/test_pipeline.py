"""Tests for the category fan-out pipeline."""

import httpx
import pytest

from sample_pages import AMAZON_CATEGORY_LINKS, AMAZON_CATEGORY_PAGE, CAPTCHA_PAGE, amazon_product_page
from scrapehub.core.exceptions import ExtractionError, FetchError, InvalidInputError, UnsupportedSourceError
from scrapehub.scrapers.pipeline import CategoryPipeline, PipelineReport

CATEGORY_URL = "https://www.amazon.com/s?k=laptop"
LINK_1, LINK_2, LINK_3 = AMAZON_CATEGORY_LINKS


class RecordingSink:
    """In-memory sink that keeps every upserted record in order."""

    def __init__(self, fail_for=()):
        self.records = []
        self.fail_for = set(fail_for)

    async def upsert(self, record):
        if record.external_id in self.fail_for:
            raise RuntimeError("database is locked")
        self.records.append(record)
        return record


@pytest.fixture
def category_routes():
    return {
        CATEGORY_URL: (200, AMAZON_CATEGORY_PAGE),
        LINK_1: (200, amazon_product_page(title="Laptop One", price="$100.00")),
        LINK_2: (200, amazon_product_page(title="Laptop Two", price="$200.00")),
        LINK_3: (200, amazon_product_page(title="Laptop Three", price="$300.00")),
    }


# ============================================================================
# TESTS: CATEGORY FAN-OUT
# ============================================================================

class TestScrapeCategory:
    """Tests for CategoryPipeline.scrape_category."""

    async def test_all_products_stored_in_listing_order(self, registry_factory, category_routes):
        sink = RecordingSink()
        pipeline = CategoryPipeline(registry_factory(category_routes), sink)

        report = await pipeline.scrape_category(CATEGORY_URL)

        assert (report.total, report.succeeded, report.failed) == (3, 3, 0)
        assert [r.external_id for r in sink.records] == ["B0AAAAAAA1", "B0AAAAAAA2", "B0AAAAAAA3"]
        assert [r.title for r in sink.records] == ["Laptop One", "Laptop Two", "Laptop Three"]

    async def test_timeout_on_one_product_is_contained(self, registry_factory, category_routes):
        """Three links, the second times out: two stored, in order."""
        category_routes[LINK_2] = httpx.ReadTimeout("timed out")
        sink = RecordingSink()
        pipeline = CategoryPipeline(registry_factory(category_routes), sink)

        report = await pipeline.scrape_category(CATEGORY_URL)

        assert (report.total, report.succeeded, report.failed) == (3, 2, 1)
        assert [r.product_url for r in sink.records] == [LINK_1, LINK_3]
        assert report.failures[0][0] == LINK_2

    async def test_mixed_product_failures_counted(self, registry_factory, category_routes):
        category_routes[LINK_1] = (404, "gone")
        category_routes[LINK_3] = (200, CAPTCHA_PAGE)
        sink = RecordingSink()
        pipeline = CategoryPipeline(registry_factory(category_routes), sink)

        report = await pipeline.scrape_category(CATEGORY_URL)

        assert (report.total, report.succeeded, report.failed) == (3, 1, 2)
        assert [r.external_id for r in sink.records] == ["B0AAAAAAA2"]
        assert [url for url, _ in report.failures] == [LINK_1, LINK_3]

    async def test_storage_failure_is_contained(self, registry_factory, category_routes):
        sink = RecordingSink(fail_for={"B0AAAAAAA1"})
        pipeline = CategoryPipeline(registry_factory(category_routes), sink)

        report = await pipeline.scrape_category(CATEGORY_URL)

        assert (report.succeeded, report.failed) == (2, 1)
        assert "database is locked" in report.failures[0][1]

    async def test_empty_listing_is_success(self, registry_factory):
        routes = {CATEGORY_URL: (200, "<html><body>No results</body></html>")}
        pipeline = CategoryPipeline(registry_factory(routes), RecordingSink())

        report = await pipeline.scrape_category(CATEGORY_URL)

        assert (report.total, report.succeeded, report.failed) == (0, 0, 0)

    async def test_category_fetch_failure_propagates(self, registry_factory):
        sink = RecordingSink()
        pipeline = CategoryPipeline(registry_factory({CATEGORY_URL: (503, "busy")}), sink)

        with pytest.raises(FetchError):
            await pipeline.scrape_category(CATEGORY_URL)

        assert sink.records == []

    async def test_unsupported_category_propagates(self, registry_factory):
        calls = []
        pipeline = CategoryPipeline(registry_factory({}, calls), RecordingSink())

        with pytest.raises(UnsupportedSourceError):
            await pipeline.scrape_category("https://www.ebay.com/b/laptops")

        assert calls == []

    async def test_malformed_category_url_propagates(self, registry_factory):
        pipeline = CategoryPipeline(registry_factory({}), RecordingSink())

        with pytest.raises(InvalidInputError):
            await pipeline.scrape_category("laptops")

    async def test_report_to_dict(self, registry_factory, category_routes):
        category_routes[LINK_3] = (500, "oops")
        pipeline = CategoryPipeline(registry_factory(category_routes), RecordingSink())

        report = await pipeline.scrape_category(CATEGORY_URL)
        data = report.to_dict()

        assert data["url"] == CATEGORY_URL
        assert data["total"] == 3
        assert data["failures"][0]["product_url"] == LINK_3
        assert "Status: 500" in data["failures"][0]["error"]


# ============================================================================
# TESTS: SINGLE PRODUCT
# ============================================================================

class TestScrapeProduct:
    """Tests for CategoryPipeline.scrape_product."""

    async def test_scrape_product_stores_record(self, registry_factory, category_routes):
        sink = RecordingSink()
        pipeline = CategoryPipeline(registry_factory(category_routes), sink)

        record = await pipeline.scrape_product(LINK_2)

        assert record.external_id == "B0AAAAAAA2"
        assert sink.records == [record]

    async def test_scrape_product_propagates_errors(self, registry_factory):
        sink = RecordingSink()
        routes = {LINK_1: (200, "<html><body>Layout changed</body></html>")}
        pipeline = CategoryPipeline(registry_factory(routes), sink)

        with pytest.raises(ExtractionError):
            await pipeline.scrape_product(LINK_1)

        assert sink.records == []


def test_pipeline_report_defaults():
    report = PipelineReport(url=CATEGORY_URL)

    assert (report.total, report.succeeded, report.failed) == (0, 0, 0)
    assert report.failures == []
