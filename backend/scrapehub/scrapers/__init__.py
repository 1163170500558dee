"""Scraping layer: fetcher, extractors, registry, pipeline and jobs."""

from scrapehub.scrapers.base import BaseExtractor, ProductRecord
from scrapehub.scrapers.fetcher import Fetcher
from scrapehub.scrapers.pipeline import CategoryPipeline, PipelineReport
from scrapehub.scrapers.registry import ScraperRegistry

__all__ = [
    "BaseExtractor",
    "ProductRecord",
    "Fetcher",
    "CategoryPipeline",
    "PipelineReport",
    "ScraperRegistry",
]
