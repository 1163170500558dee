"""Platform-specific extractor implementations.

Each module defines one BaseExtractor subclass. New platforms are added
here and registered in scrapehub.scrapers.register_adapters.
"""

from .amazon import AmazonExtractor
from .jumia import JumiaExtractor

__all__ = [
    "AmazonExtractor",
    "JumiaExtractor",
]
