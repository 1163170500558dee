"""ScrapeHub: multi-platform product scraper backend."""

__version__ = "0.1.0"
