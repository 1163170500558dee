"""Custom exception classes for the application.

Error kinds map onto the retry policy of the job runner: ``retryable``
is False for failures that cannot succeed without operator action.
"""

from typing import Iterable, Optional


class ScrapeHubException(Exception):
    """Base exception for all ScrapeHub errors."""

    retryable: bool = False

    def __init__(self, message: str = "An unexpected error occurred", url: Optional[str] = None):
        self.message = message
        self.url = url
        super().__init__(self.message)

    def to_context(self) -> dict:
        """Return a dict suitable for structured log fields."""
        return {
            "error_type": type(self).__name__,
            "error": self.message,
            "url": self.url,
            "retryable": self.retryable,
        }


class InvalidInputError(ScrapeHubException):
    """Raised when a URL is empty or not a well-formed absolute http(s) URL."""

    def __init__(self, url: Optional[str], reason: str = "not a valid absolute URL"):
        super().__init__(f"Invalid URL provided: {url!r} ({reason})", url=url)


class UnsupportedSourceError(ScrapeHubException):
    """Raised when no registered scraper supports a URL."""

    def __init__(self, url: Optional[str] = None, message: str = ""):
        if not message:
            message = "The provided URL is not supported by any available scraper."
        super().__init__(message, url=url)


class NetworkError(ScrapeHubException):
    """Raised on transport-level failures: timeout, DNS, connection reset."""

    retryable = True

    def __init__(self, url: str, reason: str):
        self.reason = reason
        super().__init__(f"Network error while fetching {url}: {reason}", url=url)


class FetchError(ScrapeHubException):
    """Raised when the remote answers with a non-success HTTP status."""

    retryable = True

    def __init__(self, url: str, status: int):
        self.status = status
        super().__init__(f"Failed to fetch URL: {url}. Status: {status}", url=url)

    def to_context(self) -> dict:
        context = super().to_context()
        context["status"] = self.status
        return context


class ExtractionError(ScrapeHubException):
    """Raised when a fetched page lacks required product elements."""

    def __init__(self, url: str, missing: Iterable[str], platform: str = ""):
        self.missing = list(missing)
        self.platform = platform
        label = platform.capitalize() if platform else "The site"
        super().__init__(
            f"Product data not found ({', '.join(self.missing)}). "
            f"{label} may have changed layout or blocked the request.",
            url=url,
        )

    def to_context(self) -> dict:
        context = super().to_context()
        context["missing"] = self.missing
        return context


class BlockedPageError(ExtractionError):
    """Extraction failed and the page looks like an anti-bot challenge."""

    retryable = True

    def __init__(self, url: str, missing: Iterable[str], platform: str = "", marker: str = ""):
        self.marker = marker
        super().__init__(url, missing, platform)
        self.message = f"Blocked or challenge page served for {url} (matched {marker!r})"
        self.args = (self.message,)


class JobTimeoutError(ScrapeHubException):
    """Raised when one job attempt exceeds its execution time limit."""

    retryable = True

    def __init__(self, url: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Scrape job for {url} exceeded {timeout_seconds}s", url=url)
