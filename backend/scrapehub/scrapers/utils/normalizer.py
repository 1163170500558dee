"""URL validation and canonicalization helpers used by the extractors."""

import hashlib
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from scrapehub.core.exceptions import InvalidInputError


def validate_url(url: Optional[str]) -> str:
    """Check that a URL is a non-empty, absolute http(s) URL.

    Args:
        url: Candidate URL

    Returns:
        The URL stripped of surrounding whitespace

    Raises:
        InvalidInputError: If the URL is empty or malformed
    """
    if url is None or not isinstance(url, str) or not url.strip():
        raise InvalidInputError(url, "empty URL")

    url = url.strip()
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidInputError(url, str(e)) from e

    if parts.scheme not in ("http", "https"):
        raise InvalidInputError(url, "missing or unsupported scheme")
    if not parts.netloc or not parts.hostname:
        raise InvalidInputError(url, "missing host")
    if any(ch.isspace() for ch in url):
        raise InvalidInputError(url, "contains whitespace")
    return url


def strip_query(url: str) -> str:
    """Drop the query string and fragment from a URL."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def absolutize(href: str, origin: str) -> str:
    """Resolve a possibly relative href against a site origin.

    Protocol-relative hrefs ("//cdn...") get https.
    """
    href = href.strip()
    if href.startswith("//"):
        return f"https:{href}"
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(origin.rstrip("/") + "/", href.lstrip("/"))


def url_digest(url: str) -> str:
    """Deterministic content hash of the full URL string."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()
