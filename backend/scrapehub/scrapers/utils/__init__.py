"""Scraper utilities for proxy rotation, request identity, retry and URL handling."""

from .proxy_manager import ProxyPool, ProxyEntry, is_valid_proxy, PROXY_PATTERN
from .user_agents import (
    get_random_user_agent,
    build_browser_headers,
    USER_AGENTS,
)
from .normalizer import (
    validate_url,
    strip_query,
    absolutize,
    url_digest,
)
from .retry import fetch_retry


__all__ = [
    # Proxy management
    "ProxyPool",
    "ProxyEntry",
    "is_valid_proxy",
    "PROXY_PATTERN",
    # User agents
    "get_random_user_agent",
    "build_browser_headers",
    "USER_AGENTS",
    # Normalization
    "validate_url",
    "strip_query",
    "absolutize",
    "url_digest",
    # Retry
    "fetch_retry",
]
