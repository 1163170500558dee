"""Retry policy with exponential backoff for page fetches."""

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from scrapehub.core.exceptions import NetworkError


logger = structlog.get_logger(__name__)


def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "fetch_retrying",
        attempt=retry_state.attempt_number,
        sleep_seconds=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
        error=str(exc) if exc else None,
    )


def fetch_retry(attempts: int = 1, min_wait: float = 1, max_wait: float = 10) -> AsyncRetrying:
    """Build a retry controller for transient network failures.

    Only NetworkError is retried; HTTP status failures and parse
    failures surface on the first attempt.

    Args:
        attempts: Total attempts including the first (1 disables retry)
        min_wait: Minimum backoff in seconds
        max_wait: Maximum backoff in seconds

    Returns:
        tenacity AsyncRetrying instance that re-raises the last error
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(NetworkError),
        before_sleep=_log_before_sleep,
        reraise=True,
    )
