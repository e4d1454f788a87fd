"""Retry policy for page fetches."""

import logging

import httpx
import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)


RETRYABLE_STATUS_CODES = frozenset([429, 500, 502, 503, 504])


def is_retryable_fetch_error(exc: BaseException) -> bool:
    """Transport failures and throttling / server-side statuses are retried.

    Other 4xx responses (404, 403...) will not change on a retry.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


# Reusable retry decorator for page fetches (httpx)
fetch_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=30),
    retry=retry_if_exception(is_retryable_fetch_error),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
