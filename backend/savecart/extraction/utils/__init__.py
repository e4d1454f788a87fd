"""Extraction utilities: price/currency normalization, rate limiting and retry."""

from .normalizer import (
    currency_from_hostname,
    currency_from_symbol,
    format_price,
    normalize_price,
    normalize_url,
    store_name_from_hostname,
)
from .rate_limiter import DomainRateLimiter, TokenBucket
from .retry import fetch_retry, is_retryable_fetch_error


__all__ = [
    # Normalization
    "normalize_price",
    "currency_from_symbol",
    "currency_from_hostname",
    "format_price",
    "normalize_url",
    "store_name_from_hostname",
    # Rate limiting
    "DomainRateLimiter",
    "TokenBucket",
    # Retry
    "fetch_retry",
    "is_retryable_fetch_error",
]
