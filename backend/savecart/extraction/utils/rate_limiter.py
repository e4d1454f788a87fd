"""Per-host token buckets keeping page fetches polite."""

import asyncio
import time
from typing import Dict, Optional


class TokenBucket:
    """Refilling token bucket; one token per request.

    Starts full, so a host can absorb a short burst before requests are
    spaced out at the steady rate.
    """

    def __init__(self, rate: float, capacity: float):
        """Initialize token bucket.

        Args:
            rate: Tokens added per second
            capacity: Burst size (bucket never holds more than this)
        """
        self.rate = rate
        self.capacity = capacity
        self.tokens = capacity
        self.last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    @classmethod
    def per_minute(cls, rpm: int) -> "TokenBucket":
        # Burst of a tenth of the per-minute budget, at least 2
        return cls(rate=rpm / 60.0, capacity=max(2.0, rpm / 10.0))

    @property
    def rpm(self) -> float:
        return self.rate * 60.0

    def _refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.last_refill) * self.rate)
        self.last_refill = now

    def _take(self, tokens: float) -> float:
        """Take tokens if available; otherwise return the seconds to wait."""
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return 0.0
        return (tokens - self.tokens) / self.rate

    async def acquire(self, tokens: float = 1.0) -> None:
        """Wait until ``tokens`` can be taken from the bucket."""
        async with self._lock:
            delay = self._take(tokens)
            while delay > 0:
                await asyncio.sleep(delay)
                delay = self._take(tokens)


class DomainRateLimiter:
    """One TokenBucket per storefront host.

    A burst of Amazon fetches never delays an eBay fetch.
    """

    # Requests per minute for storefront hosts
    DOMAIN_LIMITS_RPM = {
        "www.amazon.com": 10,
        "www.amazon.in": 10,
        "www.amazon.co.uk": 10,
        "www.ebay.com": 20,
        "www.walmart.com": 10,
        "www.bestbuy.com": 10,
        "www.target.com": 15,
        "www.newegg.com": 15,
        "www.flipkart.com": 10,
    }

    def __init__(self, default_rpm: int = 10, limits: Optional[Dict[str, int]] = None):
        """Initialize rate limiter.

        Args:
            default_rpm: Limit for hosts not listed in the table
            limits: Per-host overrides merged over DOMAIN_LIMITS_RPM
        """
        self.default_rpm = default_rpm
        self._limits = {**self.DOMAIN_LIMITS_RPM, **(limits or {})}
        self._buckets: Dict[str, TokenBucket] = {}

    def _bucket_for(self, domain: str) -> TokenBucket:
        bucket = self._buckets.get(domain)
        if bucket is None:
            bucket = TokenBucket.per_minute(self._limits.get(domain, self.default_rpm))
            self._buckets[domain] = bucket
        return bucket

    async def acquire(self, domain: str, tokens: float = 1.0) -> None:
        """Block until the host's bucket allows another request.

        Args:
            domain: Host being fetched (e.g., "www.ebay.com")
            tokens: Number of tokens to take (default 1.0)
        """
        await self._bucket_for(domain).acquire(tokens)

    def set_custom_limit(self, domain: str, rpm: int) -> None:
        """Override a host's limit; its bucket starts over full."""
        self._limits[domain] = rpm
        self._buckets[domain] = TokenBucket.per_minute(rpm)

    def get_current_rate(self, domain: str) -> float:
        """Current limit for a host in requests per minute."""
        return self._bucket_for(domain).rpm
