"""Immutable strategy registry handed to the dispatcher."""

from dataclasses import dataclass
from typing import Optional, Tuple

from savecart.extraction.base import BaseStrategy


@dataclass(frozen=True)
class StrategyRegistry:
    """Ordered domain table plus the two fallback tiers.

    Domains are matched as substrings of the page hostname in table order,
    so "amazon.com" also covers "www.amazon.com" and "smile.amazon.com".
    """

    entries: Tuple[Tuple[str, BaseStrategy], ...]
    structured_data: BaseStrategy
    generic: BaseStrategy

    def __post_init__(self):
        """Validate data after initialization."""
        seen = set()
        for domain, strategy in self.entries:
            if not domain:
                raise ValueError(f"Empty domain for strategy: {strategy!r}")
            if domain in seen:
                raise ValueError(f"Duplicate domain in registry: {domain}")
            seen.add(domain)

    def match(self, hostname: Optional[str]) -> Optional[BaseStrategy]:
        """Find the site strategy for a hostname.

        Args:
            hostname: Page hostname (e.g., "www.ebay.com")

        Returns:
            First strategy whose domain occurs in the hostname, or None
        """
        if not hostname:
            return None
        hostname = hostname.lower()
        for domain, strategy in self.entries:
            if domain in hostname:
                return strategy
        return None

    @property
    def domains(self) -> Tuple[str, ...]:
        return tuple(domain for domain, _ in self.entries)

    def __len__(self) -> int:
        return len(self.entries)
