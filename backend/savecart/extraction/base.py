"""Base strategy interface and extraction result types.

All storefront strategies inherit from BaseStrategy and return a
RawCandidate; the dispatcher turns candidates into ExtractedProduct
records.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import structlog

from savecart.extraction.document import PageDocument
from savecart.schemas.product_info import ProductInfo


@dataclass(frozen=True)
class RawCandidate:
    """Unvalidated, possibly partial result produced by a single strategy."""

    title: str
    current_price: Optional[float] = None
    original_price: Optional[float] = None
    image_url: Optional[str] = None
    currency: str = "USD"


def guard_original_price(
    current_price: Optional[float], original_price: Optional[float]
) -> Optional[float]:
    """Keep an original price only when it frames a real discount.

    Args:
        current_price: Current selling price
        original_price: Candidate strike-through / list price

    Returns:
        original_price if strictly greater than current_price, else None
    """
    if original_price is None or current_price is None:
        return None
    if original_price > current_price:
        return original_price
    return None


@dataclass(frozen=True)
class ExtractedProduct:
    """Final extraction record for one page (never mutated after creation)."""

    title: str
    current_price: Optional[float]
    original_price: Optional[float]
    image_url: Optional[str]
    currency: str
    store: str
    product_url: str

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.title:
            raise ValueError("title is required")
        if self.current_price is not None and not (
            math.isfinite(self.current_price) and self.current_price >= 0
        ):
            raise ValueError("current_price must be a finite non-negative number")
        if self.original_price is not None and (
            self.current_price is None or self.original_price <= self.current_price
        ):
            raise ValueError("original_price must be greater than current_price")

    @classmethod
    def from_candidate(
        cls, candidate: RawCandidate, store: str, product_url: str
    ) -> "ExtractedProduct":
        """Build the final record from a strategy candidate.

        Applies the original-price guard uniformly regardless of which
        strategy produced the candidate.
        """
        return cls(
            title=candidate.title,
            current_price=candidate.current_price,
            original_price=guard_original_price(
                candidate.current_price, candidate.original_price
            ),
            image_url=candidate.image_url,
            currency=candidate.currency or "USD",
            store=store,
            product_url=product_url,
        )

    @property
    def is_usable(self) -> bool:
        """True when the record has a title and a finite current price."""
        return bool(self.title) and (
            self.current_price is not None and math.isfinite(self.current_price)
        )

    def to_info(self) -> ProductInfo:
        return ProductInfo(
            title=self.title,
            current_price=self.current_price,
            original_price=self.original_price,
            image_url=self.image_url,
            currency=self.currency,
            store=self.store,
            product_url=self.product_url,
        )

    def to_message(self) -> Dict[str, Any]:
        """JSON-shaped message with camelCase keys for the UI/backend."""
        return self.to_info().model_dump(by_alias=True)


class BaseStrategy(ABC):
    """Abstract base class for all extraction strategies.

    Strategies read a PageDocument and return a RawCandidate, or None when
    the page is not a product page as far as the strategy can tell.
    """

    shop_slug: str = ""  # Must be overridden in subclass (e.g., "amazon")
    shop_name: str = ""  # Human-readable store name (e.g., "Amazon")
    strategy_type: str = ""  # 'site', 'structured_data' or 'generic'

    def __init__(self):
        self.logger = structlog.get_logger(strategy=self.shop_slug)

    @abstractmethod
    def extract(self, document: PageDocument) -> Optional[RawCandidate]:
        """Extract a product candidate from a page.

        Args:
            document: Parsed page

        Returns:
            RawCandidate, or None if no title could be found
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(shop_slug={self.shop_slug!r})"
