"""Extraction dispatcher: picks a strategy for a page and post-processes its result."""

from typing import Optional

import structlog

from savecart.core.exceptions import ExtractionError
from savecart.extraction.base import BaseStrategy, ExtractedProduct, RawCandidate
from savecart.extraction.document import PageDocument
from savecart.extraction.register_strategies import build_default_registry
from savecart.extraction.registry import StrategyRegistry
from savecart.extraction.utils.normalizer import store_name_from_hostname

logger = structlog.get_logger(__name__)


class ProductExtractor:
    """Runs the strategy tiers against a page.

    Tiers:
    1. Site strategy whose domain occurs in the hostname. Its result is final,
       including None: a recognised storefront without a title is not a
       product page.
    2. Structured data (JSON-LD, microdata).
    3. Generic heuristics.

    Stateless between calls; the same document can be extracted repeatedly.
    """

    def __init__(self, registry: StrategyRegistry):
        self.registry = registry

    def select_strategy(self, document: PageDocument) -> Optional[BaseStrategy]:
        """Return the domain-matched site strategy, or None for unknown hosts."""
        return self.registry.match(document.hostname)

    def extract_product_info(self, document: PageDocument) -> Optional[ExtractedProduct]:
        """Extract a product record from a page.

        Args:
            document: Parsed page

        Returns:
            ExtractedProduct with store and product URL attached, or None when
            no tier recognises the page (strategy errors included)
        """
        log = logger.bind(url=document.url)

        strategy = self.select_strategy(document)
        if strategy is not None:
            log.debug("strategy_selected", strategy=strategy.shop_slug, tier="site")
            candidate = self._run(strategy, document)
        else:
            candidate = self._run(self.registry.structured_data, document)
            if candidate is None:
                candidate = self._run(self.registry.generic, document)

        if candidate is None:
            log.debug("no_product_found")
            return None

        try:
            product = ExtractedProduct.from_candidate(
                candidate,
                store=store_name_from_hostname(document.hostname),
                product_url=document.url,
            )
        except ValueError as e:
            log.warning("candidate_rejected", error=str(e))
            return None

        log.info(
            "product_extracted",
            store=product.store,
            title=product.title[:80],
            current_price=product.current_price,
            currency=product.currency,
            usable=product.is_usable,
        )
        return product

    def _run(self, strategy: BaseStrategy, document: PageDocument) -> Optional[RawCandidate]:
        try:
            return strategy.extract(document)
        except ExtractionError as e:
            logger.warning("strategy_rejected_page", strategy=strategy.shop_slug, error=e.message)
            return None
        except Exception as e:
            logger.error(
                "strategy_failed",
                strategy=strategy.shop_slug,
                url=document.url,
                error=str(e),
                exc_info=True,
            )
            return None


# Global extractor instance
_extractor_instance: Optional[ProductExtractor] = None


def get_product_extractor() -> ProductExtractor:
    """Get or create the shared extractor built on the default registry.

    Returns:
        ProductExtractor instance
    """
    global _extractor_instance

    if _extractor_instance is None:
        _extractor_instance = ProductExtractor(build_default_registry())

    return _extractor_instance
