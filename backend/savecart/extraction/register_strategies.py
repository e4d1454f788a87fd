"""Build the default strategy registry.

Called once at startup; the resulting registry is passed into the
dispatcher explicitly instead of living in module-level mutable state.
"""

from typing import Optional, Sequence, Tuple, Type

import structlog

from savecart.extraction.base import BaseStrategy
from savecart.extraction.registry import StrategyRegistry
from savecart.extraction.strategies import (
    AmazonStrategy,
    BestBuyStrategy,
    EbayStrategy,
    FlipkartStrategy,
    GenericStrategy,
    NeweggStrategy,
    SiteStrategy,
    StructuredDataStrategy,
    TargetStrategy,
    WalmartStrategy,
)

logger = structlog.get_logger(__name__)


# Matched in this order; first hostname hit wins
DEFAULT_SITE_STRATEGIES: Tuple[Type[SiteStrategy], ...] = (
    AmazonStrategy,
    EbayStrategy,
    WalmartStrategy,
    BestBuyStrategy,
    TargetStrategy,
    NeweggStrategy,
    FlipkartStrategy,
)


def build_registry(
    site_strategies: Sequence[Type[SiteStrategy]],
    structured_data: Optional[BaseStrategy] = None,
    generic: Optional[BaseStrategy] = None,
) -> StrategyRegistry:
    """Instantiate strategies and freeze them into a registry.

    Args:
        site_strategies: SiteStrategy subclasses in match order
        structured_data: Structured-data tier (default StructuredDataStrategy)
        generic: Last-resort tier (default GenericStrategy)

    Returns:
        StrategyRegistry instance
    """
    entries = []
    for strategy_class in site_strategies:
        if not issubclass(strategy_class, SiteStrategy):
            raise ValueError(f"Strategy class must inherit from SiteStrategy: {strategy_class}")
        strategy = strategy_class()
        entries.append((strategy.domain, strategy))
        logger.debug(
            "strategy_registered",
            domain=strategy.domain,
            strategy_class=strategy_class.__name__,
        )

    registry = StrategyRegistry(
        entries=tuple(entries),
        structured_data=structured_data or StructuredDataStrategy(),
        generic=generic or GenericStrategy(),
    )
    logger.info("all_strategies_registered", count=len(registry), domains=list(registry.domains))
    return registry


def build_default_registry() -> StrategyRegistry:
    """Registry with every known storefront in the standard order."""
    return build_registry(DEFAULT_SITE_STRATEGIES)
