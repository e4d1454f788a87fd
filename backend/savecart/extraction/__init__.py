"""Product-data extraction engine.

This package provides:
- PageDocument, the parsed page every strategy reads
- Selector probes and per-storefront selector tables
- Structured-data and generic fallback strategies
- The immutable strategy registry and the dispatcher
- The product-page gate for automatic detection
"""

from .base import BaseStrategy, ExtractedProduct, RawCandidate, guard_original_price
from .document import PageDocument
from .registry import StrategyRegistry
from .register_strategies import build_default_registry, build_registry
from .dispatcher import ProductExtractor, get_product_extractor
from .gate import is_product_page

__all__ = [
    # Data structures
    "PageDocument",
    "RawCandidate",
    "ExtractedProduct",
    "guard_original_price",
    # Strategies
    "BaseStrategy",
    "StrategyRegistry",
    "build_registry",
    "build_default_registry",
    # Dispatch
    "ProductExtractor",
    "get_product_extractor",
    "is_product_page",
]
