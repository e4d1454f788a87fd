"""Extraction strategies.

Site strategies run a per-storefront SelectorTable; the structured-data and
generic strategies are the fallback tiers for unrecognised hostnames.
"""

from .site import SelectorTable, SiteStrategy, infer_currency
from .amazon import AmazonStrategy
from .ebay import EbayStrategy
from .walmart import WalmartStrategy
from .bestbuy import BestBuyStrategy
from .target import TargetStrategy
from .newegg import NeweggStrategy
from .flipkart import FlipkartStrategy
from .structured_data import StructuredDataStrategy
from .generic import GenericStrategy

__all__ = [
    # Engine
    "SelectorTable",
    "SiteStrategy",
    "infer_currency",
    # Storefronts
    "AmazonStrategy",
    "EbayStrategy",
    "WalmartStrategy",
    "BestBuyStrategy",
    "TargetStrategy",
    "NeweggStrategy",
    "FlipkartStrategy",
    # Fallback tiers
    "StructuredDataStrategy",
    "GenericStrategy",
]
