"""Generic heuristic strategy for storefronts without a dedicated table.

Uses broad, semantic selectors only. No original-price detection: without
site knowledge a strike-through price is too often unrelated to the
product.
"""

from savecart.extraction.probes import Image, Text, texts
from savecart.extraction.strategies.site import HOSTNAME, PRICE_SYMBOL, SelectorTable, SiteStrategy


GENERIC_SELECTORS = SelectorTable(
    title=texts(
        '[itemprop="name"]',
        "h1",
    ),
    price=(
        Text('[itemprop="price"]'),
        Text("[data-price]", fallback_attrs=("data-price",)),
        Text(".price"),
        Text(".product-price"),
    ),
    image=(
        Image('[itemprop="image"]', attrs=("src", "data-src", "content", "href")),
        Image(".product-image img"),
        Image(".product img"),
    ),
    currency_signals=(PRICE_SYMBOL, HOSTNAME),
    default_currency="USD",
)


class GenericStrategy(SiteStrategy):
    """Last-resort strategy used when nothing else recognises the page."""

    shop_slug = "generic"
    shop_name = "Generic"
    strategy_type = "generic"
    table = GENERIC_SELECTORS
