"""Walmart product page strategy."""

from savecart.extraction.probes import images, texts
from savecart.extraction.strategies.site import PRICE_SYMBOL, SelectorTable, SiteStrategy


WALMART_SELECTORS = SelectorTable(
    title=texts(
        'h1[itemprop="name"]',
        "h1.prod-title",
    ),
    price=texts(
        '[itemprop="price"]',
        ".price-characteristic",
        '[data-automation="product-price"]',
    ),
    original_price=texts(
        ".strikethrough-price",
        ".was-price",
    ),
    image=images(".prod-hero-image"),
    currency_signals=(PRICE_SYMBOL,),
)


class WalmartStrategy(SiteStrategy):
    """Walmart.com product page strategy."""

    shop_slug = "walmart"
    shop_name = "Walmart"
    domain = "walmart.com"
    table = WALMART_SELECTORS
