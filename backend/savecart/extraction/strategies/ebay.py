"""eBay item page strategy.

Structure: h1.x-item-title__mainTitle > span (title),
[itemprop=price] or .x-price-primary (price, "US $19.99"),
.original-price (list price), #icImg (legacy main image).
"""

from savecart.extraction.probes import images, texts
from savecart.extraction.strategies.site import PRICE_SYMBOL, SelectorTable, SiteStrategy


EBAY_SELECTORS = SelectorTable(
    title=texts(
        "h1.x-item-title__mainTitle span",
        "h1.x-item-title__mainTitle",
        "#itemTitle",
    ),
    price=texts(
        '[itemprop="price"]',
        ".x-price-primary span",
        "span.notranslate",
    ),
    original_price=texts(
        ".original-price",
        ".x-additional-info__textual-display .ux-textspans--STRIKETHROUGH",
    ),
    image=images(
        "#icImg",
        ".ux-image-carousel-item.active img",
        ".img img",
        attrs=("src", "data-zoom-src", "data-src"),
    ),
    currency_signals=(PRICE_SYMBOL,),
    default_currency="USD",
)


class EbayStrategy(SiteStrategy):
    """eBay listing page strategy."""

    shop_slug = "ebay"
    shop_name = "eBay"
    domain = "ebay.com"
    table = EBAY_SELECTORS
