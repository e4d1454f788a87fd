"""Best Buy product page strategy.

Structure: .sku-title h1 (title), .priceView-customer-price > span (price),
.pricing-price__regular-price ("Was $X"), img.primary-image.
"""

from savecart.extraction.probes import images, texts
from savecart.extraction.strategies.site import PRICE_SYMBOL, SelectorTable, SiteStrategy


BESTBUY_SELECTORS = SelectorTable(
    title=texts(".sku-title h1", ".heading-5"),
    price=texts(
        ".priceView-customer-price span",
        ".priceView-purchase-price",
    ),
    original_price=texts(".pricing-price__regular-price"),
    image=images(".primary-image"),
    currency_signals=(PRICE_SYMBOL,),
)


class BestBuyStrategy(SiteStrategy):
    shop_slug = "bestbuy"
    shop_name = "Best Buy"
    domain = "bestbuy.com"
    table = BESTBUY_SELECTORS
