"""Newegg product page strategy.

Newegg splits the current price across tags ("$<strong>1,299</strong><sup>.99</sup>"),
which reads back as one run of text.
"""

from savecart.extraction.probes import images, texts
from savecart.extraction.strategies.site import PRICE_SYMBOL, SelectorTable, SiteStrategy


NEWEGG_SELECTORS = SelectorTable(
    title=texts(".product-title"),
    price=texts(
        ".price-current",
        ".product-price",
    ),
    original_price=texts(".price-was"),
    image=images(".product-view-img-original"),
    currency_signals=(PRICE_SYMBOL,),
)


class NeweggStrategy(SiteStrategy):
    shop_slug = "newegg"
    shop_name = "Newegg"
    domain = "newegg.com"
    table = NEWEGG_SELECTORS
