"""Target product page strategy (data-test hooks are stable across redesigns)."""

from savecart.extraction.probes import images, texts
from savecart.extraction.strategies.site import PRICE_SYMBOL, SelectorTable, SiteStrategy


TARGET_SELECTORS = SelectorTable(
    title=texts('[data-test="product-title"]'),
    price=texts('[data-test="product-price"]'),
    original_price=texts('[data-test="product-price-was"]'),
    image=images('[data-test="product-image"]'),
    currency_signals=(PRICE_SYMBOL,),
)


class TargetStrategy(SiteStrategy):
    shop_slug = "target"
    shop_name = "Target"
    domain = "target.com"
    table = TARGET_SELECTORS
