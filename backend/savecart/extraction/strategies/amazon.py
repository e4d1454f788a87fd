"""Amazon product page strategy.

Amazon reshuffles its product page markup often, so every field has a long
fallback chain. Structure seen on current pages:
  - #productTitle (title)
  - .a-price > span.a-offscreen (full price text, visually hidden)
  - .a-price-whole / .a-price-fraction (visible split price)
  - .a-text-price / .basisPrice (strike-through list price)
  - img#landingImage[data-old-hires] (hi-res main image)
"""

from typing import Optional

from savecart.core.exceptions import ExtractionError
from savecart.extraction.base import RawCandidate
from savecart.extraction.document import PageDocument
from savecart.extraction.probes import Probe, images, texts
from savecart.extraction.strategies.site import (
    HOSTNAME,
    PAGE_TEXT,
    PRICE_SYMBOL,
    SelectorTable,
    SiteStrategy,
)


class AmazonSplitPrice(Probe):
    """Rebuild a price from the visible ``.a-price-whole`` / ``.a-price-fraction`` pair."""

    def probe(self, document: PageDocument) -> Optional[str]:
        whole = document.select_one(".a-price-whole")
        if whole is None:
            return None
        # .a-price-whole renders as "1,299." with the decimal point inside
        whole_text = whole.get_text(strip=True).rstrip(".")
        fraction = None
        container = whole.find_parent(class_="a-price")
        if container is not None:
            fraction = container.select_one(".a-price-fraction")
        symbol = container.select_one(".a-price-symbol") if container is not None else None

        text = whole_text
        if fraction is not None and fraction.get_text(strip=True):
            text = f"{whole_text}.{fraction.get_text(strip=True)}"
        if symbol is not None:
            text = f"{symbol.get_text(strip=True)}{text}"
        return text

    def __repr__(self) -> str:
        return "AmazonSplitPrice()"


AMAZON_SELECTORS = SelectorTable(
    title=texts(
        "#productTitle",
        ".product-title-word-break",
        '[data-feature-name="title"]',
        "h1",
    ),
    price=(
        *texts(".a-price .a-offscreen"),
        AmazonSplitPrice(),
        *texts(
            "#priceblock_ourprice",
            "#priceblock_dealprice",
            ".priceToPay",
            ".a-price",
            '[data-a-color="price"] .a-offscreen',
            "#corePrice_feature_div .a-price",
        ),
    ),
    original_price=texts(
        ".a-text-price .a-offscreen",
        ".a-text-price",
        ".basisPrice .a-offscreen",
        '[data-a-strike="true"]',
        ".a-price.a-text-price",
    ),
    image=images(
        "#landingImage",
        "#imgBlkFront",
        "#main-image",
        "[data-old-hires]",
        '[data-a-image-name="landingImage"]',
        attrs=("data-old-hires", "src", "data-a-dynamic-image"),
    ),
    currency_signals=(PRICE_SYMBOL, HOSTNAME, PAGE_TEXT),
    default_currency="USD",
    match_image_alt_to_title=True,
)


class AmazonStrategy(SiteStrategy):
    """Amazon product detail page strategy."""

    shop_slug = "amazon"
    shop_name = "Amazon"
    domain = "amazon.com"
    table = AMAZON_SELECTORS

    def extract(self, document: PageDocument) -> Optional[RawCandidate]:
        # Bot-check interstitial served instead of the product page
        if document.select_one('form[action*="validateCaptcha"]') is not None:
            raise ExtractionError(self.shop_name, "captcha page served")
        return super().extract(document)
