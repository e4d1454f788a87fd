"""Flipkart product page strategy.

Flipkart ships hashed CSS class names (._30jeq3, .B_NuCI, ...) that rotate
between deployments, so after the known classes the chains fall back to
content scans: short rupee-prefixed text for the price and the largest
declared image for the picture. Prices are always in INR.
"""

from savecart.extraction.probes import LargestImage, ShortTextScan, images, texts
from savecart.extraction.strategies.site import SelectorTable, SiteStrategy


FLIPKART_SELECTORS = SelectorTable(
    title=texts(
        ".B_NuCI",
        "h1.yhB1nd",
        "span.B_NuCI",
        'h1[class*="title"]',
        "h1",
    ),
    price=(
        *texts(
            "._30jeq3._16Jk6d",
            "._30jeq3",
            ".aMaAEs",
            'div[class*="_30jeq3"]',
            'div[class*="price"]',
        ),
        ShortTextScan(r"₹\s*\d[\d,]*(?:\.\d+)?"),
        ShortTextScan(r"(?:₹|Rs\.?|INR)?\s*\d[\d,]*\.?\d*"),
    ),
    original_price=texts(
        "._3I9_wc._2p6lqe",
        "._3I9_wc",
        '[class*="striked"]',
    ),
    image=images(
        "._396cs4",
        "._2r_T1I",
        'img[class*="product-image"]',
        ".CXW8mj img",
    ),
    image_fallback=(LargestImage(min_size=100),),
    currency_signals=(),
    default_currency="INR",
    match_image_alt_to_title=True,
)


class FlipkartStrategy(SiteStrategy):
    """Flipkart product page strategy."""

    shop_slug = "flipkart"
    shop_name = "Flipkart"
    domain = "flipkart.com"
    table = FLIPKART_SELECTORS
