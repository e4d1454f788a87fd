"""Product-page heuristic gate for the automatic detection flow.

A page passes when it shows something price-shaped AND either something
title-shaped or an add-to-cart control. Explicit user-triggered extraction
never consults the gate.
"""

import structlog

from savecart.extraction.document import PageDocument

logger = structlog.get_logger(__name__)


PRICE_SELECTORS = ", ".join([
    "[data-price]",
    ".price",
    ".product-price",
    '[itemprop="price"]',
    ".a-price",
    '[data-test="product-price"]',
])

TITLE_SELECTORS = ", ".join([
    '[itemprop="name"]',
    ".product-title",
    ".product-name",
    "h1.title",
    "#productTitle",
    '[data-test="product-title"]',
])

ADD_TO_CART_SELECTORS = ", ".join([
    'button[data-action="add-to-cart"]',
    ".add-to-cart",
    "#add-to-cart",
    '[id*="ddToCart"]',
    '[id*="addToCart"]',
    "#add-to-cart-button",
])


def _has(document: PageDocument, selector: str) -> bool:
    return document.select_one(selector) is not None


def is_product_page(document: PageDocument) -> bool:
    """Decide whether a page looks like a single-product page.

    Args:
        document: Parsed page

    Returns:
        True if a price element exists and a title or add-to-cart control exists
    """
    has_price = _has(document, PRICE_SELECTORS)
    has_title = _has(document, TITLE_SELECTORS)
    has_add_to_cart = _has(document, ADD_TO_CART_SELECTORS)

    result = has_price and (has_title or has_add_to_cart)
    logger.debug(
        "product_page_checked",
        url=document.url,
        has_price=has_price,
        has_title=has_title,
        has_add_to_cart=has_add_to_cart,
        is_product_page=result,
    )
    return result
