"""Pytest configuration and shared fixtures."""

import pytest

from savecart.config import Settings
from savecart.extraction.dispatcher import ProductExtractor
from savecart.extraction.document import PageDocument
from savecart.extraction.register_strategies import build_default_registry


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest.fixture
def make_document():
    """Build a PageDocument from markup and a URL."""

    def _make(html: str, url: str = "https://shop.example.com/product/1") -> PageDocument:
        return PageDocument.from_html(html, url)

    return _make


@pytest.fixture
def extractor() -> ProductExtractor:
    """Extractor over the default storefront registry."""
    return ProductExtractor(build_default_registry())


@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults, independent of any local .env file."""
    return Settings(
        _env_file=None,
        AUTO_DETECT_PRODUCTS=True,
        AUTO_DETECT_KNOWN_STORES_ONLY=False,
        PUSH_NOTIFICATIONS=True,
        PRICE_DROP_THRESHOLD=5.0,
        NOTIFICATION_TITLE_MAX_LENGTH=80,
    )


# ============================================================================
# HTML FIXTURES
# ============================================================================

@pytest.fixture
def amazon_html() -> str:
    return """
    <html><body>
      <div id="dp">
        <h1><span id="productTitle">  Echo Dot (5th Gen) Smart Speaker  </span></h1>
        <div id="corePrice_feature_div">
          <span class="a-price"><span class="a-offscreen">$49.99</span></span>
          <span class="a-price a-text-price" data-a-strike="true">
            <span class="a-offscreen">$59.99</span>
          </span>
        </div>
        <img id="landingImage"
             src="https://m.media-amazon.com/images/I/small.jpg"
             data-old-hires="https://m.media-amazon.com/images/I/hires.jpg"
             alt="Echo Dot (5th Gen) Smart Speaker">
        <input type="submit" id="add-to-cart-button" value="Add to Cart">
      </div>
    </body></html>
    """


@pytest.fixture
def widget_html() -> str:
    """Unrecognised storefront page with both JSON-LD and visible markup."""
    return """
    <html>
      <head>
        <script type="application/ld+json">
          {"@context": "https://schema.org", "@type": "Product", "name": "Widget",
           "offers": {"@type": "Offer", "price": 19.99, "priceCurrency": "USD"}}
        </script>
      </head>
      <body>
        <h1>Widget</h1>
        <span class="price">$19.99</span>
        <s class="was-price">$29.99</s>
        <button class="add-to-cart">Add to cart</button>
      </body>
    </html>
    """


@pytest.fixture
def generic_html() -> str:
    """Unrecognised storefront page without structured data."""
    return """
    <html><body>
      <div class="product">
        <h1 class="title">Brass Desk Lamp</h1>
        <div class="product-image"><img src="/media/lamp.jpg" alt="lamp"></div>
        <span class="price">$35.00</span>
        <button class="add-to-cart">Add to cart</button>
      </div>
    </body></html>
    """
