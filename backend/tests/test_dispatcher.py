"""Tests for the strategy registry and the extraction dispatcher."""

import json

import pytest
from jsonschema import ValidationError, validate

from savecart.core.exceptions import ExtractionError
from savecart.extraction.base import BaseStrategy, ExtractedProduct, RawCandidate
from savecart.extraction.dispatcher import ProductExtractor
from savecart.extraction.register_strategies import DEFAULT_SITE_STRATEGIES, build_registry
from savecart.extraction.registry import StrategyRegistry
from savecart.extraction.strategies import (
    AmazonStrategy,
    BestBuyStrategy,
    GenericStrategy,
    StructuredDataStrategy,
)


PRODUCT_MESSAGE_SCHEMA = {
    "type": "object",
    "required": [
        "title", "currentPrice", "originalPrice", "imageUrl", "currency", "store", "productUrl",
    ],
    "additionalProperties": False,
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "currentPrice": {"type": ["number", "null"]},
        "originalPrice": {"type": ["number", "null"]},
        "imageUrl": {"type": ["string", "null"]},
        "currency": {"type": "string"},
        "store": {"type": "string"},
        "productUrl": {"type": "string"},
    },
}


class FixedStrategy(BaseStrategy):
    shop_slug = "fixed"
    shop_name = "Fixed"
    strategy_type = "test"

    def __init__(self, candidate=None, error=None):
        super().__init__()
        self.candidate = candidate
        self.error = error
        self.calls = 0

    def extract(self, document):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.candidate


# ============================================================================
# TESTS: REGISTRY
# ============================================================================

class TestStrategyRegistry:
    """Tests for StrategyRegistry and build_registry."""

    def test_default_domain_order(self, extractor):
        assert extractor.registry.domains == (
            "amazon.com",
            "ebay.com",
            "walmart.com",
            "bestbuy.com",
            "target.com",
            "newegg.com",
            "flipkart.com",
        )

    def test_substring_match(self, extractor):
        assert isinstance(extractor.registry.match("www.amazon.com"), AmazonStrategy)
        assert isinstance(extractor.registry.match("smile.amazon.com"), AmazonStrategy)
        assert isinstance(extractor.registry.match("WWW.BESTBUY.COM"), BestBuyStrategy)

    def test_no_match(self, extractor):
        assert extractor.registry.match("www.example.com") is None
        assert extractor.registry.match("") is None
        assert extractor.registry.match(None) is None

    def test_first_entry_wins(self):
        first, second = FixedStrategy(), FixedStrategy()
        registry = StrategyRegistry(
            entries=(("shop.com", first), ("myshop.com", second)),
            structured_data=StructuredDataStrategy(),
            generic=GenericStrategy(),
        )
        assert registry.match("www.myshop.com") is first

    def test_duplicate_domain_rejected(self):
        with pytest.raises(ValueError, match="Duplicate domain"):
            StrategyRegistry(
                entries=(("amazon.com", FixedStrategy()), ("amazon.com", FixedStrategy())),
                structured_data=StructuredDataStrategy(),
                generic=GenericStrategy(),
            )

    def test_registry_is_immutable(self, extractor):
        with pytest.raises(Exception):
            extractor.registry.entries = ()

    def test_build_registry_rejects_non_site_strategy(self):
        with pytest.raises(ValueError, match="must inherit from SiteStrategy"):
            build_registry([StructuredDataStrategy])

    def test_build_registry_size(self):
        assert len(build_registry(DEFAULT_SITE_STRATEGIES)) == 7


# ============================================================================
# TESTS: DISPATCH
# ============================================================================

class TestProductExtractor:
    """Tests for ProductExtractor.extract_product_info."""

    def test_known_storefront(self, extractor, make_document, amazon_html):
        url = "https://www.amazon.com/dp/B09B8V1LZ3?ref_=nav"
        product = extractor.extract_product_info(make_document(amazon_html, url))

        assert product.title == "Echo Dot (5th Gen) Smart Speaker"
        assert product.current_price == 49.99
        assert product.original_price == 59.99
        assert product.currency == "USD"
        assert product.store == "Amazon"
        assert product.product_url == url
        assert product.is_usable

    def test_domain_match_is_final(self, extractor, make_document):
        """A recognised storefront without a title is not a product page,
        even when structured data would have produced a result."""
        html = """
        <script type="application/ld+json">
          {"@type": "Product", "name": "Hidden", "offers": {"price": 5}}
        </script>
        <span class="a-price"><span class="a-offscreen">$5.00</span></span>
        """
        doc = make_document(html, "https://www.amazon.com/gp/browse")
        assert extractor.extract_product_info(doc) is None

    def test_fallback_tiers_not_invoked_for_recognised_domain(self, make_document):
        site = FixedStrategy(candidate=None)
        structured = FixedStrategy(candidate=RawCandidate(title="SD", current_price=1.0))
        generic = FixedStrategy(candidate=RawCandidate(title="G", current_price=1.0))
        registry = StrategyRegistry(
            entries=(("amazon.com", site),), structured_data=structured, generic=generic
        )
        result = ProductExtractor(registry).extract_product_info(
            make_document("<h1>x</h1>", "https://www.amazon.com/dp/1")
        )

        assert result is None
        assert site.calls == 1
        assert structured.calls == 0
        assert generic.calls == 0

    def test_structured_data_preferred_over_generic(self, extractor, make_document):
        html = """
        <script type="application/ld+json">
          {"@type": "Product", "name": "Widget Pro", "offers": {"price": "24.00", "priceCurrency": "EUR"}}
        </script>
        <h1>Totally Different Heading</h1>
        <span class="price">$99.00</span>
        """
        product = extractor.extract_product_info(make_document(html, "https://example.com/w"))
        assert product.title == "Widget Pro"
        assert product.current_price == 24.0
        assert product.currency == "EUR"

    @pytest.mark.parametrize("literal", ["-5", "NaN", "1e999"])
    def test_invalid_structured_price_falls_back_to_generic(self, extractor, make_document, literal):
        html = (
            '<script type="application/ld+json">'
            f'{{"@type": "Product", "name": "Widget Pro", "offers": {{"price": {literal}}}}}'
            "</script>"
            '<h1>Widget</h1><span class="price">$19.99</span>'
        )
        product = extractor.extract_product_info(make_document(html, "https://example.com/w"))
        assert product.title == "Widget"
        assert product.current_price == 19.99

    def test_generic_fallback(self, extractor, make_document, generic_html):
        product = extractor.extract_product_info(make_document(generic_html, "https://shop.example.org/lamp"))
        assert product.title == "Brass Desk Lamp"
        assert product.current_price == 35.0
        assert product.store == "Example"
        assert product.image_url == "https://shop.example.org/media/lamp.jpg"

    def test_widget_end_to_end(self, extractor, make_document, widget_html):
        url = "https://example.com/products/widget"
        product = extractor.extract_product_info(make_document(widget_html, url))

        assert product.to_message() == {
            "title": "Widget",
            "currentPrice": 19.99,
            "originalPrice": None,
            "imageUrl": None,
            "currency": "USD",
            "store": "Example",
            "productUrl": url,
        }

    def test_nothing_found(self, extractor, make_document):
        doc = make_document("<p>Just a blog post.</p>", "https://blog.example.net/post")
        assert extractor.extract_product_info(doc) is None

    def test_priceless_record_is_returned_but_unusable(self, extractor, make_document):
        product = extractor.extract_product_info(make_document("<h1>Coming Soon</h1>"))
        assert product.title == "Coming Soon"
        assert product.current_price is None
        assert product.is_usable is False

    def test_strategy_exception_yields_none(self, make_document):
        broken = FixedStrategy(error=RuntimeError("boom"))
        registry = StrategyRegistry(
            entries=(("broken.example", broken),),
            structured_data=StructuredDataStrategy(),
            generic=GenericStrategy(),
        )
        extractor = ProductExtractor(registry)
        doc = make_document("<h1>Thing</h1>", "https://www.broken.example/p/1")

        assert extractor.extract_product_info(doc) is None
        # Still usable afterwards
        assert extractor.extract_product_info(doc) is None
        assert broken.calls == 2

    def test_extraction_error_yields_none(self, extractor, make_document):
        html = '<form action="/errors/validateCaptcha"></form><h1>Robot Check</h1>'
        doc = make_document(html, "https://www.amazon.com/dp/X")
        assert extractor.extract_product_info(doc) is None

    def test_fallback_exception_moves_to_generic(self, make_document):
        structured = FixedStrategy(error=ExtractionError("Structured data", "bad"))
        registry = StrategyRegistry(entries=(), structured_data=structured, generic=GenericStrategy())
        product = ProductExtractor(registry).extract_product_info(
            make_document("<h1>Fallback</h1><span class='price'>$2</span>")
        )
        assert product.title == "Fallback"

    def test_idempotent(self, extractor, make_document, amazon_html):
        doc = make_document(amazon_html, "https://www.amazon.com/dp/B09B8V1LZ3")
        assert extractor.extract_product_info(doc) == extractor.extract_product_info(doc)


# ============================================================================
# TESTS: ORIGINAL-PRICE GUARD
# ============================================================================

class TestOriginalPriceGuard:
    """Original price is kept only when strictly above the current price."""

    @pytest.mark.parametrize(
        "current,original,expected",
        [
            (19.99, 29.99, 29.99),
            (19.99, 19.99, None),
            (19.99, 9.99, None),
            (None, 29.99, None),
            (19.99, None, None),
        ],
    )
    def test_guard_applied_by_dispatcher(self, make_document, current, original, expected):
        candidate = RawCandidate(title="Item", current_price=current, original_price=original)
        registry = StrategyRegistry(
            entries=(("shop.test", FixedStrategy(candidate=candidate)),),
            structured_data=StructuredDataStrategy(),
            generic=GenericStrategy(),
        )
        product = ProductExtractor(registry).extract_product_info(
            make_document("", "https://www.shop.test/item")
        )
        assert product.original_price == expected
        assert product.current_price == current

    def test_equal_strikethrough_on_storefront_page(self, extractor, make_document):
        html = """
        <span id="productTitle">Same Price</span>
        <span class="a-price"><span class="a-offscreen">$10.00</span></span>
        <span class="a-text-price"><span class="a-offscreen">$10.00</span></span>
        """
        product = extractor.extract_product_info(make_document(html, "https://www.amazon.com/dp/Y"))
        assert product.original_price is None

    def test_record_rejects_unguarded_original_price(self):
        with pytest.raises(ValueError, match="original_price must be greater"):
            ExtractedProduct(
                title="Bad",
                current_price=10.0,
                original_price=5.0,
                image_url=None,
                currency="USD",
                store="Example",
                product_url="https://example.com",
            )

    @pytest.mark.parametrize("price", [float("nan"), float("inf"), -5.0])
    def test_record_rejects_invalid_current_price(self, price):
        with pytest.raises(ValueError, match="finite non-negative"):
            ExtractedProduct(
                title="Bad",
                current_price=price,
                original_price=None,
                image_url=None,
                currency="USD",
                store="Example",
                product_url="https://example.com/p",
            )


# ============================================================================
# TESTS: WIRE MESSAGE
# ============================================================================

class TestProductMessage:
    """Tests for the JSON message sent to the popup / backend."""

    def test_message_matches_schema(self, extractor, make_document, amazon_html):
        product = extractor.extract_product_info(
            make_document(amazon_html, "https://www.amazon.com/dp/B09B8V1LZ3")
        )
        message = product.to_message()

        validate(instance=message, schema=PRODUCT_MESSAGE_SCHEMA)
        json.dumps(message)

    def test_partial_message_matches_schema(self, extractor, make_document):
        product = extractor.extract_product_info(make_document("<h1>Coming Soon</h1>"))
        validate(instance=product.to_message(), schema=PRODUCT_MESSAGE_SCHEMA)

    def test_snake_case_keys_rejected(self):
        with pytest.raises(ValidationError):
            validate(
                instance={"title": "x", "current_price": 1.0},
                schema=PRODUCT_MESSAGE_SCHEMA,
            )

