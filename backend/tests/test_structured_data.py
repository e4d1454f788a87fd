"""Tests for the JSON-LD / microdata strategy."""

import json

import pytest

from savecart.extraction.strategies.structured_data import StructuredDataStrategy, coerce_price


def ld_json(data) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


@pytest.fixture
def strategy() -> StructuredDataStrategy:
    return StructuredDataStrategy()


class TestJsonLd:
    """Tests for JSON-LD Product entities."""

    def test_top_level_product(self, make_document, strategy):
        html = ld_json({
            "@context": "https://schema.org",
            "@type": "Product",
            "name": "Widget",
            "image": "https://cdn.example.com/widget.jpg",
            "offers": {"@type": "Offer", "price": 19.99, "priceCurrency": "USD"},
        })
        candidate = strategy.extract(make_document(html))

        assert candidate.title == "Widget"
        assert candidate.current_price == 19.99
        assert candidate.original_price is None
        assert candidate.image_url == "https://cdn.example.com/widget.jpg"
        assert candidate.currency == "USD"

    def test_product_inside_graph(self, make_document, strategy):
        html = ld_json({
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "BreadcrumbList", "itemListElement": []},
                {
                    "@type": ["Product", "IndividualProduct"],
                    "name": "Graph Chair",
                    "offers": [
                        {"@type": "Offer", "price": "149.00", "priceCurrency": "EUR"},
                        {"@type": "Offer", "price": "99.00", "priceCurrency": "EUR"},
                    ],
                },
            ],
        })
        candidate = strategy.extract(make_document(html))

        assert candidate.title == "Graph Chair"
        assert candidate.current_price == 149.0
        assert candidate.currency == "EUR"

    def test_top_level_list(self, make_document, strategy):
        html = ld_json([
            {"@type": "Organization", "name": "Shop"},
            {"@type": "Product", "name": "Listed", "offers": {"price": "5"}},
        ])
        candidate = strategy.extract(make_document(html))
        assert candidate.title == "Listed"
        assert candidate.current_price == 5.0

    def test_string_price_normalized(self, make_document, strategy):
        html = ld_json({"@type": "Product", "name": "Rug", "offers": {"price": "$1,250.00"}})
        assert strategy.extract(make_document(html)).current_price == 1250.0

    def test_aggregate_offer_low_price(self, make_document, strategy):
        html = ld_json({
            "@type": "Product",
            "name": "Sneaker",
            "offers": {"@type": "AggregateOffer", "lowPrice": 59.5, "highPrice": 80, "priceCurrency": "GBP"},
        })
        candidate = strategy.extract(make_document(html))
        assert candidate.current_price == 59.5
        assert candidate.currency == "GBP"

    def test_price_specification(self, make_document, strategy):
        html = ld_json({
            "@type": "Product",
            "name": "Bundle",
            "offers": {"priceSpecification": {"price": 12, "priceCurrency": "USD"}},
        })
        assert strategy.extract(make_document(html)).current_price == 12.0

    def test_currency_defaults_to_usd(self, make_document, strategy):
        html = ld_json({"@type": "Product", "name": "Plain", "offers": {"price": 3}})
        assert strategy.extract(make_document(html)).currency == "USD"

    def test_image_object_and_relative_url(self, make_document, strategy):
        html = ld_json({
            "@type": "Product",
            "name": "Pic",
            "image": [{"@type": "ImageObject", "url": "/img/pic.jpg"}],
            "offers": {"price": 1},
        })
        doc = make_document(html, "https://shop.example.com/p/pic")
        assert strategy.extract(doc).image_url == "https://shop.example.com/img/pic.jpg"

    def test_malformed_block_skipped(self, make_document, strategy):
        html = (
            '<script type="application/ld+json">{"@type": "Product", "name": </script>'
            + ld_json({"@type": "Product", "name": "Second Block", "offers": {"price": 7}})
        )
        candidate = strategy.extract(make_document(html))
        assert candidate.title == "Second Block"

    def test_entity_without_price_skipped(self, make_document, strategy):
        html = ld_json({"@type": "Product", "name": "No Offer"}) + ld_json(
            {"@type": "Product", "name": "Priced", "offers": {"price": 10}}
        )
        assert strategy.extract(make_document(html)).title == "Priced"

    @pytest.mark.parametrize("price", [float("nan"), float("inf"), -5])
    def test_entity_with_invalid_price_skipped(self, make_document, strategy, price):
        html = ld_json({"@type": "Product", "name": "Broken", "offers": {"price": price}})
        assert strategy.extract(make_document(html)) is None

    def test_invalid_price_falls_through_to_next_entity(self, make_document, strategy):
        html = ld_json({"@type": "Product", "name": "Broken", "offers": {"price": float("nan")}}) + ld_json(
            {"@type": "Product", "name": "Priced", "offers": {"price": 10}}
        )
        candidate = strategy.extract(make_document(html))
        assert candidate.title == "Priced"
        assert candidate.current_price == 10.0

    def test_overflowing_price_literal_skipped(self, make_document, strategy):
        html = '<script type="application/ld+json">{"@type": "Product", "name": "Huge", "offers": {"price": 1e999}}</script>'
        assert strategy.extract(make_document(html)) is None

    def test_entity_without_name_skipped(self, make_document, strategy):
        html = ld_json({"@type": "Product", "offers": {"price": 10}})
        assert strategy.extract(make_document(html)) is None

    def test_first_entity_in_document_order(self, make_document, strategy):
        html = ld_json({"@type": "Product", "name": "First", "offers": {"price": 1}}) + ld_json(
            {"@type": "Product", "name": "Second", "offers": {"price": 2}}
        )
        assert strategy.extract(make_document(html)).title == "First"

    def test_non_product_types_ignored(self, make_document, strategy):
        html = ld_json({"@type": "WebPage", "name": "About us", "offers": {"price": 1}})
        assert strategy.extract(make_document(html)) is None

    def test_no_structured_data(self, make_document, strategy):
        assert strategy.extract(make_document("<h1>Plain page</h1>")) is None


class TestMicrodata:
    """Tests for schema.org microdata."""

    def test_product_scope(self, make_document, strategy):
        html = """
        <div itemscope itemtype="https://schema.org/Product">
          <span itemprop="name">Trail Runner 2</span>
          <img itemprop="image" src="/img/shoe.jpg">
          <div itemprop="brand" itemscope itemtype="https://schema.org/Brand">
            <span itemprop="name">Acme</span>
          </div>
          <div itemprop="offers" itemscope itemtype="https://schema.org/Offer">
            <meta itemprop="priceCurrency" content="EUR">
            <span itemprop="price" content="89.90">89,90 €</span>
          </div>
        </div>
        """
        candidate = strategy.extract(make_document(html, "https://www.laufshop.de/p/trail"))

        assert candidate.title == "Trail Runner 2"
        assert candidate.current_price == 89.9
        assert candidate.currency == "EUR"
        assert candidate.image_url == "https://www.laufshop.de/img/shoe.jpg"

    def test_json_ld_preferred_over_microdata(self, make_document, strategy):
        html = """
        <div itemscope itemtype="https://schema.org/Product">
          <span itemprop="name">From Microdata</span>
          <span itemprop="price">1.00</span>
        </div>
        """ + ld_json({"@type": "Product", "name": "From JSON-LD", "offers": {"price": 2}})
        assert strategy.extract(make_document(html)).title == "From JSON-LD"

    def test_scope_without_price_skipped(self, make_document, strategy):
        html = """
        <div itemscope itemtype="https://schema.org/Product"><span itemprop="name">Nameless price</span></div>
        """
        assert strategy.extract(make_document(html)) is None


class TestCoercePrice:
    """Tests for coerce_price."""

    @pytest.mark.parametrize(
        "value,expected",
        [(19.99, 19.99), (20, 20.0), ("20.50", 20.5), ("USD 7", 7.0), (True, None), (None, None), ({}, None),
         (float("nan"), None), (float("inf"), None), (float("-inf"), None), (-5, None), (0, 0.0)],
    )
    def test_coerce(self, value, expected):
        assert coerce_price(value) == expected
