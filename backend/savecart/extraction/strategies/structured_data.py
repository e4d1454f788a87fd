"""Structured-data strategy: schema.org Product entities embedded in a page.

Reads JSON-LD blocks first, then microdata. Independent of the visual DOM,
so it keeps working through storefront redesigns as long as the shop
publishes product metadata.

JSON-LD shapes handled:
  - {"@type": "Product", ...}
  - [{"@type": "Product", ...}, ...]
  - {"@graph": [..., {"@type": ["Product", "Thing"], ...}]}
"""

import json
import math
from typing import Any, Dict, Iterator, List, Optional

from bs4 import Tag

from savecart.extraction.base import BaseStrategy, RawCandidate
from savecart.extraction.document import PageDocument
from savecart.extraction.utils.normalizer import normalize_price

DEFAULT_CURRENCY = "USD"


def _is_product(entity: Any) -> bool:
    if not isinstance(entity, dict):
        return False
    entity_type = entity.get("@type")
    if isinstance(entity_type, list):
        return "Product" in entity_type
    return entity_type == "Product"


def _iter_products(data: Any) -> Iterator[Dict[str, Any]]:
    """Yield Product entities from a parsed JSON-LD block in document order."""
    entities = data if isinstance(data, list) else [data]
    for entity in entities:
        if not isinstance(entity, dict):
            continue
        if _is_product(entity):
            yield entity
        graph = entity.get("@graph")
        if isinstance(graph, list):
            for item in graph:
                if _is_product(item):
                    yield item


def coerce_price(value: Any) -> Optional[float]:
    """Price given as a native number or as text.

    json.loads accepts NaN and Infinity literals; those and negative numbers
    are treated as no price.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            price = float(value)
        except OverflowError:
            return None
        if not math.isfinite(price) or price < 0:
            return None
        return price
    if isinstance(value, str):
        return normalize_price(value)
    return None


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _offer_price(offer: Dict[str, Any]) -> Optional[float]:
    price = coerce_price(offer.get("price"))
    if price is None:
        # AggregateOffer
        price = coerce_price(offer.get("lowPrice"))
    if price is None:
        price_spec = _first(offer.get("priceSpecification"))
        if isinstance(price_spec, dict):
            price = coerce_price(price_spec.get("price"))
    return price


def _image_url(value: Any) -> Optional[str]:
    value = _first(value)
    if isinstance(value, dict):
        # ImageObject
        value = value.get("url") or value.get("contentUrl")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class StructuredDataStrategy(BaseStrategy):
    """Product extraction from JSON-LD and microdata."""

    shop_slug = "structured_data"
    shop_name = "Structured data"
    strategy_type = "structured_data"

    def extract(self, document: PageDocument) -> Optional[RawCandidate]:
        """Return the first conforming Product entity, or None.

        An entity conforms when it has a name and an offer price. Blocks that
        fail to parse are skipped; they never abort the scan.
        """
        candidate = self._extract_json_ld(document)
        if candidate is None:
            candidate = self._extract_microdata(document)
        return candidate

    # ------------------------------------------------------------------
    # JSON-LD
    # ------------------------------------------------------------------

    def _extract_json_ld(self, document: PageDocument) -> Optional[RawCandidate]:
        blocks = document.soup.find_all("script", type="application/ld+json")
        for index, block in enumerate(blocks):
            raw = block.string if block.string is not None else block.get_text()
            try:
                data = json.loads(raw)
            except (TypeError, ValueError) as e:
                self.logger.debug("json_ld_parse_failed", block=index, error=str(e))
                continue

            for entity in _iter_products(data):
                candidate = self._candidate_from_entity(document, entity)
                if candidate is not None:
                    self.logger.debug("json_ld_product_found", block=index)
                    return candidate
        return None

    def _candidate_from_entity(
        self, document: PageDocument, entity: Dict[str, Any]
    ) -> Optional[RawCandidate]:
        name = entity.get("name")
        if not isinstance(name, str) or not name.strip():
            return None

        offer = _first(entity.get("offers"))
        if not isinstance(offer, dict):
            return None

        price = _offer_price(offer)
        if price is None:
            self.logger.debug("json_ld_offer_without_price", name=name[:80])
            return None

        currency = offer.get("priceCurrency")
        if not isinstance(currency, str) or not currency.strip():
            currency = DEFAULT_CURRENCY

        return RawCandidate(
            title=" ".join(name.split()),
            current_price=price,
            original_price=None,
            image_url=document.resolve_url(_image_url(entity.get("image"))),
            currency=currency.strip(),
        )

    # ------------------------------------------------------------------
    # Microdata
    # ------------------------------------------------------------------

    def _extract_microdata(self, document: PageDocument) -> Optional[RawCandidate]:
        for scope in document.select('[itemscope][itemtype*="schema.org/Product"]'):
            name = _microdata_value(_own_props(scope, "name"))
            price_text = _microdata_value(scope.select('[itemprop="price"]'))
            price = normalize_price(price_text)
            if not name or price is None:
                continue

            currency = _microdata_value(scope.select('[itemprop="priceCurrency"]'))
            image = None
            for element in _own_props(scope, "image"):
                image = element.get("src") or element.get("content") or element.get("href")
                if image:
                    break

            self.logger.debug("microdata_product_found", name=name[:80])
            return RawCandidate(
                title=name,
                current_price=price,
                original_price=None,
                image_url=document.resolve_url(image),
                currency=currency or DEFAULT_CURRENCY,
            )
        return None


def _own_props(scope: Tag, prop: str) -> List[Tag]:
    """Properties of this item only, skipping those of nested items (brand, offers...)."""
    found = []
    for element in scope.find_all(attrs={"itemprop": prop}):
        owner = element.find_parent(attrs={"itemscope": True})
        if owner is scope:
            found.append(element)
    return found


def _microdata_value(elements: List[Tag]) -> Optional[str]:
    for element in elements:
        value = element.get("content") or element.get_text()
        value = " ".join(str(value).split())
        if value:
            return value
    return None
