"""Selector-table driven strategy shared by every known storefront.

A storefront is described entirely by a SelectorTable: ordered probe chains
per field plus its currency rules. SiteStrategy runs the table:

    title (required) -> price -> original price -> image -> currency

Adding a storefront means adding a table and a thin subclass carrying its
domain, not new control flow.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from savecart.extraction.base import BaseStrategy, RawCandidate
from savecart.extraction.document import PageDocument
from savecart.extraction.probes import ImageWithAlt, Probe, first_match
from savecart.extraction.utils.normalizer import (
    currency_from_hostname,
    currency_from_symbol,
    normalize_price,
)

# Currency signals, evaluated in the order listed on a table
PRICE_SYMBOL = "price_symbol"  # symbol inside the matched price text
HOSTNAME = "hostname"  # top-level domain of the page
PAGE_TEXT = "page_text"  # symbol glyphs anywhere in the page body

_VALID_SIGNALS = frozenset([PRICE_SYMBOL, HOSTNAME, PAGE_TEXT])


@dataclass(frozen=True)
class SelectorTable:
    """Ordered probe chains and currency rules for one storefront."""

    title: Tuple[Probe, ...]
    price: Tuple[Probe, ...] = ()
    original_price: Tuple[Probe, ...] = ()
    image: Tuple[Probe, ...] = ()
    image_fallback: Tuple[Probe, ...] = ()  # tried after the alt-text match
    currency_signals: Tuple[str, ...] = (PRICE_SYMBOL,)
    default_currency: str = "USD"
    match_image_alt_to_title: bool = False

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.title:
            raise ValueError("a selector table needs at least one title probe")
        unknown = set(self.currency_signals) - _VALID_SIGNALS
        if unknown:
            raise ValueError(f"Invalid currency signals: {sorted(unknown)}")


def infer_currency(
    table: SelectorTable, price_text: Optional[str], document: PageDocument
) -> str:
    """Pick a currency using the table's signals, then its fixed default.

    Args:
        table: Storefront selector table
        price_text: Raw text the current price was read from
        document: Parsed page

    Returns:
        ISO 4217 currency code
    """
    for signal in table.currency_signals:
        if signal == PRICE_SYMBOL:
            currency = currency_from_symbol(price_text)
        elif signal == HOSTNAME:
            currency = currency_from_hostname(document.hostname)
        else:
            currency = currency_from_symbol(document.text)
        if currency:
            return currency
    return table.default_currency


class SiteStrategy(BaseStrategy):
    """Runs a SelectorTable against a page."""

    strategy_type = "site"
    domain: str = ""  # Matched as a substring of the page hostname
    table: SelectorTable

    def extract(self, document: PageDocument) -> Optional[RawCandidate]:
        """Extract a product candidate using this storefront's table.

        Returns None as soon as the title chain is exhausted; a missing price
        or image only leaves that field empty.
        """
        title = first_match(self.table.title, document)
        if not title:
            self.logger.debug("title_not_found", url=document.url)
            return None

        price_text = first_match(self.table.price, document)
        current_price = normalize_price(price_text)
        if current_price is None:
            self.logger.debug("price_not_found", url=document.url, price_text=price_text)

        original_price = normalize_price(
            first_match(self.table.original_price, document)
        )

        image_probes = self.table.image
        if self.table.match_image_alt_to_title:
            image_probes = image_probes + (ImageWithAlt(title),)
        image_probes = image_probes + self.table.image_fallback
        image_url = first_match(image_probes, document)

        currency = infer_currency(self.table, price_text, document)

        candidate = RawCandidate(
            title=title,
            current_price=current_price,
            original_price=original_price,
            image_url=image_url,
            currency=currency,
        )
        self.logger.debug(
            "candidate_extracted",
            title=title[:80],
            current_price=current_price,
            original_price=original_price,
            currency=currency,
            has_image=image_url is not None,
        )
        return candidate
