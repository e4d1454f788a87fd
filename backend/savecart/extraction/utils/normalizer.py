"""Data normalization utilities for price parsing and currency inference."""

import math
import re
from typing import Optional
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse


# First run of digits/commas/periods. A leading period counts unless a letter
# precedes it ("$.99" -> ".99", "Rs.499" -> "499")
_PRICE_RUN = re.compile(r"(?<![A-Za-z])\.?\d[\d,.]*")

# Longest leading float literal of a comma-free run ("1299." -> "1299.")
_FLOAT_PREFIX = re.compile(r"\d+(?:\.\d*)?|\.\d+")

# Checked in order, first hit wins
CURRENCY_SYMBOLS = (
    ("₹", "INR"),
    ("Rs.", "INR"),
    ("INR", "INR"),
    ("€", "EUR"),
    ("£", "GBP"),
    ("$", "USD"),
)

# Hostname suffix -> currency
HOSTNAME_CURRENCIES = {
    ".in": "INR",
    ".uk": "GBP",
    ".de": "EUR",
    ".fr": "EUR",
    ".it": "EUR",
    ".es": "EUR",
    ".nl": "EUR",
    ".ie": "EUR",
    ".be": "EUR",
    ".at": "EUR",
}

CURRENCY_DISPLAY_SYMBOLS = {
    "USD": "$",
    "INR": "₹",
    "EUR": "€",
    "GBP": "£",
}

# Common tracking parameters to remove
TRACKING_PARAMS = frozenset([
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "ref",
    "ref_",
    "source",
    "fbclid",
    "gclid",
    "mc_cid",
    "mc_eid",
])


def normalize_price(raw: Optional[str]) -> Optional[float]:
    """Parse a raw price string and extract its numeric value.

    Only the first run of digits, commas and periods is considered; every
    character except digits and the decimal point is stripped from it.

    Handles formats like:
    - "$1,234.56" -> 1234.56
    - "₹999" -> 999.0
    - "US $19.99 each" -> 19.99
    - "1,299." -> 1299.0

    European "1.234,56" is not special-cased and parses as 1.23456.

    Args:
        raw: Raw price text, possibly with symbols and surrounding words

    Returns:
        Float price value, or None if no digits are present
    """
    if not raw:
        return None

    match = _PRICE_RUN.search(raw)
    if not match:
        return None

    cleaned = re.sub(r"[^\d.]", "", match.group(0))
    literal = _FLOAT_PREFIX.match(cleaned)
    if not literal:
        return None

    value = float(literal.group(0))
    if not math.isfinite(value):
        return None
    return value


def currency_from_symbol(text: Optional[str]) -> Optional[str]:
    """Return the currency code of the first known symbol found in text."""
    if not text:
        return None
    for symbol, code in CURRENCY_SYMBOLS:
        if symbol in text:
            return code
    return None


def currency_from_hostname(hostname: Optional[str]) -> Optional[str]:
    """Infer a currency from the storefront's top-level domain.

    Args:
        hostname: Page hostname (e.g., "www.amazon.co.uk")

    Returns:
        Currency code, or None when the TLD carries no signal
    """
    if not hostname:
        return None
    hostname = hostname.lower().rstrip(".")
    for suffix, code in HOSTNAME_CURRENCIES.items():
        if hostname.endswith(suffix):
            return code
    return None


def format_price(price: Optional[float], currency: str = "USD") -> str:
    """Render a price for display.

    Args:
        price: Numeric price, or None
        currency: ISO 4217 code

    Returns:
        String such as "$19.99" or "₹1,299.00"; "Price unavailable" for None
    """
    if price is None:
        return "Price unavailable"
    symbol = CURRENCY_DISPLAY_SYMBOLS.get(currency.upper())
    if symbol is None:
        return f"{currency.upper()} {price:,.2f}"
    return f"{symbol}{price:,.2f}"


def normalize_url(url: str) -> str:
    """Normalize a URL by removing tracking parameters and the fragment.

    Args:
        url: URL to normalize

    Returns:
        Normalized URL
    """
    if not url:
        return url

    parsed = urlparse(url)
    query_params = parse_qs(parsed.query, keep_blank_values=True)

    # Remove tracking parameters
    filtered_params = {
        k: v for k, v in query_params.items() if k not in TRACKING_PARAMS
    }

    new_query = urlencode(filtered_params, doseq=True)

    return urlunparse(
        (parsed.scheme, parsed.netloc.lower(), parsed.path, parsed.params, new_query, "")
    )


# Two-label public suffixes; the store label sits in front of them
COMPOUND_SUFFIXES = frozenset([
    "co.uk",
    "com.au",
    "co.in",
    "co.jp",
    "com.mx",
    "com.br",
    "co.nz",
    "com.sg",
])


def store_name_from_hostname(hostname: Optional[str]) -> str:
    """Derive a display store name from a page hostname.

    Takes the label in front of the public suffix and capitalizes it:
    - "www.amazon.com" -> "Amazon"
    - "www.amazon.co.uk" -> "Amazon"
    - "shop.example.com" -> "Example"

    Args:
        hostname: Page hostname

    Returns:
        Store name, or "Unknown" for an empty hostname
    """
    labels = [label for label in (hostname or "").lower().strip(".").split(".") if label]
    if not labels:
        return "Unknown"
    if len(labels) >= 3 and ".".join(labels[-2:]) in COMPOUND_SUFFIXES:
        labels = labels[:-2]
    elif len(labels) >= 2:
        labels = labels[:-1]
    return labels[-1].capitalize()
