"""Selector probes: small, ordered, exception-safe field readers.

A probe takes a PageDocument and returns a non-empty string or None.
"Selector absent" and "selector raised" are both plain None results, so a
chain of probes can be evaluated in order with the first hit winning.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence, Tuple

import structlog
from bs4 import Tag

from savecart.extraction.document import PageDocument

logger = structlog.get_logger(__name__)

DEFAULT_IMAGE_ATTRS = ("src", "data-src")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = " ".join(value.split())
    return value or None


class Probe(ABC):
    """Base class for all probes."""

    def __call__(self, document: PageDocument) -> Optional[str]:
        try:
            return _clean(self.probe(document))
        except Exception as e:
            logger.debug("probe_failed", probe=repr(self), error=str(e))
            return None

    @abstractmethod
    def probe(self, document: PageDocument) -> Optional[str]:
        """Read a raw value from the document; may raise."""
        pass


class Text(Probe):
    """Text content of the first element matching a CSS selector.

    Falls back to attribute values (``content`` by default) so that
    ``<meta itemprop="price" content="19.99">`` style markup also reads.
    """

    def __init__(self, selector: str, fallback_attrs: Sequence[str] = ("content",)):
        self.selector = selector
        self.fallback_attrs = tuple(fallback_attrs)

    def probe(self, document: PageDocument) -> Optional[str]:
        element = document.select_one(self.selector)
        if element is None:
            return None
        text = _clean(element.get_text())
        if text:
            return text
        for attr in self.fallback_attrs:
            value = _clean(element.get(attr))
            if value:
                return value
        return None

    def __repr__(self) -> str:
        return f"Text({self.selector!r})"


def _attribute_url(element: Tag, attr: str) -> Optional[str]:
    value = element.get(attr)
    if isinstance(value, list):
        value = " ".join(value)
    value = _clean(value)
    if not value:
        return None
    if attr == "data-a-dynamic-image":
        # JSON object keyed by image URL
        try:
            urls = json.loads(value)
        except ValueError:
            return None
        if not isinstance(urls, dict) or not urls:
            return None
        value = next(iter(urls))
    if attr == "srcset":
        value = value.split(",")[0].split()[0]
    if value.startswith("data:"):
        return None
    return value


class Image(Probe):
    """Image URL from the first element matching a selector.

    When the matched element is a container rather than an ``<img>``, its
    first descendant image is used. Relative URLs are resolved against the
    page location.
    """

    def __init__(self, selector: str, attrs: Sequence[str] = DEFAULT_IMAGE_ATTRS):
        self.selector = selector
        self.attrs = tuple(attrs)

    def probe(self, document: PageDocument) -> Optional[str]:
        element = document.select_one(self.selector)
        if element is None:
            return None
        url = self._read(element)
        if url is None and element.name != "img":
            inner = element.find("img")
            if inner is not None:
                url = self._read(inner)
        return document.resolve_url(url)

    def _read(self, element: Tag) -> Optional[str]:
        for attr in self.attrs:
            url = _attribute_url(element, attr)
            if url:
                return url
        return None

    def __repr__(self) -> str:
        return f"Image({self.selector!r})"


class ImageWithAlt(Probe):
    """First ``<img>`` whose alt text equals a given string (usually the title)."""

    def __init__(self, alt: str, attrs: Sequence[str] = DEFAULT_IMAGE_ATTRS):
        self.alt = alt
        self.attrs = tuple(attrs)

    def probe(self, document: PageDocument) -> Optional[str]:
        element = document.soup.find("img", alt=self.alt)
        if element is None:
            return None
        for attr in self.attrs:
            url = _attribute_url(element, attr)
            if url:
                return document.resolve_url(url)
        return None

    def __repr__(self) -> str:
        return f"ImageWithAlt({self.alt[:30]!r})"


class LargestImage(Probe):
    """Largest ``<img>`` by declared width x height, above a minimum size.

    Static HTML has no layout, so only images with numeric width/height
    attributes are considered.
    """

    def __init__(self, min_size: int = 100):
        self.min_size = min_size

    def probe(self, document: PageDocument) -> Optional[str]:
        best_url = None
        best_area = 0
        for img in document.soup.find_all("img"):
            width = _int_attr(img, "width")
            height = _int_attr(img, "height")
            if width <= self.min_size or height <= self.min_size:
                continue
            url = _attribute_url(img, "src")
            if url and width * height > best_area:
                best_area = width * height
                best_url = url
        return document.resolve_url(best_url)

    def __repr__(self) -> str:
        return f"LargestImage(min_size={self.min_size})"


def _int_attr(element: Tag, attr: str) -> int:
    match = re.match(r"\s*(\d+)", str(element.get(attr) or ""))
    return int(match.group(1)) if match else 0


class ShortTextScan(Probe):
    """Scan every element for short text matching a pattern.

    Used as a last resort on storefronts whose class names are obfuscated.
    Returns the matched portion of the first element, in document order,
    whose stripped text is shorter than ``max_length``.
    """

    def __init__(self, pattern: str, max_length: int = 15):
        self.pattern = re.compile(pattern, re.IGNORECASE)
        self.max_length = max_length

    def probe(self, document: PageDocument) -> Optional[str]:
        for element in document.soup.find_all(True):
            if element.name in ("script", "style", "noscript"):
                continue
            text = element.get_text(strip=True)
            if not text or len(text) >= self.max_length:
                continue
            match = self.pattern.search(text)
            if match:
                return match.group(0)
        return None

    def __repr__(self) -> str:
        return f"ShortTextScan({self.pattern.pattern!r})"


def texts(*selectors: str) -> Tuple[Probe, ...]:
    """Shorthand for a chain of Text probes."""
    return tuple(Text(selector) for selector in selectors)


def images(*selectors: str, attrs: Sequence[str] = DEFAULT_IMAGE_ATTRS) -> Tuple[Probe, ...]:
    """Shorthand for a chain of Image probes sharing the same attributes."""
    return tuple(Image(selector, attrs=attrs) for selector in selectors)


def first_match(probes: Iterable[Probe], document: PageDocument) -> Optional[str]:
    """Evaluate probes in order and return the first non-empty result.

    Args:
        probes: Ordered probe chain
        document: Parsed page

    Returns:
        First non-empty string, or None when every probe comes back empty
    """
    for probe in probes:
        value = probe(document)
        if value:
            logger.debug("probe_matched", probe=repr(probe), value=value[:80])
            return value
    return None
