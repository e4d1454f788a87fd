"""Parsed page wrapper handed to every extraction strategy."""

from functools import cached_property
from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag


class PageDocument:
    """A parsed HTML document together with the URL it was loaded from.

    Strategies only read from it; nothing in the extraction engine mutates
    the tree, so one instance can be extracted from repeatedly.
    """

    def __init__(self, soup: BeautifulSoup, url: str):
        self.soup = soup
        self.url = url

    @classmethod
    def from_html(cls, html: str, url: str) -> "PageDocument":
        """Parse raw HTML.

        Args:
            html: Page markup
            url: Location of the page (used for store name and relative links)

        Returns:
            PageDocument instance
        """
        return cls(BeautifulSoup(html or "", "html.parser"), url)

    @cached_property
    def hostname(self) -> str:
        return (urlparse(self.url).hostname or "").lower()

    @cached_property
    def text(self) -> str:
        """Whitespace-collapsed text content of the page body."""
        root = self.soup.body or self.soup
        return " ".join(root.get_text(" ").split())

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def resolve_url(self, value: Optional[str]) -> Optional[str]:
        """Resolve a possibly relative link against the page URL."""
        if not value:
            return None
        return urljoin(self.url, value.strip())

    def __repr__(self) -> str:
        return f"PageDocument(url={self.url!r})"
