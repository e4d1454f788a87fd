"""HTTP page fetcher producing PageDocuments.

The extraction engine never performs I/O itself; hosts that do not already
hold a DOM (the CLI, background re-checks) use this to load one.
"""

import random
from typing import Optional
from urllib.parse import urlparse

import httpx
import structlog

from savecart.config import settings
from savecart.core.exceptions import FetchError, RateLimitError
from savecart.extraction.document import PageDocument
from savecart.extraction.utils.rate_limiter import DomainRateLimiter
from savecart.extraction.utils.retry import fetch_retry

logger = structlog.get_logger(__name__)

# Storefronts serve the full product page only to desktop browsers
DESKTOP_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) Gecko/20100101 Firefox/133.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.1 Safari/605.1.15",
)


class PageFetcher:
    """Async page downloader with per-domain rate limiting and retry.

    Usage:
        async with PageFetcher() as fetcher:
            document = await fetcher.fetch_document(url)
    """

    def __init__(
        self,
        rate_limiter: Optional[DomainRateLimiter] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.rate_limiter = rate_limiter or DomainRateLimiter(
            default_rpm=settings.FETCH_RATE_LIMIT_RPM
        )
        self._timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS
        self._user_agent = user_agent or settings.FETCH_USER_AGENT or random.choice(DESKTOP_USER_AGENTS)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "PageFetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Open the underlying HTTP client (idempotent)."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
            headers={
                "User-Agent": self._user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9",
            },
        )
        logger.debug("fetcher_started", timeout=self._timeout)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("fetcher_closed")

    @fetch_retry
    async def _get(self, url: str) -> httpx.Response:
        domain = urlparse(url).netloc
        await self.rate_limiter.acquire(domain)

        logger.info("fetching_page", url=url)
        response = await self._client.get(url)
        response.raise_for_status()
        return response

    async def fetch_document(self, url: str) -> PageDocument:
        """Download and parse a page.

        Args:
            url: Absolute http(s) URL

        Returns:
            PageDocument bound to the final (post-redirect) URL

        Raises:
            RateLimitError: If the storefront keeps answering 429
            FetchError: On any other failure after retries
        """
        if urlparse(url).scheme not in ("http", "https"):
            raise FetchError(url, "only http and https URLs can be fetched")

        await self.start()
        try:
            response = await self._get(url)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("fetch_failed", url=url, status_code=status)
            if status == 429:
                raise RateLimitError(urlparse(url).netloc) from e
            raise FetchError(url, f"HTTP {status}") from e
        except httpx.HTTPError as e:
            logger.warning("fetch_failed", url=url, error=str(e))
            raise FetchError(url, str(e) or type(e).__name__) from e

        final_url = str(response.url)
        logger.info(
            "page_fetched",
            url=final_url,
            status_code=response.status_code,
            size=len(response.text),
        )
        return PageDocument.from_html(response.text, final_url)
