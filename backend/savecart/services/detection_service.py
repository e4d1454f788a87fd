"""Trigger handling for product detection.

Two request kinds reach the engine:

- ``extract_now`` (user opened the popup): always extracts and always
  answers, partial records included.
- ``detect_on_navigation`` (page finished loading): runs the automatic flow

      Idle -> gate -> Skip | Extract -> Discard (unusable) | Present

Per tab, at most one navigation detection is in flight. A repeat trigger for
the same URL is answered "duplicate" right away; a trigger for a new URL takes
over the tab and the older run's result is dropped as "stale".
"""

import itertools
from typing import Dict, Optional, Tuple
from urllib.parse import urlparse

import structlog
from pydantic import ValidationError

from savecart.config import Settings, settings as default_settings
from savecart.core.exceptions import FetchError, RateLimitError
from savecart.extraction.base import ExtractedProduct
from savecart.extraction.dispatcher import ProductExtractor, get_product_extractor
from savecart.extraction.document import PageDocument
from savecart.extraction.fetcher import PageFetcher
from savecart.extraction.gate import is_product_page
from savecart.schemas.product_info import ProductInfo, TriggerRequest, TriggerResponse
from savecart.services.presenter import LoggingPresenter, ProductPresenter

logger = structlog.get_logger(__name__)


# Reasons sent back when no product is returned
NOT_FOUND = "not_found"
NOT_PRODUCT_PAGE = "not_product_page"
UNUSABLE = "unusable"
DUPLICATE = "duplicate"
STALE = "stale"
DISABLED = "disabled"
UNSUPPORTED_STORE = "unsupported_store"
FETCH_FAILED = "fetch_failed"


class DetectionService:
    """Answers trigger requests for browser tabs."""

    def __init__(
        self,
        extractor: Optional[ProductExtractor] = None,
        presenter: Optional[ProductPresenter] = None,
        fetcher: Optional[PageFetcher] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or default_settings
        self.extractor = extractor or get_product_extractor()
        self.presenter = presenter or LoggingPresenter(self.settings)
        self.fetcher = fetcher
        # tab_id -> (url, run token) of the navigation detection in flight
        self._in_flight: Dict[int, Tuple[str, int]] = {}
        self._tokens = itertools.count(1)

    async def handle(self, request: TriggerRequest) -> TriggerResponse:
        """Dispatch a trigger request to the matching flow."""
        if request.action == "extract_now":
            return await self.extract_now(request)
        return await self.detect_on_navigation(request)

    async def _load_document(self, request: TriggerRequest) -> PageDocument:
        if request.html is not None:
            return PageDocument.from_html(request.html, request.url)
        if self.fetcher is None:
            raise FetchError(request.url, "no page markup supplied and no fetcher configured")
        return await self.fetcher.fetch_document(request.url)

    async def extract_now(self, request: TriggerRequest) -> TriggerResponse:
        """Extract regardless of the product-page gate.

        Returns partial records too (e.g. no price), so the popup can show
        "Price unavailable".
        """
        log = logger.bind(tab_id=request.tab_id, action=request.action)

        try:
            document = await self._load_document(request)
        except (FetchError, RateLimitError) as e:
            log.warning("page_load_failed", url=request.url, error=e.message)
            return TriggerResponse(reason=FETCH_FAILED)

        product = self.extractor.extract_product_info(document)
        if product is None:
            log.info("nothing_found", url=request.url)
            return TriggerResponse(reason=NOT_FOUND)
        info = self._to_info(product, log)
        if info is None:
            return TriggerResponse(reason=NOT_FOUND)
        return TriggerResponse(product_info=info)

    async def detect_on_navigation(self, request: TriggerRequest) -> TriggerResponse:
        """Run the gated automatic flow and present usable products."""
        log = logger.bind(tab_id=request.tab_id, action=request.action, url=request.url)

        if not self.settings.AUTO_DETECT_PRODUCTS:
            return TriggerResponse(reason=DISABLED)

        if self.settings.AUTO_DETECT_KNOWN_STORES_ONLY:
            hostname = urlparse(request.url).hostname
            if self.extractor.registry.match(hostname) is None:
                log.debug("store_not_supported", hostname=hostname)
                return TriggerResponse(reason=UNSUPPORTED_STORE)

        current = self._in_flight.get(request.tab_id)
        if current is not None and current[0] == request.url:
            log.debug("detection_coalesced")
            return TriggerResponse(reason=DUPLICATE)

        token = next(self._tokens)
        if current is not None:
            log.debug("detection_superseded", previous_url=current[0])
        self._in_flight[request.tab_id] = (request.url, token)

        try:
            return await self._detect(request, token, log)
        finally:
            if self._in_flight.get(request.tab_id, (None, None))[1] == token:
                del self._in_flight[request.tab_id]

    @staticmethod
    def _to_info(product: ExtractedProduct, log) -> Optional[ProductInfo]:
        try:
            return product.to_info()
        except ValidationError as e:
            log.warning("product_rejected", title=product.title[:80], error=str(e))
            return None

    def _is_stale(self, tab_id: int, token: int) -> bool:
        current = self._in_flight.get(tab_id)
        return current is None or current[1] != token

    async def _detect(self, request: TriggerRequest, token: int, log) -> TriggerResponse:
        try:
            document = await self._load_document(request)
        except (FetchError, RateLimitError) as e:
            log.warning("page_load_failed", error=e.message)
            return TriggerResponse(reason=FETCH_FAILED)

        if self._is_stale(request.tab_id, token):
            log.debug("detection_stale")
            return TriggerResponse(reason=STALE)

        if not is_product_page(document):
            return TriggerResponse(reason=NOT_PRODUCT_PAGE)

        product = self.extractor.extract_product_info(document)
        if product is None:
            return TriggerResponse(reason=NOT_FOUND)
        if not product.is_usable:
            log.debug("product_discarded", title=product.title[:80])
            return TriggerResponse(reason=UNUSABLE)

        info = self._to_info(product, log)
        if info is None:
            return TriggerResponse(reason=NOT_FOUND)
        await self.presenter.present(product)
        return TriggerResponse(product_info=info)
