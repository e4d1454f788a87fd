"""Presenters receive usable extraction results and offer the save action."""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

import structlog

from savecart.config import Settings, settings as default_settings
from savecart.extraction.base import ExtractedProduct
from savecart.extraction.utils.normalizer import format_price

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NotificationCard:
    """What the in-page "product detected" card shows."""

    title: str
    price_label: str
    store: str
    image_url: Optional[str]
    product_url: str
    action_label: str = "Save to Cart"


def truncate_title(title: str, max_length: int) -> str:
    if len(title) <= max_length:
        return title
    return title[:max_length] + "..."


def build_notification_card(
    product: ExtractedProduct, settings: Optional[Settings] = None
) -> NotificationCard:
    """Build the card for a detected product.

    Args:
        product: Extraction result (price may be missing)
        settings: Settings providing NOTIFICATION_TITLE_MAX_LENGTH

    Returns:
        NotificationCard instance
    """
    settings = settings or default_settings
    price_label = format_price(product.current_price, product.currency)
    if product.current_price is not None:
        price_label = f"Price: {price_label}"
    return NotificationCard(
        title=truncate_title(product.title, settings.NOTIFICATION_TITLE_MAX_LENGTH),
        price_label=price_label,
        store=product.store,
        image_url=product.image_url,
        product_url=product.product_url,
    )


class ProductPresenter(ABC):
    """Receives products from the detection flow."""

    @abstractmethod
    async def present(self, product: ExtractedProduct) -> None:
        """Show a detected product to the user."""
        pass


class LoggingPresenter(ProductPresenter):
    """Emits a structured log event per detected product."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.logger = logger.bind(presenter="logging")

    async def present(self, product: ExtractedProduct) -> None:
        card = build_notification_card(product, self.settings)
        self.logger.info(
            "product_detected",
            title=card.title,
            price=card.price_label,
            store=card.store,
            url=card.product_url,
        )


class TrackingPresenter(ProductPresenter):
    """Keeps the cards it was shown and saves them to a PriceTracker on request.

    Args:
        tracker: PriceTracker the save action writes to
        user_id: Owner of saved products
        max_history: Presented products kept; older ones are dropped
    """

    def __init__(
        self,
        tracker,
        user_id: int,
        settings: Optional[Settings] = None,
        max_history: int = 20,
    ):
        self.tracker = tracker
        self.user_id = user_id
        self.settings = settings or default_settings
        self.presented: Deque[ExtractedProduct] = deque(maxlen=max_history)
        self.cards: Deque[NotificationCard] = deque(maxlen=max_history)

    async def present(self, product: ExtractedProduct) -> None:
        self.presented.append(product)
        self.cards.append(build_notification_card(product, self.settings))

    async def save(self, product: Optional[ExtractedProduct] = None):
        """Run the card's save action.

        Args:
            product: Product to save (default: the most recently presented one)

        Returns:
            TrackedProduct created or updated by the tracker
        """
        if product is None:
            if not self.presented:
                raise ValueError("No product has been presented")
            product = self.presented[-1]
        tracked = await self.tracker.save_product(self.user_id, product)
        logger.info("product_save_action", product_id=tracked.id, user_id=self.user_id)
        return tracked
