"""Price tracking: saved products, price history, alerts and price-drop checks.

In-memory storage collaborator for extracted products. The extraction engine
never touches these records; it only hands ExtractedProduct values to
PriceTracker.save_product / update_price.
"""

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import structlog

from savecart.config import Settings, settings as default_settings
from savecart.core.exceptions import NotFoundError
from savecart.extraction.base import ExtractedProduct
from savecart.extraction.utils.normalizer import format_price, normalize_url

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TrackedProduct:
    """Persisted snapshot of a saved product plus its alert state."""

    id: int
    user_id: int
    title: str
    current_price: float
    original_price: Optional[float]
    image_url: Optional[str]
    currency: str
    store: str
    product_url: str
    created_at: datetime = field(default_factory=_utcnow)
    last_updated: datetime = field(default_factory=_utcnow)
    is_alert_set: bool = False
    alert_price: Optional[float] = None
    is_favorite: bool = False
    last_checked_price: Optional[float] = None
    last_checked: Optional[datetime] = None


@dataclass(frozen=True)
class PriceHistoryEntry:
    id: int
    product_id: int
    price: float
    date: datetime = field(default_factory=_utcnow)


@dataclass
class Notification:
    id: int
    user_id: int
    product_id: int
    message: str
    is_read: bool = False
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class PriceDrop:
    """A saved product whose price fell since the last check."""

    product_id: int
    title: str
    old_price: float
    new_price: float
    store: str
    url: str
    currency: str = "USD"

    @property
    def savings(self) -> float:
        return self.old_price - self.new_price

    @property
    def drop_percent(self) -> float:
        if self.old_price <= 0:
            return 0.0
        return self.savings / self.old_price * 100


class MemStorage:
    """Key-indexed in-memory tables with auto-increment ids."""

    def __init__(self):
        self.products: Dict[int, TrackedProduct] = {}
        self.price_history: Dict[int, PriceHistoryEntry] = {}
        self.notifications: Dict[int, Notification] = {}
        self._product_ids = itertools.count(1)
        self._history_ids = itertools.count(1)
        self._notification_ids = itertools.count(1)

    def next_product_id(self) -> int:
        return next(self._product_ids)

    def add_price_history(self, product_id: int, price: float) -> PriceHistoryEntry:
        entry = PriceHistoryEntry(id=next(self._history_ids), product_id=product_id, price=price)
        self.price_history[entry.id] = entry
        return entry

    def create_notification(self, user_id: int, product_id: int, message: str) -> Notification:
        notification = Notification(
            id=next(self._notification_ids),
            user_id=user_id,
            product_id=product_id,
            message=message,
        )
        self.notifications[notification.id] = notification
        return notification


class PriceTracker:
    """Saves extracted products and evaluates price alerts.

    Product identity is (user_id, normalized product URL), so saving the same
    page twice updates the existing record instead of duplicating it.
    """

    def __init__(self, storage: Optional[MemStorage] = None, settings: Optional[Settings] = None):
        self.storage = storage or MemStorage()
        self.settings = settings or default_settings
        self._index: Dict[Tuple[int, str], int] = {}

    def _get(self, product_id: int) -> TrackedProduct:
        product = self.storage.products.get(product_id)
        if product is None:
            raise NotFoundError("Product", str(product_id))
        return product

    async def get_product(self, product_id: int) -> TrackedProduct:
        return self._get(product_id)

    async def get_products(self, user_id: int) -> List[TrackedProduct]:
        return [p for p in self.storage.products.values() if p.user_id == user_id]

    async def find_product(self, user_id: int, product_url: str) -> Optional[TrackedProduct]:
        product_id = self._index.get((user_id, normalize_url(product_url)))
        if product_id is None:
            return None
        return self.storage.products.get(product_id)

    async def save_product(self, user_id: int, product: ExtractedProduct) -> TrackedProduct:
        """Create a tracked product, or update it when the URL is already saved.

        Args:
            user_id: Owner of the saved product
            product: Usable extraction result

        Returns:
            The created or updated TrackedProduct

        Raises:
            ValueError: If the product has no usable price
        """
        if not product.is_usable:
            raise ValueError("Cannot track a product without a title and a current price")

        existing = await self.find_product(user_id, product.product_url)
        if existing is not None:
            return await self.update_price(existing.id, product)

        tracked = TrackedProduct(
            id=self.storage.next_product_id(),
            user_id=user_id,
            title=product.title,
            current_price=product.current_price,
            original_price=product.original_price,
            image_url=product.image_url,
            currency=product.currency,
            store=product.store,
            product_url=product.product_url,
        )
        self.storage.products[tracked.id] = tracked
        self._index[(user_id, normalize_url(product.product_url))] = tracked.id
        self.storage.add_price_history(tracked.id, tracked.current_price)

        logger.info(
            "product_saved",
            product_id=tracked.id,
            user_id=user_id,
            store=tracked.store,
            price=tracked.current_price,
        )
        return tracked

    async def update_price(self, product_id: int, product: ExtractedProduct) -> TrackedProduct:
        """Refresh a tracked product from a new extraction.

        A changed price appends a history entry and, when an alert is set and
        the price crosses from above the alert price to at or below it,
        creates a notification for the owner.
        """
        tracked = self._get(product_id)
        if not product.is_usable:
            raise ValueError("Cannot update a product without a title and a current price")

        old_price = tracked.current_price
        new_price = product.current_price

        tracked.title = product.title
        tracked.original_price = product.original_price
        tracked.image_url = product.image_url or tracked.image_url
        tracked.currency = product.currency
        tracked.current_price = new_price
        tracked.last_updated = _utcnow()

        if new_price == old_price:
            return tracked

        tracked.last_checked_price = old_price
        tracked.last_checked = tracked.last_updated
        self.storage.add_price_history(tracked.id, new_price)
        logger.info("price_changed", product_id=tracked.id, old_price=old_price, new_price=new_price)

        if (
            tracked.is_alert_set
            and tracked.alert_price is not None
            and new_price <= tracked.alert_price < old_price
        ):
            message = (
                f"Price for {tracked.title} dropped to "
                f"{format_price(new_price, tracked.currency)}! "
                f"(Your alert was set at {format_price(tracked.alert_price, tracked.currency)})"
            )
            self.storage.create_notification(tracked.user_id, tracked.id, message)
            logger.info("price_alert_triggered", product_id=tracked.id, alert_price=tracked.alert_price)

        return tracked

    async def set_alert(self, product_id: int, alert_price: float) -> TrackedProduct:
        if alert_price < 0:
            raise ValueError("alert_price must be non-negative")
        tracked = self._get(product_id)
        tracked.is_alert_set = True
        tracked.alert_price = alert_price
        tracked.last_updated = _utcnow()
        return tracked

    async def clear_alert(self, product_id: int) -> TrackedProduct:
        tracked = self._get(product_id)
        tracked.is_alert_set = False
        tracked.alert_price = None
        tracked.last_updated = _utcnow()
        return tracked

    async def delete_product(self, product_id: int) -> None:
        tracked = self._get(product_id)
        del self.storage.products[product_id]
        self._index.pop((tracked.user_id, normalize_url(tracked.product_url)), None)
        logger.info("product_deleted", product_id=product_id)

    async def get_price_history(self, product_id: int) -> List[PriceHistoryEntry]:
        """Price history of a product, oldest first."""
        self._get(product_id)
        entries = [e for e in self.storage.price_history.values() if e.product_id == product_id]
        return sorted(entries, key=lambda e: (e.date, e.id))

    async def get_notifications(self, user_id: int) -> List[Notification]:
        """Notifications for a user, newest first."""
        notifications = [n for n in self.storage.notifications.values() if n.user_id == user_id]
        return sorted(notifications, key=lambda n: (n.created_at, n.id), reverse=True)

    async def mark_notification_read(self, notification_id: int) -> Notification:
        notification = self.storage.notifications.get(notification_id)
        if notification is None:
            raise NotFoundError("Notification", str(notification_id))
        notification.is_read = True
        return notification

    async def check_price_drops(self, user_id: Optional[int] = None) -> List[PriceDrop]:
        """Alerted products whose price fell since the last check.

        Drops smaller than PRICE_DROP_THRESHOLD percent are ignored.

        Args:
            user_id: Restrict the check to one user's products

        Returns:
            List of PriceDrop, in product id order
        """
        threshold = self.settings.PRICE_DROP_THRESHOLD
        drops: List[PriceDrop] = []
        for tracked in sorted(self.storage.products.values(), key=lambda p: p.id):
            if user_id is not None and tracked.user_id != user_id:
                continue
            if not tracked.is_alert_set or tracked.last_checked_price is None:
                continue
            if tracked.current_price >= tracked.last_checked_price:
                continue

            drop = PriceDrop(
                product_id=tracked.id,
                title=tracked.title,
                old_price=tracked.last_checked_price,
                new_price=tracked.current_price,
                store=tracked.store,
                url=tracked.product_url,
                currency=tracked.currency,
            )
            if drop.drop_percent < threshold:
                logger.debug(
                    "price_drop_below_threshold",
                    product_id=tracked.id,
                    drop_percent=round(drop.drop_percent, 2),
                    threshold=threshold,
                )
                continue
            drops.append(drop)

        logger.info("price_drops_checked", count=len(drops), threshold=threshold)
        return drops


def build_price_drop_messages(
    drops: List[PriceDrop], settings: Optional[Settings] = None
) -> List[str]:
    """Render user-facing price-drop messages.

    The first drop gets a headline message; any further drops are folded
    into one summary line.

    Args:
        drops: Result of PriceTracker.check_price_drops
        settings: Settings (PUSH_NOTIFICATIONS disables all messages)

    Returns:
        List of message strings, empty when notifications are off
    """
    settings = settings or default_settings
    if not drops or not settings.PUSH_NOTIFICATIONS:
        return []

    drop = drops[0]
    messages = [
        f"{drop.title} is now {format_price(drop.new_price, drop.currency)} at {drop.store}. "
        f"You're saving {format_price(drop.savings, drop.currency)}!"
    ]
    if len(drops) > 1:
        messages.append(
            f"{len(drops) - 1} more products have price drops. Open SaveCart to view all."
        )
    return messages
