"""Services built on the extraction engine: detection flow, presentation and price tracking."""

from .detection_service import DetectionService
from .presenter import (
    LoggingPresenter,
    NotificationCard,
    ProductPresenter,
    TrackingPresenter,
    build_notification_card,
)
from .price_tracker import (
    MemStorage,
    Notification,
    PriceDrop,
    PriceHistoryEntry,
    PriceTracker,
    TrackedProduct,
    build_price_drop_messages,
)

__all__ = [
    "DetectionService",
    "ProductPresenter",
    "LoggingPresenter",
    "TrackingPresenter",
    "NotificationCard",
    "build_notification_card",
    "PriceTracker",
    "MemStorage",
    "TrackedProduct",
    "PriceHistoryEntry",
    "Notification",
    "PriceDrop",
    "build_price_drop_messages",
]
