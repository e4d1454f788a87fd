"""Tests for notification cards and presenters."""

from savecart.extraction.base import ExtractedProduct
from savecart.services.price_tracker import PriceTracker
from savecart.services.presenter import (
    LoggingPresenter,
    TrackingPresenter,
    build_notification_card,
    truncate_title,
)


def make_product(title="Brass Desk Lamp", price=35.0, currency="USD") -> ExtractedProduct:
    return ExtractedProduct(
        title=title,
        current_price=price,
        original_price=None,
        image_url="https://shop.example.org/media/lamp.jpg",
        currency=currency,
        store="Example",
        product_url="https://shop.example.org/lamp",
    )


class TestNotificationCard:
    """Tests for build_notification_card."""

    def test_card_fields(self, test_settings):
        card = build_notification_card(make_product(), test_settings)

        assert card.title == "Brass Desk Lamp"
        assert card.price_label == "Price: $35.00"
        assert card.store == "Example"
        assert card.image_url == "https://shop.example.org/media/lamp.jpg"
        assert card.product_url == "https://shop.example.org/lamp"
        assert card.action_label == "Save to Cart"

    def test_missing_price(self, test_settings):
        card = build_notification_card(make_product(price=None), test_settings)
        assert card.price_label == "Price unavailable"

    def test_rupee_price(self, test_settings):
        card = build_notification_card(make_product(price=65999.0, currency="INR"), test_settings)
        assert card.price_label == "Price: ₹65,999.00"

    def test_long_title_truncated(self, test_settings):
        card = build_notification_card(make_product(title="x" * 120), test_settings)
        assert card.title == "x" * 80 + "..."


class TestTruncateTitle:
    """Tests for truncate_title."""

    def test_short_title_unchanged(self):
        assert truncate_title("Lamp", 80) == "Lamp"

    def test_exact_length_unchanged(self):
        assert truncate_title("abcde", 5) == "abcde"

    def test_truncated(self):
        assert truncate_title("abcdef", 5) == "abcde..."


class TestLoggingPresenter:
    """Tests for LoggingPresenter."""

    async def test_present_does_not_raise(self, test_settings):
        await LoggingPresenter(test_settings).present(make_product(price=None))


class TestTrackingPresenter:
    """Tests for TrackingPresenter history."""

    async def test_history_is_bounded(self, test_settings):
        presenter = TrackingPresenter(
            PriceTracker(settings=test_settings), user_id=7, settings=test_settings, max_history=3
        )
        for i in range(10):
            await presenter.present(make_product(title=f"Lamp {i}", price=30.0 + i))

        assert [p.title for p in presenter.presented] == ["Lamp 7", "Lamp 8", "Lamp 9"]
        assert [c.title for c in presenter.cards] == ["Lamp 7", "Lamp 8", "Lamp 9"]

    async def test_save_uses_latest_product(self, test_settings):
        presenter = TrackingPresenter(
            PriceTracker(settings=test_settings), user_id=7, settings=test_settings, max_history=2
        )
        for i in range(5):
            await presenter.present(make_product(title=f"Lamp {i}", price=30.0 + i))

        tracked = await presenter.save()
        assert tracked.title == "Lamp 4"
