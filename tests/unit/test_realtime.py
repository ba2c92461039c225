"""Unit tests for the in-process order notifier."""

from unittest.mock import MagicMock

from src.core.realtime import OrderNotifier, get_order_notifier


class TestOrderNotifier:
    """Tests for OrderNotifier."""

    def test_publish_reaches_subscribers_of_that_order(self) -> None:
        notifier = OrderNotifier()
        watcher = MagicMock()
        bystander = MagicMock()
        notifier.subscribe("order-1", watcher)
        notifier.subscribe("order-2", bystander)

        delivered = notifier.publish("order-1", {"id": "order-1", "status": "ready"})

        assert delivered == 1
        watcher.assert_called_once_with({"id": "order-1", "status": "ready"})
        bystander.assert_not_called()

    def test_unsubscribe_stops_delivery(self) -> None:
        notifier = OrderNotifier()
        watcher = MagicMock()
        subscription = notifier.subscribe("order-1", watcher)

        subscription.unsubscribe()
        subscription.unsubscribe()
        notifier.publish("order-1", {"id": "order-1"})

        watcher.assert_not_called()
        assert subscription.active is False
        assert notifier.subscriber_count("order-1") == 0

    def test_failing_callback_does_not_block_others(self) -> None:
        notifier = OrderNotifier()
        broken = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        notifier.subscribe("order-1", broken)
        notifier.subscribe("order-1", healthy)

        delivered = notifier.publish("order-1", {"id": "order-1"})

        assert delivered == 1
        healthy.assert_called_once()

    def test_publish_without_subscribers(self) -> None:
        assert OrderNotifier().publish("order-1", {}) == 0

    def test_subscriber_count(self) -> None:
        notifier = OrderNotifier()
        first = notifier.subscribe("order-1", MagicMock())
        notifier.subscribe("order-1", MagicMock())

        assert notifier.subscriber_count("order-1") == 2
        first.unsubscribe()
        assert notifier.subscriber_count("order-1") == 1

    def test_global_notifier_is_singleton(self) -> None:
        assert get_order_notifier() is get_order_notifier()
