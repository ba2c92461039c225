"""In-process order change notifier.

Browsers receive live order updates straight from Supabase realtime. This
registry covers subscribers living inside the API process (tracking views
served over long-polling, audit hooks, tests) so that every successful status
transition fans out to whoever is watching that order.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from threading import Lock
from typing import Any, Callable

logger = logging.getLogger(__name__)

OrderChangeCallback = Callable[[dict[str, Any]], None]


class Subscription:
    """Handle returned by OrderNotifier.subscribe."""

    def __init__(self, notifier: "OrderNotifier", order_id: str, callback: OrderChangeCallback) -> None:
        self._notifier = notifier
        self.order_id = order_id
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        """Stop receiving updates. Safe to call more than once."""
        if self.active:
            self._notifier._remove(self)
            self.active = False


class OrderNotifier:
    """Thread-safe observer registry keyed by order id."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscription]] = defaultdict(list)
        self._lock = Lock()

    def subscribe(self, order_id: str, on_change: OrderChangeCallback) -> Subscription:
        """Register a callback for changes to one order.

        Args:
            order_id: The order to watch.
            on_change: Called with the updated order row after each change.

        Returns:
            Subscription: Handle whose unsubscribe() removes the callback.
        """
        subscription = Subscription(self, str(order_id), on_change)
        with self._lock:
            self._subscribers[subscription.order_id].append(subscription)
        return subscription

    def publish(self, order_id: str, order: dict[str, Any]) -> int:
        """Deliver an updated order to its subscribers.

        A failing callback is logged and skipped.

        Returns:
            Number of callbacks that ran successfully.
        """
        with self._lock:
            subscribers = list(self._subscribers.get(str(order_id), []))

        delivered = 0
        for subscription in subscribers:
            try:
                subscription.callback(order)
                delivered += 1
            except Exception:
                logger.exception("Order subscriber failed for order %s", order_id)
        return delivered

    def subscriber_count(self, order_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(str(order_id), []))

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.order_id)
            if not subscribers:
                return
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                del self._subscribers[subscription.order_id]


# Global singleton instance
_order_notifier: OrderNotifier | None = None


def get_order_notifier() -> OrderNotifier:
    """Get or create the global order notifier instance."""
    global _order_notifier
    if _order_notifier is None:
        _order_notifier = OrderNotifier()
    return _order_notifier
