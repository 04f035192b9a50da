# tableflow/core/change_feed.py

"""
In-process change feed used by the stores to push full snapshots to
subscribers (display boards, websocket clients) after every write.
"""

from typing import Any, Awaitable, Callable, Dict, Hashable, List, Union
import asyncio
import inspect
import logging

logger = logging.getLogger(__name__)

Callback = Callable[[Any], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by ``ChangeFeed.subscribe``; cancel to stop receiving."""

    def __init__(self, feed: "ChangeFeed", topic: Hashable, callback: Callback):
        self._feed = feed
        self.topic = topic
        self.callback = callback
        self.active = True

    def cancel(self):
        if self.active:
            self._feed._remove(self)
            self.active = False


class ChangeFeed:
    """Topic -> subscriber registry delivering snapshots, not deltas."""

    def __init__(self):
        self.subscribers: Dict[Hashable, List[Subscription]] = {}
        self.lock = asyncio.Lock()

    def subscribe(self, topic: Hashable, callback: Callback) -> Subscription:
        subscription = Subscription(self, topic, callback)
        self.subscribers.setdefault(topic, []).append(subscription)
        logger.debug(
            f"Subscribed to {topic}. "
            f"Total subscribers: {len(self.subscribers[topic])}"
        )
        return subscription

    def _remove(self, subscription: Subscription):
        try:
            self.subscribers[subscription.topic].remove(subscription)
            if not self.subscribers[subscription.topic]:
                del self.subscribers[subscription.topic]
        except (KeyError, ValueError):
            logger.warning(f"Subscription not found for topic {subscription.topic}")

    async def publish(self, topic: Hashable, snapshot: Any):
        """Deliver ``snapshot`` to every subscriber of ``topic``.

        A subscriber that raises is dropped; the others still receive the
        snapshot.
        """
        async with self.lock:
            subscriptions = list(self.subscribers.get(topic, []))

        dead_subscriptions = []
        for subscription in subscriptions:
            try:
                result = subscription.callback(snapshot)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error delivering {topic} snapshot: {str(e)}")
                dead_subscriptions.append(subscription)

        for subscription in dead_subscriptions:
            subscription.cancel()

    def subscriber_count(self, topic: Hashable) -> int:
        return len(self.subscribers.get(topic, []))

    def clear(self):
        for subscriptions in list(self.subscribers.values()):
            for subscription in subscriptions:
                subscription.active = False
        self.subscribers.clear()


# Global instance
change_feed = ChangeFeed()
