"""
Post Update Bus
===============

Synchronous fan-out of freshly published post sets to subscribers.
"""

from typing import Callable, List

from ..ingestion.models import Post
from ..utils.logging import get_logger_for_component

PostCallback = Callable[[List[Post]], None]


class PostUpdateBus:
    """Ordered set of subscriber callbacks owned by one pipeline.

    Callbacks run in subscription order on the caller's stack. Exceptions
    raised by a callback propagate to whoever called ``publish``.
    """

    def __init__(self):
        self._subscribers: List[PostCallback] = []
        self.logger = get_logger_for_component("publisher")

    def subscribe(self, callback: PostCallback) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it.

        Subscribing the same callback twice registers it once.
        """
        if callback not in self._subscribers:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, posts: List[Post]) -> None:
        """Deliver posts to every current subscriber exactly once."""
        # Snapshot so callbacks may unsubscribe while being notified
        subscribers = list(self._subscribers)
        if subscribers:
            self.logger.debug(f"Notifying {len(subscribers)} subscriber(s) of {len(posts)} posts")
        for callback in subscribers:
            callback(posts)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
