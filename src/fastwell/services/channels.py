"""Change notification channels keyed by document.

The document store publishes every mutation here; observers (the AI
request watchers, the SSE stream endpoint) subscribe per document id.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Callable

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[dict], None]
ChannelKey = tuple[str, str]


class Subscription:
    """Handle returned by ChangeFeed.subscribe."""

    def __init__(self, feed: "ChangeFeed", key: ChannelKey, callback: ChangeCallback):
        self._feed = feed
        self.key = key
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._feed._remove(self.key, self.callback)
            self.active = False


class ChangeFeed:
    """Callback registry for per-document change notifications."""

    def __init__(self):
        self._subscribers: dict[ChannelKey, list[ChangeCallback]] = {}

    def subscribe(self, collection: str, doc_id: str, callback: ChangeCallback) -> Subscription:
        """Register a callback for changes to one document."""
        key = (collection, doc_id)
        self._subscribers.setdefault(key, []).append(callback)
        return Subscription(self, key, callback)

    def publish(self, collection: str, doc_id: str, document: dict) -> None:
        """Deliver the full current document to every subscriber."""
        for callback in list(self._subscribers.get((collection, doc_id), [])):
            try:
                callback(document)
            except Exception:
                logger.exception("Change callback failed for %s/%s", collection, doc_id)

    def subscriber_count(self, collection: str, doc_id: str) -> int:
        return len(self._subscribers.get((collection, doc_id), []))

    async def listen(self, collection: str, doc_id: str) -> AsyncIterator[dict]:
        """Iterate over changes to a document until the consumer stops."""
        queue: asyncio.Queue[dict] = asyncio.Queue()
        subscription = self.subscribe(collection, doc_id, queue.put_nowait)
        try:
            while True:
                yield await queue.get()
        finally:
            subscription.unsubscribe()

    def _remove(self, key: ChannelKey, callback: ChangeCallback) -> None:
        callbacks = self._subscribers.get(key)
        if not callbacks:
            return
        if callback in callbacks:
            callbacks.remove(callback)
        if not callbacks:
            del self._subscribers[key]
