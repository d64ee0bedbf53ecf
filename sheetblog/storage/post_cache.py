"""
Post Cache
==========

Short-lived snapshot of the published post set.

The slot holds ``{"data": [post, ...], "timestamp": epoch_millis}`` as JSON
text. Expired, malformed or undecodable entries are deleted and reported as
a miss. Storage failures are logged and never raised: the cache is advisory
and must not stand between callers and a fresh fetch.
"""

import json
import math
import time
from typing import Callable, List, Optional

from ..ingestion.models import Post
from ..utils.exceptions import CacheError, ErrorCode
from ..utils.logging import get_logger_for_component
from .kv_store import KeyValueStore

CACHE_KEY = "templates"
CACHE_TTL_SECONDS = 5 * 60


class PostCache:
    """Timestamped, shape-validated post snapshot in a key-value slot."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = CACHE_KEY,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize post cache.

        Args:
            store: Key-value storage backend
            key: Slot key
            ttl_seconds: Snapshot lifetime
            clock: Returns current epoch seconds (injectable for tests)
        """
        self.store = store
        self.key = key
        self.ttl_ms = ttl_seconds * 1000
        self.clock = clock
        self.logger = get_logger_for_component("post_cache")

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def set(self, posts: List[Post]) -> None:
        """Store a snapshot of posts stamped with the current time."""
        if not isinstance(posts, list):
            return

        try:
            payload = json.dumps({
                "data": [post.to_record() for post in posts],
                "timestamp": self._now_ms(),
            })
            self.store.set(self.key, payload)
        except (CacheError, TypeError, ValueError, AttributeError) as e:
            self.logger.error(
                f"Failed to cache posts: {e}",
                extra={"error_code": ErrorCode.CACHE_WRITE_FAILED.value},
            )
            self._discard()

    def get(self) -> Optional[List[Post]]:
        """Return the cached posts, or None on miss, expiry or corruption."""
        try:
            cached = self.store.get(self.key)
            if not cached:
                return None

            parsed = json.loads(cached)
            now_ms = self._now_ms()

            if not self._is_valid_entry(parsed, now_ms):
                self.logger.warning(f"Discarding malformed cache entry '{self.key}'")
                self._discard()
                return None

            if now_ms - parsed["timestamp"] > self.ttl_ms:
                self.logger.debug(f"Cache entry '{self.key}' expired")
                self._discard()
                return None

            return [Post.model_validate(record) for record in parsed["data"]]

        except (CacheError, ValueError, TypeError) as e:
            # JSONDecodeError and pydantic ValidationError are ValueErrors
            self.logger.error(
                f"Failed to retrieve cached posts: {e}",
                extra={"error_code": ErrorCode.CACHE_CORRUPTED.value},
            )
            self._discard()
            return None

    def clear(self) -> None:
        """Remove the snapshot."""
        self._discard()

    @staticmethod
    def _is_valid_entry(parsed, now_ms: int) -> bool:
        if not isinstance(parsed, dict) or not isinstance(parsed.get("data"), list):
            return False
        timestamp = parsed.get("timestamp")
        if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
            return False
        # A stamp from the future would never expire
        return math.isfinite(timestamp) and timestamp <= now_ms

    def _discard(self) -> None:
        try:
            self.store.delete(self.key)
        except CacheError as e:
            self.logger.warning(f"Could not clear cache entry '{self.key}': {e}")
