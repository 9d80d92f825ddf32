"""Explicit cache for listing queries.

One cache lives for the duration of a single request, so the current visit of
each property is chosen again on every fetch. Entries are keyed by query name
and dropped through ``invalidate``, which every mutation calls for the keys it
affects, or once they are older than ``ttl_seconds``. Each load is tagged with
a sequence number; a load that finishes after a newer one was issued, or
after an invalidation, never replaces the current entry.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

PROPERTIES = "properties"
VISITS = "visits"

_MISSING = object()


class ListingCache:
    def __init__(self, ttl_seconds: float | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[Any, float]] = {}
        self._issued: dict[str, int] = {}

    def _lookup(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        value, stored_at = entry
        if self.ttl_seconds is not None and self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            logger.debug("Expired %s", key)
            return _MISSING
        return value

    def begin(self, key: str) -> int:
        with self._lock:
            ticket = self._issued.get(key, 0) + 1
            self._issued[key] = ticket
            return ticket

    def commit(self, key: str, ticket: int, value: Any) -> bool:
        with self._lock:
            if ticket != self._issued.get(key):
                logger.debug("Discarding stale %s result (ticket %d, latest %d)", key, ticket, self._issued.get(key, 0))
                return False
            self._entries[key] = (value, self._clock())
            return True

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._lookup(key)
        return default if value is _MISSING else value

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        with self._lock:
            value = self._lookup(key)
        if value is not _MISSING:
            return value
        ticket = self.begin(key)
        value = loader()
        self.commit(key, ticket, value)
        return value

    def invalidate(self, *keys: str) -> None:
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)
                self._issued[key] = self._issued.get(key, 0) + 1
        logger.debug("Invalidated %s", ", ".join(keys))

    def clear(self) -> None:
        with self._lock:
            for key in list(self._issued):
                self._issued[key] += 1
            self._entries.clear()
