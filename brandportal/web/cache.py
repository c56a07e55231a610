"""Request/cache layer shared by every view that reads settings or content.

Each resource key has one entry. The first subscriber triggers a fetch,
later subscribers share the entry, and `invalidate` refetches for everyone
still subscribed. There is no time-based expiry: freshness comes from the
mutation helpers invalidating the keys they affect.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from brandportal.errors import PortalError

logger = logging.getLogger(__name__)

Listener = Callable[["Subscription"], None]


@dataclass
class _Entry:
    key: str
    value: Any = None
    error: PortalError | None = None
    loading: bool = False
    loaded: bool = False
    generation: int = 0
    subscribers: list["Subscription"] = field(default_factory=list)


class Subscription:
    """A view's interest in one resource. Closing it drops any late responses."""

    def __init__(self, cache: "ResourceCache", entry: _Entry, listener: Listener | None) -> None:
        self._cache = cache
        self._entry = entry
        self._listener = listener
        self.closed = False

    @property
    def key(self) -> str:
        return self._entry.key

    @property
    def value(self) -> Any:
        return self._entry.value

    @property
    def loading(self) -> bool:
        return self._entry.loading

    @property
    def error(self) -> PortalError | None:
        return self._entry.error

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._cache._unsubscribe(self)

    def _notify(self) -> None:
        if self.closed or self._listener is None:
            return
        self._listener(self)


class ResourceCache:
    def __init__(self, fetch: Callable[[str], Any]) -> None:
        self._fetch = fetch
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.RLock()

    def subscribe(self, key: str, listener: Listener | None = None) -> Subscription:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry(key=key)
            sub = Subscription(self, entry, listener)
            entry.subscribers.append(sub)
            needs_fetch = not entry.loaded and not entry.loading
        if needs_fetch:
            self._refetch(entry)
        return sub

    def invalidate(self, key: str) -> None:
        """Refetch `key` for all live subscribers; forget it if nobody is listening."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return
            if not entry.subscribers:
                del self._entries[key]
                return
        self._refetch(entry)

    def invalidate_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.invalidate(key)

    def peek(self, key: str) -> Any:
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def read(self, key: str) -> Any:
        """One-shot read through the cache. Raises the fetch error if there is no value."""
        sub = self.subscribe(key)
        try:
            if sub.error is not None and not self._entries[key].loaded:
                raise sub.error
            return sub.value
        finally:
            sub.close()

    def _unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            entry = self._entries.get(sub.key)
            if entry is not None and sub in entry.subscribers:
                entry.subscribers.remove(sub)

    def _broadcast(self, entry: _Entry) -> None:
        with self._lock:
            subs = list(entry.subscribers)
        for sub in subs:
            try:
                sub._notify()
            except Exception:
                # one broken view must not block the others or the entry state
                logger.exception("listener for %s failed", entry.key)

    def _refetch(self, entry: _Entry) -> None:
        with self._lock:
            entry.generation += 1
            generation = entry.generation
            entry.loading = True
        self._broadcast(entry)
        try:
            value = self._fetch(entry.key)
        except PortalError as e:
            err = e
        except Exception as e:
            logger.exception("fetch %s raised unexpectedly", entry.key)
            err = PortalError(f"{entry.key}: {e}")
        else:
            err = None
        if err is not None:
            with self._lock:
                if generation != entry.generation:
                    return
                entry.error = err
                entry.loading = False
            logger.warning("fetch %s failed: %s", entry.key, err.message)
            self._broadcast(entry)
            return
        with self._lock:
            # superseded by a newer fetch while this one was in flight
            if generation != entry.generation:
                return
            entry.value = value
            entry.error = None
            entry.loaded = True
            entry.loading = False
        self._broadcast(entry)
