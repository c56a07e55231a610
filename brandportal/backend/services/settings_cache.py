"""Aggregate settings cache with version-counter invalidation.

The `{key: value}` snapshot is memoised together with the version it was
loaded at. Writers bump the version after commit, so the next read in any
process sharing the counter reloads from the database.
"""
from __future__ import annotations

import copy
import logging
import threading
from functools import lru_cache
from typing import Any, Callable

import redis
from redis import Redis

from brandportal.backend.config import get_settings

logger = logging.getLogger(__name__)


class LocalVersionCounter:
    """In-process counter; enough for a single worker."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def current(self) -> int | None:
        return self._value

    def bump(self) -> None:
        with self._lock:
            self._value += 1


class RedisVersionCounter:
    """Counter shared through one redis key, for several worker processes."""

    def __init__(self, client: Redis, key: str) -> None:
        self._client = client
        self._key = key

    def current(self) -> int | None:
        try:
            raw = self._client.get(self._key)
        except redis.RedisError as e:
            logger.warning("settings cache: redis unavailable, bypassing cache: %s", e)
            return None
        return int(raw) if raw is not None else 0

    def bump(self) -> None:
        try:
            self._client.incr(self._key)
        except redis.RedisError as e:
            logger.warning("settings cache: redis incr failed, other workers may read stale settings: %s", e)


class SettingsSnapshotCache:
    def __init__(self, counter) -> None:
        self._counter = counter
        self._lock = threading.Lock()
        self._version: int | None = None
        self._snapshot: dict[str, Any] | None = None

    def get(self, load: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        version = self._counter.current()
        with self._lock:
            if version is not None and self._snapshot is not None and self._version == version:
                return copy.deepcopy(self._snapshot)
        snapshot = load()
        with self._lock:
            self._version = version
            self._snapshot = None if version is None else copy.deepcopy(snapshot)
        return snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None
            self._version = None
        self._counter.bump()

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None
            self._version = None


def build_counter(backend: str):
    s = get_settings()
    if backend == "redis":
        return RedisVersionCounter(Redis(host=s.redis_host, port=s.redis_port), s.settings_cache_redis_key)
    if backend != "local":
        logger.warning("settings cache: unknown backend %r, using local", backend)
    return LocalVersionCounter()


@lru_cache
def get_settings_cache() -> SettingsSnapshotCache:
    return SettingsSnapshotCache(build_counter(get_settings().settings_cache_backend))
