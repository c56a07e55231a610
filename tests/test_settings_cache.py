"""Aggregate settings cache and its version counters."""
from unittest.mock import Mock

import pytest
import redis

from brandportal.backend.services.settings_cache import (
    LocalVersionCounter,
    RedisVersionCounter,
    SettingsSnapshotCache,
)


def _loader(values):
    calls = {"n": 0}

    def load():
        calls["n"] += 1
        return dict(values)

    return load, calls


def test_snapshot_is_reused_until_invalidated():
    cache = SettingsSnapshotCache(LocalVersionCounter())
    store = {"theme": "light"}
    load, calls = _loader(store)

    assert cache.get(load) == {"theme": "light"}
    assert cache.get(load) == {"theme": "light"}
    assert calls["n"] == 1

    cache.invalidate()
    cache.get(load)
    assert calls["n"] == 2


def test_returned_snapshot_cannot_mutate_cache():
    cache = SettingsSnapshotCache(LocalVersionCounter())
    load, _ = _loader({"menu": ["home"]})
    first = cache.get(load)
    first["menu"].append("oops")
    assert cache.get(load) == {"menu": ["home"]}


def test_shared_counter_invalidates_other_caches():
    counter = LocalVersionCounter()
    worker_a = SettingsSnapshotCache(counter)
    worker_b = SettingsSnapshotCache(counter)
    load, calls = _loader({"theme": "light"})

    worker_a.get(load)
    worker_b.get(load)
    worker_a.invalidate()
    worker_b.get(load)

    assert calls["n"] == 3


def test_redis_counter_reads_and_bumps_key():
    client = Mock()
    client.get.return_value = b"7"
    counter = RedisVersionCounter(client, "brandportal:settings:version")

    assert counter.current() == 7
    counter.bump()
    client.incr.assert_called_once_with("brandportal:settings:version")


def test_redis_outage_bypasses_cache():
    client = Mock()
    client.get.side_effect = redis.ConnectionError("down")
    client.incr.side_effect = redis.ConnectionError("down")
    cache = SettingsSnapshotCache(RedisVersionCounter(client, "k"))
    load, calls = _loader({"theme": "dark"})

    assert cache.get(load) == {"theme": "dark"}
    assert cache.get(load) == {"theme": "dark"}
    assert calls["n"] == 2
    cache.invalidate()


def test_missing_redis_key_counts_as_version_zero():
    client = Mock()
    client.get.return_value = None
    assert RedisVersionCounter(client, "k").current() == 0
