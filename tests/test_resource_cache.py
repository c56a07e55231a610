"""Resource cache: shared entries, invalidation, stale and dangling responses."""
import httpx
import pytest

from brandportal.errors import NotFoundError, PortalError, TransientStoreError
from brandportal.web.api_client import PortalApiClient
from brandportal.web.cache import ResourceCache
from brandportal.web.config import WebConfig


class FakeBackend:
    def __init__(self, values):
        self.values = dict(values)
        self.calls = []
        self.fail_with = None

    def fetch(self, key):
        self.calls.append(key)
        if self.fail_with is not None:
            raise self.fail_with
        return self.values[key]


def test_first_subscriber_fetches_later_ones_share():
    backend = FakeBackend({"settings/public": {"theme": "light"}})
    cache = ResourceCache(backend.fetch)

    a = cache.subscribe("settings/public")
    b = cache.subscribe("settings/public")

    assert backend.calls == ["settings/public"]
    assert a.value == b.value == {"theme": "light"}
    assert not a.loading
    assert a.error is None


def test_invalidate_refetches_for_live_subscribers():
    backend = FakeBackend({"content": {"hero": {"title": "Hi"}}})
    cache = ResourceCache(backend.fetch)
    seen = []
    sub = cache.subscribe("content", lambda s: seen.append((s.loading, s.value)))

    backend.values["content"] = {"hero": {"title": "Hello"}}
    cache.invalidate("content")

    assert sub.value == {"hero": {"title": "Hello"}}
    assert seen[-1] == (False, {"hero": {"title": "Hello"}})
    assert (True, {"hero": {"title": "Hi"}}) in seen
    assert backend.calls == ["content", "content"]


def test_invalidate_without_subscribers_drops_entry():
    backend = FakeBackend({"settings": {"theme": "light"}})
    cache = ResourceCache(backend.fetch)
    cache.subscribe("settings").close()

    cache.invalidate("settings")
    assert backend.calls == ["settings"]
    assert cache.peek("settings") is None

    backend.values["settings"] = {"theme": "dark"}
    assert cache.subscribe("settings").value == {"theme": "dark"}
    assert backend.calls == ["settings", "settings"]


def test_invalidate_unknown_key_is_ignored():
    backend = FakeBackend({})
    cache = ResourceCache(backend.fetch)
    cache.invalidate("content/type/hero")
    assert backend.calls == []


def test_closed_subscription_is_never_notified():
    backend = FakeBackend({"settings/public": {"theme": "light"}})
    cache = ResourceCache(backend.fetch)
    closed_calls = []
    live_calls = []
    closed = cache.subscribe("settings/public", lambda s: closed_calls.append(s.value))
    cache.subscribe("settings/public", lambda s: live_calls.append(s.value))
    closed_calls.clear()
    closed.close()

    cache.invalidate("settings/public")

    assert closed_calls == []
    assert live_calls


def test_fetch_error_is_exposed_and_keeps_last_value():
    backend = FakeBackend({"settings/public": {"theme": "light"}})
    cache = ResourceCache(backend.fetch)
    sub = cache.subscribe("settings/public")

    backend.fail_with = TransientStoreError("db down")
    cache.invalidate("settings/public")

    assert isinstance(sub.error, TransientStoreError)
    assert sub.value == {"theme": "light"}
    assert not sub.loading

    backend.fail_with = None
    cache.invalidate("settings/public")
    assert sub.error is None


def test_stale_response_is_discarded():
    values = iter([{"v": 1}, {"v": 2}, {"v": 3}])
    cache = None

    def fetch(key):
        value = next(values)
        if value == {"v": 2}:
            # a newer invalidation lands while this response is in flight
            cache.invalidate(key)
        return value

    cache = ResourceCache(fetch)
    sub = cache.subscribe("settings")
    cache.invalidate("settings")

    assert sub.value == {"v": 3}


def test_read_raises_when_nothing_was_ever_loaded():
    backend = FakeBackend({})
    backend.fail_with = NotFoundError("missing")
    cache = ResourceCache(backend.fetch)

    with pytest.raises(NotFoundError):
        cache.read("content/type/hero")


def test_read_returns_value():
    backend = FakeBackend({"settings": {"theme": "dark"}})
    cache = ResourceCache(backend.fetch)
    assert cache.read("settings") == {"theme": "dark"}
    assert cache.peek("settings") == {"theme": "dark"}


def test_unexpected_fetch_exception_does_not_leave_entry_loading():
    backend = FakeBackend({"settings/public": {"theme": "light"}})
    backend.fail_with = RuntimeError("bad payload")
    cache = ResourceCache(backend.fetch)

    sub = cache.subscribe("settings/public")
    assert not sub.loading
    assert isinstance(sub.error, PortalError)
    assert "bad payload" in sub.error.message
    sub.close()

    backend.fail_with = None
    again = cache.subscribe("settings/public")
    assert again.value == {"theme": "light"}
    assert again.error is None
    assert backend.calls == ["settings/public", "settings/public"]


def test_failing_listener_does_not_block_other_subscribers():
    backend = FakeBackend({"content": {"hero": {"title": "Hi"}}})
    cache = ResourceCache(backend.fetch)

    def broken(sub):
        raise RuntimeError("view crashed")

    cache.subscribe("content", broken)
    seen = []
    healthy = cache.subscribe("content", lambda s: seen.append(s.value))

    backend.values["content"] = {"hero": {"title": "Hello"}}
    cache.invalidate("content")

    assert not healthy.loading
    assert seen[-1] == {"hero": {"title": "Hello"}}


def test_non_json_response_surfaces_as_error_not_stuck_loading():
    def handler(request):
        return httpx.Response(200, text="<html>proxy page</html>", headers={"content-type": "text/html"})

    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://portal.test")
    api = PortalApiClient(http, config=WebConfig(read_retries=0))
    cache = ResourceCache(api.fetch)

    sub = cache.subscribe("settings/public")
    assert isinstance(sub.error, TransientStoreError)
    assert not sub.loading
