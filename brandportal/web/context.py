"""Explicitly constructed context passed to every view: API client + cache.

Mutations go through here so each write invalidates every resource key
whose data it could affect.
"""
from __future__ import annotations

from typing import Any, BinaryIO

from brandportal.web.api_client import (
    CONTENT,
    PUBLIC_SETTINGS,
    SETTINGS,
    PortalApiClient,
    content_type_key,
)
from brandportal.web.cache import ResourceCache, Listener, Subscription

# The admin view and the public view both derive from the same settings rows.
SETTINGS_KEYS = (SETTINGS, PUBLIC_SETTINGS)


def content_keys(section: str) -> tuple[str, str]:
    return (CONTENT, content_type_key(section))


class PortalContext:
    def __init__(self, api: PortalApiClient, cache: ResourceCache | None = None) -> None:
        self.api = api
        self.cache = cache or ResourceCache(api.fetch)

    def subscribe(self, key: str, listener: Listener | None = None) -> Subscription:
        return self.cache.subscribe(key, listener)

    def invalidate(self, key: str) -> None:
        self.cache.invalidate(key)

    # settings

    def update_setting(self, key: str, value: Any) -> dict[str, Any]:
        result = self.api.put_setting(key, value)
        self.cache.invalidate_many(SETTINGS_KEYS)
        return result

    def upload_logo(self, filename: str, data: bytes | BinaryIO, content_type: str | None = None) -> str:
        return self._upload("logo", filename, data, content_type)

    def upload_favicon(self, filename: str, data: bytes | BinaryIO, content_type: str | None = None) -> str:
        return self._upload("favicon", filename, data, content_type)

    def _upload(self, kind: str, filename: str, data: bytes | BinaryIO, content_type: str | None) -> str:
        url = self.api.upload_asset(kind, filename, data, content_type)
        self.cache.invalidate_many(SETTINGS_KEYS)
        return url

    # content

    def update_content(self, section: str, identifier: str, content: Any) -> dict[str, Any]:
        result = self.api.put_content(section, identifier, content)
        self.cache.invalidate_many(content_keys(section))
        return result

    def delete_content(self, section: str, identifier: str) -> None:
        self.api.delete_content(section, identifier)
        self.cache.invalidate_many(content_keys(section))
