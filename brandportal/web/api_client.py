"""HTTP client for the settings and content endpoints.

Maps error responses back onto `brandportal.errors` so the cache and editor
deal with one taxonomy. Reads are retried on transient failures; writes are
sent exactly once.
"""
from __future__ import annotations

import json
import logging
from typing import Any, BinaryIO, Iterable
from urllib.parse import quote

import httpx

from brandportal.errors import PortalError, TransientStoreError, ValidationError, error_for_status
from brandportal.web.config import WebConfig

logger = logging.getLogger(__name__)

SETTINGS = "settings"
PUBLIC_SETTINGS = "settings/public"
CONTENT = "content"
CONTENT_TYPE_PREFIX = "content/type/"


def _segment(name: str) -> str:
    return quote(name, safe="")


def content_type_key(section: str) -> str:
    return f"{CONTENT_TYPE_PREFIX}{section}"


def group_content_rows(rows: Iterable[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """Flat `GET /content` rows -> {section: {identifier: content}}."""
    grouped: dict[str, dict[str, Any]] = {}
    for row in rows:
        grouped.setdefault(row["section"], {})[row["identifier"]] = row["content"]
    return grouped


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return (response.text or response.reason_phrase or "error")[:200]
    if isinstance(data, dict):
        return str(data.get("message") or data.get("detail") or response.reason_phrase)
    return response.reason_phrase


class PortalApiClient:
    def __init__(
        self,
        http: httpx.Client | None = None,
        *,
        config: WebConfig | None = None,
        token: str | None = None,
    ) -> None:
        self.config = config or WebConfig()
        self.http = http or httpx.Client(base_url=self.config.base_url, timeout=self.config.timeout_seconds)
        self.token = token

    def _url(self, path: str) -> str:
        return f"{self.config.api_prefix}{path}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _send(self, method: str, path: str, extra_headers: dict[str, str] | None = None, **kwargs) -> Any:
        headers = self._headers()
        if extra_headers:
            headers.update(extra_headers)
        try:
            r = self.http.request(method, self._url(path), headers=headers, **kwargs)
        except httpx.TransportError as e:
            raise TransientStoreError(f"{method} {path}: {e}")
        if r.status_code >= 400:
            raise error_for_status(r.status_code, _error_message(r))
        try:
            return r.json()
        except ValueError:
            content_type = r.headers.get("content-type") or "no content type"
            raise TransientStoreError(f"{method} {path}: expected JSON, got {content_type}")

    def _read(self, path: str, **kwargs) -> Any:
        attempts = max(0, self.config.read_retries) + 1
        for attempt in range(1, attempts + 1):
            try:
                return self._send("GET", path, **kwargs)
            except TransientStoreError as e:
                if attempt == attempts:
                    raise
                logger.warning("GET %s failed (attempt %s/%s), retrying: %s", path, attempt, attempts, e.message)

    def _write(self, method: str, path: str, payload: dict[str, Any]) -> Any:
        try:
            body = json.dumps(payload, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"payload must be JSON-serializable: {e}")
        return self._send(
            method,
            path,
            extra_headers={"Content-Type": "application/json"},
            content=body.encode("utf-8"),
        )

    # auth

    def login(self, username: str, password: str) -> str:
        data = self._send("POST", "/auth/login", json={"username": username, "password": password})
        self.token = data["access_token"]
        return self.token

    # settings

    def get_settings(self) -> dict[str, Any]:
        return self._read("/settings")

    def get_public_settings(self) -> dict[str, Any]:
        return self._read("/settings/public")

    def put_setting(self, key: str, value: Any) -> dict[str, Any]:
        return self._write("PUT", "/settings", {"key": key, "value": value})

    def upload_asset(self, kind: str, filename: str, data: bytes | BinaryIO, content_type: str | None = None) -> str:
        files = {"file": (filename, data, content_type or "application/octet-stream")}
        return self._send("POST", f"/settings/{kind}", files=files)["url"]

    # content

    def list_content(self) -> list[dict[str, Any]]:
        return self._read("/content")

    def get_content_by_type(self, section: str) -> list[dict[str, Any]]:
        return self._read(f"/content/type/{_segment(section)}")

    def put_content(self, section: str, identifier: str, content: Any) -> dict[str, Any]:
        return self._write("PUT", "/content", {"section": section, "identifier": identifier, "content": content})

    def delete_content(self, section: str, identifier: str) -> None:
        self._send("DELETE", f"/content/{_segment(section)}/{_segment(identifier)}")

    # cache resources

    def fetch(self, resource_key: str) -> Any:
        """Resolve a cache resource key to a read request."""
        if resource_key == SETTINGS:
            return self.get_settings()
        if resource_key == PUBLIC_SETTINGS:
            return self.get_public_settings()
        if resource_key == CONTENT:
            return group_content_rows(self.list_content())
        if resource_key.startswith(CONTENT_TYPE_PREFIX):
            return self.get_content_by_type(resource_key[len(CONTENT_TYPE_PREFIX):])
        raise PortalError(f"unknown resource {resource_key!r}")
