"""Branding propagation: settings snapshot -> document metadata.

`apply_branding` is pure. It takes the currently applied branding (None
before the first snapshot) and returns the new state plus the list of
effects a document has to perform. Nothing here touches a document
directly; `DocumentState` and `BrandingPropagator` are the side-effecting
edge.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from brandportal.errors import ValidationError
from brandportal.web.api_client import PUBLIC_SETTINGS
from brandportal.web.colors import HSL, foreground_css, parse_color
from brandportal.web.config import DEFAULT_FAVICON, DEFAULT_PUBLIC_SETTINGS

logger = logging.getLogger(__name__)

CACHE_TOKEN_PARAM = "t"

Clock = Callable[[], int]


def wall_clock_millis() -> int:
    return int(time.time() * 1000)


class CounterClock:
    """Deterministic freshness tokens: 1, 2, 3, ..."""

    def __init__(self, start: int = 0) -> None:
        self.value = start

    def __call__(self) -> int:
        self.value += 1
        return self.value


def strip_cache_token(url: str | None) -> str | None:
    """Base path of an asset URL with the cache-busting parameter removed."""
    if not url:
        return None
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != CACHE_TOKEN_PARAM]
    return urlunsplit(parts._replace(query=urlencode(query)))


def with_cache_token(base: str, token: int) -> str:
    sep = "&" if "?" in base else "?"
    return f"{base}{sep}{CACHE_TOKEN_PARAM}={token}"


def _absolute(path: str) -> str:
    if path.startswith(("http://", "https://", "/")):
        return path
    return f"/{path}"


@dataclass(frozen=True)
class Asset:
    base: str
    token: int

    @property
    def url(self) -> str:
        return with_cache_token(self.base, self.token)


@dataclass(frozen=True)
class AppliedBranding:
    company_name: str
    title: str
    theme: str
    primary_color: str
    primary: HSL
    favicon: Asset
    logo: Asset | None

    def fingerprint(self) -> tuple:
        return (
            self.company_name,
            self.title,
            self.theme,
            self.primary_color,
            self.favicon.base,
            self.logo.base if self.logo else None,
        )


@dataclass(frozen=True)
class Effect:
    kind: str  # title|css_var|theme_class|link|logo
    target: str
    value: str | None


@dataclass(frozen=True)
class BrandingUpdate:
    state: AppliedBranding
    effects: tuple[Effect, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.effects)


def _primary(snapshot: Mapping[str, Any]) -> tuple[str, HSL]:
    raw = snapshot.get("primaryColor") or DEFAULT_PUBLIC_SETTINGS["primaryColor"]
    try:
        return raw, parse_color(raw)
    except ValidationError:
        logger.warning("branding: invalid primary colour %r, using default", raw)
        default = DEFAULT_PUBLIC_SETTINGS["primaryColor"]
        return default, parse_color(default)


def _next_asset(previous: Asset | None, base: str | None, clock: Clock) -> Asset | None:
    if base is None:
        return None
    if previous is not None and previous.base == base:
        return previous
    return Asset(base=base, token=clock())


def _full_effects(state: AppliedBranding) -> list[Effect]:
    return [
        Effect("title", "document", state.title),
        Effect("css_var", "--primary", state.primary.css()),
        Effect("css_var", "--primary-foreground", foreground_css(state.primary)),
        Effect("theme_class", "dark", "on" if state.theme == "dark" else "off"),
        Effect("link", "icon", state.favicon.url),
        Effect("link", "apple-touch-icon", state.favicon.url),
        Effect("logo", "src", state.logo.url if state.logo else None),
    ]


def full_effects(state: AppliedBranding) -> tuple[Effect, ...]:
    """Everything needed to bring a freshly opened document up to `state`."""
    return tuple(_full_effects(state))


def apply_branding(
    current: AppliedBranding | None,
    snapshot: Mapping[str, Any],
    clock: Clock = wall_clock_millis,
) -> BrandingUpdate:
    company = snapshot.get("companyName") or DEFAULT_PUBLIC_SETTINGS["companyName"]
    title = snapshot.get("siteTitle") or company
    theme = "dark" if snapshot.get("theme") == "dark" else "light"
    color_raw, primary = _primary(snapshot)
    favicon_base = _absolute(strip_cache_token(snapshot.get("favicon")) or DEFAULT_FAVICON)
    logo_path = strip_cache_token(snapshot.get("logoPath"))
    logo_base = _absolute(logo_path) if logo_path else None

    candidate_key = (company, title, theme, color_raw, favicon_base, logo_base)
    if current is not None and current.fingerprint() == candidate_key:
        return BrandingUpdate(state=current)

    state = AppliedBranding(
        company_name=company,
        title=title,
        theme=theme,
        primary_color=color_raw,
        primary=primary,
        favicon=_next_asset(current.favicon if current else None, favicon_base, clock),
        logo=_next_asset(current.logo if current else None, logo_base, clock),
    )
    if current is None:
        return BrandingUpdate(state=state, effects=full_effects(state))

    old = {(e.kind, e.target): e for e in _full_effects(current)}
    effects = tuple(e for e in _full_effects(state) if old.get((e.kind, e.target)) != e)
    return BrandingUpdate(state=state, effects=effects)


@dataclass(frozen=True)
class LogoView:
    kind: str  # image|text
    alt: str
    src: str | None = None
    text: str | None = None


def placeholder_text(company_name: str | None) -> str:
    name = (company_name or "").strip() or DEFAULT_PUBLIC_SETTINGS["companyName"]
    return name[:1].upper()


def resolve_logo(state: AppliedBranding | None, image_loaded: bool = True) -> LogoView:
    """Image when available and loadable, otherwise the company initial."""
    company = state.company_name if state else DEFAULT_PUBLIC_SETTINGS["companyName"]
    if state is None or state.logo is None:
        return LogoView(kind="text", alt=company, text=placeholder_text(company))
    if not image_loaded:
        logger.warning("branding: logo failed to load from %s, showing placeholder", state.logo.url)
        return LogoView(kind="text", alt=company, text=placeholder_text(company))
    return LogoView(kind="image", alt=company, src=state.logo.url)


@dataclass
class DocumentState:
    """In-memory document head: what a browser tab would hold after the effects."""

    title: str = ""
    css_vars: dict[str, str] = field(default_factory=dict)
    classes: set[str] = field(default_factory=set)
    links: dict[str, str] = field(default_factory=dict)
    logo_src: str | None = None
    mutations: int = 0

    def apply(self, effects: Iterable[Effect]) -> None:
        for effect in effects:
            self.mutations += 1
            if effect.kind == "title":
                self.title = effect.value or ""
            elif effect.kind == "css_var":
                self.css_vars[effect.target] = effect.value or ""
            elif effect.kind == "theme_class":
                if effect.value == "on":
                    self.classes.add(effect.target)
                else:
                    self.classes.discard(effect.target)
            elif effect.kind == "link":
                self.links[effect.target] = effect.value or ""
            elif effect.kind == "logo":
                self.logo_src = effect.value
            else:
                raise ValueError(f"unknown effect kind {effect.kind!r}")


class BrandingPropagator:
    """Keeps every attached document in line with the public settings."""

    def __init__(self, context, clock: Clock = wall_clock_millis) -> None:
        self.context = context
        self.clock = clock
        self.state: AppliedBranding | None = None
        self.documents: list[DocumentState] = []
        self._subscription = None

    def attach(self, document: DocumentState) -> DocumentState:
        self.documents.append(document)
        if self.state is not None:
            document.apply(full_effects(self.state))
        return document

    def detach(self, document: DocumentState) -> None:
        if document in self.documents:
            self.documents.remove(document)

    def start(self) -> None:
        if self._subscription is None:
            self._subscription = self.context.subscribe(PUBLIC_SETTINGS, self._on_settings)
            if self.state is None and not self._subscription.loading:
                self._on_settings(self._subscription)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def _on_settings(self, sub) -> None:
        if sub.loading:
            return
        snapshot = sub.value
        if sub.error is not None:
            logger.warning("branding: settings fetch failed (%s), using %s", sub.error.message,
                           "last snapshot" if snapshot else "defaults")
        if not snapshot:
            snapshot = DEFAULT_PUBLIC_SETTINGS
        self.push(snapshot)

    def push(self, snapshot: Mapping[str, Any]) -> BrandingUpdate:
        update = apply_branding(self.state, snapshot, self.clock)
        self.state = update.state
        if update.changed:
            for document in list(self.documents):
                document.apply(update.effects)
        return update
