"""Branding propagation: pure transition, cache-busting tokens, document effects."""
import logging

from brandportal.web.branding import (
    CounterClock,
    DocumentState,
    apply_branding,
    resolve_logo,
    strip_cache_token,
    with_cache_token,
)
from brandportal.web.config import DEFAULT_FAVICON, DEFAULT_PUBLIC_SETTINGS

SNAPSHOT = {
    "companyName": "Acme Ltd",
    "siteTitle": "Acme Client Portal",
    "primaryColor": "#3b82f6",
    "theme": "light",
    "logoPath": "/uploads/logo-1.png",
    "favicon": "/uploads/favicon-1.ico",
}


def _effects_by_target(update):
    return {(e.kind, e.target): e.value for e in update.effects}


def test_first_application_emits_full_effect_set():
    update = apply_branding(None, SNAPSHOT, CounterClock())
    effects = _effects_by_target(update)

    assert effects[("title", "document")] == "Acme Client Portal"
    assert effects[("css_var", "--primary")] == "217.2 91.2% 59.8%"
    assert effects[("css_var", "--primary-foreground")] == "0 0% 98%"
    assert effects[("theme_class", "dark")] == "off"
    assert effects[("link", "icon")] == "/uploads/favicon-1.ico?t=1"
    assert effects[("link", "apple-touch-icon")] == "/uploads/favicon-1.ico?t=1"
    assert effects[("logo", "src")] == "/uploads/logo-1.png?t=2"


def test_same_snapshot_is_a_no_op():
    clock = CounterClock()
    first = apply_branding(None, SNAPSHOT, clock)
    second = apply_branding(first.state, dict(SNAPSHOT), clock)

    assert second.state is first.state
    assert second.effects == ()
    assert not second.changed
    assert clock.value == 2


def test_token_is_kept_when_asset_path_is_unchanged():
    clock = CounterClock()
    first = apply_branding(None, SNAPSHOT, clock)
    # the server echoes a token-carrying URL back; the base is what counts
    echoed = dict(SNAPSHOT, logoPath=first.state.logo.url, primaryColor="#10b981")
    second = apply_branding(first.state, echoed, clock)

    assert second.changed
    assert second.state.logo == first.state.logo
    assert ("logo", "src") not in _effects_by_target(second)
    assert ("css_var", "--primary") in _effects_by_target(second)


def test_token_changes_when_asset_path_changes():
    clock = CounterClock()
    first = apply_branding(None, SNAPSHOT, clock)
    second = apply_branding(first.state, dict(SNAPSHOT, logoPath="/uploads/logo-2.png"), clock)

    effects = _effects_by_target(second)
    assert effects == {("logo", "src"): "/uploads/logo-2.png?t=3"}
    assert second.state.favicon == first.state.favicon


def test_title_falls_back_to_company_name():
    update = apply_branding(None, dict(SNAPSHOT, siteTitle=""), CounterClock())
    assert _effects_by_target(update)[("title", "document")] == "Acme Ltd"


def test_dark_theme_and_light_primary():
    update = apply_branding(None, dict(SNAPSHOT, theme="dark", primaryColor="#fde68a"), CounterClock())
    effects = _effects_by_target(update)
    assert effects[("theme_class", "dark")] == "on"
    assert effects[("css_var", "--primary-foreground")] == "0 0% 10%"


def test_invalid_colour_keeps_default(caplog):
    with caplog.at_level(logging.WARNING, logger="brandportal.web.branding"):
        update = apply_branding(None, dict(SNAPSHOT, primaryColor="not-a-colour"), CounterClock())
    assert update.state.primary_color == DEFAULT_PUBLIC_SETTINGS["primaryColor"]
    assert "invalid primary colour" in caplog.text


def test_missing_favicon_uses_default_and_no_logo():
    update = apply_branding(None, {"companyName": "Acme Ltd"}, CounterClock())
    effects = _effects_by_target(update)
    assert effects[("link", "icon")] == f"{DEFAULT_FAVICON}?t=1"
    assert effects[("logo", "src")] is None
    assert update.state.logo is None


def test_cache_token_helpers():
    assert strip_cache_token("/uploads/logo-1.png?t=123") == "/uploads/logo-1.png"
    assert strip_cache_token("/uploads/logo-1.png?v=2&t=123") == "/uploads/logo-1.png?v=2"
    assert strip_cache_token(None) is None
    assert with_cache_token("/uploads/logo-1.png", 5) == "/uploads/logo-1.png?t=5"
    assert with_cache_token("/uploads/logo-1.png?v=2", 5) == "/uploads/logo-1.png?v=2&t=5"


def test_document_state_applies_effects_and_counts_mutations():
    clock = CounterClock()
    first = apply_branding(None, SNAPSHOT, clock)
    doc = DocumentState()
    doc.apply(first.effects)

    assert doc.title == "Acme Client Portal"
    assert doc.css_vars["--primary"] == "217.2 91.2% 59.8%"
    assert "dark" not in doc.classes
    assert doc.links["icon"] == "/uploads/favicon-1.ico?t=1"
    assert doc.logo_src == "/uploads/logo-1.png?t=2"
    applied = doc.mutations

    doc.apply(apply_branding(first.state, SNAPSHOT, clock).effects)
    assert doc.mutations == applied

    doc.apply(apply_branding(first.state, dict(SNAPSHOT, theme="dark"), clock).effects)
    assert "dark" in doc.classes
    assert doc.mutations == applied + 1


def test_resolve_logo_image_and_fallback(caplog):
    state = apply_branding(None, SNAPSHOT, CounterClock()).state

    view = resolve_logo(state)
    assert view.kind == "image"
    assert view.src == "/uploads/logo-1.png?t=2"
    assert view.alt == "Acme Ltd"

    with caplog.at_level(logging.WARNING, logger="brandportal.web.branding"):
        broken = resolve_logo(state, image_loaded=False)
    assert broken.kind == "text"
    assert broken.text == "A"
    assert "logo failed to load" in caplog.text


def test_resolve_logo_without_logo_or_state():
    state = apply_branding(None, {"companyName": "zeta systems"}, CounterClock()).state
    assert resolve_logo(state).text == "Z"
    view = resolve_logo(None)
    assert view.kind == "text"
    assert view.text == DEFAULT_PUBLIC_SETTINGS["companyName"][0]
