"""Branding settings store (site_settings table, one row per key).

Reads of the full mapping go through the aggregate cache; every write bumps
the cache version after commit, so a read following a confirmed write never
sees the previous value.
"""
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from brandportal.backend.config import get_settings
from brandportal.backend.models.site_setting import SiteSetting
from brandportal.backend.services.settings_cache import get_settings_cache
from brandportal.backend.utils.json_values import ensure_json_value, require_name

logger = logging.getLogger(__name__)

COMPANY_NAME = "companyName"
LOGO_PATH = "logoPath"
PRIMARY_COLOR = "primaryColor"
THEME = "theme"
RADIUS = "radius"
SITE_TITLE = "siteTitle"
SITE_DESCRIPTION = "siteDescription"
FAVICON = "favicon"

# Safe for unauthenticated consumers.
PUBLIC_KEYS = (
    COMPANY_NAME,
    LOGO_PATH,
    PRIMARY_COLOR,
    THEME,
    RADIUS,
    SITE_TITLE,
    SITE_DESCRIPTION,
    FAVICON,
)

# Setting written by each asset upload kind.
ASSET_KEYS = {
    "logo": LOGO_PATH,
    "favicon": FAVICON,
}


def public_defaults() -> dict[str, Any]:
    s = get_settings()
    return {
        COMPANY_NAME: s.default_company_name,
        LOGO_PATH: None,
        PRIMARY_COLOR: s.default_primary_color,
        THEME: "light",
        RADIUS: 0.5,
        SITE_TITLE: s.default_site_title,
        SITE_DESCRIPTION: "",
        FAVICON: None,
    }


def _load_all(db: Session) -> dict[str, Any]:
    rows = db.execute(select(SiteSetting)).scalars().all()
    return {row.key: row.value_json for row in rows}


def get_all_settings(db: Session) -> dict[str, Any]:
    """All stored settings as {key: value}. Absent keys are simply missing."""
    return get_settings_cache().get(lambda: _load_all(db))


def get_public_settings(db: Session) -> dict[str, Any]:
    """Public subset; keys without a stored row (or stored as null) get defaults."""
    stored = get_all_settings(db)
    out = public_defaults()
    for key in PUBLIC_KEYS:
        if stored.get(key) is not None:
            out[key] = stored[key]
    return out


def upsert_setting(db: Session, key: str, value: Any, updated_by: int | None = None) -> None:
    """Insert or overwrite one setting. Last write wins; no conflict detection."""
    key = require_name(key, what="key")
    ensure_json_value(value)
    row = db.get(SiteSetting, key)
    now = datetime.utcnow()
    if row:
        row.value_json = value
        row.updated_by = updated_by
        row.updated_at = now
    else:
        db.add(SiteSetting(key=key, value_json=value, updated_by=updated_by, updated_at=now))
    db.commit()
    get_settings_cache().invalidate()
    logger.info("setting updated key=%s by=%s", key, updated_by)


def set_asset_setting(db: Session, kind: str, url: str, updated_by: int | None = None) -> str:
    """Point the logo/favicon setting at a freshly uploaded file. Returns the key written."""
    key = ASSET_KEYS[kind]
    upsert_setting(db, key, url, updated_by=updated_by)
    return key
