"""Branding settings: admin read/write, public subset, logo/favicon upload."""
import logging
from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from brandportal.backend.auth import require_admin
from brandportal.backend.deps import get_db
from brandportal.backend.models.user import User
from brandportal.backend.services.activity import log_activity
from brandportal.backend.services.site_settings import (
    get_all_settings,
    get_public_settings,
    set_asset_setting,
    upsert_setting,
)
from brandportal.backend.services.uploads import store_asset

router = APIRouter()
logger = logging.getLogger(__name__)


class SettingUpdate(BaseModel):
    key: str
    value: Any


class UploadResponse(BaseModel):
    url: str


@router.get("")
def read_settings(db: Session = Depends(get_db), _: User = Depends(require_admin)) -> dict[str, Any]:
    return get_all_settings(db)


@router.get("/public")
def read_public_settings(db: Session = Depends(get_db)) -> dict[str, Any]:
    return get_public_settings(db)


@router.put("")
def write_setting(
    payload: SettingUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    upsert_setting(db, payload.key, payload.value, updated_by=admin.id)
    log_activity(
        db,
        action="Settings Updated",
        details=f"Setting {payload.key.strip()} was updated",
        entity_type="settings",
        entity_key=payload.key.strip(),
        user_id=admin.id,
    )
    return {"key": payload.key.strip(), "value": payload.value}


def _upload_asset(kind: str, file: UploadFile, db: Session, admin: User) -> UploadResponse:
    url, size = store_asset(kind, file.filename, file.file)
    key = set_asset_setting(db, kind, url, updated_by=admin.id)
    log_activity(
        db,
        action=f"{kind.capitalize()} Uploaded",
        details=f"New {kind} uploaded: {url}",
        entity_type="asset",
        entity_key=key,
        user_id=admin.id,
    )
    logger.info("%s uploaded url=%s size=%s by=%s", kind, url, size, admin.id)
    return UploadResponse(url=url)


@router.post("/logo", response_model=UploadResponse)
def upload_logo(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return _upload_asset("logo", file, db, admin)


@router.post("/favicon", response_model=UploadResponse)
def upload_favicon(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return _upload_asset("favicon", file, db, admin)
