"""Public-site content blocks: admin editing and public reads by section."""
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from brandportal.backend.auth import require_admin
from brandportal.backend.deps import get_db
from brandportal.backend.models.user import User
from brandportal.backend.services.activity import log_activity
from brandportal.backend.services.site_content import (
    content_row_dict,
    delete_content,
    list_content,
    list_content_by_section,
    upsert_content,
)

router = APIRouter()


class ContentUpdate(BaseModel):
    section: str
    identifier: str
    content: Any = None


@router.get("")
def read_content(db: Session = Depends(get_db), _: User = Depends(require_admin)) -> list[dict[str, Any]]:
    """Flat list; callers group by section/identifier."""
    return [content_row_dict(r) for r in list_content(db)]


@router.put("")
def write_content(
    payload: ContentUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    row = upsert_content(db, payload.section, payload.identifier, payload.content)
    log_activity(
        db,
        action="Content Updated",
        details=f"Content {row.section}/{row.identifier} was updated",
        entity_type="content",
        entity_key=f"{row.section}/{row.identifier}",
        user_id=admin.id,
    )
    return content_row_dict(row)


@router.delete("/{section}/{identifier:path}")
def remove_content(
    section: str,
    identifier: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    delete_content(db, section, identifier)
    log_activity(
        db,
        action="Content Deleted",
        details=f"Content {section}/{identifier} was deleted",
        entity_type="content",
        entity_key=f"{section}/{identifier}",
        user_id=admin.id,
    )
    return {"ok": True}


@router.get("/type/{content_type}")
def read_content_by_type(content_type: str, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [content_row_dict(r) for r in list_content_by_section(db, content_type)]
