"""Content store for the public site: JSON blocks keyed by (section, identifier)."""
import logging
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from brandportal.backend.models.site_content import SiteContent
from brandportal.backend.utils.json_values import ensure_json_value, require_name
from brandportal.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def content_row_dict(row: SiteContent) -> dict[str, Any]:
    return {
        "section": row.section,
        "identifier": row.identifier,
        "content": row.content_json,
        "updatedAt": row.updated_at.isoformat() if row.updated_at else None,
    }


def group_by_section(rows: Iterable[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """{section: {identifier: content}}. Each row lands in exactly one slot."""
    out: dict[str, dict[str, Any]] = {}
    for row in rows:
        out.setdefault(row["section"], {})[row["identifier"]] = row["content"]
    return out


def list_content(db: Session) -> list[SiteContent]:
    return list(
        db.execute(
            select(SiteContent).order_by(SiteContent.section, SiteContent.identifier)
        ).scalars().all()
    )


def list_content_by_section(db: Session, section: str) -> list[SiteContent]:
    return list(
        db.execute(
            select(SiteContent)
            .where(SiteContent.section == section)
            .order_by(SiteContent.identifier)
        ).scalars().all()
    )


def get_all_grouped_by_section(db: Session) -> dict[str, dict[str, Any]]:
    return group_by_section(content_row_dict(r) for r in list_content(db))


def _get_row(db: Session, section: str, identifier: str) -> SiteContent | None:
    return db.execute(
        select(SiteContent).where(
            SiteContent.section == section,
            SiteContent.identifier == identifier,
        )
    ).scalar_one_or_none()


def upsert_content(db: Session, section: str, identifier: str, content: Any) -> SiteContent:
    """Replace the whole content value of one (section, identifier) pair."""
    section = require_name(section, what="section", max_len=64)
    # sections are single URL path segments (/content/type/{section})
    if "/" in section:
        raise ValidationError("section must not contain '/'")
    identifier = require_name(identifier, what="identifier", max_len=128)
    if content is None:
        raise ValidationError("content is required")
    ensure_json_value(content, what="content")
    row = _get_row(db, section, identifier)
    now = datetime.utcnow()
    if row:
        row.content_json = content
        row.updated_at = now
    else:
        row = SiteContent(section=section, identifier=identifier, content_json=content, updated_at=now)
        db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("content updated section=%s identifier=%s", section, identifier)
    return row


def delete_content(db: Session, section: str, identifier: str) -> None:
    row = _get_row(db, section, identifier)
    if not row:
        raise NotFoundError(f"Content {section}/{identifier} not found")
    db.delete(row)
    db.commit()
