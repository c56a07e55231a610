"""Activity logging helpers."""
from __future__ import annotations

from datetime import datetime
from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from brandportal.backend.models.activity_event import ActivityEvent


def log_activity(
    db: Session,
    *,
    action: str,
    details: str | None = None,
    entity_type: str | None = None,
    entity_key: str | None = None,
    user_id: int | None = None,
) -> None:
    row = ActivityEvent(
        action=action,
        details=details,
        entity_type=entity_type,
        entity_key=entity_key,
        user_id=user_id,
        created_at=datetime.utcnow(),
    )
    db.add(row)
    db.commit()


def recent_activities(db: Session, limit: int = 20) -> list[ActivityEvent]:
    return list(
        db.execute(
            select(ActivityEvent).order_by(desc(ActivityEvent.created_at), desc(ActivityEvent.id)).limit(limit)
        ).scalars().all()
    )
