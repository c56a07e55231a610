"""Admin activity feed."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from brandportal.backend.auth import require_admin
from brandportal.backend.deps import get_db
from brandportal.backend.services.activity import recent_activities

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("")
def list_activities(limit: int = Query(20, ge=1, le=200), db: Session = Depends(get_db)):
    return [
        {
            "id": a.id,
            "userId": a.user_id,
            "action": a.action,
            "details": a.details,
            "entityType": a.entity_type,
            "entityKey": a.entity_key,
            "createdAt": a.created_at.isoformat() if a.created_at else None,
        }
        for a in recent_activities(db, limit)
    ]
