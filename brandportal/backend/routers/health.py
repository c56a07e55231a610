"""Health and ready endpoints."""
import redis
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from brandportal.backend.deps import get_db
from brandportal.backend.config import get_settings

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok", "service": "brandportal"}


@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    s = get_settings()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return JSONResponse({"status": "error", "message": str(e)}, status_code=503)

    if s.settings_cache_backend == "redis":
        try:
            r = redis.Redis(host=s.redis_host, port=s.redis_port)
            r.ping()
        except redis.RedisError as e:
            return JSONResponse({"status": "error", "message": f"redis: {e}"}, status_code=503)

    return {"status": "ok"}
