"""JWT bearer authentication and role checks."""
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from brandportal.backend.config import get_settings
from brandportal.backend.deps import get_db
from brandportal.backend.models.user import User, ROLE_ADMIN
from brandportal.errors import NotAuthorizedError

security = HTTPBearer(auto_error=False)

# bcrypt limit; pass as bytes to avoid passlib's internal 72-byte test crash
_MAX_PW_BYTES = 72


def _to_bytes(s: str) -> bytes:
    b = s.encode("utf-8")
    return b[: _MAX_PW_BYTES] if len(b) > _MAX_PW_BYTES else b


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_to_bytes(plain), hashed.encode() if isinstance(hashed, str) else hashed)
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(_to_bytes(password), bcrypt.gensalt()).decode()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    s = get_settings()
    to_encode = data.copy()
    exp = expires_delta or timedelta(minutes=s.jwt_expire_minutes)
    to_encode.update({"exp": datetime.utcnow() + exp})
    return jwt.encode(to_encode, s.jwt_secret, algorithm=s.jwt_algorithm)


def create_user_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role})


def decode_token(token: str) -> Optional[dict]:
    s = get_settings()
    try:
        return jwt.decode(token, s.jwt_secret, algorithms=[s.jwt_algorithm])
    except JWTError:
        return None


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if not credentials:
        raise NotAuthorizedError("Unauthorized", status_code=401)
    payload = decode_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise NotAuthorizedError("Invalid token", status_code=401)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise NotAuthorizedError("Invalid token", status_code=401)
    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise NotAuthorizedError("Unauthorized", status_code=401)
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Role is re-read from the database, not trusted from the token."""
    if user.role != ROLE_ADMIN:
        raise NotAuthorizedError("Forbidden: Insufficient permissions", status_code=403)
    return user
