"""Login for admins and clients."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from sqlalchemy.orm import Session
from sqlalchemy import select

from brandportal.backend.deps import get_db
from brandportal.backend.models.user import User, ROLE_ADMIN
from brandportal.backend.auth import (
    get_password_hash,
    create_user_token,
    verify_password,
    get_current_user,
)
from brandportal.backend.config import get_settings
from brandportal.errors import NotAuthorizedError

router = APIRouter()


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


def ensure_admin_user(db: Session) -> None:
    s = get_settings()
    existing = db.execute(
        select(User).where(User.username == s.admin_default_username)
    ).scalar_one_or_none()
    if existing:
        return
    admin = User(
        username=s.admin_default_username,
        email=s.admin_default_email,
        name="Administrator",
        password_hash=get_password_hash(s.admin_default_password),
        role=ROLE_ADMIN,
    )
    db.add(admin)
    db.commit()


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    ensure_admin_user(db)
    user = db.execute(select(User).where(User.username == data.username)).scalar_one_or_none()
    if not user or not verify_password(data.password, user.password_hash):
        raise NotAuthorizedError("Invalid username or password", status_code=401)
    if not user.is_active:
        raise NotAuthorizedError("User is disabled", status_code=401)
    return TokenResponse(access_token=create_user_token(user))


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"id": user.id, "username": user.username, "name": user.name, "role": user.role}
