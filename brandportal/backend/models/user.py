"""Portal users: admins and clients."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime

from brandportal.backend.database import Base

ROLE_ADMIN = "admin"
ROLE_CLIENT = "client"
ROLE_PENDING = "pending"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default=ROLE_CLIENT)  # admin|client|pending
    status = Column(String(16), nullable=False, default="active")  # active|disabled
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def is_active(self) -> bool:
        return self.status == "active"
