"""Editable content blocks for the public site, keyed by (section, identifier)."""
from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB

from brandportal.backend.database import Base


class SiteContent(Base):
    __tablename__ = "site_contents"

    id = Column(Integer, primary_key=True)
    section = Column(String(64), nullable=False, index=True)
    identifier = Column(String(128), nullable=False)
    content_json = Column(JSONB, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("section", "identifier", name="uq_site_contents_section_identifier"),
    )
