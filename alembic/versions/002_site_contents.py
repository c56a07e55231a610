"""Add site_contents for editable public-site blocks.

Revision ID: 002
Revises: 001
Create Date: 2026-09-21

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "site_contents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("section", sa.String(64), nullable=False),
        sa.Column("identifier", sa.String(128), nullable=False),
        sa.Column("content_json", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("section", "identifier", name="uq_site_contents_section_identifier"),
    )
    op.create_index("ix_site_contents_section", "site_contents", ["section"])


def downgrade() -> None:
    op.drop_index("ix_site_contents_section", table_name="site_contents")
    op.drop_table("site_contents")
