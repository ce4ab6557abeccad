"""Initial schema: certificates table.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000+00:00

Creates the certificates table holding one signed record per certified
wipe report.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# Revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Apply migration: Create certificates table."""
    op.create_table(
        "certificates",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("original_name", sa.Text(), nullable=False),
        sa.Column("stored_name", sa.String(length=255), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=False),
        sa.Column("size_bytes", sa.BigInteger(), nullable=False),
        sa.Column("upload_time", sa.String(length=32), nullable=False),
        sa.Column("extracted_text_snippet", sa.Text(), nullable=False),
        sa.Column("signature", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_certificates")),
    )
    op.create_index(
        op.f("ix_certificates_upload_time"),
        "certificates",
        ["upload_time"],
        unique=False,
    )


def downgrade() -> None:
    """Revert migration: Drop certificates table."""
    op.drop_index(op.f("ix_certificates_upload_time"), table_name="certificates")
    op.drop_table("certificates")
