"""Profile photo and resume tables.

Revision ID: 001_portfolio_assets
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op


# revision identifiers, used by Alembic.
revision = "001_portfolio_assets"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS profile_photos (
            id BIGSERIAL PRIMARY KEY,
            photo TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS resumes (
            id BIGSERIAL PRIMARY KEY,
            resume TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_profile_photos_created_at "
        "ON profile_photos (created_at DESC, id DESC)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_resumes_created_at "
        "ON resumes (created_at DESC, id DESC)"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS resumes")
    op.execute("DROP TABLE IF EXISTS profile_photos")
