"""Baseline content tables.

users, analyses, storybooks and colorings are normally created by the main
backend; IF NOT EXISTS keeps this migration safe to run against it.

Revision ID: 001_content_tables
Revises: None
Create Date: 2026-10-17
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_content_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(36) PRIMARY KEY,
            name VARCHAR(128),
            children JSONB NOT NULL DEFAULT '[]',
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            last_activity_date DATE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Analyses / storybooks / colorings ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS analyses (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL,
            task_type VARCHAR(32),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_analyses_user_id ON analyses(user_id)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS storybooks (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL,
            title VARCHAR(256),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_storybooks_user_id ON storybooks(user_id)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS colorings (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_colorings_user_id ON colorings(user_id)")

    # --- Discover feed ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS discover_posts (
            id SERIAL PRIMARY KEY,
            title VARCHAR(256) NOT NULL,
            body TEXT NOT NULL DEFAULT '',
            is_published BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_discover_posts_published
        ON discover_posts(created_at DESC) WHERE is_published
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS discover_posts")
