"""Gamification tables.

Creates user_badges, user_activity and user_coloring_stats. The badge
catalog itself lives in code.

Revision ID: 002_gamification_tables
Revises: 001_content_tables
Create Date: 2026-10-17
"""

from collections.abc import Sequence

from alembic import op

revision: str = "002_gamification_tables"
down_revision: str | None = "001_content_tables"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- User Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL,
            badge_id VARCHAR(64) NOT NULL,
            unlocked_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            progress_data JSONB DEFAULT '{}',
            CONSTRAINT user_badges_user_id_badge_id_key UNIQUE (user_id, badge_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_user_badges_user_id
        ON user_badges(user_id)
    """)

    # --- Daily Activity ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_activity (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL,
            activity_date DATE NOT NULL,
            analyses_count INTEGER NOT NULL DEFAULT 0,
            stories_count INTEGER NOT NULL DEFAULT 0,
            colorings_count INTEGER NOT NULL DEFAULT 0,
            first_activity_at TIMESTAMPTZ,
            CONSTRAINT user_activity_user_id_activity_date_key UNIQUE (user_id, activity_date)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_user_activity_user_id
        ON user_activity(user_id)
    """)

    # --- Coloring Stats ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_coloring_stats (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(36) UNIQUE NOT NULL,
            completed_colorings INTEGER NOT NULL DEFAULT 0,
            colors_used_total INTEGER NOT NULL DEFAULT 0,
            colors_used_single_max INTEGER NOT NULL DEFAULT 0,
            brush_types_used INTEGER NOT NULL DEFAULT 0,
            brush_types_array JSONB NOT NULL DEFAULT '[]',
            premium_brushes_used INTEGER NOT NULL DEFAULT 0,
            premium_brushes_array JSONB NOT NULL DEFAULT '[]',
            ai_suggestions_used INTEGER NOT NULL DEFAULT 0,
            harmony_colors_used INTEGER NOT NULL DEFAULT 0,
            reference_images_used INTEGER NOT NULL DEFAULT 0,
            coloring_streak INTEGER NOT NULL DEFAULT 0,
            last_coloring_date DATE,
            coloring_time_total INTEGER NOT NULL DEFAULT 0,
            quick_colorings INTEGER NOT NULL DEFAULT 0,
            marathon_colorings INTEGER NOT NULL DEFAULT 0,
            undo_and_continue INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_coloring_stats")
    op.execute("DROP TABLE IF EXISTS user_activity")
    op.execute("DROP TABLE IF EXISTS user_badges")
