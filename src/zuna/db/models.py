"""ORM models for the tables the gamification engine reads and writes.

``users``, ``analyses``, ``storybooks`` and ``colorings`` are owned by other
parts of the backend; only the columns the engine touches are mapped here.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from zuna.db.base import Base, JSONType

# ---------------------------------------------------------------------------
# Users and content (read-mostly)
# ---------------------------------------------------------------------------


class User(Base):
    """Parent or educator account. Streak columns are maintained by the badge engine."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(128))
    children: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_activity_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Analysis(Base):
    """A completed drawing analysis."""

    __tablename__ = "analyses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    task_type: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Storybook(Base):
    """A generated storybook."""

    __tablename__ = "storybooks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    title: Mapped[str | None] = mapped_column(String(256))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Coloring(Base):
    """A generated coloring page."""

    __tablename__ = "colorings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class DiscoverPost(Base):
    """Editorial post shown in the discover feed."""

    __tablename__ = "discover_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


# ---------------------------------------------------------------------------
# Gamification
# ---------------------------------------------------------------------------


class UserBadge(Base):
    """Badges earned by users. UNIQUE(user_id, badge_id) prevents duplicates."""

    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="user_badges_user_id_badge_id_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    badge_id: Mapped[str] = mapped_column(String(64), nullable=False)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    progress_data: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)


class UserActivity(Base):
    """Daily activity rollup, one row per (user, calendar day)."""

    __tablename__ = "user_activity"
    __table_args__ = (
        UniqueConstraint("user_id", "activity_date", name="user_activity_user_id_activity_date_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    activity_date: Mapped[date] = mapped_column(Date, nullable=False)
    analyses_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stories_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    colorings_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    first_activity_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class UserColoringStats(Base):
    """Lifetime coloring rollup feeding the coloring badges."""

    __tablename__ = "user_coloring_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    completed_colorings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    colors_used_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    colors_used_single_max: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    brush_types_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    brush_types_array: Mapped[list[str]] = mapped_column(JSONType, default=list)
    premium_brushes_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    premium_brushes_array: Mapped[list[str]] = mapped_column(JSONType, default=list)
    ai_suggestions_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    harmony_colors_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reference_images_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    coloring_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_coloring_date: Mapped[date | None] = mapped_column(Date)
    coloring_time_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quick_colorings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    marathon_colorings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    undo_and_continue: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
