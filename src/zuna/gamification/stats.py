"""User statistics snapshot that every badge criterion evaluates against."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from zuna.db.store import Store, StoreResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserStats:
    total_analyses: int = 0
    total_stories: int = 0
    total_colorings: int = 0
    unique_test_types: frozenset[str] = field(default_factory=frozenset)
    consecutive_days: int = 0
    children_count: int = 0
    profile_complete: bool = False

    # Lifetime coloring rollup
    completed_colorings: int = 0
    colors_used_total: int = 0
    colors_used_single_max: int = 0
    brush_types: frozenset[str] = field(default_factory=frozenset)
    premium_brushes: frozenset[str] = field(default_factory=frozenset)
    ai_suggestions_used: int = 0
    harmony_colors_used: int = 0
    reference_images_used: int = 0
    coloring_streak: int = 0
    coloring_time_total: int = 0
    quick_colorings: int = 0
    marathon_colorings: int = 0
    undo_and_continue: int = 0

    @classmethod
    def empty(cls) -> UserStats:
        """All-zero snapshot used when the real one can't be computed."""
        return cls()


_COLORING_COUNTERS = (
    "completed_colorings",
    "colors_used_total",
    "colors_used_single_max",
    "ai_suggestions_used",
    "harmony_colors_used",
    "reference_images_used",
    "coloring_streak",
    "coloring_time_total",
    "quick_colorings",
    "marathon_colorings",
    "undo_and_continue",
)


def coloring_stats_from_row(row: dict[str, Any] | None) -> dict[str, Any]:
    if row is None:
        return {}
    fields: dict[str, Any] = {name: int(row.get(name) or 0) for name in _COLORING_COUNTERS}
    fields["brush_types"] = frozenset(row.get("brush_types_array") or ())
    fields["premium_brushes"] = frozenset(row.get("premium_brushes_array") or ())
    return fields


async def fetch_user_stats(store: Store, user_id: str) -> StoreResult[UserStats]:
    """Aggregate a fresh snapshot. Any failed query fails the whole snapshot.

    Queries run one after another; they are cheap and the store may hand out
    a single connection.
    """
    analyses = await store.table("analyses").select("task_type", count=True).eq("user_id", user_id).execute()
    if analyses.error is not None:
        return StoreResult(error=analyses.error)

    stories = await store.table("storybooks").select(head=True).eq("user_id", user_id).execute()
    if stories.error is not None:
        return StoreResult(error=stories.error)

    colorings = await store.table("colorings").select(head=True).eq("user_id", user_id).execute()
    if colorings.error is not None:
        return StoreResult(error=colorings.error)

    user = await (
        store.table("users")
        .select("name", "children", "current_streak")
        .eq("id", user_id)
        .maybe_single()
        .execute()
    )
    if user.error is not None:
        return StoreResult(error=user.error)

    coloring_stats = await (
        store.table("user_coloring_stats").select().eq("user_id", user_id).maybe_single().execute()
    )
    if coloring_stats.error is not None:
        return StoreResult(error=coloring_stats.error)

    user_row = user.data or {}
    children = user_row.get("children") or []
    task_types = frozenset(r["task_type"] for r in analyses.data or () if r.get("task_type"))

    stats = UserStats(
        total_analyses=analyses.count or 0,
        total_stories=stories.count or 0,
        total_colorings=colorings.count or 0,
        unique_test_types=task_types,
        consecutive_days=int(user_row.get("current_streak") or 0),
        children_count=len(children),
        profile_complete=bool(user_row.get("name")) and len(children) > 0,
        **coloring_stats_from_row(coloring_stats.data),
    )
    return StoreResult(data=stats)
