"""Streak tracking and calendar/clock helpers for the event-driven badges."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime, timedelta

from zuna.db.store import Store, StoreResult

logger = logging.getLogger(__name__)

# (start_hour, end_hour) half-open windows in local time
ACTIVITY_WINDOWS: dict[str, tuple[int, int]] = {
    "night": (0, 4),
    "early_morning": (4, 6),
}
COLORING_WINDOWS: dict[str, tuple[int, int]] = {
    "midnight": (0, 4),
    "sunrise": (5, 7),
    "golden_hour": (17, 19),
}

WEEKEND_BOTH = "weekend_both"


def get_month_day(d: date) -> str:
    """Calendar key used by special-day badges, e.g. '04-23'."""
    return d.strftime("%m-%d")


def matching_windows(now: datetime, windows: dict[str, tuple[int, int]]) -> list[str]:
    """Names of the windows containing ``now.hour``."""
    return [name for name, (start, end) in windows.items() if start <= now.hour < end]


def compute_consecutive_days(activity_dates: Iterable[date], today: date) -> int:
    """Length of the run of active days ending today or yesterday.

    Walks the dates newest first; a date equal to the cursor or the day before
    extends the run, anything older ends it.
    """
    streak = 0
    cursor = today
    for d in sorted(set(activity_dates), reverse=True):
        if d > today:
            continue
        if d == cursor or d == cursor - timedelta(days=1):
            streak += 1
            cursor = d
        else:
            break
    return streak


def advance_coloring_streak(current: int, last_coloring_date: date | None, today: date) -> int:
    """Coloring streak after a completed coloring on ``today``."""
    if last_coloring_date == today:
        return max(current, 1)
    if last_coloring_date == today - timedelta(days=1):
        return current + 1
    return 1


async def update_user_streak(store: Store, user_id: str, today: date) -> StoreResult[int]:
    """Recompute the user's consecutive-day streak from ``user_activity`` and save it.

    Keeps ``longest_streak`` as a high-water mark. Returns the new current streak.
    """
    activity = await (
        store.table("user_activity")
        .select("activity_date")
        .eq("user_id", user_id)
        .lte("activity_date", today)
        .order("activity_date", desc=True)
        .execute()
    )
    if activity.error is not None:
        return StoreResult(error=activity.error)

    current = compute_consecutive_days((r["activity_date"] for r in activity.data or ()), today)

    user = await store.table("users").select("longest_streak").eq("id", user_id).maybe_single().execute()
    if user.error is not None:
        return StoreResult(error=user.error)
    if user.data is None:
        # No profile row yet; nothing to persist
        return StoreResult(data=current)

    longest = max(int(user.data.get("longest_streak") or 0), current)
    updated = await (
        store.table("users")
        .update({"current_streak": current, "longest_streak": longest, "last_activity_date": today})
        .eq("id", user_id)
        .execute()
    )
    if updated.error is not None:
        return StoreResult(error=updated.error)

    logger.debug("Streak for %s is now %d (longest %d)", user_id, current, longest)
    return StoreResult(data=current)
