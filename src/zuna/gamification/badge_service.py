"""Badge engine: activity rollups, badge evaluation, awarding and progress.

Every public coroutine is safe to call from a request path without a
try/except: store errors come back as ``StoreResult.error`` and are handled at
the call site, and anything unexpected is caught by :func:`fail_safe` and
turned into the method's default (empty list, ``False`` or ``None``).
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, TypeVar
from zoneinfo import ZoneInfo

from zuna.config import get_settings
from zuna.db.store import Store, StoreResult
from zuna.gamification.catalog import (
    BADGES,
    BADGES_BY_ID,
    COLORING_TIME_OF_DAY,
    PREMIUM_BRUSHES,
    SPECIAL_DAY,
    TIME_OF_DAY,
    Badge,
    badges_for_stat,
    badges_for_trigger,
)
from zuna.gamification.criteria import is_met, progress_of
from zuna.gamification.schemas import ColoringEvent
from zuna.gamification.stats import UserStats, coloring_stats_from_row, fetch_user_stats
from zuna.gamification.streak_service import (
    ACTIVITY_WINDOWS,
    COLORING_WINDOWS,
    WEEKEND_BOTH,
    advance_coloring_streak,
    get_month_day,
    matching_windows,
    update_user_streak,
)
from zuna.notifications.push import Notifier, PushNotification

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]

ACTIVITY_COUNTERS = {
    "analysis": "analyses_count",
    "story": "stories_count",
    "coloring": "colorings_count",
}

_EVENT_COUNTERS = {
    "ai_suggestion": "ai_suggestions_used",
    "harmony_used": "harmony_colors_used",
    "reference_used": "reference_images_used",
    "undo_continue": "undo_and_continue",
}

# Narrow checks run after each coloring write
_COLORING_PROGRESS_STATS = ("coloring_time_total", "coloring_streak")


@dataclass(frozen=True)
class UserBadgeView:
    badge_id: str
    badge: Badge
    unlocked_at: datetime


@dataclass(frozen=True)
class BadgeCheckResult:
    new_badges: list[UserBadgeView]
    all_badges: list[UserBadgeView]

    @classmethod
    def empty(cls) -> BadgeCheckResult:
        return cls(new_badges=[], all_badges=[])


@dataclass(frozen=True)
class ProgressEntry:
    badge: Badge
    current: int
    target: int
    percentage: int


def local_now() -> datetime:
    """Current time in the app timezone; calendar days and clock badges use it."""
    return datetime.now(ZoneInfo(get_settings().timezone))


def fail_safe(
    default_factory: Callable[[], T],
    operation: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Catch anything escaping ``func``, log it and return ``default_factory()``."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:  # noqa: ANN401
            try:
                return await func(*args, **kwargs)
            except Exception:
                logger.exception("Error in %s", operation)
                return default_factory()

        return wrapper

    return decorator


def _parse_timestamp(value: datetime | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _to_views(rows: list[dict[str, Any]]) -> list[UserBadgeView]:
    """Join rows against the catalog, dropping ids the catalog no longer knows."""
    views = []
    for row in rows:
        badge = BADGES_BY_ID.get(row["badge_id"])
        if badge is None:
            continue
        views.append(UserBadgeView(badge.id, badge, _parse_timestamp(row["unlocked_at"])))
    return views


def apply_coloring_event(
    row: dict[str, Any],
    event: ColoringEvent,
    today: date,
    *,
    quick_minutes: int,
    marathon_minutes: int,
) -> dict[str, Any]:
    """Column changes one event makes to a ``user_coloring_stats`` row (empty dict for a new row)."""
    changes: dict[str, Any] = {}

    if event.type == "coloring_completed":
        changes["completed_colorings"] = (row.get("completed_colorings") or 0) + 1
        changes["colors_used_total"] = (row.get("colors_used_total") or 0) + event.colors_in_session
        changes["colors_used_single_max"] = max(row.get("colors_used_single_max") or 0, event.colors_in_session)
        if event.session_duration is not None:
            changes["coloring_time_total"] = (row.get("coloring_time_total") or 0) + round(event.session_duration)
            if event.session_duration < quick_minutes:
                changes["quick_colorings"] = (row.get("quick_colorings") or 0) + 1
            elif event.session_duration > marathon_minutes:
                changes["marathon_colorings"] = (row.get("marathon_colorings") or 0) + 1
        changes["coloring_streak"] = advance_coloring_streak(
            row.get("coloring_streak") or 0, row.get("last_coloring_date"), today
        )
        changes["last_coloring_date"] = today

    elif event.type == "brush_used":
        if not event.value:
            return changes
        brushes = set(row.get("brush_types_array") or ())
        if event.value not in brushes:
            brushes.add(event.value)
            changes["brush_types_array"] = sorted(brushes)
            changes["brush_types_used"] = len(brushes)
        if event.value in PREMIUM_BRUSHES:
            premium = set(row.get("premium_brushes_array") or ())
            if event.value not in premium:
                premium.add(event.value)
                changes["premium_brushes_array"] = sorted(premium)
                changes["premium_brushes_used"] = len(premium)

    else:
        column = _EVENT_COUNTERS[event.type]
        changes[column] = (row.get(column) or 0) + 1

    return changes


class BadgeService:
    """Evaluates and awards badges for one store.

    Notifications for new badges are fire-and-forget tasks; ``aclose()`` waits
    for whatever is still in flight.
    """

    def __init__(
        self,
        store: Store,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
        quick_coloring_minutes: int = 5,
        marathon_coloring_minutes: int = 30,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._clock = clock or local_now
        self._quick_minutes = quick_coloring_minutes
        self._marathon_minutes = marathon_coloring_minutes
        self._pending: set[asyncio.Task[None]] = set()

    # ── Reads ──

    async def _fetch_user_badges(self, user_id: str) -> StoreResult[list[UserBadgeView]]:
        result = await (
            self._store.table("user_badges")
            .select()
            .eq("user_id", user_id)
            .order("unlocked_at", desc=True)
            .execute()
        )
        if result.error is not None:
            return StoreResult(error=result.error)
        return StoreResult(data=_to_views(result.data or []))

    @fail_safe(list, "get_user_badges")
    async def get_user_badges(self, user_id: str) -> list[UserBadgeView]:
        """Badges the user owns, newest first."""
        result = await self._fetch_user_badges(user_id)
        if result.error is not None:
            logger.error("Error fetching user badges for %s: %s", user_id, result.error.message)
            return []
        return result.data or []

    @fail_safe(list, "get_badge_progress")
    async def get_badge_progress(self, user_id: str, limit: int | None = None) -> list[ProgressEntry]:
        """Unearned, non-secret badges with progress, closest to completion first."""
        owned_result = await self._fetch_user_badges(user_id)
        if owned_result.error is not None:
            logger.error("Error fetching user badges for %s: %s", user_id, owned_result.error.message)
        owned = {b.badge_id for b in owned_result.data or ()}

        stats = UserStats.empty()
        try:
            stats_result = await fetch_user_stats(self._store, user_id)
        except Exception:
            logger.exception("Error computing stats for %s", user_id)
        else:
            if stats_result.error is not None:
                logger.error("Error computing stats for %s: %s", user_id, stats_result.error.message)
            stats = stats_result.data or stats

        entries = []
        for badge in BADGES:
            if badge.id in owned or badge.is_secret:
                continue
            progress = progress_of(badge.criterion, stats)
            if progress is None:
                continue
            current, target = progress
            if current >= target:
                continue
            percentage = max(0, current * 100 // target)
            entries.append(ProgressEntry(badge, current, target, percentage))

        # sorted() is stable, so ties keep catalog order
        entries = sorted(entries, key=lambda e: e.percentage, reverse=True)
        return entries[:limit] if limit is not None else entries

    # ── Evaluation ──

    @fail_safe(BadgeCheckResult.empty, "check_and_award_badges")
    async def check_and_award_badges(self, user_id: str) -> BadgeCheckResult:
        """Award every catalog badge the user now qualifies for, in one batch write."""
        logger.info("Checking badges for user %s", user_id)

        existing_result = await self._fetch_user_badges(user_id)
        if existing_result.error is not None:
            logger.error("Error fetching user badges for %s: %s", user_id, existing_result.error.message)
            return BadgeCheckResult.empty()
        existing = existing_result.data or []
        owned = {b.badge_id for b in existing}

        stats_result = await fetch_user_stats(self._store, user_id)
        if stats_result.error is not None:
            logger.error("Error computing stats for %s: %s", user_id, stats_result.error.message)
            return BadgeCheckResult(new_badges=[], all_badges=existing)
        stats = stats_result.data

        qualifying = [b for b in BADGES if b.id not in owned and is_met(b.criterion, stats)]
        if not qualifying:
            return BadgeCheckResult(new_badges=[], all_badges=existing)

        unlocked_at = self._clock().astimezone(timezone.utc)
        rows = [
            {"user_id": user_id, "badge_id": b.id, "unlocked_at": unlocked_at, "progress_data": {}}
            for b in qualifying
        ]
        inserted = await (
            self._store.table("user_badges")
            .upsert(rows, on_conflict=("user_id", "badge_id"), ignore_duplicates=True)
            .execute()
        )
        if inserted.error is not None:
            logger.error("Batch badge insert error for %s: %s", user_id, inserted.error.message)
            return BadgeCheckResult(new_badges=[], all_badges=existing)

        # Rows skipped on conflict were awarded by a concurrent pass
        written = {row["badge_id"]: row for row in inserted.data or ()}
        new_badges = _to_views([written[b.id] for b in qualifying if b.id in written])

        for view in new_badges:
            self._notify_badge_earned(user_id, view.badge)

        if new_badges:
            logger.info("Awarded %d new badges to user %s", len(new_badges), user_id)
        return BadgeCheckResult(new_badges=new_badges, all_badges=[*existing, *new_badges])

    @fail_safe(lambda: False, "award_badge")
    async def award_badge(self, user_id: str, badge_id: str) -> bool:
        """Insert one badge. False when unknown, already owned or the write fails."""
        if badge_id not in BADGES_BY_ID:
            logger.warning("Badge not found: %s", badge_id)
            return False

        result = await (
            self._store.table("user_badges")
            .insert({
                "user_id": user_id,
                "badge_id": badge_id,
                "unlocked_at": self._clock().astimezone(timezone.utc),
                "progress_data": {},
            })
            .execute()
        )
        if result.error is not None:
            if result.error.is_unique_violation:
                logger.info("Badge %s already awarded to user %s", badge_id, user_id)
            else:
                logger.error("Error awarding badge %s to user %s: %s", badge_id, user_id, result.error.message)
            return False

        logger.info("Awarded badge %s to user %s", badge_id, user_id)
        return True

    # ── Activity recording ──

    @fail_safe(lambda: None, "record_activity")
    async def record_activity(self, user_id: str, activity_type: str) -> None:
        """Bump today's rollup counter, refresh the streak, then run clock/calendar checks."""
        column = ACTIVITY_COUNTERS.get(activity_type)
        if column is None:
            logger.warning("Ignoring unknown activity type %r for user %s", activity_type, user_id)
            return

        now = self._clock()
        today = now.date()

        existing = await (
            self._store.table("user_activity")
            .select()
            .eq("user_id", user_id)
            .eq("activity_date", today)
            .maybe_single()
            .execute()
        )
        if existing.error is not None:
            logger.error("Error recording activity for %s: %s", user_id, existing.error.message)
            return

        if existing.data is not None:
            write = (
                self._store.table("user_activity")
                .update({column: (existing.data.get(column) or 0) + 1})
                .eq("id", existing.data["id"])
            )
        else:
            counts = {c: int(c == column) for c in ACTIVITY_COUNTERS.values()}
            write = self._store.table("user_activity").insert({
                "user_id": user_id,
                "activity_date": today,
                **counts,
                "first_activity_at": now.astimezone(timezone.utc),
            })

        written = await write.execute()
        if written.error is not None:
            logger.error("Error recording activity for %s: %s", user_id, written.error.message)
            return

        streak = await update_user_streak(self._store, user_id, today)
        if streak.error is not None:
            logger.error("Error updating streak for %s: %s", user_id, streak.error.message)

        await self._check_time_badges(user_id, now)
        await self._check_special_day_badges(user_id, today)

        logger.info("Recorded %s activity for user %s", activity_type, user_id)

    @fail_safe(lambda: None, "record_coloring_activity")
    async def record_coloring_activity(self, user_id: str, event: ColoringEvent) -> None:
        """Fold one coloring event into the lifetime rollup, then award coloring badges."""
        now = self._clock()

        current = await (
            self._store.table("user_coloring_stats").select().eq("user_id", user_id).maybe_single().execute()
        )
        if current.error is not None:
            logger.error("Error recording coloring activity for %s: %s", user_id, current.error.message)
            return

        row = current.data or {}
        changes = self._coloring_changes(row, event, now)
        if current.data is None:
            written = await (
                self._store.table("user_coloring_stats").insert({"user_id": user_id, **changes}).execute()
            )
            if written.error is not None and written.error.is_unique_violation:
                # A concurrent first event created the row; fold onto it
                current = await (
                    self._store.table("user_coloring_stats").select().eq("user_id", user_id).maybe_single().execute()
                )
                if current.error is not None or current.data is None:
                    reason = current.error.message if current.error is not None else "row vanished"
                    logger.error("Error recording coloring activity for %s: %s", user_id, reason)
                    return
                row = current.data
                changes = self._coloring_changes(row, event, now)
                written = await (
                    self._store.table("user_coloring_stats").update(changes).eq("id", row["id"]).execute()
                )
        else:
            written = await self._store.table("user_coloring_stats").update(changes).eq("id", row["id"]).execute()
        if written.error is not None:
            logger.error("Error recording coloring activity for %s: %s", user_id, written.error.message)
            return

        stats_row = (written.data or [{**row, **changes}])[0]
        await self._check_coloring_badges(user_id, stats_row, event, now)

        logger.info("Recorded coloring event %s for user %s", event.type, user_id)

    def _coloring_changes(self, row: dict[str, Any], event: ColoringEvent, now: datetime) -> dict[str, Any]:
        changes = apply_coloring_event(
            row,
            event,
            now.date(),
            quick_minutes=self._quick_minutes,
            marathon_minutes=self._marathon_minutes,
        )
        changes["updated_at"] = now.astimezone(timezone.utc)
        return changes

    # ── Narrow award checks ──

    async def _check_time_badges(self, user_id: str, now: datetime) -> None:
        by_window = badges_for_trigger(TIME_OF_DAY)
        for window in matching_windows(now, ACTIVITY_WINDOWS):
            await self.award_badge(user_id, by_window[window])

    async def _check_special_day_badges(self, user_id: str, today: date) -> None:
        by_day = badges_for_trigger(SPECIAL_DAY)
        badge_id = by_day.get(get_month_day(today))
        if badge_id is not None:
            await self.award_badge(user_id, badge_id)

        # Sunday counts only if Saturday had activity too
        if today.weekday() == 6:
            saturday = await (
                self._store.table("user_activity")
                .select("id")
                .eq("user_id", user_id)
                .eq("activity_date", today - timedelta(days=1))
                .maybe_single()
                .execute()
            )
            if saturday.error is not None:
                logger.error("Error checking weekend activity for %s: %s", user_id, saturday.error.message)
            elif saturday.data is not None:
                await self.award_badge(user_id, by_day[WEEKEND_BOTH])

    async def _check_coloring_badges(
        self,
        user_id: str,
        stats_row: dict[str, Any],
        event: ColoringEvent,
        now: datetime,
    ) -> None:
        owned_result = await self._fetch_user_badges(user_id)
        owned = {b.badge_id for b in owned_result.data or ()}
        stats = UserStats(**coloring_stats_from_row(stats_row))

        for stat in _COLORING_PROGRESS_STATS:
            for badge in badges_for_stat(stat):
                if badge.id not in owned and is_met(badge.criterion, stats):
                    await self.award_badge(user_id, badge.id)

        if event.type == "coloring_completed":
            by_window = badges_for_trigger(COLORING_TIME_OF_DAY)
            for window in matching_windows(now, COLORING_WINDOWS):
                if by_window[window] not in owned:
                    await self.award_badge(user_id, by_window[window])

    # ── Notifications ──

    def _notify_badge_earned(self, user_id: str, badge: Badge) -> None:
        if self._notifier is None:
            return
        notification = PushNotification(
            title="🏆 Yeni Rozet Kazandın!",
            body=f"{badge.icon} {badge.name}: {badge.description}",
            data={"type": "badge_earned", "badgeId": badge.id},
        )
        task = asyncio.create_task(self._notifier.send_push_notification(user_id, notification))
        self._pending.add(task)
        task.add_done_callback(self._on_notification_done)

    def _on_notification_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Badge notification failed: %s", exc)

    async def aclose(self) -> None:
        """Wait for in-flight notifications."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
