"""Cached editorial content: daily tip, expert tips and the discover feed."""

from __future__ import annotations

from datetime import date

import structlog

from zuna.content.caches import ContentCaches
from zuna.content.generator import BaseTextGenerator, ContentUnavailableError
from zuna.content.schemas import DailyTip, DiscoverPostResponse, ExpertTip
from zuna.db.store import Store
from zuna.json_extractor import extract_model

logger = structlog.get_logger()

FALLBACK_DAILY_TIP = DailyTip(
    title="Birlikte çizin",
    body="Bugün çocuğunuzla aynı kağıda birlikte bir resim çizin ve ona çizdiklerini anlattırın.",
    category="bonding",
)

DAILY_TIP_PROMPT = (
    "Ebeveynler için çocuk çizimleri ve duygusal gelişim üzerine kısa bir günlük ipucu yaz. "
    "Tarih: {day}. Yalnızca JSON döndür: "
    '{{"title": "...", "body": "...", "category": "..."}}'
)

EXPERT_TIPS_PROMPT = (
    "'{topic}' konusunda çocuk gelişimi uzmanlarından 3 kısa ipucu yaz. "
    "Yalnızca JSON dizisi döndür: "
    '[{{"title": "...", "tip": "...", "expert": "..."}}]'
)


class ContentService:
    """Serves content through per-type TTL caches. Failures are never cached."""

    def __init__(self, store: Store, generator: BaseTextGenerator, caches: ContentCaches) -> None:
        self._store = store
        self._generator = generator
        self._caches = caches

    async def get_daily_tip(self, day: date) -> DailyTip:
        async def fetch() -> DailyTip:
            reply = await self._generator.generate(DAILY_TIP_PROMPT.format(day=day.isoformat()))
            tip = extract_model(reply, DailyTip, None)
            if tip is None:
                raise ContentUnavailableError("daily tip reply did not contain a tip")
            return tip

        try:
            return await self._caches.daily_tip.get_or_fetch(day.isoformat(), fetch)
        except ContentUnavailableError:
            logger.warning("daily_tip_fallback", day=day.isoformat())
            return FALLBACK_DAILY_TIP

    async def get_expert_tips(self, topic: str) -> list[ExpertTip]:
        key = topic.strip().lower()

        async def fetch() -> list[ExpertTip]:
            reply = await self._generator.generate(EXPERT_TIPS_PROMPT.format(topic=topic))
            tips = extract_model(reply, list[ExpertTip], None, expect_array=True)
            if tips is None:
                raise ContentUnavailableError("expert tips reply did not contain a tip list")
            return tips

        try:
            return await self._caches.expert_tips.get_or_fetch(key, fetch)
        except ContentUnavailableError:
            logger.warning("expert_tips_fallback", topic=key)
            return []

    async def get_discover_feed(self, limit: int = 20) -> list[DiscoverPostResponse]:
        async def fetch() -> list[DiscoverPostResponse]:
            result = await (
                self._store.table("discover_posts")
                .select("id", "title", "body", "created_at")
                .eq("is_published", True)
                .order("created_at", desc=True)
                .order("id", desc=True)
                .limit(limit)
                .execute()
            )
            if result.error is not None:
                raise ContentUnavailableError(result.error.message)
            return [DiscoverPostResponse.model_validate(row) for row in result.data or ()]

        try:
            return await self._caches.discover_feed.get_or_fetch(f"feed:{limit}", fetch)
        except ContentUnavailableError as exc:
            logger.error("discover_feed_unavailable", error=str(exc))
            return []

    def invalidate_discover_feed(self) -> None:
        """Drop every cached feed page after editorial changes."""
        self._caches.discover_feed.clear()
