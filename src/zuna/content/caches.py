"""One TTL cache per content type, built once per process and injected."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from zuna.cache import TTLCache
from zuna.config import Settings


@dataclass(frozen=True)
class ContentCaches:
    daily_tip: TTLCache[Any]
    discover_feed: TTLCache[Any]
    expert_tips: TTLCache[Any]

    @classmethod
    def from_settings(cls, settings: Settings) -> ContentCaches:
        size = settings.cache_max_size
        return cls(
            daily_tip=TTLCache(settings.daily_tip_ttl_seconds, max_size=size),
            discover_feed=TTLCache(settings.discover_feed_ttl_seconds, max_size=size),
            expert_tips=TTLCache(settings.expert_tips_ttl_seconds, max_size=size),
        )
