"""Push notifications over Redis pub/sub.

The mobile push gateway pattern-subscribes to ``push:user:*`` and forwards each
message to the user's registered devices.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushNotification:
    title: str
    body: str = ""
    data: dict[str, Any] = field(default_factory=dict)


class Notifier(Protocol):
    async def send_push_notification(self, user_id: str, notification: PushNotification) -> None: ...


def channel_for(user_id: str) -> str:
    return f"push:user:{user_id}"


class RedisPushNotifier:
    """Publish push payloads to the per-user channel."""

    def __init__(self, redis: object | None) -> None:
        self._redis = redis

    async def send_push_notification(self, user_id: str, notification: PushNotification) -> None:
        if self._redis is None:
            return

        payload = {"user_id": user_id, **asdict(notification)}
        try:
            await self._redis.publish(channel_for(user_id), json.dumps(payload, ensure_ascii=False))  # type: ignore[union-attr]
        except Exception:
            logger.warning("Failed to publish push notification via %s", channel_for(user_id), exc_info=True)
