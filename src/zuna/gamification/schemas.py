"""Pydantic request/response models for gamification endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ActivityType = Literal["analysis", "story", "coloring"]

ColoringEventType = Literal[
    "coloring_completed",
    "brush_used",
    "ai_suggestion",
    "harmony_used",
    "reference_used",
    "undo_continue",
]


# --- Requests ---


class ActivityRequest(BaseModel):
    type: ActivityType


class ColoringEvent(BaseModel):
    """One event from a coloring session.

    ``colors_in_session`` and ``session_duration`` (minutes) only matter for
    ``coloring_completed``; ``value`` carries the brush id for ``brush_used``.
    """

    type: ColoringEventType
    value: str | None = None
    colors_in_session: int = Field(default=0, ge=0)
    session_duration: float | None = Field(default=None, ge=0)


# --- Badge ---


class BadgeResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    category: str
    category_label: str
    rarity: str
    is_secret: bool = False


class AllBadgesResponse(BaseModel):
    badges: list[BadgeResponse]
    total: int


class EarnedBadgeResponse(BadgeResponse):
    unlocked_at: datetime


class UserBadgesResponse(BaseModel):
    badges: list[EarnedBadgeResponse]
    total_earned: int
    total_available: int


class BadgeCheckResponse(BaseModel):
    new_badges: list[EarnedBadgeResponse]
    total_badges: int


class BadgeProgressEntry(BaseModel):
    badge: BadgeResponse
    current: int
    target: int
    percentage: int


class BadgeProgressResponse(BaseModel):
    progress: list[BadgeProgressEntry]


class ActivityResponse(BaseModel):
    new_badges: list[EarnedBadgeResponse]
