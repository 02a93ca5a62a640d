"""Pydantic models for generated and editorial content."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class DailyTip(BaseModel):
    title: str
    body: str
    category: str = "general"


class ExpertTip(BaseModel):
    title: str
    tip: str
    expert: str | None = None


class ExpertTipsResponse(BaseModel):
    topic: str
    tips: list[ExpertTip]


class DiscoverPostResponse(BaseModel):
    id: int
    title: str
    body: str
    created_at: datetime


class DiscoverFeedResponse(BaseModel):
    posts: list[DiscoverPostResponse]
