"""Content endpoints backed by the TTL-cached content service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from zuna.content.schemas import DailyTip, DiscoverFeedResponse, ExpertTipsResponse
from zuna.content.service import ContentService
from zuna.dependencies import get_content_service
from zuna.gamification.badge_service import local_now

router = APIRouter(prefix="/api/v1/content", tags=["Content"])


@router.get("/daily-tip", response_model=DailyTip)
async def daily_tip(service: ContentService = Depends(get_content_service)) -> DailyTip:
    """Today's tip (app timezone)."""
    return await service.get_daily_tip(local_now().date())


@router.get("/discover", response_model=DiscoverFeedResponse)
async def discover_feed(
    limit: int = Query(20, ge=1, le=100),
    service: ContentService = Depends(get_content_service),
) -> DiscoverFeedResponse:
    return DiscoverFeedResponse(posts=await service.get_discover_feed(limit))


@router.get("/expert-tips", response_model=ExpertTipsResponse)
async def expert_tips(
    topic: str = Query(..., min_length=1, max_length=100),
    service: ContentService = Depends(get_content_service),
) -> ExpertTipsResponse:
    return ExpertTipsResponse(topic=topic, tips=await service.get_expert_tips(topic))
