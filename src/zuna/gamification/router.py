"""Gamification API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from zuna.config import get_settings
from zuna.dependencies import get_badge_service, get_current_user_id
from zuna.gamification.badge_service import BadgeService, UserBadgeView
from zuna.gamification.catalog import BADGES, CATEGORY_LABELS, Badge, visible_badges
from zuna.gamification.schemas import (
    ActivityRequest,
    ActivityResponse,
    AllBadgesResponse,
    BadgeCheckResponse,
    BadgeProgressEntry,
    BadgeProgressResponse,
    BadgeResponse,
    ColoringEvent,
    EarnedBadgeResponse,
    UserBadgesResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


def _badge_response(badge: Badge) -> BadgeResponse:
    return BadgeResponse(
        id=badge.id,
        name=badge.name,
        description=badge.description,
        icon=badge.icon,
        category=badge.category,
        category_label=CATEGORY_LABELS.get(badge.category, badge.category),
        rarity=badge.rarity,
        is_secret=badge.is_secret,
    )


def _earned_response(view: UserBadgeView) -> EarnedBadgeResponse:
    return EarnedBadgeResponse(
        **_badge_response(view.badge).model_dump(),
        unlocked_at=view.unlocked_at,
    )


# ── Public ──


@router.get("/badges", response_model=AllBadgesResponse)
async def list_badges() -> AllBadgesResponse:
    """Badge catalog without secret badges."""
    badges = [_badge_response(b) for b in visible_badges()]
    return AllBadgesResponse(badges=badges, total=len(badges))


# ── Authenticated ──


@router.get("/users/me/badges", response_model=UserBadgesResponse)
async def my_badges(
    user_id: str = Depends(get_current_user_id),
    service: BadgeService = Depends(get_badge_service),
) -> UserBadgesResponse:
    views = await service.get_user_badges(user_id)
    return UserBadgesResponse(
        badges=[_earned_response(v) for v in views],
        total_earned=len(views),
        total_available=len(BADGES),
    )


@router.post("/users/me/badges/check", response_model=BadgeCheckResponse)
async def check_my_badges(
    user_id: str = Depends(get_current_user_id),
    service: BadgeService = Depends(get_badge_service),
) -> BadgeCheckResponse:
    result = await service.check_and_award_badges(user_id)
    return BadgeCheckResponse(
        new_badges=[_earned_response(v) for v in result.new_badges],
        total_badges=len(result.all_badges),
    )


@router.get("/users/me/badges/progress", response_model=BadgeProgressResponse)
async def my_badge_progress(
    user_id: str = Depends(get_current_user_id),
    service: BadgeService = Depends(get_badge_service),
) -> BadgeProgressResponse:
    """Badges closest to completion."""
    entries = await service.get_badge_progress(user_id, limit=get_settings().badge_progress_limit)
    return BadgeProgressResponse(
        progress=[
            BadgeProgressEntry(
                badge=_badge_response(e.badge),
                current=e.current,
                target=e.target,
                percentage=e.percentage,
            )
            for e in entries
        ]
    )


@router.post("/users/me/activity", response_model=ActivityResponse)
async def record_my_activity(
    body: ActivityRequest,
    user_id: str = Depends(get_current_user_id),
    service: BadgeService = Depends(get_badge_service),
) -> ActivityResponse:
    """Record an analysis/story/coloring and return any badges it unlocked."""
    await service.record_activity(user_id, body.type)
    result = await service.check_and_award_badges(user_id)
    return ActivityResponse(new_badges=[_earned_response(v) for v in result.new_badges])


@router.post("/users/me/coloring-activity", response_model=ActivityResponse)
async def record_my_coloring_activity(
    event: ColoringEvent,
    user_id: str = Depends(get_current_user_id),
    service: BadgeService = Depends(get_badge_service),
) -> ActivityResponse:
    await service.record_coloring_activity(user_id, event)
    result = await service.check_and_award_badges(user_id)
    return ActivityResponse(new_badges=[_earned_response(v) for v in result.new_badges])
