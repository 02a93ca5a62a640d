"""Shared FastAPI dependencies."""

from fastapi import Header, HTTPException, Request, status

from zuna.content.service import ContentService
from zuna.gamification.badge_service import BadgeService


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Caller's id as set by the upstream auth gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()


def get_badge_service(request: Request) -> BadgeService:
    return request.app.state.badge_service


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content_service
