"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI

from zuna.config import get_settings
from zuna.content.caches import ContentCaches
from zuna.content.generator import HttpTextGenerator
from zuna.content.router import router as content_router
from zuna.content.service import ContentService
from zuna.database import close_db, get_session_factory, init_db
from zuna.db.store import SqlAlchemyStore
from zuna.gamification.badge_service import BadgeService
from zuna.gamification.router import router as gamification_router
from zuna.health.router import router as health_router
from zuna.middleware import setup_middleware
from zuna.notifications.push import RedisPushNotifier


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle: database, Redis and the services built on them."""
    settings = get_settings()
    await init_db(settings.database_url)
    app.state.redis = redis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )

    store = SqlAlchemyStore(get_session_factory())
    app.state.badge_service = BadgeService(
        store,
        notifier=RedisPushNotifier(app.state.redis),
        quick_coloring_minutes=settings.quick_coloring_minutes,
        marathon_coloring_minutes=settings.marathon_coloring_minutes,
    )
    app.state.content_service = ContentService(
        store,
        HttpTextGenerator(
            settings.content_api_url,
            api_key=settings.content_api_key,
            timeout=settings.content_api_timeout_seconds,
        ),
        ContentCaches.from_settings(settings),
    )

    yield

    await app.state.badge_service.aclose()
    await app.state.redis.aclose()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Zuna API",
        description="Badges, streaks and cached content for the Zuna drawing app",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(gamification_router)
    app.include_router(content_router)

    return app


app = create_app()
