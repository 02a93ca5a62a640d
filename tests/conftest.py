"""Shared test fixtures.

Engine and store tests run against in-memory SQLite with a single shared
connection (StaticPool), so every session sees the same database.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from zuna.cache import TTLCache
from zuna.content.caches import ContentCaches
from zuna.content.generator import BaseTextGenerator, ContentUnavailableError
from zuna.content.service import ContentService
from zuna.database import get_session
from zuna.db import models  # noqa: F401
from zuna.db.base import Base
from zuna.db.store import SqlAlchemyStore, StoreResult
from zuna.gamification.badge_service import BadgeService
from zuna.main import create_app
from zuna.notifications.push import PushNotification

ISTANBUL = ZoneInfo("Europe/Istanbul")

USER_ID = "7f1c2a9e-3b4d-4c5e-8f6a-1b2c3d4e5f60"


class FakeClock:
    """Settable clock; defaults to a plain Wednesday afternoon."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 3, 11, 14, 0, tzinfo=ISTANBUL)

    def __call__(self) -> datetime:
        return self.now

    def set(self, *args: int) -> None:
        self.now = datetime(*args, tzinfo=ISTANBUL)


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, PushNotification]] = []

    async def send_push_notification(self, user_id: str, notification: PushNotification) -> None:
        self.sent.append((user_id, notification))


class FakeGenerator(BaseTextGenerator):
    """Returns canned replies in order; raises ContentUnavailableError when a reply is an exception."""

    def __init__(self, *replies: str | Exception) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        if not reply:
            raise ContentUnavailableError("no reply")
        return reply


def chain_mock(result: StoreResult[Any] | Exception) -> tuple[MagicMock, MagicMock]:
    """Store whose every query chain resolves to ``result`` (or raises it)."""
    query = MagicMock()
    for name in (
        "select", "insert", "update", "upsert",
        "eq", "neq", "gt", "gte", "lt", "lte", "in_",
        "order", "limit", "single", "maybe_single",
    ):
        getattr(query, name).return_value = query
    if isinstance(result, Exception):
        query.execute = AsyncMock(side_effect=result)
    else:
        query.execute = AsyncMock(return_value=result)
    store = MagicMock()
    store.table.return_value = query
    return store, query


# --- Database ---


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> SqlAlchemyStore:
    return SqlAlchemyStore(session_factory)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture
async def badge_service(
    store: SqlAlchemyStore, notifier: RecordingNotifier, clock: FakeClock
) -> AsyncGenerator[BadgeService, None]:
    service = BadgeService(store, notifier=notifier, clock=clock)
    yield service
    await service.aclose()


# --- Row helpers ---


async def add_rows(
    session_factory: async_sessionmaker[AsyncSession], model: type[Base], rows: list[dict[str, Any]]
) -> None:
    if not rows:
        return
    async with session_factory() as session, session.begin():
        await session.execute(insert(model), rows)


async def fetch_rows(
    session_factory: async_sessionmaker[AsyncSession], model: type[Base], **filters: Any
) -> list[Any]:
    async with session_factory() as session:
        stmt = select(model).filter_by(**filters)
        return list((await session.execute(stmt)).scalars())


async def seed_user(
    session_factory: async_sessionmaker[AsyncSession],
    user_id: str = USER_ID,
    *,
    name: str | None = "Ayşe",
    children: list[dict[str, Any]] | None = None,
    current_streak: int = 0,
) -> None:
    await add_rows(session_factory, models.User, [{
        "id": user_id,
        "name": name,
        "children": children if children is not None else [],
        "current_streak": current_streak,
        "longest_streak": current_streak,
    }])


async def seed_analyses(
    session_factory: async_sessionmaker[AsyncSession],
    count: int,
    user_id: str = USER_ID,
    task_types: list[str] | None = None,
) -> None:
    types = task_types or ["DAP"]
    await add_rows(
        session_factory,
        models.Analysis,
        [{"user_id": user_id, "task_type": types[i % len(types)]} for i in range(count)],
    )


# --- HTTP ---


@pytest.fixture
def app(
    badge_service: BadgeService,
    store: SqlAlchemyStore,
    session_factory: async_sessionmaker[AsyncSession],
) -> FastAPI:
    """App with services wired to the SQLite store; lifespan is not run."""
    application = create_app()
    application.state.badge_service = badge_service
    application.state.content_service = ContentService(
        store,
        FakeGenerator('{"title": "Renkler", "body": "Bugün mavi tonlarla boyayın."}'),
        ContentCaches(TTLCache(60), TTLCache(60), TTLCache(60)),
    )
    application.state.redis = MagicMock(ping=AsyncMock(return_value=True))

    async def _session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_session] = _session_override
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
