"""Health probes, middleware and content endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from conftest import add_rows
from fastapi import FastAPI
from httpx import AsyncClient

from zuna.db import models


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_ready(client: AsyncClient) -> None:
    response = await client.get("/ready")
    assert response.json() == {"status": "ready", "checks": {"database": "ok", "redis": "ok"}}


@pytest.mark.asyncio
async def test_ready_degraded_when_redis_down(app: FastAPI, client: AsyncClient) -> None:
    app.state.redis.ping = AsyncMock(side_effect=ConnectionError("refused"))
    data = (await client.get("/ready")).json()
    assert data["status"] == "degraded"
    assert data["checks"]["redis"] == "error: refused"


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    data = (await client.get("/version")).json()
    assert set(data) == {"version", "environment"}


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert len(response.headers["x-request-id"]) == 36


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-Id": "req-42"})
    assert response.headers["x-request-id"] == "req-42"


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    response = await client.options(
        "/api/v1/badges",
        headers={
            "Origin": "http://localhost:8081",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "X-User-Id",
        },
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:8081"


@pytest.mark.asyncio
async def test_unknown_route_is_json_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found"}


@pytest.mark.asyncio
async def test_daily_tip(client: AsyncClient) -> None:
    response = await client.get("/api/v1/content/daily-tip")
    assert response.status_code == 200
    assert response.json() == {"title": "Renkler", "body": "Bugün mavi tonlarla boyayın.", "category": "general"}


@pytest.mark.asyncio
async def test_discover_feed(client: AsyncClient, session_factory) -> None:
    await add_rows(session_factory, models.DiscoverPost, [{
        "id": 7,
        "title": "Çizimlerde renkler",
        "body": "Renk seçimleri ne anlatır?",
        "created_at": datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc),
    }])

    response = await client.get("/api/v1/content/discover", params={"limit": 5})

    assert response.status_code == 200
    [item] = response.json()["posts"]
    assert (item["id"], item["title"]) == (7, "Çizimlerde renkler")


@pytest.mark.asyncio
async def test_discover_limit_validated(client: AsyncClient) -> None:
    response = await client.get("/api/v1/content/discover", params={"limit": 0})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_expert_tips_requires_topic(client: AsyncClient) -> None:
    response = await client.get("/api/v1/content/expert-tips")
    assert response.status_code == 422
