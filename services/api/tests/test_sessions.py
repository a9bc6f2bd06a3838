import json

import pytest

from app.infra import sessions
from app.infra.redis_client import get_redis
from app.settings import settings


@pytest.mark.asyncio
async def test_create_and_get_session():
    token = await sessions.create_session("user-1", "a@example.com")
    data = await sessions.get_session(token)
    assert data["user_id"] == "user-1"
    assert data["email"] == "a@example.com"
    assert "created_at" in data


@pytest.mark.asyncio
async def test_session_has_ttl():
    token = await sessions.create_session("user-1", "a@example.com")
    r = await get_redis()
    ttl = await r.ttl(f"listly:session:{token}")
    assert 0 < ttl <= settings.session_ttl_sec


@pytest.mark.asyncio
async def test_tokens_are_unique():
    first = await sessions.create_session("user-1", "a@example.com")
    second = await sessions.create_session("user-1", "a@example.com")
    assert first != second


@pytest.mark.asyncio
async def test_delete_session():
    token = await sessions.create_session("user-1", "a@example.com")
    assert await sessions.delete_session(token) is True
    assert await sessions.get_session(token) is None
    assert await sessions.delete_session(token) is False


@pytest.mark.asyncio
async def test_unknown_and_empty_tokens():
    assert await sessions.get_session("nope") is None
    assert await sessions.get_session("") is None


@pytest.mark.asyncio
async def test_corrupt_payload_is_dropped():
    r = await get_redis()
    await r.set("listly:session:broken", "{not json")
    assert await sessions.get_session("broken") is None
    assert await r.get("listly:session:broken") is None


@pytest.mark.asyncio
async def test_payload_without_user_is_rejected():
    r = await get_redis()
    await r.set("listly:session:anon", json.dumps({"email": "x@example.com"}))
    assert await sessions.get_session("anon") is None
