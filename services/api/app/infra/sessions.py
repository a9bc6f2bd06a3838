"""Redis-backed login sessions.

A session is a JSON payload stored under ``listly:session:<token>`` with a
TTL. The token itself is the only thing handed to the client (bearer header
or httpOnly cookie).
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.security import new_token
from app.infra.redis_client import get_redis
from app.settings import settings

logger = logging.getLogger("listly.sessions")


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()

def _session_key(token: str) -> str:
    return f"listly:session:{token}"


async def create_session(user_id: str, email: str) -> str:
    token = new_token()
    payload = {"user_id": user_id, "email": email, "created_at": _iso_now()}
    r = await get_redis()
    await r.set(_session_key(token), json.dumps(payload), ex=settings.session_ttl_sec)
    logger.info("session created for user %s", user_id)
    return token


async def get_session(token: str) -> Optional[dict]:
    if not token:
        return None
    r = await get_redis()
    raw = await r.get(_session_key(token))
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("dropping unreadable session payload")
        await r.delete(_session_key(token))
        return None
    if not data.get("user_id"):
        return None
    return data


async def delete_session(token: str) -> bool:
    r = await get_redis()
    return bool(await r.delete(_session_key(token)))
