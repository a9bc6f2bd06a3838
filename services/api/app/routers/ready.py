import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from redis.exceptions import RedisError

from app.db import get_db
from app.infra.redis_client import get_redis

router = APIRouter()
logger = logging.getLogger("listly.ready")


@router.get("/ready")
async def ready(db: Session = Depends(get_db)):
    redis_ok = False
    try:
        r = await get_redis()
        await r.ping()
        redis_ok = True
    except (RedisError, OSError) as e:
        logger.warning("redis not ready: %s", e)

    db_ok = False
    try:
        await run_in_threadpool(db.execute, text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        logger.warning("database not ready: %s", e)

    return {"ok": True, "redis_ok": redis_ok, "db_ok": db_ok}
