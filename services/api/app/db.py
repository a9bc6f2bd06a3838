"""Database engine and per-request sessions.

The engine (and its pool) is built lazily once per process from
``Settings``; ``get_db`` hands each request its own ``Session``.
"""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .settings import Settings, settings


class Base(DeclarativeBase):
    pass


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def engine_options(url: str, config: Settings = settings) -> dict:
    """Keyword arguments for ``create_engine``.

    SQLite gets no pool sizing (its default pool ignores it) and must allow
    use from FastAPI's worker threads.
    """
    options: dict = {"pool_pre_ping": True, "echo": config.db_echo}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        return options
    options.update(
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_recycle=config.db_pool_recycle_sec,
    )
    return options


def init_engine(database_url: str | None = None) -> Engine:
    global _engine, _session_factory
    url = database_url or settings.database_url
    _engine = create_engine(url, **engine_options(url))
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_db():
    if _session_factory is None:
        init_engine()
    db = _session_factory()
    try:
        yield db
    finally:
        db.close()
