import pytest

from app import deps
from app.infra.sessions import create_session
from app.models import User


@pytest.mark.asyncio
async def test_user_lookup_runs_in_threadpool(db_session, monkeypatch):
    user = User(email="pool@example.com", name="Pool")
    db_session.add(user)
    db_session.commit()
    token = await create_session(user.id, user.email)

    calls = []
    real = deps.run_in_threadpool

    async def recording(func, *args, **kwargs):
        calls.append(func.__name__)
        return await real(func, *args, **kwargs)

    monkeypatch.setattr(deps, "run_in_threadpool", recording)

    found = await deps.get_current_user_optional(token=token, db=db_session)
    assert found is not None
    assert found.id == user.id
    assert calls == ["get_active"]


@pytest.mark.asyncio
async def test_unknown_token_skips_database(db_session, monkeypatch):
    async def fail(*args, **kwargs):
        raise AssertionError("database should not be touched")

    monkeypatch.setattr(deps, "run_in_threadpool", fail)
    assert await deps.get_current_user_optional(token="nope", db=db_session) is None
    assert await deps.get_current_user_optional(token=None, db=db_session) is None


@pytest.mark.asyncio
async def test_inactive_user_has_no_identity(db_session):
    user = User(email="gone@example.com", is_active=False)
    db_session.add(user)
    db_session.commit()
    token = await create_session(user.id, user.email)

    assert await deps.get_current_user_optional(token=token, db=db_session) is None
