"""Email/password auth backed by Redis sessions.

Endpoints:
- POST /auth/register - create account (auto-accepts pending list invitations)
- POST /auth/login    - returns a bearer token and sets the session cookie
- POST /auth/logout   - drops the session
- GET  /auth/session  - current user or null, never 401
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from .. import models, schemas
from ..core.responses import ok
from ..deps import get_current_user_optional, get_session_token, get_user_service
from ..infra.sessions import create_session, delete_session
from ..limiter import limiter
from ..services.user_service import UserService
from ..settings import settings

router = APIRouter(prefix="/auth")
logger = logging.getLogger("listly.auth")


@router.post("/register", response_model=schemas.Envelope[schemas.UserOut], status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
def register(
    request: Request,
    data: schemas.RegisterRequest,
    service: UserService = Depends(get_user_service),
):
    return ok(service.register(data))


@router.post("/login", response_model=schemas.Envelope[schemas.LoginResponse])
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    response: Response,
    data: schemas.LoginRequest,
    service: UserService = Depends(get_user_service),
):
    user = service.authenticate(data.email, data.password)
    token = await create_session(user.id, user.email)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_sec,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    logger.info("user %s logged in", user.id)
    return ok({"token": token, "user": user})


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
):
    if token:
        await delete_session(token)
    response.delete_cookie(settings.session_cookie_name)


@router.get("/session", response_model=schemas.Envelope[schemas.SessionOut])
async def session(user: Optional[models.User] = Depends(get_current_user_optional)):
    return ok({"user": user})
