"""FastAPI dependencies for Listly API.

Provides:
- Database session dependency
- Current user resolution (bearer token or session cookie -> Redis session -> User)
- Lenient pagination parsing
- Per-request service construction around the request's DB session
"""

from typing import Optional

from fastapi import Depends, Header, Query, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from .core.errors import UnauthorizedError
from .core.pagination import Page
from .db import get_db
from .infra.sessions import get_session
from .models import User
from .services.category_service import CategoryService
from .services.collaboration_service import CollaborationService
from .services.item_service import ItemService
from .services.list_service import ListService
from .services.meal_plan_service import MealPlanService
from .services.pantry_service import PantryService
from .services.recipe_service import RecipeService
from .services.store_service import StoreService
from .services.user_service import UserService
from .settings import settings


def get_session_token(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> Optional[str]:
    """Bearer header wins over the cookie."""
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return request.cookies.get(settings.session_cookie_name)


async def has_live_session(request: Request) -> bool:
    """Session check that needs no parsed body or DB session."""
    token = get_session_token(request, request.headers.get("authorization"))
    return bool(token) and await get_session(token) is not None


async def get_current_user_optional(
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
) -> Optional[User]:
    if not token:
        return None
    session = await get_session(token)
    if not session:
        return None
    return await run_in_threadpool(UserService(db).get_active, session["user_id"])


async def get_current_user(
    user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    """Authentication gate for /api/v1.

    Raises:
        UnauthorizedError (401) when there is no valid session
    """
    if user is None:
        raise UnauthorizedError()
    return user


def get_pagination(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
) -> Page:
    """Raw strings on purpose: junk like ?page=abc falls back to defaults instead of a 400."""
    return Page.parse(page, limit)


def pagination_with_default(default_limit: int):
    def _dep(
        page: Optional[str] = Query(None),
        limit: Optional[str] = Query(None),
    ) -> Page:
        return Page.parse(page, limit, default_limit=default_limit)
    return _dep


# --- Services ---

def get_list_service(db: Session = Depends(get_db)) -> ListService:
    return ListService(db)


def get_item_service(db: Session = Depends(get_db)) -> ItemService:
    return ItemService(db)


def get_collaboration_service(db: Session = Depends(get_db)) -> CollaborationService:
    return CollaborationService(db)


def get_recipe_service(db: Session = Depends(get_db)) -> RecipeService:
    return RecipeService(db)


def get_meal_plan_service(db: Session = Depends(get_db)) -> MealPlanService:
    return MealPlanService(db)


def get_store_service(db: Session = Depends(get_db)) -> StoreService:
    return StoreService(db)


def get_pantry_service(db: Session = Depends(get_db)) -> PantryService:
    return PantryService(db)


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)
