from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from .. import models, schemas
from ..core.responses import ok
from ..deps import get_category_service, get_current_user
from ..services.category_service import CategoryService

router = APIRouter(prefix="/categories")


@router.get("", response_model=schemas.Envelope[list[schemas.CategoryOut]])
def get_categories(
    q: Optional[str] = None,
    include_all: bool = Query(False, alias="all"),
    user: models.User = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    """`q` searches by name; `all=true` lists everything; default is the user's usage stats."""
    if q is not None and q.strip():
        return ok(service.search(q))
    if include_all:
        return ok(service.get_all())
    return ok(service.get_usage_stats(user.id))


@router.post("", response_model=schemas.Envelope[schemas.CategoryOut], status_code=status.HTTP_201_CREATED)
def create_category(
    data: schemas.CategoryCreate,
    service: CategoryService = Depends(get_category_service),
):
    return ok(service.create(data))


@router.get("/{category_id}", response_model=schemas.Envelope[schemas.CategoryOut])
def get_category(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
):
    """Lookup by id or slug."""
    return ok(service.get(category_id))


@router.patch("/{category_id}", response_model=schemas.Envelope[schemas.CategoryOut])
def update_category(
    category_id: str,
    data: schemas.CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
):
    return ok(service.update(category_id, data))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    service: CategoryService = Depends(get_category_service),
):
    service.delete(category_id)
