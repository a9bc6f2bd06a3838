from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from .. import models, schemas
from ..core.pagination import Page
from ..core.responses import ok, paginated
from ..deps import get_current_user, get_list_service, get_pagination, get_recipe_service
from ..services.list_service import ListService
from ..services.recipe_service import RecipeService

router = APIRouter(prefix="/recipes")


def recipe_filters(
    cuisine: Optional[str] = None,
    difficulty: Optional[schemas.Difficulty] = None,
    max_time: Optional[int] = Query(None, alias="maxTime", ge=0),
    is_public: Optional[bool] = Query(None, alias="isPublic"),
    q: Optional[str] = None,
) -> dict:
    return {
        "cuisine": cuisine,
        "difficulty": difficulty,
        "max_time": max_time,
        "is_public": is_public,
        "q": q,
    }


@router.get("", response_model=schemas.PageEnvelope[schemas.RecipeOut])
def get_recipes(
    filters: dict = Depends(recipe_filters),
    page: Page = Depends(get_pagination),
    user: models.User = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
):
    rows, total = service.get_by_user(user.id, filters, page)
    return paginated(rows, total, page)


@router.post("", response_model=schemas.Envelope[schemas.RecipeOut], status_code=status.HTTP_201_CREATED)
def create_recipe(
    data: schemas.RecipeCreate,
    user: models.User = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
):
    return ok(service.create(user.id, data))


@router.get("/public", response_model=schemas.PageEnvelope[schemas.RecipeOut])
def get_public_recipes(
    filters: dict = Depends(recipe_filters),
    page: Page = Depends(get_pagination),
    service: RecipeService = Depends(get_recipe_service),
):
    rows, total = service.get_public(filters, page)
    return paginated(rows, total, page)


@router.post(
    "/shopping-list",
    response_model=schemas.Envelope[schemas.ListDetailOut],
    status_code=status.HTTP_201_CREATED,
)
def create_shopping_list_from_recipes(
    data: schemas.RecipeShoppingListRequest,
    user: models.User = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
    lists: ListService = Depends(get_list_service),
):
    """Build a new list from the ingredients of one or more recipes."""
    shopping_list = service.generate_shopping_list(user.id, data.recipe_ids, data.servings, data.list_name)
    return ok(lists.get_by_id_with_details(shopping_list.id, user.id, {"items"}))


@router.get("/{recipe_id}", response_model=schemas.Envelope[schemas.RecipeOut])
def get_recipe(
    recipe_id: str,
    user: models.User = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
):
    return ok(service.get_by_id_with_details(recipe_id, user.id))


@router.patch("/{recipe_id}", response_model=schemas.Envelope[schemas.RecipeOut])
def update_recipe(
    recipe_id: str,
    data: schemas.RecipeUpdate,
    user: models.User = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
):
    return ok(service.update(recipe_id, user.id, data))


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(
    recipe_id: str,
    user: models.User = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
):
    service.delete(recipe_id, user.id)
