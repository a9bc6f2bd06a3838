from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from .. import models, schemas
from ..core.pagination import Page
from ..core.responses import ok, paginated
from ..deps import get_current_user, get_list_service, get_meal_plan_service, pagination_with_default
from ..services.list_service import ListService
from ..services.meal_plan_service import MealPlanService

router = APIRouter(prefix="/meal-plans")


@router.get("", response_model=schemas.PageEnvelope[schemas.MealPlanOut])
def get_meal_plans(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    meal_type: Optional[schemas.MealType] = Query(None, alias="mealType"),
    is_completed: Optional[bool] = Query(None, alias="isCompleted"),
    page: Page = Depends(pagination_with_default(100)),
    user: models.User = Depends(get_current_user),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    filters = {
        "start_date": start_date,
        "end_date": end_date,
        "meal_type": meal_type,
        "is_completed": is_completed,
    }
    rows, total = service.get_by_user(user.id, filters, page)
    return paginated(rows, total, page)


@router.post("", response_model=schemas.Envelope[schemas.MealPlanOut], status_code=status.HTTP_201_CREATED)
def create_meal_plan(
    data: schemas.MealPlanCreate,
    user: models.User = Depends(get_current_user),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    return ok(service.create(user.id, data))


@router.post(
    "/bulk",
    response_model=schemas.Envelope[list[schemas.MealPlanOut]],
    status_code=status.HTTP_201_CREATED,
)
def create_meal_plans_bulk(
    data: schemas.MealPlanBulkCreate,
    user: models.User = Depends(get_current_user),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    return ok(service.bulk_create(user.id, data.plans))


@router.post(
    "/shopping-list",
    response_model=schemas.Envelope[schemas.ListDetailOut],
    status_code=status.HTTP_201_CREATED,
)
def create_shopping_list_from_plan(
    data: schemas.MealPlanShoppingListRequest,
    user: models.User = Depends(get_current_user),
    service: MealPlanService = Depends(get_meal_plan_service),
    lists: ListService = Depends(get_list_service),
):
    """Aggregate the ingredients of planned recipes in a date range into a new list."""
    shopping_list = service.generate_shopping_list(
        user.id, data.start_date, data.end_date, data.meal_types, data.list_name
    )
    return ok(lists.get_by_id_with_details(shopping_list.id, user.id, {"items"}))


@router.get("/{plan_id}", response_model=schemas.Envelope[schemas.MealPlanOut])
def get_meal_plan(
    plan_id: str,
    user: models.User = Depends(get_current_user),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    return ok(service.get_by_id_with_details(plan_id, user.id))


@router.patch("/{plan_id}", response_model=schemas.Envelope[schemas.MealPlanOut])
def update_meal_plan(
    plan_id: str,
    data: schemas.MealPlanUpdate,
    user: models.User = Depends(get_current_user),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    return ok(service.update(plan_id, user.id, data))


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_meal_plan(
    plan_id: str,
    user: models.User = Depends(get_current_user),
    service: MealPlanService = Depends(get_meal_plan_service),
):
    service.delete(plan_id, user.id)
