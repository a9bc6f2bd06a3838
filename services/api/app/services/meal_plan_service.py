import logging
from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app import models, schemas
from app.core.errors import NotFoundError, ValidationError
from app.core.pagination import Page
from app.core.patch import patch_fields
from app.services.shopping_list_builder import aggregate_ingredients, create_list_from_lines

logger = logging.getLogger("listly.meal_plans")


class MealPlanService:
    def __init__(self, db: Session):
        self.db = db

    def _check_recipe(self, recipe_id: str, user_id: str) -> None:
        recipe = self.db.get(models.Recipe, recipe_id)
        if not recipe or (recipe.user_id != user_id and not recipe.is_public):
            raise NotFoundError("Recipe")

    def _build(self, user_id: str, data: schemas.MealPlanCreate) -> models.MealPlan:
        fields = patch_fields(data)
        if fields.get("recipe_id"):
            self._check_recipe(fields["recipe_id"], user_id)
        return models.MealPlan(**fields, user_id=user_id, is_completed=False)

    def create(self, user_id: str, data: schemas.MealPlanCreate) -> models.MealPlan:
        plan = self._build(user_id, data)
        self.db.add(plan)
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def bulk_create(self, user_id: str, plans: list[schemas.MealPlanCreate]) -> list[models.MealPlan]:
        created = [self._build(user_id, data) for data in plans]
        self.db.add_all(created)
        self.db.commit()
        for plan in created:
            self.db.refresh(plan)
        logger.info("%d meal plans created for %s", len(created), user_id)
        return created

    def get_by_user(self, user_id: str, filters: dict, page: Page) -> tuple[list[models.MealPlan], int]:
        start, end = filters.get("start_date"), filters.get("end_date")
        if start and end and end < start:
            raise ValidationError("endDate must be on or after startDate")

        query = self.db.query(models.MealPlan).filter(models.MealPlan.user_id == user_id)
        if start:
            query = query.filter(models.MealPlan.date >= start)
        if end:
            query = query.filter(models.MealPlan.date <= end)
        if filters.get("meal_type"):
            query = query.filter(models.MealPlan.meal_type == filters["meal_type"])
        if filters.get("is_completed") is not None:
            query = query.filter(models.MealPlan.is_completed.is_(filters["is_completed"]))

        total = query.count()
        rows = (
            query.options(selectinload(models.MealPlan.recipe))
            .order_by(models.MealPlan.date, models.MealPlan.meal_type, models.MealPlan.id)
            .offset(page.offset)
            .limit(page.limit)
            .all()
        )
        return rows, total

    def get_by_id_with_details(self, plan_id: str, user_id: str) -> models.MealPlan:
        plan = self.db.get(models.MealPlan, plan_id)
        if not plan or plan.user_id != user_id:
            raise NotFoundError("Meal plan")
        return plan

    def update(self, plan_id: str, user_id: str, data: schemas.MealPlanUpdate) -> models.MealPlan:
        plan = self.get_by_id_with_details(plan_id, user_id)
        fields = patch_fields(data)
        if fields.get("recipe_id"):
            self._check_recipe(fields["recipe_id"], user_id)
        for field, value in fields.items():
            setattr(plan, field, value)
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def delete(self, plan_id: str, user_id: str) -> None:
        plan = self.get_by_id_with_details(plan_id, user_id)
        self.db.delete(plan)
        self.db.commit()

    def generate_shopping_list(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        meal_types: Optional[list[str]] = None,
        list_name: Optional[str] = None,
    ) -> models.ShoppingList:
        if end_date < start_date:
            raise ValidationError("endDate must be on or after startDate")

        query = (
            self.db.query(models.MealPlan)
            .options(selectinload(models.MealPlan.recipe).selectinload(models.Recipe.ingredients))
            .filter(
                models.MealPlan.user_id == user_id,
                models.MealPlan.date >= start_date,
                models.MealPlan.date <= end_date,
                models.MealPlan.recipe_id.isnot(None),
            )
        )
        if meal_types:
            query = query.filter(or_(*(models.MealPlan.meal_type == m for m in meal_types)))

        entries = []
        for plan in query.order_by(models.MealPlan.date).all():
            recipe = plan.recipe
            if recipe is None:
                continue
            scale = plan.servings / recipe.servings if plan.servings and recipe.servings else 1.0
            entries.append((recipe, scale))

        if not entries:
            raise ValidationError("No planned recipes in that date range")

        name = list_name or f"Meal plan {start_date.isoformat()} to {end_date.isoformat()}"
        return create_list_from_lines(self.db, user_id, name, aggregate_ingredients(entries))
