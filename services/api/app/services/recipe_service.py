import logging
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from app import models, schemas
from app.core.errors import ForbiddenError, NotFoundError
from app.core.pagination import Page
from app.core.patch import patch_fields
from app.services.shopping_list_builder import aggregate_ingredients, create_list_from_lines

logger = logging.getLogger("listly.recipes")


def _ingredient_models(ingredients: list[schemas.IngredientIn]) -> list[models.RecipeIngredient]:
    out = []
    for ing in ingredients:
        fields = patch_fields(ing)
        fields.setdefault("sort_order", 0)
        out.append(models.RecipeIngredient(**fields))
    return out


class RecipeService:
    def __init__(self, db: Session):
        self.db = db

    def _filtered(self, query, filters: dict):
        if filters.get("cuisine"):
            query = query.filter(func.lower(models.Recipe.cuisine) == filters["cuisine"].lower())
        if filters.get("difficulty"):
            query = query.filter(models.Recipe.difficulty == filters["difficulty"])
        if filters.get("max_time") is not None:
            total_time = func.coalesce(models.Recipe.prep_time, 0) + func.coalesce(models.Recipe.cook_time, 0)
            query = query.filter(total_time <= filters["max_time"])
        if filters.get("is_public") is not None:
            query = query.filter(models.Recipe.is_public.is_(filters["is_public"]))
        if filters.get("q"):
            query = query.filter(func.lower(models.Recipe.title).contains(filters["q"].lower()))
        return query

    def _page(self, query, page: Page) -> tuple[list[models.Recipe], int]:
        total = query.count()
        rows = (
            query.options(selectinload(models.Recipe.ingredients))
            .order_by(models.Recipe.created_at.desc(), models.Recipe.id)
            .offset(page.offset)
            .limit(page.limit)
            .all()
        )
        return rows, total

    def get_by_user(self, user_id: str, filters: dict, page: Page) -> tuple[list[models.Recipe], int]:
        query = self.db.query(models.Recipe).filter(models.Recipe.user_id == user_id)
        return self._page(self._filtered(query, filters), page)

    def get_public(self, filters: dict, page: Page) -> tuple[list[models.Recipe], int]:
        query = self.db.query(models.Recipe).filter(models.Recipe.is_public.is_(True))
        filters = {k: v for k, v in filters.items() if k != "is_public"}
        return self._page(self._filtered(query, filters), page)

    def get_by_id_with_details(self, recipe_id: str, user_id: str) -> models.Recipe:
        recipe = self.db.get(models.Recipe, recipe_id)
        if not recipe or (recipe.user_id != user_id and not recipe.is_public):
            raise NotFoundError("Recipe")
        return recipe

    def _owned(self, recipe_id: str, user_id: str) -> models.Recipe:
        recipe = self.get_by_id_with_details(recipe_id, user_id)
        if recipe.user_id != user_id:
            raise ForbiddenError("Only the recipe owner can change this recipe")
        return recipe

    def create(self, user_id: str, data: schemas.RecipeCreate) -> models.Recipe:
        fields = patch_fields(data)
        fields.pop("ingredients", None)
        fields.setdefault("is_public", False)

        recipe = models.Recipe(**fields, user_id=user_id)
        recipe.ingredients = _ingredient_models(data.ingredients)
        self.db.add(recipe)
        self.db.commit()
        self.db.refresh(recipe)
        logger.info("recipe %s created with %d ingredients", recipe.id, len(recipe.ingredients))
        return recipe

    def update(self, recipe_id: str, user_id: str, data: schemas.RecipeUpdate) -> models.Recipe:
        recipe = self._owned(recipe_id, user_id)
        fields = patch_fields(data)
        fields.pop("ingredients", None)
        for field, value in fields.items():
            setattr(recipe, field, value)
        if data.ingredients is not None:
            # Replace the whole set; delete-orphan removes the old rows
            recipe.ingredients = _ingredient_models(data.ingredients)
        self.db.commit()
        self.db.refresh(recipe)
        return recipe

    def delete(self, recipe_id: str, user_id: str) -> None:
        recipe = self._owned(recipe_id, user_id)
        self.db.delete(recipe)
        self.db.commit()

    def generate_shopping_list(
        self,
        user_id: str,
        recipe_ids: list[str],
        servings: Optional[int] = None,
        list_name: Optional[str] = None,
    ) -> models.ShoppingList:
        recipes = (
            self.db.query(models.Recipe)
            .options(selectinload(models.Recipe.ingredients))
            .filter(
                models.Recipe.id.in_(recipe_ids),
                or_(models.Recipe.user_id == user_id, models.Recipe.is_public.is_(True)),
            )
            .all()
        )
        if len({r.id for r in recipes}) != len(set(recipe_ids)):
            raise NotFoundError("Recipe")

        entries = []
        for recipe in recipes:
            scale = servings / recipe.servings if servings and recipe.servings else 1.0
            entries.append((recipe, scale))

        name = list_name or (
            f"{recipes[0].title} ingredients" if len(recipes) == 1 else "Recipe ingredients"
        )
        return create_list_from_lines(self.db, user_id, name, aggregate_ingredients(entries))
