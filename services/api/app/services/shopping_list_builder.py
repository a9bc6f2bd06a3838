"""Turn recipe ingredients into a new shopping list.

Shared by recipe and meal-plan generation. Ingredients with the same
normalized name and unit are summed into one line.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app import models
from app.core.errors import ValidationError
from app.core.text import normalize_item_key
from app.settings import settings
from app.services.category_service import CategoryService

logger = logging.getLogger("listly.builder")


def aggregate_ingredients(entries: Iterable[tuple[models.Recipe, float]]) -> list[dict]:
    """entries: (recipe, scale factor). Returns lines sorted by display name."""
    aggregated: dict[tuple[str, str], dict] = {}

    for recipe, scale in entries:
        for ing in recipe.ingredients:
            key = normalize_item_key(ing.name) or ing.name.lower()
            unit = (ing.unit or "").strip().lower()
            agg = aggregated.get((key, unit))
            if agg is None:
                agg = aggregated[(key, unit)] = {
                    "name": ing.name.strip(),
                    "unit": ing.unit.strip() if ing.unit else None,
                    "quantity": 0.0,
                    "sources": [],
                }
            if ing.quantity:
                agg["quantity"] += float(ing.quantity) * scale
            if recipe.title not in agg["sources"]:
                agg["sources"].append(recipe.title)

    lines = []
    for agg in aggregated.values():
        agg["quantity"] = round(agg["quantity"], 2) if agg["quantity"] > 0 else 1
        lines.append(agg)
    lines.sort(key=lambda x: x["name"].lower())
    return lines


def create_list_from_lines(db: Session, user_id: str, name: str, lines: list[dict]) -> models.ShoppingList:
    if not lines:
        raise ValidationError("No ingredients found for the selected recipes")
    if len(lines) > settings.max_items_per_list:
        raise ValidationError(f"A list can hold at most {settings.max_items_per_list} items")

    owned = db.query(func.count(models.ShoppingList.id)).filter(
        models.ShoppingList.owner_id == user_id
    ).scalar()
    if owned >= settings.max_lists_per_user:
        raise ValidationError(f"You can have at most {settings.max_lists_per_user} lists")

    categories = CategoryService(db)
    shopping_list = models.ShoppingList(owner_id=user_id, name=name[:100], status="ACTIVE", is_template=False)
    for order, line in enumerate(lines):
        match = categories.find_best_match(line["name"])
        shopping_list.items.append(
            models.ListItem(
                name=line["name"],
                quantity=line["quantity"],
                unit=line["unit"],
                notes=_source_note(line["sources"]),
                sort_order=order,
                priority=0,
                category_id=match.id if match else None,
                added_by_id=user_id,
            )
        )
    db.add(shopping_list)
    db.commit()
    db.refresh(shopping_list)
    logger.info("generated list %s with %d items", shopping_list.id, len(lines))
    return shopping_list


def _source_note(sources: list[str]) -> Optional[str]:
    return f"For: {', '.join(sources)}" if sources else None
