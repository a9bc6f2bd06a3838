"""Category lookups, usage stats and keyword auto-categorization."""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app import models, schemas
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.patch import patch_fields
from app.core.text import generate_slug, normalize_item_key
from app.services.access import visible_list_ids

logger = logging.getLogger("listly.categories")

SEARCH_LIMIT = 10

# Keyword -> default category slug. Multi-word keywords are listed before
# the single words they contain.
CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "frozen-foods": ["ice cream", "frozen", "popsicle"],
    "household": ["paper towel", "toilet paper", "soap", "detergent", "cleaner"],
    "produce": ["apple", "banana", "orange", "lettuce", "tomato", "carrot", "fruit", "vegetable"],
    "dairy-eggs": ["milk", "cheese", "yogurt", "butter", "cream", "egg"],
    "meat-seafood": ["chicken", "beef", "pork", "fish", "turkey", "lamb", "meat"],
    "bakery": ["bread", "bagel", "croissant", "roll", "bun", "cake"],
    "pantry-staples": ["pasta", "rice", "flour", "sugar", "salt", "pepper", "oil", "cereal"],
    "beverages": ["water", "juice", "soda", "coffee", "tea", "beer", "wine"],
    "snacks-candy": ["chips", "crackers", "cookies", "candy", "nuts"],
}


def match_category_slug(item_name: str) -> Optional[str]:
    """Best default category slug for an item name, or None."""
    raw = item_name.lower()
    words = normalize_item_key(item_name).split()
    for slug, keywords in CATEGORY_KEYWORDS.items():
        for keyword in keywords:
            if " " in keyword:
                if keyword in raw:
                    return slug
            elif normalize_item_key(keyword) in words:
                return slug
    return None


class CategoryService:
    def __init__(self, db: Session):
        self.db = db

    def search(self, query: str) -> list[models.Category]:
        q = query.strip().lower()
        return (
            self.db.query(models.Category)
            .filter(func.lower(models.Category.name).contains(q))
            .order_by(models.Category.name)
            .limit(SEARCH_LIMIT)
            .all()
        )

    def get_all(self) -> list[models.Category]:
        return self.db.query(models.Category).order_by(
            models.Category.sort_order, models.Category.name
        ).all()

    def get_usage_stats(self, user_id: str) -> list[dict]:
        """Default categories with how often they appear on the user's lists, most used first."""
        counts = dict(
            self.db.query(models.ListItem.category_id, func.count(models.ListItem.id))
            .filter(
                models.ListItem.list_id.in_(visible_list_ids(user_id)),
                models.ListItem.category_id.isnot(None),
            )
            .group_by(models.ListItem.category_id)
            .all()
        )

        defaults = (
            self.db.query(models.Category)
            .filter(models.Category.is_default.is_(True))
            .order_by(models.Category.sort_order)
            .all()
        )
        stats = []
        for category in defaults:
            row = schemas.CategoryOut.model_validate(category).model_dump()
            row["usage_count"] = counts.get(category.id, 0)
            stats.append(row)
        # stable sort keeps sort_order among equal counts
        stats.sort(key=lambda r: r["usage_count"], reverse=True)
        return stats

    def get(self, id_or_slug: str) -> models.Category:
        category = self.db.get(models.Category, id_or_slug)
        if not category:
            category = self.db.query(models.Category).filter(
                models.Category.slug == id_or_slug
            ).first()
        if not category:
            raise NotFoundError("Category")
        return category

    def get_by_slug(self, slug: str) -> Optional[models.Category]:
        return self.db.query(models.Category).filter(models.Category.slug == slug).first()

    def find_best_match(self, item_name: str) -> Optional[models.Category]:
        slug = match_category_slug(item_name)
        return self.get_by_slug(slug) if slug else None

    def create(self, data: schemas.CategoryCreate) -> models.Category:
        fields = patch_fields(data)
        if data.slug:
            if self.get_by_slug(data.slug):
                raise ConflictError(f"Category slug '{data.slug}' already exists")
            slug = data.slug
        else:
            slug_base = generate_slug(data.name)
            slug = slug_base
            counter = 1
            while self.get_by_slug(slug):
                slug = f"{slug_base}-{counter}"
                counter += 1
        fields["slug"] = slug
        fields.setdefault("sort_order", 0)

        category = models.Category(**fields, is_default=False)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        logger.info("category %s created", category.slug)
        return category

    def update(self, id_or_slug: str, data: schemas.CategoryUpdate) -> models.Category:
        category = self.get(id_or_slug)
        if category.is_default:
            raise ValidationError("Default categories cannot be modified")
        for field, value in patch_fields(data).items():
            setattr(category, field, value)
        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, id_or_slug: str) -> None:
        category = self.get(id_or_slug)
        if category.is_default:
            raise ValidationError("Default categories cannot be deleted")
        self.db.delete(category)
        self.db.commit()
