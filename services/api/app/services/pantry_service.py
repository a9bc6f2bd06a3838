from datetime import date, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from app import models, schemas
from app.core.errors import NotFoundError
from app.core.pagination import Page
from app.core.patch import patch_fields


class PantryService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: str, filters: dict, page: Page) -> tuple[list[models.PantryItem], int]:
        query = self.db.query(models.PantryItem).filter(models.PantryItem.user_id == user_id)

        if filters.get("q"):
            query = query.filter(func.lower(models.PantryItem.name).contains(filters["q"].lower()))
        if filters.get("category_id"):
            query = query.filter(models.PantryItem.category_id == filters["category_id"])
        if filters.get("location"):
            query = query.filter(func.lower(models.PantryItem.location) == filters["location"].lower())
        if filters.get("barcode"):
            query = query.filter(models.PantryItem.barcode == filters["barcode"])
        if filters.get("is_consumed") is not None:
            query = query.filter(models.PantryItem.is_consumed.is_(filters["is_consumed"]))
        if filters.get("expiring_before"):
            query = query.filter(
                models.PantryItem.expiration_date.isnot(None),
                models.PantryItem.expiration_date <= filters["expiring_before"],
            )

        total = query.count()
        rows = (
            query.order_by(
                models.PantryItem.expiration_date.asc().nulls_last(),
                models.PantryItem.created_at.desc(),
            )
            .offset(page.offset)
            .limit(page.limit)
            .all()
        )
        return rows, total

    def get_expiring(self, user_id: str, days: int = 5) -> list[models.PantryItem]:
        """Unconsumed items expiring within ``days`` (already expired ones included)."""
        threshold = date.today() + timedelta(days=days)
        return (
            self.db.query(models.PantryItem)
            .filter(
                models.PantryItem.user_id == user_id,
                models.PantryItem.is_consumed.is_(False),
                models.PantryItem.expiration_date.isnot(None),
                models.PantryItem.expiration_date <= threshold,
            )
            .order_by(models.PantryItem.expiration_date.asc())
            .all()
        )

    def get_by_id_with_details(self, item_id: str, user_id: str) -> models.PantryItem:
        item = self.db.query(models.PantryItem).filter(
            models.PantryItem.id == item_id,
            models.PantryItem.user_id == user_id,
        ).first()
        if not item:
            raise NotFoundError("Pantry item")
        return item

    def _check_category(self, category_id: str) -> None:
        if not self.db.get(models.Category, category_id):
            raise NotFoundError("Category")

    def create(self, user_id: str, data: schemas.PantryItemCreate) -> models.PantryItem:
        fields = patch_fields(data)
        fields.setdefault("quantity", 1)
        if fields.get("category_id"):
            self._check_category(fields["category_id"])
        item = models.PantryItem(**fields, user_id=user_id, is_consumed=False)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def update(self, item_id: str, user_id: str, data: schemas.PantryItemUpdate) -> models.PantryItem:
        item = self.get_by_id_with_details(item_id, user_id)
        fields = patch_fields(data)
        if fields.get("category_id"):
            self._check_category(fields["category_id"])
        for field, value in fields.items():
            setattr(item, field, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete(self, item_id: str, user_id: str) -> None:
        item = self.get_by_id_with_details(item_id, user_id)
        self.db.delete(item)
        self.db.commit()

    def consume_many(self, user_id: str, item_ids: list[str]) -> int:
        items = self.db.query(models.PantryItem).filter(
            models.PantryItem.user_id == user_id,
            models.PantryItem.id.in_(item_ids),
            models.PantryItem.is_consumed.is_(False),
        ).all()
        for item in items:
            item.is_consumed = True
        self.db.commit()
        return len(items)
