import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app import models, schemas
from app.core.errors import NotFoundError, ValidationError
from app.core.patch import patch_fields
from app.settings import settings
from app.services.access import can_edit_items, get_list_with_role, require, role_for
from app.services.category_service import CategoryService

logger = logging.getLogger("listly.items")

EDIT_DENIED = "You need editor access to change items on this list"


class ItemService:
    def __init__(self, db: Session):
        self.db = db
        self.categories = CategoryService(db)

    def get_by_list(
        self,
        list_id: str,
        user_id: str,
        is_checked: Optional[bool] = None,
        category_id: Optional[str] = None,
    ) -> list[models.ListItem]:
        get_list_with_role(self.db, list_id, user_id)
        query = self.db.query(models.ListItem).filter(models.ListItem.list_id == list_id)
        if is_checked is not None:
            query = query.filter(models.ListItem.is_checked.is_(is_checked))
        if category_id:
            query = query.filter(models.ListItem.category_id == category_id)
        return query.order_by(
            models.ListItem.is_checked,
            models.ListItem.sort_order,
            models.ListItem.created_at,
        ).all()

    def get_by_id(self, item_id: str, user_id: str) -> models.ListItem:
        item, _ = self._item_with_role(item_id, user_id)
        return item

    def create(self, list_id: str, user_id: str, data: schemas.ItemCreate) -> models.ListItem:
        return self.create_many(list_id, user_id, [data])[0]

    def create_many(self, list_id: str, user_id: str, items: list[schemas.ItemCreate]) -> list[models.ListItem]:
        shopping_list, role = get_list_with_role(self.db, list_id, user_id)
        require(can_edit_items(role), EDIT_DENIED)

        existing = self._count(list_id)
        if existing + len(items) > settings.max_items_per_list:
            raise ValidationError(f"A list can hold at most {settings.max_items_per_list} items")

        next_order = self._next_sort_order(list_id)
        created = []
        for data in items:
            fields = patch_fields(data)
            fields.setdefault("quantity", 1)
            fields.setdefault("priority", 0)
            if "sort_order" not in fields:
                fields["sort_order"] = next_order
                next_order += 1
            fields["category_id"] = self._resolve_category(fields.get("category_id"), fields["name"])

            item = models.ListItem(**fields, list_id=shopping_list.id, added_by_id=user_id)
            self.db.add(item)
            self.db.flush()
            self._log(item, "ADDED", user_id)
            created.append(item)

        self.db.commit()
        for item in created:
            self.db.refresh(item)
        logger.info("%d item(s) added to list %s", len(created), list_id)
        return created

    def update(self, item_id: str, user_id: str, data: schemas.ItemUpdate) -> models.ListItem:
        item, role = self._item_with_role(item_id, user_id)
        require(can_edit_items(role), EDIT_DENIED)

        fields = patch_fields(data)
        if "category_id" in fields:
            self._resolve_category(fields["category_id"], item.name)

        price_before = (item.estimated_price, item.actual_price)
        for field, value in fields.items():
            setattr(item, field, value)
        if (item.estimated_price, item.actual_price) != price_before:
            self._log(item, "PRICE_UPDATED", user_id, price=item.actual_price or item.estimated_price)

        self.db.commit()
        self.db.refresh(item)
        return item

    def delete(self, item_id: str, user_id: str) -> None:
        item, role = self._item_with_role(item_id, user_id)
        require(can_edit_items(role), EDIT_DENIED)
        self._log(item, "REMOVED", user_id, link=False)
        self.db.delete(item)
        self.db.commit()

    def toggle_check(self, item_id: str, user_id: str, actual_price: Optional[float] = None) -> models.ListItem:
        """Flip the checked state. Any role on the list may do this, viewers included."""
        item, _ = self._item_with_role(item_id, user_id)

        item.is_checked = not item.is_checked
        if item.is_checked:
            item.checked_at = models.utcnow()
            if actual_price is not None:
                item.actual_price = actual_price
            self._log(item, "CHECKED", user_id, price=item.actual_price)
        else:
            item.checked_at = None
            self._log(item, "UNCHECKED", user_id)

        self.db.commit()
        self.db.refresh(item)
        return item

    def move_to_list(self, item_id: str, user_id: str, target_list_id: str) -> models.ListItem:
        item, role = self._item_with_role(item_id, user_id)
        require(can_edit_items(role), EDIT_DENIED)
        if item.list_id == target_list_id:
            raise ValidationError("Item is already on that list")

        target, target_role = get_list_with_role(self.db, target_list_id, user_id)
        require(can_edit_items(target_role), EDIT_DENIED)
        if self._count(target.id) >= settings.max_items_per_list:
            raise ValidationError(f"A list can hold at most {settings.max_items_per_list} items")

        item.list_id = target.id
        item.sort_order = self._next_sort_order(target.id)
        item.is_checked = False
        item.checked_at = None
        self.db.commit()
        self.db.refresh(item)
        logger.info("item %s moved to list %s", item_id, target.id)
        return item

    # --- helpers ---

    def _item_with_role(self, item_id: str, user_id: str) -> tuple[models.ListItem, str]:
        item = self.db.get(models.ListItem, item_id)
        if not item:
            raise NotFoundError("Item")
        role = role_for(self.db, item.list, user_id)
        if role is None:
            raise NotFoundError("Item")
        return item, role

    def _count(self, list_id: str) -> int:
        return self.db.query(func.count(models.ListItem.id)).filter(
            models.ListItem.list_id == list_id
        ).scalar()

    def _next_sort_order(self, list_id: str) -> int:
        current = self.db.query(func.max(models.ListItem.sort_order)).filter(
            models.ListItem.list_id == list_id
        ).scalar()
        return 0 if current is None else current + 1

    def _resolve_category(self, category_id: Optional[str], item_name: str) -> Optional[str]:
        if category_id:
            if not self.db.get(models.Category, category_id):
                raise NotFoundError("Category")
            return category_id
        match = self.categories.find_best_match(item_name)
        return match.id if match else None

    def _log(self, item: models.ListItem, action: str, user_id: str, price: Optional[float] = None, link: bool = True):
        self.db.add(
            models.ItemHistory(
                item_id=item.id if link else None,
                item_name=item.name,
                quantity=item.quantity,
                unit=item.unit,
                price=price,
                action=action,
                list_id=item.list_id,
                user_id=user_id,
                store_id=item.list.store_id if item.list else None,
            )
        )
