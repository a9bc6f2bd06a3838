"""Shopping list business rules.

Roles: OWNER > ADMIN > EDITOR > VIEWER. Every method resolves the caller's
role on the list first; see ``access`` for the 404/403 policy.
"""

import logging
from typing import Optional

from sqlalchemy import Integer, cast, func
from sqlalchemy.orm import Session

from app import models, schemas
from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.core.pagination import Page
from app.core.patch import patch_fields
from app.settings import settings
from app.services.access import (
    OWNER,
    can_edit_list,
    can_edit_items,
    get_list_with_role,
    require,
    visible_list_ids,
)

logger = logging.getLogger("listly.lists")

SORT_FIELDS = {
    "created_at": models.ShoppingList.created_at,
    "createdAt": models.ShoppingList.created_at,
    "updated_at": models.ShoppingList.updated_at,
    "updatedAt": models.ShoppingList.updated_at,
    "name": models.ShoppingList.name,
}

COPIED_ITEM_FIELDS = (
    "name", "quantity", "unit", "notes", "priority",
    "estimated_price", "category_id", "sort_order",
)

DEFAULT_COPY_NAME = "Copy"


def _utcnow():
    return models.utcnow()


class ListService:
    def __init__(self, db: Session):
        self.db = db

    # --- read ---

    def get_by_user(self, user_id: str, filters: dict, page: Page) -> tuple[list[dict], int]:
        query = self.db.query(models.ShoppingList).filter(
            models.ShoppingList.id.in_(visible_list_ids(user_id))
        )

        if filters.get("status"):
            query = query.filter(models.ShoppingList.status == filters["status"])
        if filters.get("store_id"):
            query = query.filter(models.ShoppingList.store_id == filters["store_id"])
        if filters.get("is_template") is not None:
            query = query.filter(models.ShoppingList.is_template.is_(filters["is_template"]))
        if filters.get("q"):
            query = query.filter(func.lower(models.ShoppingList.name).contains(filters["q"].lower()))

        total = query.count()

        column = SORT_FIELDS.get(filters.get("sort") or "updated_at", models.ShoppingList.updated_at)
        ordering = column.asc() if filters.get("order") == "asc" else column.desc()
        rows = query.order_by(ordering, models.ShoppingList.id).offset(page.offset).limit(page.limit).all()

        return self._summaries(rows, user_id), total

    def get_templates(self, user_id: str) -> list[dict]:
        rows = (
            self.db.query(models.ShoppingList)
            .filter(
                models.ShoppingList.id.in_(visible_list_ids(user_id)),
                models.ShoppingList.is_template.is_(True),
            )
            .order_by(models.ShoppingList.name)
            .all()
        )
        return self._summaries(rows, user_id)

    def get_by_id(self, list_id: str, user_id: str) -> dict:
        shopping_list, role = get_list_with_role(self.db, list_id, user_id)
        return self._summary(shopping_list, role)

    def get_by_id_with_details(self, list_id: str, user_id: str, include: Optional[set[str]] = None) -> dict:
        """Detail view. ``include`` picks the related sets; None or empty means all of them."""
        shopping_list, role = get_list_with_role(self.db, list_id, user_id)
        data = self._summary(shopping_list, role)
        wanted = include or {"items", "collaborators", "store"}

        if "items" in wanted:
            data["items"] = list(shopping_list.items)
        if "collaborators" in wanted:
            data["collaborators"] = [
                {"user_id": c.user_id, "role": c.role, "joined_at": c.joined_at, "user": c.user}
                for c in shopping_list.collaborators
            ]
        if "store" in wanted:
            data["store"] = shopping_list.store
        return data

    # --- write ---

    def create(self, user_id: str, data: schemas.ListCreate) -> dict:
        owned = self.db.query(func.count(models.ShoppingList.id)).filter(
            models.ShoppingList.owner_id == user_id
        ).scalar()
        if owned >= settings.max_lists_per_user:
            raise ValidationError(f"You can have at most {settings.max_lists_per_user} lists")

        fields = patch_fields(data)
        if fields.get("store_id"):
            self._check_store(fields["store_id"])
        fields.setdefault("is_template", False)

        shopping_list = models.ShoppingList(**fields, owner_id=user_id, status="ACTIVE")
        self.db.add(shopping_list)
        self.db.commit()
        self.db.refresh(shopping_list)
        logger.info("list %s created by %s", shopping_list.id, user_id)
        return self._summary(shopping_list, OWNER)

    def update(self, list_id: str, user_id: str, data: schemas.ListUpdate) -> dict:
        shopping_list, role = get_list_with_role(self.db, list_id, user_id)
        require(can_edit_list(role), "Only the owner or an admin can edit this list")

        fields = patch_fields(data)
        if fields.get("store_id"):
            self._check_store(fields["store_id"])
        for field, value in fields.items():
            setattr(shopping_list, field, value)

        if "status" in fields:
            if fields["status"] == "COMPLETED" and shopping_list.completed_at is None:
                shopping_list.completed_at = _utcnow()
            elif fields["status"] == "ACTIVE":
                shopping_list.completed_at = None

        self.db.commit()
        self.db.refresh(shopping_list)
        return self._summary(shopping_list, role)

    def delete(self, list_id: str, user_id: str) -> None:
        shopping_list, role = get_list_with_role(self.db, list_id, user_id)
        if role != OWNER:
            raise ForbiddenError("Only the list owner can delete this list")
        self.db.delete(shopping_list)
        self.db.commit()
        logger.info("list %s deleted by %s", list_id, user_id)

    def complete(self, list_id: str, user_id: str) -> dict:
        shopping_list, role = get_list_with_role(self.db, list_id, user_id)
        require(can_edit_items(role), "Only the owner or an editor can complete this list")
        shopping_list.status = "COMPLETED"
        shopping_list.completed_at = _utcnow()
        self.db.commit()
        self.db.refresh(shopping_list)
        return self._summary(shopping_list, role)

    def archive(self, list_id: str, user_id: str) -> dict:
        shopping_list, role = get_list_with_role(self.db, list_id, user_id)
        require(can_edit_list(role), "Only the owner or an admin can archive this list")
        shopping_list.status = "ARCHIVED"
        self.db.commit()
        self.db.refresh(shopping_list)
        return self._summary(shopping_list, role)

    def duplicate(self, list_id: str, user_id: str, name: Optional[str] = None) -> dict:
        source, _ = get_list_with_role(self.db, list_id, user_id)

        owned = self.db.query(func.count(models.ShoppingList.id)).filter(
            models.ShoppingList.owner_id == user_id
        ).scalar()
        if owned >= settings.max_lists_per_user:
            raise ValidationError(f"You can have at most {settings.max_lists_per_user} lists")

        copy = models.ShoppingList(
            owner_id=user_id,
            name=name or DEFAULT_COPY_NAME,
            description=source.description,
            notes=source.notes,
            budget=source.budget,
            color=source.color,
            icon=source.icon,
            store_id=source.store_id,
            is_template=False,
            status="ACTIVE",
        )
        for item in source.items:
            copy.items.append(
                models.ListItem(
                    **{field: getattr(item, field) for field in COPIED_ITEM_FIELDS},
                    is_checked=False,
                    added_by_id=user_id,
                )
            )
        self.db.add(copy)
        self.db.commit()
        self.db.refresh(copy)
        logger.info("list %s duplicated into %s", list_id, copy.id)
        return self._summary(copy, OWNER)

    def get_activity(self, list_id: str, user_id: str, limit: int = 50) -> list[models.ItemHistory]:
        get_list_with_role(self.db, list_id, user_id)
        return (
            self.db.query(models.ItemHistory)
            .filter(models.ItemHistory.list_id == list_id)
            .order_by(models.ItemHistory.created_at.desc())
            .limit(limit)
            .all()
        )

    # --- helpers ---

    def _check_store(self, store_id: str) -> None:
        if not self.db.get(models.Store, store_id):
            raise NotFoundError("Store")

    def _summary(self, shopping_list: models.ShoppingList, role: str) -> dict:
        return self._summaries([shopping_list], None, roles={shopping_list.id: role})[0]

    def _summaries(self, rows: list, user_id: Optional[str], roles: Optional[dict] = None) -> list[dict]:
        if not rows:
            return []
        ids = [r.id for r in rows]

        item_stats = {
            list_id: (count, checked, estimated)
            for list_id, count, checked, estimated in self.db.query(
                models.ListItem.list_id,
                func.count(models.ListItem.id),
                func.sum(cast(models.ListItem.is_checked, Integer)),
                func.sum(models.ListItem.estimated_price * models.ListItem.quantity),
            )
            .filter(models.ListItem.list_id.in_(ids))
            .group_by(models.ListItem.list_id)
            .all()
        }
        collab_counts = dict(
            self.db.query(models.ListCollaborator.list_id, func.count(models.ListCollaborator.id))
            .filter(models.ListCollaborator.list_id.in_(ids))
            .group_by(models.ListCollaborator.list_id)
            .all()
        )
        if roles is None:
            roles = dict(
                self.db.query(models.ListCollaborator.list_id, models.ListCollaborator.role)
                .filter(
                    models.ListCollaborator.list_id.in_(ids),
                    models.ListCollaborator.user_id == user_id,
                )
                .all()
            )
            for r in rows:
                if r.owner_id == user_id:
                    roles[r.id] = OWNER

        out = []
        for r in rows:
            count, checked, estimated = item_stats.get(r.id, (0, 0, None))
            data = schemas.ListOut.model_validate(r).model_dump()
            data.update(
                role=roles.get(r.id),
                item_count=count,
                checked_count=int(checked or 0),
                estimated_total=round(float(estimated), 2) if estimated is not None else 0.0,
                collaborator_count=collab_counts.get(r.id, 0),
            )
            out.append(data)
        return out
