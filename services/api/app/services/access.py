"""List access resolution shared by the list, item and collaboration services.

Policy:
- a list the user neither owns nor collaborates on is reported as missing (404)
- a visible list where the user's role is too low is reported as forbidden (403)
"""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app import models
from app.core.errors import ForbiddenError, NotFoundError

OWNER = "OWNER"

ROLE_RANK = {
    "VIEWER": 0,
    "EDITOR": 1,
    "ADMIN": 2,
    OWNER: 3,
}

DEFAULT_COLLABORATOR_ROLE = "EDITOR"


def has_minimum_role(role: Optional[str], minimum: str) -> bool:
    if role is None:
        return False
    return ROLE_RANK.get(role, -1) >= ROLE_RANK[minimum]


def can_edit_items(role: Optional[str]) -> bool:
    return has_minimum_role(role, "EDITOR")


def can_edit_list(role: Optional[str]) -> bool:
    return has_minimum_role(role, "ADMIN")


def can_manage_collaborators(role: Optional[str]) -> bool:
    return has_minimum_role(role, "ADMIN")


def visible_list_ids(user_id: str):
    """SELECT of list ids the user owns or collaborates on."""
    shared = select(models.ListCollaborator.list_id).where(
        models.ListCollaborator.user_id == user_id
    )
    return select(models.ShoppingList.id).where(
        or_(
            models.ShoppingList.owner_id == user_id,
            models.ShoppingList.id.in_(shared),
        )
    )


def role_for(db: Session, shopping_list: models.ShoppingList, user_id: str) -> Optional[str]:
    if shopping_list.owner_id == user_id:
        return OWNER
    collab = db.query(models.ListCollaborator).filter(
        models.ListCollaborator.list_id == shopping_list.id,
        models.ListCollaborator.user_id == user_id,
    ).first()
    return collab.role if collab else None


def get_list_with_role(db: Session, list_id: str, user_id: str) -> tuple[models.ShoppingList, str]:
    shopping_list = db.get(models.ShoppingList, list_id)
    if not shopping_list:
        raise NotFoundError("List")
    role = role_for(db, shopping_list, user_id)
    if role is None:
        raise NotFoundError("List")
    return shopping_list, role


def require(allowed: bool, message: Optional[str] = None) -> None:
    if not allowed:
        raise ForbiddenError(message) if message else ForbiddenError()
