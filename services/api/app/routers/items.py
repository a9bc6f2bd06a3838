from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from .. import models, schemas
from ..core.responses import ok
from ..deps import get_current_user, get_item_service
from ..services.item_service import ItemService

router = APIRouter(prefix="/items")


@router.get("/{item_id}", response_model=schemas.Envelope[schemas.ItemOut])
def get_item(
    item_id: str,
    user: models.User = Depends(get_current_user),
    service: ItemService = Depends(get_item_service),
):
    return ok(service.get_by_id(item_id, user.id))


@router.patch("/{item_id}", response_model=schemas.Envelope[schemas.ItemOut])
def update_item(
    item_id: str,
    data: schemas.ItemUpdate,
    user: models.User = Depends(get_current_user),
    service: ItemService = Depends(get_item_service),
):
    return ok(service.update(item_id, user.id, data))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: str,
    user: models.User = Depends(get_current_user),
    service: ItemService = Depends(get_item_service),
):
    service.delete(item_id, user.id)


@router.post("/{item_id}/check", response_model=schemas.Envelope[schemas.ItemOut])
def toggle_item_check(
    item_id: str,
    data: Optional[schemas.ToggleCheckRequest] = Body(None),
    user: models.User = Depends(get_current_user),
    service: ItemService = Depends(get_item_service),
):
    """Flip checked state; optional actualPrice is recorded when checking."""
    actual_price = data.actual_price if data else None
    return ok(service.toggle_check(item_id, user.id, actual_price))


@router.patch("/{item_id}/move", response_model=schemas.Envelope[schemas.ItemOut])
def move_item(
    item_id: str,
    data: schemas.MoveItemRequest,
    user: models.User = Depends(get_current_user),
    service: ItemService = Depends(get_item_service),
):
    return ok(service.move_to_list(item_id, user.id, data.target_list_id))
