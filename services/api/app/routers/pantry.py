from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends, status, Query

from .. import models, schemas
from ..core.pagination import Page
from ..core.responses import ok, paginated
from ..deps import get_current_user, get_pagination, get_pantry_service
from ..services.pantry_service import PantryService

router = APIRouter(prefix="/pantry")

@router.get("", response_model=schemas.PageEnvelope[schemas.PantryItemOut])
def get_pantry_items(
    q: Optional[str] = None,
    category_id: Optional[str] = Query(None, alias="categoryId"),
    location: Optional[str] = None,
    barcode: Optional[str] = None,
    is_consumed: Optional[bool] = Query(None, alias="isConsumed"),
    expiring_before: Optional[date] = Query(None, alias="expiringBefore"),
    page: Page = Depends(get_pagination),
    user: models.User = Depends(get_current_user),
    service: PantryService = Depends(get_pantry_service),
):
    """List pantry items with optional filtering."""
    filters = {
        "q": q,
        "category_id": category_id,
        "location": location,
        "barcode": barcode,
        "is_consumed": is_consumed,
        "expiring_before": expiring_before,
    }
    rows, total = service.get_by_user(user.id, filters, page)
    return paginated(rows, total, page)

@router.get("/expiring", response_model=schemas.Envelope[list[schemas.PantryItemOut]])
def get_expiring_items(
    days: int = Query(5, ge=1, le=30),
    user: models.User = Depends(get_current_user),
    service: PantryService = Depends(get_pantry_service),
):
    """Unconsumed items expiring within `days`."""
    return ok(service.get_expiring(user.id, days))

@router.post("", response_model=schemas.Envelope[schemas.PantryItemOut], status_code=status.HTTP_201_CREATED)
def create_pantry_item(
    item_in: schemas.PantryItemCreate,
    user: models.User = Depends(get_current_user),
    service: PantryService = Depends(get_pantry_service),
):
    """Create a new pantry item."""
    return ok(service.create(user.id, item_in))

@router.post("/consume", response_model=schemas.Envelope[schemas.ConsumeResult])
def consume_pantry_items(
    data: schemas.PantryConsumeRequest,
    user: models.User = Depends(get_current_user),
    service: PantryService = Depends(get_pantry_service),
):
    """Mark several pantry items as used up."""
    return ok({"consumed": service.consume_many(user.id, data.item_ids)})

@router.get("/{item_id}", response_model=schemas.Envelope[schemas.PantryItemOut])
def get_pantry_item(
    item_id: str,
    user: models.User = Depends(get_current_user),
    service: PantryService = Depends(get_pantry_service),
):
    return ok(service.get_by_id_with_details(item_id, user.id))

@router.patch("/{item_id}", response_model=schemas.Envelope[schemas.PantryItemOut])
def update_pantry_item(
    item_id: str,
    item_in: schemas.PantryItemUpdate,
    user: models.User = Depends(get_current_user),
    service: PantryService = Depends(get_pantry_service),
):
    """Update a pantry item."""
    return ok(service.update(item_id, user.id, item_in))

@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pantry_item(
    item_id: str,
    user: models.User = Depends(get_current_user),
    service: PantryService = Depends(get_pantry_service),
):
    """Delete a pantry item."""
    service.delete(item_id, user.id)
