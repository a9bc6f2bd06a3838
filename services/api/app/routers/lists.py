"""Shopping list endpoints.

Endpoints:
- GET/POST /lists
- GET /lists/templates
- GET/PATCH/DELETE /lists/{list_id}   (?include=items,collaborators,store)
- POST /lists/{list_id}/complete | /archive | /duplicate
- GET/POST /lists/{list_id}/items, POST /lists/{list_id}/items/bulk
- GET /lists/{list_id}/activity
- GET/POST /lists/{list_id}/collaborators
- PATCH/DELETE /lists/{list_id}/collaborators/{user_id}
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from .. import models, schemas
from ..core.pagination import Page
from ..core.responses import ok, paginated
from ..deps import (
    get_collaboration_service,
    get_current_user,
    get_item_service,
    get_list_service,
    get_pagination,
)
from ..services.collaboration_service import CollaborationService
from ..services.item_service import ItemService
from ..services.list_service import ListService

router = APIRouter(prefix="/lists")

INCLUDE_PARTS = {"items", "collaborators", "store"}


@router.get("", response_model=schemas.PageEnvelope[schemas.ListOut])
def get_lists(
    list_status: Optional[schemas.ListStatus] = Query(None, alias="status"),
    store_id: Optional[str] = Query(None, alias="storeId"),
    is_template: Optional[bool] = Query(None, alias="isTemplate"),
    q: Optional[str] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
    page: Page = Depends(get_pagination),
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    """Lists owned by or shared with the current user."""
    filters = {
        "status": list_status,
        "store_id": store_id,
        "is_template": is_template,
        "q": q,
        "sort": sort,
        "order": order,
    }
    rows, total = service.get_by_user(user.id, filters, page)
    return paginated(rows, total, page)


@router.post("", response_model=schemas.Envelope[schemas.ListOut], status_code=status.HTTP_201_CREATED)
def create_list(
    data: schemas.ListCreate,
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    return ok(service.create(user.id, data))


@router.get("/templates", response_model=schemas.Envelope[list[schemas.ListOut]])
def get_templates(
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    return ok(service.get_templates(user.id))


@router.get("/{list_id}", response_model=schemas.Envelope[schemas.ListDetailOut])
def get_list(
    list_id: str,
    include: Optional[str] = None,
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    """Single list; `include` (any value) switches to the detail view."""
    if include is None:
        return ok(service.get_by_id(list_id, user.id))
    parts = {p.strip() for p in include.split(",")} & INCLUDE_PARTS
    return ok(service.get_by_id_with_details(list_id, user.id, parts or None))


@router.patch("/{list_id}", response_model=schemas.Envelope[schemas.ListOut])
def update_list(
    list_id: str,
    data: schemas.ListUpdate,
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    return ok(service.update(list_id, user.id, data))


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_list(
    list_id: str,
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    service.delete(list_id, user.id)


@router.post("/{list_id}/complete", response_model=schemas.Envelope[schemas.ListOut])
def complete_list(
    list_id: str,
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    return ok(service.complete(list_id, user.id))


@router.post("/{list_id}/archive", response_model=schemas.Envelope[schemas.ListOut])
def archive_list(
    list_id: str,
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    return ok(service.archive(list_id, user.id))


@router.post(
    "/{list_id}/duplicate",
    response_model=schemas.Envelope[schemas.ListOut],
    status_code=status.HTTP_201_CREATED,
)
def duplicate_list(
    list_id: str,
    data: Optional[schemas.DuplicateListRequest] = Body(None),
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    """Copy a list and its items. Name defaults to "Copy"."""
    name = data.name if data else None
    return ok(service.duplicate(list_id, user.id, name))


# --- Items on a list ---

@router.get("/{list_id}/items", response_model=schemas.Envelope[list[schemas.ItemOut]])
def get_list_items(
    list_id: str,
    is_checked: Optional[bool] = Query(None, alias="isChecked"),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    user: models.User = Depends(get_current_user),
    service: ItemService = Depends(get_item_service),
):
    return ok(service.get_by_list(list_id, user.id, is_checked, category_id))


@router.post(
    "/{list_id}/items",
    response_model=schemas.Envelope[schemas.ItemOut],
    status_code=status.HTTP_201_CREATED,
)
def create_list_item(
    list_id: str,
    data: schemas.ItemCreate,
    user: models.User = Depends(get_current_user),
    service: ItemService = Depends(get_item_service),
):
    return ok(service.create(list_id, user.id, data))


@router.post(
    "/{list_id}/items/bulk",
    response_model=schemas.Envelope[list[schemas.ItemOut]],
    status_code=status.HTTP_201_CREATED,
)
def create_list_items_bulk(
    list_id: str,
    data: schemas.ItemBulkCreate,
    user: models.User = Depends(get_current_user),
    service: ItemService = Depends(get_item_service),
):
    return ok(service.create_many(list_id, user.id, data.items))


@router.get("/{list_id}/activity", response_model=schemas.Envelope[list[schemas.ActivityOut]])
def get_list_activity(
    list_id: str,
    limit: int = Query(50, ge=1, le=100),
    user: models.User = Depends(get_current_user),
    service: ListService = Depends(get_list_service),
):
    return ok(service.get_activity(list_id, user.id, limit))


# --- Collaborators ---

@router.get("/{list_id}/collaborators", response_model=schemas.Envelope[list[schemas.CollaboratorOut]])
def get_collaborators(
    list_id: str,
    user: models.User = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
):
    return ok(service.get_collaborators(list_id, user.id))


@router.post(
    "/{list_id}/collaborators",
    response_model=schemas.Envelope[schemas.ShareResult],
    status_code=status.HTTP_201_CREATED,
)
def share_list(
    list_id: str,
    data: schemas.ShareRequest,
    user: models.User = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
):
    return ok(service.share(list_id, user.id, data.email, data.role))


@router.patch(
    "/{list_id}/collaborators/{collaborator_id}",
    response_model=schemas.Envelope[schemas.CollaboratorOut],
)
def update_collaborator_role(
    list_id: str,
    collaborator_id: str,
    data: schemas.RoleUpdateRequest,
    user: models.User = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
):
    return ok(service.update_role(list_id, user.id, collaborator_id, data.role))


@router.delete("/{list_id}/collaborators/{collaborator_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_collaborator(
    list_id: str,
    collaborator_id: str,
    user: models.User = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service),
):
    """Remove a collaborator, or leave the list when collaborator_id is yourself."""
    service.remove_collaborator(list_id, user.id, collaborator_id)
