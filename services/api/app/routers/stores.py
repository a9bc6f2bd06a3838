from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from .. import models, schemas
from ..core.errors import ValidationError
from ..core.pagination import Page
from ..core.responses import ok, paginated
from ..deps import get_current_user, get_store_service, pagination_with_default
from ..services.store_service import DEFAULT_RADIUS_KM, MAX_RADIUS_KM, StoreService

router = APIRouter(prefix="/stores")


def parse_near(near: str) -> tuple[float, float]:
    try:
        lat_raw, lng_raw = near.split(",")
        lat, lng = float(lat_raw), float(lng_raw)
    except ValueError:
        raise ValidationError("near must be 'lat,lng'")
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise ValidationError("near is out of range")
    return lat, lng


@router.get("", response_model=schemas.PageEnvelope[schemas.StoreOut])
def get_stores(
    q: Optional[str] = None,
    search: Optional[str] = None,
    chain: Optional[str] = None,
    near: Optional[str] = None,
    radius: float = Query(DEFAULT_RADIUS_KM, gt=0, le=MAX_RADIUS_KM),
    page: Page = Depends(pagination_with_default(50)),
    user: models.User = Depends(get_current_user),
    service: StoreService = Depends(get_store_service),
):
    """Store directory. `near=lat,lng` switches to a distance-sorted radius search."""
    if near:
        lat, lng = parse_near(near)
        nearby = service.find_nearby(lat, lng, radius)
        window = nearby[page.offset:page.offset + page.limit]
        return paginated(service.with_favorites(window, user.id), len(nearby), page)

    rows, total = service.get_all({"q": q or search, "chain": chain}, page)
    return paginated(service.with_favorites(rows, user.id), total, page)


@router.post("", response_model=schemas.Envelope[schemas.StoreOut], status_code=status.HTTP_201_CREATED)
def create_store(
    data: schemas.StoreCreate,
    service: StoreService = Depends(get_store_service),
):
    return ok(service.create(data))


# --- Favorites (declared before /{store_id}) ---

@router.get("/favorites", response_model=schemas.Envelope[list[schemas.FavoriteStoreOut]])
def get_favorite_stores(
    user: models.User = Depends(get_current_user),
    service: StoreService = Depends(get_store_service),
):
    return ok(service.get_favorites(user.id))


@router.post(
    "/favorites",
    response_model=schemas.Envelope[schemas.FavoriteStoreOut],
    status_code=status.HTTP_201_CREATED,
)
def add_favorite_store(
    data: Optional[schemas.FavoriteStoreRequest] = Body(None),
    user: models.User = Depends(get_current_user),
    service: StoreService = Depends(get_store_service),
):
    if not data or not data.store_id:
        raise ValidationError("storeId is required")
    return ok(service.add_favorite(user.id, data.store_id))


@router.delete("/favorites", status_code=status.HTTP_204_NO_CONTENT)
def remove_favorite_store(
    store_id: Optional[str] = Query(None, alias="storeId"),
    data: Optional[schemas.FavoriteStoreRequest] = Body(None),
    user: models.User = Depends(get_current_user),
    service: StoreService = Depends(get_store_service),
):
    """storeId may come in the JSON body or the query string."""
    target = (data.store_id if data else None) or store_id
    if not target:
        raise ValidationError("storeId is required")
    service.remove_favorite(user.id, target)


@router.get("/{store_id}", response_model=schemas.Envelope[schemas.StoreOut])
def get_store(
    store_id: str,
    service: StoreService = Depends(get_store_service),
):
    return ok(service.get_by_id(store_id))


@router.patch("/{store_id}", response_model=schemas.Envelope[schemas.StoreOut])
def update_store(
    store_id: str,
    data: schemas.StoreUpdate,
    service: StoreService = Depends(get_store_service),
):
    return ok(service.update(store_id, data))


@router.delete("/{store_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_store(
    store_id: str,
    service: StoreService = Depends(get_store_service),
):
    service.delete(store_id)
