"""Store directory and per-user favorites.

Stores are shared by every user; only favorites are user-scoped.
"""

import logging
import math
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app import models, schemas
from app.core.errors import NotFoundError
from app.core.pagination import Page
from app.core.patch import patch_fields

logger = logging.getLogger("listly.stores")

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_KM = 10.0
MAX_RADIUS_KM = 100.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class StoreService:
    def __init__(self, db: Session):
        self.db = db

    def favorite_ids(self, user_id: str) -> set[str]:
        return {
            store_id
            for (store_id,) in self.db.query(models.UserFavoriteStore.store_id).filter(
                models.UserFavoriteStore.user_id == user_id
            )
        }

    def with_favorites(self, rows: list, user_id: str) -> list[dict]:
        favorites = self.favorite_ids(user_id)
        out = []
        for row in rows:
            data = row if isinstance(row, dict) else schemas.StoreOut.model_validate(row).model_dump()
            data["is_favorite"] = data["id"] in favorites
            out.append(data)
        return out

    def get_all(self, filters: dict, page: Page) -> tuple[list[models.Store], int]:
        query = self.db.query(models.Store)
        q = filters.get("q")
        if q:
            needle = q.lower()
            query = query.filter(
                or_(
                    func.lower(models.Store.name).contains(needle),
                    func.lower(models.Store.chain).contains(needle),
                )
            )
        if filters.get("chain"):
            query = query.filter(func.lower(models.Store.chain) == filters["chain"].lower())

        total = query.count()
        rows = query.order_by(models.Store.name, models.Store.id).offset(page.offset).limit(page.limit).all()
        return rows, total

    def find_nearby(self, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM) -> list[dict]:
        radius_km = min(radius_km, MAX_RADIUS_KM)
        # Bounding box first so the distance math only runs on candidates
        d_lat = radius_km / 111.0
        d_lng = radius_km / max(111.0 * math.cos(math.radians(lat)), 1e-6)
        candidates = self.db.query(models.Store).filter(
            models.Store.latitude.isnot(None),
            models.Store.longitude.isnot(None),
            models.Store.latitude.between(lat - d_lat, lat + d_lat),
            models.Store.longitude.between(lng - d_lng, lng + d_lng),
        ).all()

        nearby = []
        for store in candidates:
            distance = haversine_km(lat, lng, store.latitude, store.longitude)
            if distance <= radius_km:
                row = schemas.StoreOut.model_validate(store).model_dump()
                row["distance_km"] = round(distance, 2)
                nearby.append(row)
        nearby.sort(key=lambda r: r["distance_km"])
        return nearby

    def get_by_id(self, store_id: str) -> models.Store:
        store = self.db.get(models.Store, store_id)
        if not store:
            raise NotFoundError("Store")
        return store

    def create(self, data: schemas.StoreCreate) -> models.Store:
        store = models.Store(**patch_fields(data))
        self.db.add(store)
        self.db.commit()
        self.db.refresh(store)
        logger.info("store %s created", store.id)
        return store

    def update(self, store_id: str, data: schemas.StoreUpdate) -> models.Store:
        store = self.get_by_id(store_id)
        for field, value in patch_fields(data).items():
            setattr(store, field, value)
        self.db.commit()
        self.db.refresh(store)
        return store

    def delete(self, store_id: str) -> None:
        store = self.get_by_id(store_id)
        self.db.delete(store)
        self.db.commit()

    # --- favorites ---

    def get_favorites(self, user_id: str) -> list[models.UserFavoriteStore]:
        return (
            self.db.query(models.UserFavoriteStore)
            .filter(models.UserFavoriteStore.user_id == user_id)
            .order_by(models.UserFavoriteStore.created_at.desc())
            .all()
        )

    def _favorite(self, user_id: str, store_id: str) -> Optional[models.UserFavoriteStore]:
        return self.db.query(models.UserFavoriteStore).filter(
            models.UserFavoriteStore.user_id == user_id,
            models.UserFavoriteStore.store_id == store_id,
        ).first()

    def add_favorite(self, user_id: str, store_id: str) -> models.UserFavoriteStore:
        self.get_by_id(store_id)
        favorite = self._favorite(user_id, store_id)
        if favorite:
            return favorite
        favorite = models.UserFavoriteStore(user_id=user_id, store_id=store_id)
        self.db.add(favorite)
        self.db.commit()
        self.db.refresh(favorite)
        return favorite

    def remove_favorite(self, user_id: str, store_id: str) -> None:
        favorite = self._favorite(user_id, store_id)
        if not favorite:
            raise NotFoundError("Favorite store")
        self.db.delete(favorite)
        self.db.commit()
