"""Dev-only endpoints for seeding.

Endpoints:
- POST /api/dev/seed - Create default categories + sample stores (idempotent)
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Category, Store
from ..schemas import SeedResponse

router = APIRouter()
logger = logging.getLogger("listly.dev")


DEFAULT_CATEGORIES = [
    {"name": "Produce", "slug": "produce", "description": "Fresh fruits and vegetables", "color": "#22c55e", "sort_order": 1},
    {"name": "Dairy & Eggs", "slug": "dairy-eggs", "description": "Milk, cheese, yogurt, eggs", "color": "#f0f9ff", "sort_order": 2},
    {"name": "Meat & Seafood", "slug": "meat-seafood", "description": "Fresh and frozen meats, fish", "color": "#dc2626", "sort_order": 3},
    {"name": "Bakery", "slug": "bakery", "description": "Bread, pastries, baked goods", "color": "#d97706", "sort_order": 4},
    {"name": "Pantry Staples", "slug": "pantry-staples", "description": "Canned goods, grains, pasta, rice", "color": "#78716c", "sort_order": 5},
    {"name": "Frozen Foods", "slug": "frozen-foods", "description": "Frozen meals, vegetables, ice cream", "color": "#60a5fa", "sort_order": 6},
    {"name": "Snacks & Candy", "slug": "snacks-candy", "description": "Chips, cookies, candy", "color": "#f59e0b", "sort_order": 7},
    {"name": "Beverages", "slug": "beverages", "description": "Soft drinks, juice, coffee, tea", "color": "#3b82f6", "sort_order": 8},
    {"name": "Health & Beauty", "slug": "health-beauty", "description": "Personal care, cosmetics", "color": "#ec4899", "sort_order": 9},
    {"name": "Household", "slug": "household", "description": "Cleaning supplies, paper products", "color": "#8b5cf6", "sort_order": 10},
    {"name": "Baby & Kids", "slug": "baby-kids", "description": "Diapers, baby food, toys", "color": "#fbbf24", "sort_order": 11},
    {"name": "Pet Supplies", "slug": "pet-supplies", "description": "Pet food, toys, accessories", "color": "#a855f7", "sort_order": 12},
    {"name": "Other", "slug": "other", "description": "Miscellaneous items", "color": "#6b7280", "sort_order": 99},
]

SAMPLE_STORES = [
    {
        "name": "Whole Foods Market - Downtown",
        "chain": "Whole Foods",
        "address": "123 Main St, San Francisco, CA 94102",
        "latitude": 37.7749,
        "longitude": -122.4194,
    },
    {
        "name": "Trader Joe's - Mission District",
        "chain": "Trader Joe's",
        "address": "456 Valencia St, San Francisco, CA 94103",
        "latitude": 37.7599,
        "longitude": -122.4148,
    },
    {
        "name": "Safeway - Sunset",
        "chain": "Safeway",
        "address": "789 Irving St, San Francisco, CA 94122",
        "latitude": 37.7639,
        "longitude": -122.4669,
    },
    {
        "name": "Costco Wholesale",
        "chain": "Costco",
        "address": "450 10th St, San Francisco, CA 94103",
        "latitude": 37.7726,
        "longitude": -122.4099,
    },
]


def seed_defaults(db: Session) -> SeedResponse:
    """Insert missing default categories (by slug) and sample stores (by name)."""
    existing_slugs = {slug for (slug,) in db.query(Category.slug)}
    categories_created = 0
    for data in DEFAULT_CATEGORIES:
        if data["slug"] in existing_slugs:
            continue
        db.add(Category(**data, is_default=True))
        categories_created += 1

    existing_stores = {name for (name,) in db.query(Store.name)}
    stores_created = 0
    for data in SAMPLE_STORES:
        if data["name"] in existing_stores:
            continue
        db.add(Store(**data))
        stores_created += 1

    db.commit()
    logger.info("seeded %d categories, %d stores", categories_created, stores_created)
    return SeedResponse(categories_created=categories_created, stores_created=stores_created)


@router.post("/dev/seed", response_model=SeedResponse)
def seed(db: Session = Depends(get_db)):
    """Seed default categories and sample stores."""
    return seed_defaults(db)
