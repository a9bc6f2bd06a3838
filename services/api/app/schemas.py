"""Pydantic schemas for Listly API.

Request/response models for:
- Envelope + pagination meta
- Auth, users, preferences
- Lists, items, collaborators, activity
- Recipes, meal plans
- Stores, favorites, pantry, categories

JSON keys are camelCase; Python attributes are snake_case. Optional request
fields default to None; services fill in real defaults and treat an
explicit null in a patch body as "no change".
"""

import datetime as dt
from datetime import datetime, date
from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, EmailStr, Field
from pydantic.alias_generators import to_camel


T = TypeVar("T")

ListStatus = Literal["ACTIVE", "COMPLETED", "ARCHIVED"]
CollaboratorRole = Literal["VIEWER", "EDITOR", "ADMIN"]
MealType = Literal["BREAKFAST", "LUNCH", "DINNER", "SNACK"]
Difficulty = Literal["easy", "medium", "hard"]


class ApiModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        extra = "ignore"


# --- Envelope ---

class PageMeta(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class Envelope(ApiModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None


class PageEnvelope(ApiModel, Generic[T]):
    success: bool = True
    data: list[T]
    meta: PageMeta


# --- Users / Auth ---

class UserOut(ApiModel):
    id: str
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    email_verified: bool = False
    created_at: Optional[datetime] = None


class UserSummary(ApiModel):
    id: str
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class RegisterRequest(ApiModel):
    email: EmailStr
    password: str
    name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(ApiModel):
    token: str
    user: UserOut


class SessionOut(ApiModel):
    user: Optional[UserOut] = None


class UserUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    avatar_url: Optional[str] = None


class PreferencesOut(ApiModel):
    default_budget_warning: Optional[float] = None
    default_currency: str
    notifications_enabled: bool
    location_reminders: bool
    theme: str


class PreferencesUpdate(ApiModel):
    default_budget_warning: Optional[float] = Field(None, ge=0)
    default_currency: Optional[str] = Field(None, min_length=3, max_length=3)
    notifications_enabled: Optional[bool] = None
    location_reminders: Optional[bool] = None
    theme: Optional[Literal["light", "dark", "system"]] = None


# --- Categories ---

class CategoryCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    sort_order: Optional[int] = None


class CategoryUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    sort_order: Optional[int] = None


class CategoryOut(ApiModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_default: bool
    sort_order: int
    # Only set on the usage-stats listing
    usage_count: Optional[int] = None


# --- Stores ---

class StoreCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    chain: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class StoreUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    chain: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class StoreOut(ApiModel):
    id: str
    name: str
    chain: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_km: Optional[float] = None
    is_favorite: Optional[bool] = None


class FavoriteStoreRequest(ApiModel):
    # Checked by hand so the error reads "storeId is required"
    store_id: Optional[str] = None


class FavoriteStoreOut(ApiModel):
    store_id: str
    created_at: Optional[datetime] = None
    store: StoreOut


# --- List items ---

class ItemCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    priority: Optional[int] = Field(None, ge=0, le=2)
    estimated_price: Optional[float] = Field(None, ge=0)
    category_id: Optional[str] = None
    sort_order: Optional[int] = None


class ItemBulkCreate(ApiModel):
    items: list[ItemCreate] = Field(..., min_length=1, max_length=100)


class ItemUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    priority: Optional[int] = Field(None, ge=0, le=2)
    estimated_price: Optional[float] = Field(None, ge=0)
    actual_price: Optional[float] = Field(None, ge=0)
    category_id: Optional[str] = None
    sort_order: Optional[int] = None


class ToggleCheckRequest(ApiModel):
    actual_price: Optional[float] = Field(None, ge=0)


class MoveItemRequest(ApiModel):
    target_list_id: str


class ItemOut(ApiModel):
    id: str
    list_id: str
    name: str
    quantity: float
    unit: Optional[str] = None
    notes: Optional[str] = None
    is_checked: bool
    checked_at: Optional[datetime] = None
    priority: int
    estimated_price: Optional[float] = None
    actual_price: Optional[float] = None
    sort_order: int
    category_id: Optional[str] = None
    category: Optional[CategoryOut] = None
    added_by_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# --- Lists ---

class ListCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    store_id: Optional[str] = None
    is_template: Optional[bool] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class ListUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None
    budget: Optional[float] = Field(None, ge=0)
    store_id: Optional[str] = None
    status: Optional[ListStatus] = None
    is_template: Optional[bool] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class DuplicateListRequest(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class ListOut(ApiModel):
    id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    notes: Optional[str] = None
    budget: Optional[float] = None
    status: str
    is_template: bool
    color: Optional[str] = None
    icon: Optional[str] = None
    store_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Present on listing and detail responses
    role: Optional[str] = None
    item_count: Optional[int] = None
    checked_count: Optional[int] = None
    estimated_total: Optional[float] = None
    collaborator_count: Optional[int] = None


# --- Collaborators ---

class ShareRequest(ApiModel):
    email: EmailStr
    role: Optional[CollaboratorRole] = None


class RoleUpdateRequest(ApiModel):
    role: CollaboratorRole


class CollaboratorOut(ApiModel):
    user_id: str
    role: str
    joined_at: Optional[datetime] = None
    user: UserSummary


class InvitationOut(ApiModel):
    id: str
    email: str
    role: str
    expires_at: datetime


class ShareResult(ApiModel):
    status: Literal["added", "invited"]
    collaborator: Optional[CollaboratorOut] = None
    invitation: Optional[InvitationOut] = None


class ListDetailOut(ListOut):
    items: Optional[list[ItemOut]] = None
    collaborators: Optional[list[CollaboratorOut]] = None
    store: Optional[StoreOut] = None


class ActivityOut(ApiModel):
    id: str
    item_id: Optional[str] = None
    item_name: str
    action: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    price: Optional[float] = None
    user_id: str
    created_at: datetime


# --- Recipes ---

class IngredientIn(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    sort_order: Optional[int] = None


class IngredientOut(ApiModel):
    id: str
    name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    notes: Optional[str] = None
    sort_order: int


class RecipeCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    instructions: Optional[str] = None
    prep_time: Optional[int] = Field(None, ge=0)
    cook_time: Optional[int] = Field(None, ge=0)
    servings: Optional[int] = Field(None, ge=1)
    difficulty: Optional[Difficulty] = None
    cuisine: Optional[str] = Field(None, max_length=80)
    image_url: Optional[str] = None
    source_url: Optional[str] = None
    is_public: Optional[bool] = None
    ingredients: list[IngredientIn] = Field(default_factory=list)


class RecipeUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    instructions: Optional[str] = None
    prep_time: Optional[int] = Field(None, ge=0)
    cook_time: Optional[int] = Field(None, ge=0)
    servings: Optional[int] = Field(None, ge=1)
    difficulty: Optional[Difficulty] = None
    cuisine: Optional[str] = Field(None, max_length=80)
    image_url: Optional[str] = None
    source_url: Optional[str] = None
    is_public: Optional[bool] = None
    ingredients: Optional[list[IngredientIn]] = None


class RecipeOut(ApiModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    cuisine: Optional[str] = None
    image_url: Optional[str] = None
    source_url: Optional[str] = None
    is_public: bool
    ingredients: list[IngredientOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RecipeShoppingListRequest(ApiModel):
    recipe_ids: list[str] = Field(..., min_length=1, max_length=50)
    servings: Optional[int] = Field(None, ge=1)
    list_name: Optional[str] = Field(None, min_length=1, max_length=100)


# --- Meal plans ---

class MealPlanCreate(ApiModel):
    date: dt.date
    meal_type: MealType
    recipe_id: Optional[str] = None
    notes: Optional[str] = None
    servings: Optional[int] = Field(None, ge=1)


class MealPlanBulkCreate(ApiModel):
    plans: list[MealPlanCreate] = Field(..., min_length=1, max_length=100)


class MealPlanUpdate(ApiModel):
    date: Optional[dt.date] = None
    meal_type: Optional[MealType] = None
    recipe_id: Optional[str] = None
    notes: Optional[str] = None
    servings: Optional[int] = Field(None, ge=1)
    is_completed: Optional[bool] = None


class MealPlanRecipe(ApiModel):
    id: str
    title: str
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    image_url: Optional[str] = None


class MealPlanOut(ApiModel):
    id: str
    date: dt.date
    meal_type: str
    recipe_id: Optional[str] = None
    notes: Optional[str] = None
    servings: Optional[int] = None
    is_completed: bool
    recipe: Optional[MealPlanRecipe] = None
    created_at: Optional[datetime] = None


class MealPlanShoppingListRequest(ApiModel):
    start_date: dt.date
    end_date: dt.date
    meal_types: Optional[list[MealType]] = None
    list_name: Optional[str] = Field(None, min_length=1, max_length=100)


# --- Pantry ---

class PantryItemCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=100)
    expiration_date: Optional[date] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    category_id: Optional[str] = None


class PantryItemUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    barcode: Optional[str] = Field(None, max_length=100)
    expiration_date: Optional[date] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    is_consumed: Optional[bool] = None
    category_id: Optional[str] = None


class PantryConsumeRequest(ApiModel):
    item_ids: list[str] = Field(..., min_length=1, max_length=100)


class PantryItemOut(ApiModel):
    id: str
    name: str
    quantity: float
    unit: Optional[str] = None
    location: Optional[str] = None
    barcode: Optional[str] = None
    expiration_date: Optional[date] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = None
    notes: Optional[str] = None
    is_consumed: bool
    category_id: Optional[str] = None
    category: Optional[CategoryOut] = None
    created_at: Optional[datetime] = None


class ConsumeResult(ApiModel):
    consumed: int


# --- Dev ---

class SeedResponse(ApiModel):
    categories_created: int
    stores_created: int
