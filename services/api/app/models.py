"""SQLAlchemy ORM models for Listly.

Tables:
- users / user_preferences: accounts and per-user settings
- shopping_lists / list_items: lists and their items
- list_collaborators / list_invitations: sharing (the owner never has a collaborator row)
- categories: system defaults plus user-created categories
- stores / user_favorite_stores: store directory and per-user favorites
- item_history: audit trail of item actions, used for list activity
- pantry_items: household inventory
- recipes / recipe_ingredients: user recipes
- meal_plans: recipes scheduled on a date
"""

from __future__ import annotations

import datetime as dt
import uuid
from datetime import datetime, date, timezone
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Date,
    Text,
    Integer,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Numeric,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Enumerations are stored as plain strings.
LIST_STATUSES = ("ACTIVE", "COMPLETED", "ARCHIVED")
COLLABORATOR_ROLES = ("VIEWER", "EDITOR", "ADMIN")
MEAL_TYPES = ("BREAKFAST", "LUNCH", "DINNER", "SNACK")
ITEM_ACTIONS = ("ADDED", "CHECKED", "UNCHECKED", "REMOVED", "PRICE_UPDATED")
DIFFICULTIES = ("easy", "medium", "hard")
AUTH_PROVIDERS = ("EMAIL", "GOOGLE", "APPLE")

Money = Numeric(10, 2, asdecimal=False)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    provider: Mapped[str] = mapped_column(String(20), nullable=False, default="EMAIL")
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    preferences: Mapped[Optional["UserPreferences"]] = relationship(
        "UserPreferences", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    lists: Mapped[list["ShoppingList"]] = relationship(
        "ShoppingList", back_populates="owner", cascade="all, delete-orphan"
    )
    collaborations: Mapped[list["ListCollaborator"]] = relationship(
        "ListCollaborator", back_populates="user", cascade="all, delete-orphan"
    )
    recipes: Mapped[list["Recipe"]] = relationship(
        "Recipe", back_populates="user", cascade="all, delete-orphan"
    )
    pantry_items: Mapped[list["PantryItem"]] = relationship(
        "PantryItem", back_populates="user", cascade="all, delete-orphan"
    )
    meal_plans: Mapped[list["MealPlan"]] = relationship(
        "MealPlan", back_populates="user", cascade="all, delete-orphan"
    )
    favorite_stores: Mapped[list["UserFavoriteStore"]] = relationship(
        "UserFavoriteStore", back_populates="user", cascade="all, delete-orphan"
    )


class UserPreferences(Base):
    __tablename__ = "user_preferences"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    default_budget_warning: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    default_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    location_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    theme: Mapped[str] = mapped_column(String(20), nullable=False, default="system")

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="preferences")


class Category(Base):
    """Item category. Default categories are seeded and immutable."""
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    items: Mapped[list["ListItem"]] = relationship("ListItem", back_populates="category")
    pantry_items: Mapped[list["PantryItem"]] = relationship("PantryItem", back_populates="category")


class Store(Base):
    """Store directory entry. Not user-owned."""
    __tablename__ = "stores"
    __table_args__ = (
        Index("ix_stores_name", "name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    chain: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    lists: Mapped[list["ShoppingList"]] = relationship("ShoppingList", back_populates="store")
    favorites: Mapped[list["UserFavoriteStore"]] = relationship(
        "UserFavoriteStore", back_populates="store", cascade="all, delete-orphan"
    )


class UserFavoriteStore(Base):
    __tablename__ = "user_favorite_stores"
    __table_args__ = (
        UniqueConstraint("user_id", "store_id", name="uq_user_favorite_store"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    store_id: Mapped[str] = mapped_column(String(36), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="favorite_stores")
    store: Mapped["Store"] = relationship("Store", back_populates="favorites")


class ShoppingList(Base):
    __tablename__ = "shopping_lists"
    __table_args__ = (
        Index("ix_shopping_lists_owner_id", "owner_id"),
        Index("ix_shopping_lists_status", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    budget: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    is_template: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    store_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("stores.id", ondelete="SET NULL"), nullable=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    owner: Mapped["User"] = relationship("User", back_populates="lists")
    store: Mapped[Optional["Store"]] = relationship("Store", back_populates="lists")
    items: Mapped[list["ListItem"]] = relationship(
        "ListItem",
        back_populates="list",
        cascade="all, delete-orphan",
        order_by=lambda: [ListItem.is_checked, ListItem.sort_order],
    )
    collaborators: Mapped[list["ListCollaborator"]] = relationship(
        "ListCollaborator",
        back_populates="list",
        cascade="all, delete-orphan",
        order_by="ListCollaborator.joined_at",
    )
    invitations: Mapped[list["ListInvitation"]] = relationship(
        "ListInvitation", back_populates="list", cascade="all, delete-orphan"
    )
    history: Mapped[list["ItemHistory"]] = relationship(
        "ItemHistory", back_populates="list", cascade="all, delete-orphan"
    )


class ListItem(Base):
    __tablename__ = "list_items"
    __table_args__ = (
        Index("ix_list_items_list_id", "list_id"),
        Index("ix_list_items_list_checked", "list_id", "is_checked"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    list_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=1)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_checked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    checked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    estimated_price: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    actual_price: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    added_by_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    list: Mapped["ShoppingList"] = relationship("ShoppingList", back_populates="items")
    category: Mapped[Optional["Category"]] = relationship("Category", back_populates="items")


class ListCollaborator(Base):
    __tablename__ = "list_collaborators"
    __table_args__ = (
        UniqueConstraint("list_id", "user_id", name="uq_list_collaborator"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    list_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="EDITOR")
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    list: Mapped["ShoppingList"] = relationship("ShoppingList", back_populates="collaborators")
    user: Mapped["User"] = relationship("User", back_populates="collaborations")


class ListInvitation(Base):
    """Pending share for an email address that has no account yet."""
    __tablename__ = "list_invitations"
    __table_args__ = (
        Index("ix_list_invitations_email", "email"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    list_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="EDITOR")
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    invited_by_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    list: Mapped["ShoppingList"] = relationship("ShoppingList", back_populates="invitations")


class ItemHistory(Base):
    """Append-only log of what happened to list items."""
    __tablename__ = "item_history"
    __table_args__ = (
        Index("ix_item_history_list_id", "list_id"),
        Index("ix_item_history_user_id", "user_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    item_name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    price: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    item_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("list_items.id", ondelete="SET NULL"), nullable=True
    )
    list_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("shopping_lists.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    store_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("stores.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    list: Mapped["ShoppingList"] = relationship("ShoppingList", back_populates="history")


class PantryItem(Base):
    __tablename__ = "pantry_items"
    __table_args__ = (
        Index("ix_pantry_items_user_id", "user_id"),
        Index("ix_pantry_items_expiration", "user_id", "expiration_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=1)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    barcode: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    expiration_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    purchase_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    purchase_price: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_consumed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    category_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="pantry_items")
    category: Mapped[Optional["Category"]] = relationship("Category", back_populates="pantry_items")


class Recipe(Base):
    __tablename__ = "recipes"
    __table_args__ = (
        Index("ix_recipes_user_id", "user_id"),
        Index("ix_recipes_is_public", "is_public"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prep_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cook_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    servings: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    difficulty: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    cuisine: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="recipes")
    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.sort_order",
    )
    # Deleting a recipe keeps the meal plans and clears their recipe_id.
    meal_plans: Mapped[list["MealPlan"]] = relationship("MealPlan", back_populates="recipe")


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"
    __table_args__ = (
        Index("ix_recipe_ingredients_recipe_id", "recipe_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    recipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")


class MealPlan(Base):
    __tablename__ = "meal_plans"
    __table_args__ = (
        Index("ix_meal_plans_user_date", "user_id", "date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    recipe_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True
    )
    meal_type: Mapped[str] = mapped_column(String(20), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    servings: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user: Mapped["User"] = relationship("User", back_populates="meal_plans")
    recipe: Mapped[Optional["Recipe"]] = relationship("Recipe", back_populates="meal_plans")
