"""Dish and rating model type definitions for database operations."""

from datetime import datetime
from decimal import Decimal
from typing import TypedDict
from uuid import UUID


class DishVariant(TypedDict):
    """Entry of the dishes.variants JSONB array."""

    name: str
    price_modifier: Decimal


class Dish(TypedDict):
    """Dish table row representation."""

    id: UUID
    restaurant_id: UUID
    name: str
    description: str | None
    price: Decimal
    category: str | None
    image_url: str | None
    is_available: bool
    variants: list[DishVariant]
    created_at: datetime
    updated_at: datetime


class DishRating(TypedDict):
    """dish_ratings row, unique on (dish_id, order_id, customer_id)."""

    id: UUID
    dish_id: UUID
    order_id: UUID
    customer_id: UUID
    rating: int
    review: str | None
    created_at: datetime
