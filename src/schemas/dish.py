"""Menu and rating Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DishVariantSchema(BaseModel):
    """A priced variant of a dish."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(min_length=1, max_length=100, description="Variant name")
    price_modifier: Decimal = Field(default=Decimal("0"), description="Added to the dish price")


class DishCreate(BaseModel):
    """Schema for POST /dishes."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(min_length=1, max_length=255, description="Dish name")
    description: str | None = Field(default=None, max_length=2000, description="Dish description")
    price: Decimal = Field(ge=0, description="Base price")
    category: str | None = Field(default=None, max_length=100, description="Menu category")
    image_url: str | None = Field(default=None, description="Hosted image URL")
    is_available: bool = Field(default=True, description="Whether customers can order it")
    variants: list[DishVariantSchema] = Field(default_factory=list, description="Priced variants")


class DishUpdate(BaseModel):
    """Schema for PATCH /dishes/{dish_id}. All fields optional."""

    model_config = ConfigDict(from_attributes=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    price: Decimal | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, max_length=100)
    image_url: str | None = None
    is_available: bool | None = None
    variants: list[DishVariantSchema] | None = None


class DishResponse(BaseModel):
    """Schema for dish API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Dish unique identifier")
    restaurant_id: UUID = Field(description="Owning restaurant user ID")
    name: str = Field(description="Dish name")
    description: str | None = Field(default=None, description="Dish description")
    price: Decimal = Field(description="Base price")
    category: str | None = Field(default=None, description="Menu category")
    image_url: str | None = Field(default=None, description="Hosted image URL")
    is_available: bool = Field(default=True, description="Whether customers can order it")
    variants: list[DishVariantSchema] = Field(default_factory=list, description="Priced variants")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")


class DishListResponse(BaseModel):
    """Schema for menu listings."""

    model_config = ConfigDict(from_attributes=True)

    items: list[DishResponse] = Field(description="Dishes")


class DishRatingInput(BaseModel):
    """A customer's rating of one dish in a completed order."""

    model_config = ConfigDict(from_attributes=True)

    dish_id: UUID = Field(description="Rated dish")
    rating: int = Field(ge=1, le=10, description="Score from 1 to 10")
    review: str | None = Field(default=None, max_length=2000, description="Optional review text")


class RateOrderRequest(BaseModel):
    """Schema for POST /orders/{order_id}/ratings."""

    model_config = ConfigDict(from_attributes=True)

    ratings: list[DishRatingInput] = Field(min_length=1, description="One entry per rated dish")


class RateOrderResponse(BaseModel):
    """Schema for the rating submission response."""

    model_config = ConfigDict(from_attributes=True)

    order_id: UUID = Field(description="Rated order")
    rated_dishes: int = Field(description="Number of ratings stored")


class DishRatingSummary(BaseModel):
    """Average rating for a dish."""

    model_config = ConfigDict(from_attributes=True)

    dish_id: UUID = Field(description="Dish UUID")
    average_rating: float | None = Field(default=None, description="Mean score, None when unrated")
    rating_count: int = Field(description="Number of ratings")
