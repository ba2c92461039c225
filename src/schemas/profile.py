"""Profile Pydantic schemas for API request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
    """Schema for profile API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Profile unique identifier")
    user_id: UUID = Field(description="Associated auth user ID")
    role: str = Field(description="Marketplace role: customer, restaurant, delivery or unassigned")
    full_name: str | None = Field(default=None, description="Display name")
    email: str | None = Field(default=None, description="Email address")
    phone: str | None = Field(default=None, description="Phone number")
    address: str | None = Field(default=None, description="Default delivery or pickup address")
    restaurant_name: str | None = Field(default=None, description="Restaurant name for restaurant profiles")
    cuisine_type: str | None = Field(default=None, description="Cuisine for restaurant profiles")
    city: str | None = Field(default=None, description="City")
    image_url: str | None = Field(default=None, description="Profile or restaurant image URL")
    latitude: float | None = Field(default=None, description="Registered latitude")
    longitude: float | None = Field(default=None, description="Registered longitude")
    created_at: datetime | None = Field(default=None, description="Profile creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")


class RestaurantResponse(BaseModel):
    """Schema for a restaurant as customers browse it."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID = Field(description="Restaurant user ID, used as restaurant_id on orders and dishes")
    restaurant_name: str = Field(description="Restaurant name")
    cuisine_type: str | None = Field(default=None, description="Cuisine shown on the restaurant card")
    address: str | None = Field(default=None, description="Pickup address")
    city: str | None = Field(default=None, description="City")
    image_url: str | None = Field(default=None, description="Hosted image URL")
    latitude: float | None = Field(default=None, description="Registered latitude")
    longitude: float | None = Field(default=None, description="Registered longitude")


class RestaurantListResponse(BaseModel):
    """Schema for the restaurant directory."""

    items: list[RestaurantResponse] = Field(description="Restaurants ordered by name")
