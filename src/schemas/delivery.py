"""Delivery partner Pydantic schemas for API request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.order import OrderResponse


class LocationUpdate(BaseModel):
    """Schema for PUT /delivery/location."""

    model_config = ConfigDict(from_attributes=True)

    latitude: float = Field(ge=-90, le=90, description="Current latitude")
    longitude: float = Field(ge=-180, le=180, description="Current longitude")


class LocationResponse(BaseModel):
    """A delivery partner's current location."""

    model_config = ConfigDict(from_attributes=True)

    delivery_partner_id: UUID = Field(description="Delivery partner user ID")
    latitude: float = Field(description="Latitude")
    longitude: float = Field(description="Longitude")
    updated_at: datetime = Field(description="When the location was last written")


class NearbyOrderResponse(BaseModel):
    """A ready order offered to a delivery partner."""

    model_config = ConfigDict(from_attributes=True)

    order: OrderResponse = Field(description="The candidate order")
    distance_km: float = Field(description="Great-circle distance to the restaurant")
    restaurant_latitude: float = Field(description="Restaurant pickup latitude")
    restaurant_longitude: float = Field(description="Restaurant pickup longitude")


class NearbyOrdersResponse(BaseModel):
    """Schema for GET /delivery/nearby-orders."""

    model_config = ConfigDict(from_attributes=True)

    items: list[NearbyOrderResponse] = Field(description="Candidates, nearest first")
    radius_km: float = Field(description="Search radius applied")
    refresh_seconds: int = Field(description="Suggested re-poll interval")
