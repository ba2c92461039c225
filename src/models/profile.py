"""Profile model type definitions for database operations."""

from datetime import datetime
from typing import Literal, TypedDict
from uuid import UUID

# Values stored in profiles.role
ProfileRole = Literal["customer", "restaurant", "delivery"]


class Profile(TypedDict):
    """Profile table row representation.

    One row per auth user. Restaurants store their pickup coordinate here;
    it is what the assignment matcher measures distance to.
    """

    id: UUID
    user_id: UUID
    role: ProfileRole | None
    full_name: str | None
    email: str | None
    phone: str | None
    address: str | None
    restaurant_name: str | None
    cuisine_type: str | None
    city: str | None
    image_url: str | None
    latitude: float | None
    longitude: float | None
    created_at: datetime
    updated_at: datetime


class DeliveryLocation(TypedDict):
    """delivery_locations row: one current position per delivery partner.

    Overwritten on every update (last writer wins).
    """

    delivery_partner_id: UUID
    latitude: float
    longitude: float
    updated_at: datetime
