"""Profile business logic service."""

from typing import Any, Iterable
from uuid import UUID

from src.core.supabase import get_supabase_client
from src.domain.order_state import Actor, Role
from src.models.profile import Profile

# Public restaurant fields shown to customers
RESTAURANT_COLUMNS = "user_id, restaurant_name, cuisine_type, address, city, image_url, latitude, longitude"


class ProfileService:
    """Service for reading user profiles and resolving marketplace roles."""

    def __init__(self) -> None:
        """Initialize profile service with Supabase client."""
        self.client = get_supabase_client()

    async def get_profile(self, user_id: UUID | str) -> Profile | None:
        """Get a profile by auth user ID.

        Args:
            user_id: The auth user ID.

        Returns:
            dict | None: The profile data or None if not found.
        """
        response = (
            self.client.table("profiles")
            .select("*")
            .eq("user_id", str(user_id))
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def resolve_role(self, user_id: UUID | str) -> Role:
        """Resolve the marketplace role stored on the user's profile.

        Missing profiles and unknown role values resolve to Role.UNASSIGNED.
        """
        profile = await self.get_profile(user_id)
        if not profile:
            return Role.UNASSIGNED
        return Role.parse(profile.get("role"))

    async def get_actor(self, user_id: UUID | str) -> Actor:
        """Build the Actor used for authorization checks."""
        return Actor(user_id=str(user_id), role=await self.resolve_role(user_id))

    async def get_restaurant_coordinates(
        self, restaurant_ids: Iterable[str]
    ) -> dict[str, tuple[Any, Any]]:
        """Look up registered coordinates for a set of restaurants.

        Restaurants without a profile are absent from the result; rows with
        null coordinates are returned as-is and rejected by the matcher.

        Args:
            restaurant_ids: Restaurant user IDs.

        Returns:
            dict: restaurant user ID -> (latitude, longitude).
        """
        ids = sorted({str(restaurant_id) for restaurant_id in restaurant_ids})
        if not ids:
            return {}

        response = (
            self.client.table("profiles")
            .select("user_id, latitude, longitude")
            .in_("user_id", ids)
            .eq("role", Role.RESTAURANT.value)
            .execute()
        )

        return {
            str(row["user_id"]): (row.get("latitude"), row.get("longitude"))
            for row in response.data or []
        }

    async def list_restaurants(self) -> list[dict[str, Any]]:
        """List restaurants customers can order from, by name.

        Restaurant profiles that have not set a restaurant name yet are left out.
        """
        response = (
            self.client.table("profiles")
            .select(RESTAURANT_COLUMNS)
            .eq("role", Role.RESTAURANT.value)
            .not_.is_("restaurant_name", "null")
            .order("restaurant_name")
            .execute()
        )

        return response.data or []

    async def get_restaurant(self, restaurant_id: UUID | str) -> dict[str, Any] | None:
        """Get one restaurant's public profile.

        Args:
            restaurant_id: The restaurant's auth user ID.

        Returns:
            dict | None: The restaurant or None if no restaurant has that ID.
        """
        response = (
            self.client.table("profiles")
            .select(RESTAURANT_COLUMNS)
            .eq("user_id", str(restaurant_id))
            .eq("role", Role.RESTAURANT.value)
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None
