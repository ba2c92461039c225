"""Restaurant menu business logic service."""

import logging
from typing import Iterable
from uuid import UUID

from src.core.supabase import get_supabase_client
from src.domain.errors import Forbidden
from src.domain.order_state import Actor, Role
from src.models.dish import Dish
from src.schemas.dish import DishCreate, DishUpdate

logger = logging.getLogger(__name__)


class MenuService:
    """Service for restaurant dishes and their variants."""

    def __init__(self) -> None:
        """Initialize menu service with Supabase client."""
        self.client = get_supabase_client()

    @staticmethod
    def _require_restaurant(actor: Actor) -> None:
        if actor.role is not Role.RESTAURANT:
            raise Forbidden("Only restaurants can manage dishes")

    async def list_dishes(
        self, restaurant_id: UUID | str, available_only: bool = False
    ) -> list[Dish]:
        """List a restaurant's dishes, ordered by category then name.

        Args:
            restaurant_id: Restaurant user ID.
            available_only: Hide dishes marked unavailable (customer menu view).

        Returns:
            list[dict]: Dish rows.
        """
        query = (
            self.client.table("dishes")
            .select("*")
            .eq("restaurant_id", str(restaurant_id))
        )
        if available_only:
            query = query.eq("is_available", True)

        response = query.order("category").order("name").execute()
        return response.data or []

    async def get_dish(self, dish_id: UUID | str) -> Dish | None:
        response = (
            self.client.table("dishes")
            .select("*")
            .eq("id", str(dish_id))
            .maybe_single()
            .execute()
        )
        return response.data if response and response.data else None

    async def get_dishes(self, dish_ids: Iterable[UUID | str]) -> dict[str, Dish]:
        """Fetch several dishes at once, keyed by dish ID."""
        ids = sorted({str(dish_id) for dish_id in dish_ids})
        if not ids:
            return {}

        response = self.client.table("dishes").select("*").in_("id", ids).execute()
        return {str(row["id"]): row for row in response.data or []}

    async def create_dish(self, actor: Actor, data: DishCreate) -> Dish:
        """Add a dish to the acting restaurant's menu."""
        self._require_restaurant(actor)

        dish_data = data.model_dump(mode="json")
        dish_data["restaurant_id"] = actor.user_id

        response = self.client.table("dishes").insert(dish_data).execute()
        dish = response.data[0]
        logger.info("Restaurant %s added dish %s", actor.user_id, dish["id"])
        return dish

    async def update_dish(
        self, actor: Actor, dish_id: UUID | str, data: DishUpdate
    ) -> Dish | None:
        """Update one of the acting restaurant's dishes.

        Returns:
            dict | None: The updated dish, or None if it does not exist.

        Raises:
            Forbidden: The dish belongs to another restaurant.
        """
        self._require_restaurant(actor)
        dish = await self.get_dish(dish_id)
        if not dish:
            return None
        if str(dish["restaurant_id"]) != actor.user_id:
            raise Forbidden("Dish belongs to another restaurant")

        update_data = data.model_dump(mode="json", exclude_unset=True)
        if not update_data:
            return dish

        response = (
            self.client.table("dishes")
            .update(update_data)
            .eq("id", str(dish_id))
            .eq("restaurant_id", actor.user_id)
            .execute()
        )
        return response.data[0] if response.data else None

    async def delete_dish(self, actor: Actor, dish_id: UUID | str) -> bool:
        """Delete one of the acting restaurant's dishes.

        Returns:
            bool: False if the dish does not exist.
        """
        self._require_restaurant(actor)
        dish = await self.get_dish(dish_id)
        if not dish:
            return False
        if str(dish["restaurant_id"]) != actor.user_id:
            raise Forbidden("Dish belongs to another restaurant")

        self.client.table("dishes").delete().eq("id", str(dish_id)).execute()
        logger.info("Restaurant %s deleted dish %s", actor.user_id, dish_id)
        return True
