"""Dish rating business logic service."""

import logging
from typing import Any, Iterable
from uuid import UUID

from src.core.supabase import get_supabase_client
from src.domain.errors import Forbidden
from src.domain.order_state import Actor, OrderStatus, Role
from src.models.dish import DishRating
from src.schemas.dish import DishRatingInput

logger = logging.getLogger(__name__)


class RatingService:
    """Service for customer ratings of dishes in completed orders."""

    def __init__(self) -> None:
        """Initialize rating service with Supabase client."""
        self.client = get_supabase_client()

    async def rate_order(
        self,
        actor: Actor,
        order: dict[str, Any],
        ratings: Iterable[DishRatingInput],
    ) -> list[DishRating]:
        """Store or replace the actor's ratings for dishes in an order.

        Args:
            actor: The rating customer.
            order: Order row with its "items".
            ratings: One rating per dish.

        Returns:
            list[dict]: Stored rating rows.

        Raises:
            Forbidden: Actor is not the order's customer.
            ValueError: Order not completed, or a dish is not part of it or repeated.
        """
        if actor.role is not Role.CUSTOMER or str(order.get("customer_id")) != actor.user_id:
            raise Forbidden("Only the customer who placed the order can rate it")
        if order.get("status") != OrderStatus.COMPLETED.value:
            raise ValueError("Only completed orders can be rated")

        ordered_dishes = {str(item["dish_id"]) for item in order.get("items", [])}
        rows = []
        for rating in ratings:
            if str(rating.dish_id) not in ordered_dishes:
                raise ValueError(f"Dish {rating.dish_id} is not part of this order")
            if any(row["dish_id"] == str(rating.dish_id) for row in rows):
                raise ValueError(f"Dish {rating.dish_id} is rated more than once")
            rows.append(
                {
                    "dish_id": str(rating.dish_id),
                    "order_id": str(order["id"]),
                    "customer_id": actor.user_id,
                    "rating": rating.rating,
                    "review": rating.review,
                }
            )

        response = (
            self.client.table("dish_ratings")
            .upsert(rows, on_conflict="dish_id,order_id,customer_id")
            .execute()
        )
        logger.info("Customer %s rated %d dishes on order %s", actor.user_id, len(rows), order["id"])
        return response.data or rows

    async def get_dish_rating_summary(self, dish_id: UUID | str) -> dict[str, Any]:
        """Average score and count for a dish."""
        response = (
            self.client.table("dish_ratings")
            .select("rating")
            .eq("dish_id", str(dish_id))
            .execute()
        )

        scores = [row["rating"] for row in response.data or []]
        return {
            "dish_id": str(dish_id),
            "average_rating": round(sum(scores) / len(scores), 2) if scores else None,
            "rating_count": len(scores),
        }
