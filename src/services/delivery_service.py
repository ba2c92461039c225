"""Delivery partner location and order matching service."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from src.core.config import get_settings
from src.core.supabase import get_supabase_client
from src.domain.errors import Forbidden
from src.domain.matching import MatchedOrder, match_orders
from src.domain.order_state import Actor, Role
from src.models.profile import DeliveryLocation
from src.services.order_service import OrderService
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


class DeliveryService:
    """Service for delivery partner locations and nearby-order matching."""

    def __init__(self) -> None:
        """Initialize delivery service with clients."""
        self.client = get_supabase_client()
        self.settings = get_settings()
        self.order_service = OrderService()
        self.profile_service = ProfileService()

    @staticmethod
    def _require_delivery_partner(actor: Actor) -> None:
        if actor.role is not Role.DELIVERY:
            raise Forbidden("Only delivery partners can do this")

    async def update_location(
        self, actor: Actor, latitude: float, longitude: float
    ) -> DeliveryLocation:
        """Overwrite the partner's single current-location row.

        Last writer wins; there is no ordering between updates.

        Returns:
            dict: The stored location row.
        """
        self._require_delivery_partner(actor)

        location = {
            "delivery_partner_id": actor.user_id,
            "latitude": latitude,
            "longitude": longitude,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        response = (
            self.client.table("delivery_locations")
            .upsert(location, on_conflict="delivery_partner_id")
            .execute()
        )

        return response.data[0] if response.data else location

    async def get_location(self, partner_id: UUID | str) -> DeliveryLocation | None:
        """Get a delivery partner's last reported location.

        Args:
            partner_id: Delivery partner user ID.

        Returns:
            dict | None: Location row or None if never reported.
        """
        response = (
            self.client.table("delivery_locations")
            .select("*")
            .eq("delivery_partner_id", str(partner_id))
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def can_track_partner(self, actor: Actor, partner_id: UUID | str) -> bool:
        """Whether an actor may see a partner's live location.

        Partners can see themselves. Customers and restaurants can see a
        partner while that partner is carrying one of their orders.
        """
        partner_id = str(partner_id)
        if actor.role is Role.DELIVERY:
            return actor.user_id == partner_id
        if actor.role not in (Role.CUSTOMER, Role.RESTAURANT):
            return False

        orders = await self.order_service.list_orders_for_delivery_partner(partner_id)
        owner_key = "customer_id" if actor.role is Role.CUSTOMER else "restaurant_id"
        return any(str(order.get(owner_key)) == actor.user_id for order in orders)

    async def find_nearby_orders(
        self,
        actor: Actor,
        latitude: float,
        longitude: float,
        radius_km: float | None = None,
    ) -> list[MatchedOrder]:
        """Ready, unclaimed orders near a delivery partner, nearest first.

        Records the partner's position, then matches against the current
        candidates. Orders whose restaurant has no registered coordinate are
        left out.

        Args:
            actor: The delivery partner.
            latitude: Partner latitude.
            longitude: Partner longitude.
            radius_km: Override for the configured search radius.

        Returns:
            list[MatchedOrder]: Matches with items attached.
        """
        self._require_delivery_partner(actor)
        await self.update_location(actor, latitude, longitude)

        candidates = await self.order_service.list_candidate_orders()
        if not candidates:
            return []

        coordinates = await self.profile_service.get_restaurant_coordinates(
            str(order["restaurant_id"]) for order in candidates
        )
        matches = match_orders(
            latitude,
            longitude,
            candidates,
            coordinates,
            max_radius_km=radius_km or self.settings.delivery_search_radius_km,
        )
        logger.debug(
            "Partner %s: %d of %d candidates within range",
            actor.user_id,
            len(matches),
            len(candidates),
        )
        if not matches:
            return []

        with_items = await self.order_service.attach_items([dict(match.order) for match in matches])
        return [
            MatchedOrder(order=order, distance_km=match.distance_km, restaurant_location=match.restaurant_location)
            for match, order in zip(matches, with_items)
        ]
