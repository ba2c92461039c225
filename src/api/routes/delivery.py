"""Delivery partner API routes: location reporting and nearby orders."""

from uuid import UUID

from fastapi import APIRouter, Query

from src.api.deps import CurrentActor, DeliveryActor
from src.api.middleware.error_handler import AuthorizationError, NotFoundError
from src.core.config import get_settings
from src.schemas.delivery import (
    LocationResponse,
    LocationUpdate,
    NearbyOrderResponse,
    NearbyOrdersResponse,
)
from src.schemas.order import OrderResponse
from src.services.delivery_service import DeliveryService

router = APIRouter(prefix="/delivery", tags=["delivery"])


@router.put(
    "/location",
    response_model=LocationResponse,
    summary="Report current location",
    description="Overwrites the delivery partner's current position. Clients push this periodically.",
)
async def update_location(data: LocationUpdate, actor: DeliveryActor) -> LocationResponse:
    service = DeliveryService()
    location = await service.update_location(actor, data.latitude, data.longitude)
    return LocationResponse(**location)


@router.get(
    "/location/{partner_id}",
    response_model=LocationResponse,
    summary="Get a delivery partner's location",
    description="Available to the partner and to customers/restaurants whose order the partner is carrying.",
)
async def get_location(partner_id: UUID, actor: CurrentActor) -> LocationResponse:
    service = DeliveryService()

    if not await service.can_track_partner(actor, partner_id):
        raise AuthorizationError("Not authorized to track this delivery partner")

    location = await service.get_location(partner_id)
    if not location:
        raise NotFoundError("No location reported yet")

    return LocationResponse(**location)


@router.get(
    "/nearby-orders",
    response_model=NearbyOrdersResponse,
    summary="Find ready orders nearby",
    description="Ready, unclaimed orders whose restaurant is within the search radius, nearest first.",
)
async def nearby_orders(
    actor: DeliveryActor,
    latitude: float = Query(ge=-90, le=90, description="Partner latitude"),
    longitude: float = Query(ge=-180, le=180, description="Partner longitude"),
) -> NearbyOrdersResponse:
    """List orders a delivery partner can claim.

    Also records the given position as the partner's current location.
    """
    settings = get_settings()
    service = DeliveryService()
    matches = await service.find_nearby_orders(actor, latitude, longitude)

    return NearbyOrdersResponse(
        items=[
            NearbyOrderResponse(
                order=OrderResponse(**match.order),
                distance_km=round(match.distance_km, 3),
                restaurant_latitude=match.restaurant_location[0],
                restaurant_longitude=match.restaurant_location[1],
            )
            for match in matches
        ],
        radius_km=settings.delivery_search_radius_km,
        refresh_seconds=settings.location_refresh_seconds,
    )
