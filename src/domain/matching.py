"""Nearest-first matching of ready orders to a delivery partner."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from src.domain.errors import UnreachableCandidate
from src.domain.geo import haversine_distance_km, is_valid_coordinate
from src.domain.order_state import OrderStatus

logger = logging.getLogger(__name__)

DEFAULT_MAX_RADIUS_KM = 10.0

Coordinate = tuple[float, float]

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class MatchedOrder:
    """A candidate order annotated with its distance from the partner."""

    order: Mapping[str, Any]
    distance_km: float
    restaurant_location: Coordinate

    @property
    def order_id(self) -> str:
        return str(self.order["id"])


def is_candidate(order: Mapping[str, Any]) -> bool:
    """Ready and not yet claimed by any delivery partner."""
    return order.get("status") == OrderStatus.READY.value and not order.get("delivery_partner_id")


def _created_at_key(order: Mapping[str, Any]) -> datetime:
    value = order.get("created_at")
    if value is None:
        return _EPOCH
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _restaurant_location(
    order: Mapping[str, Any],
    restaurant_coordinates: Mapping[str, Any],
) -> Coordinate:
    restaurant_id = str(order.get("restaurant_id"))
    coordinate = restaurant_coordinates.get(restaurant_id)
    if coordinate is None:
        raise UnreachableCandidate(str(order.get("id")), restaurant_id)

    try:
        latitude, longitude = coordinate
    except (TypeError, ValueError) as e:
        raise UnreachableCandidate(str(order.get("id")), restaurant_id) from e
    if not is_valid_coordinate(latitude, longitude):
        raise UnreachableCandidate(str(order.get("id")), restaurant_id)
    return float(latitude), float(longitude)


def match_orders(
    partner_latitude: float,
    partner_longitude: float,
    candidates: Iterable[Mapping[str, Any]],
    restaurant_coordinates: Mapping[str, Any],
    max_radius_km: float = DEFAULT_MAX_RADIUS_KM,
) -> list[MatchedOrder]:
    """Rank unclaimed ready orders by distance from a delivery partner.

    Orders whose restaurant has no usable coordinate are dropped, as are
    orders farther than max_radius_km. The result is sorted nearest first,
    ties broken by earlier creation time. An empty list is a normal result.

    Args:
        partner_latitude: Partner's current latitude.
        partner_longitude: Partner's current longitude.
        candidates: Order rows; anything not ready-and-unclaimed is ignored.
        restaurant_coordinates: restaurant_id -> (latitude, longitude).
        max_radius_km: Search radius, inclusive.

    Returns:
        list[MatchedOrder]: Matches within the radius, nearest first.
    """
    if not is_valid_coordinate(partner_latitude, partner_longitude):
        raise ValueError("Delivery partner location is not a valid coordinate")

    matches: list[MatchedOrder] = []
    for order in candidates:
        if not is_candidate(order):
            continue
        try:
            location = _restaurant_location(order, restaurant_coordinates)
        except UnreachableCandidate as e:
            logger.debug("Skipping unreachable candidate: %s", e.message)
            continue

        distance = haversine_distance_km(partner_latitude, partner_longitude, location[0], location[1])
        if distance <= max_radius_km:
            matches.append(MatchedOrder(order=order, distance_km=distance, restaurant_location=location))

    matches.sort(key=lambda match: (match.distance_km, _created_at_key(match.order)))
    return matches
