"""Database model type definitions."""

from src.models.dish import Dish, DishRating, DishVariant
from src.models.order import Order, OrderItem, OrderStatusHistoryEntry, compute_order_total
from src.models.profile import DeliveryLocation, Profile

__all__ = [
    "DeliveryLocation",
    "Dish",
    "DishRating",
    "DishVariant",
    "Order",
    "OrderItem",
    "OrderStatusHistoryEntry",
    "Profile",
    "compute_order_total",
]
