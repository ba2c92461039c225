"""Order model type definitions for database operations."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Literal, Mapping, TypedDict
from uuid import UUID

# Order status enum values matching database enum
OrderStatus = Literal[
    "pending",
    "confirmed",
    "preparing",
    "ready",
    "assigned",
    "out_for_delivery",
    "completed",
    "rejected",
]


class OrderItem(TypedDict):
    """order_items row. Fixed at checkout."""

    id: UUID
    order_id: UUID
    dish_id: UUID
    quantity: int
    unit_price: Decimal
    variant_label: str | None


class Order(TypedDict):
    """Order table row representation.

    status, delivery_partner_id and estimated_delivery_time change only
    through the order state machine; every other column is set at checkout.
    """

    id: UUID
    customer_id: UUID
    restaurant_id: UUID
    delivery_partner_id: UUID | None
    status: OrderStatus
    total_amount: Decimal
    delivery_address: str
    estimated_delivery_time: datetime | None
    created_at: datetime
    updated_at: datetime


class OrderCreate(TypedDict, total=False):
    """Data inserted when an order is placed."""

    customer_id: str
    restaurant_id: str
    status: OrderStatus
    total_amount: str
    delivery_address: str


class OrderStatusHistoryEntry(TypedDict):
    """order_status_history row. Append-only."""

    id: UUID
    order_id: UUID
    status: OrderStatus
    note: str | None
    changed_by: UUID | None
    created_at: datetime


def compute_order_total(items: Iterable[Mapping[str, Any]]) -> Decimal:
    """Sum of unit_price x quantity over order items."""
    return sum(
        (Decimal(str(item["unit_price"])) * int(item["quantity"]) for item in items),
        Decimal("0"),
    )
