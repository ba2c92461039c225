"""Order Pydantic schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.domain.order_state import OrderStatus


class CheckoutLineItem(BaseModel):
    """A cart line submitted at checkout.

    Prices are not taken from the client; they are recomputed from the
    current menu.
    """

    model_config = ConfigDict(from_attributes=True)

    dish_id: UUID = Field(description="Dish UUID")
    quantity: int = Field(ge=1, le=100, description="Units ordered")
    variant_label: str | None = Field(default=None, max_length=100, description="Selected variant name")


class CheckoutRequest(BaseModel):
    """Schema for POST /orders."""

    model_config = ConfigDict(from_attributes=True)

    restaurant_id: UUID = Field(description="Restaurant the cart belongs to")
    delivery_address: str = Field(min_length=1, max_length=500, description="Free-text delivery address")
    items: list[CheckoutLineItem] = Field(min_length=1, description="Cart lines")


class OrderItemResponse(BaseModel):
    """Schema for a single order line."""

    model_config = ConfigDict(from_attributes=True)

    dish_id: UUID = Field(description="Dish UUID")
    quantity: int = Field(description="Units ordered")
    unit_price: Decimal = Field(description="Price per unit including variant modifier")
    variant_label: str | None = Field(default=None, description="Selected variant name")


class OrderResponse(BaseModel):
    """Schema for order API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Order unique identifier")
    customer_id: UUID = Field(description="Customer user ID")
    restaurant_id: UUID = Field(description="Restaurant user ID")
    delivery_partner_id: UUID | None = Field(default=None, description="Assigned delivery partner, if claimed")
    status: OrderStatus = Field(description="Order status")
    total_amount: Decimal = Field(description="Sum of unit price x quantity over items")
    delivery_address: str = Field(description="Delivery address")
    estimated_delivery_time: datetime | None = Field(default=None, description="Set when a partner claims the order")
    items: list[OrderItemResponse] = Field(default_factory=list, description="Order lines")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last status change")


class OrderListResponse(BaseModel):
    """Schema for order list API responses."""

    model_config = ConfigDict(from_attributes=True)

    items: list[OrderResponse] = Field(description="List of orders")


class TransitionRequest(BaseModel):
    """Schema for POST /orders/{order_id}/transitions."""

    model_config = ConfigDict(from_attributes=True)

    status: OrderStatus = Field(description="Target status")
    note: str | None = Field(default=None, max_length=500, description="Optional note stored in the history")


class StatusHistoryEntryResponse(BaseModel):
    """Schema for one order_status_history row."""

    model_config = ConfigDict(from_attributes=True)

    status: OrderStatus = Field(description="Status entered")
    note: str | None = Field(default=None, description="Optional note")
    created_at: datetime = Field(description="When the status was entered")


class StatusHistoryResponse(BaseModel):
    """Schema for GET /orders/{order_id}/history."""

    model_config = ConfigDict(from_attributes=True)

    order_id: UUID = Field(description="Order UUID")
    entries: list[StatusHistoryEntryResponse] = Field(description="History, oldest first")
