"""Order placement and lifecycle business logic service."""

import logging
from collections import defaultdict
from typing import Any, Iterable
from uuid import UUID

from src.core.config import get_settings
from src.core.realtime import OrderNotifier, get_order_notifier
from src.core.supabase import get_supabase_client
from src.domain.cart import Cart
from src.domain.errors import ClaimConflict, Forbidden, InvalidTransition
from src.domain.order_state import (
    INITIAL_STATUS,
    Actor,
    OrderSnapshot,
    OrderStatus,
    Role,
    TransitionPlan,
    plan_transition,
)
from src.models.order import Order, OrderCreate, OrderStatusHistoryEntry, compute_order_total
from src.schemas.order import CheckoutLineItem
from src.services.menu_service import MenuService

logger = logging.getLogger(__name__)

ACTIVE_DELIVERY_STATUSES = [OrderStatus.ASSIGNED.value, OrderStatus.OUT_FOR_DELIVERY.value]


class OrderService:
    """Service for checkout, status transitions and order queries.

    Status changes go through the order state machine and are written as a
    single conditional update, so concurrent writers cannot both win.
    """

    def __init__(self, notifier: OrderNotifier | None = None) -> None:
        """Initialize order service with clients."""
        self.client = get_supabase_client()
        self.settings = get_settings()
        self.notifier = notifier or get_order_notifier()
        self.menu_service = MenuService()

    # Checkout

    async def build_cart(
        self, restaurant_id: UUID | str, lines: Iterable[CheckoutLineItem]
    ) -> Cart:
        """Rebuild a submitted cart against the current menu.

        Args:
            restaurant_id: Restaurant the cart claims to belong to.
            lines: Submitted cart lines.

        Returns:
            Cart: Priced cart holding only that restaurant's dishes.

        Raises:
            ValueError: Unknown, unavailable or foreign dish, or unknown variant.
        """
        lines = list(lines)
        dishes = await self.menu_service.get_dishes(line.dish_id for line in lines)
        cart = Cart()

        for line in lines:
            dish = dishes.get(str(line.dish_id))
            if not dish:
                raise ValueError(f"Dish {line.dish_id} not found")
            if str(dish["restaurant_id"]) != str(restaurant_id):
                raise ValueError(f"Dish {line.dish_id} does not belong to this restaurant")
            if dish.get("is_available") is False:
                raise ValueError(f"{dish.get('name') or 'Dish'} is currently unavailable")

            variant = None
            if line.variant_label:
                variant = next(
                    (v for v in dish.get("variants") or [] if v.get("name") == line.variant_label),
                    None,
                )
                if variant is None:
                    raise ValueError(f"Unknown variant '{line.variant_label}' for dish {line.dish_id}")

            cart.add_item(dish, variant, line.quantity)

        return cart

    async def create_order(
        self,
        actor: Actor,
        restaurant_id: UUID | str,
        lines: Iterable[CheckoutLineItem],
        delivery_address: str,
    ) -> dict[str, Any]:
        """Place an order from a cart.

        The order starts in 'pending' with total_amount equal to the cart
        total. Payment is not collected.

        Args:
            actor: The ordering customer.
            restaurant_id: Restaurant user ID.
            lines: Cart lines.
            delivery_address: Free-text address.

        Returns:
            dict: The created order with its items.

        Raises:
            Forbidden: Actor is not a customer.
            ValueError: Empty or invalid cart.
        """
        if actor.role is not Role.CUSTOMER:
            raise Forbidden("Only customers can place orders")

        cart = await self.build_cart(restaurant_id, lines)
        if cart.is_empty:
            raise ValueError("Cart is empty")

        order_items = [
            {
                "dish_id": line.dish_id,
                "quantity": line.quantity,
                "unit_price": str(line.unit_price),
                "variant_label": line.variant_label,
            }
            for line in cart.items
        ]
        total = compute_order_total(order_items)

        order_data: OrderCreate = {
            "customer_id": actor.user_id,
            "restaurant_id": str(restaurant_id),
            "status": INITIAL_STATUS.value,
            "total_amount": str(total),
            "delivery_address": delivery_address,
        }

        order_response = self.client.table("orders").insert(order_data).execute()
        order = order_response.data[0]
        order_id = str(order["id"])
        for item in order_items:
            item["order_id"] = order_id

        try:
            items_response = self.client.table("order_items").insert(order_items).execute()
            await self._append_history(order_id, INITIAL_STATUS, actor, note="Order placed")
        except Exception:
            # The order was never placed; remove the header and its items
            logger.error("Failed to store items or history for order %s, rolling back", order_id)
            self.client.table("order_items").delete().eq("order_id", order_id).execute()
            self.client.table("orders").delete().eq("id", order_id).execute()
            raise

        logger.info(
            "Order %s placed by %s at restaurant %s (%d items, total %s)",
            order_id,
            actor.user_id,
            restaurant_id,
            cart.get_item_count(),
            total,
        )

        return {**order, "items": items_response.data or order_items}

    # Transitions

    async def transition_order(
        self,
        order_id: UUID | str,
        target: OrderStatus | str,
        actor: Actor,
        note: str | None = None,
    ) -> dict[str, Any] | None:
        """Move an order to a new status on behalf of an actor.

        Args:
            order_id: The order's UUID.
            target: Requested status.
            actor: Who is asking.
            note: Optional note stored with the history entry.

        Returns:
            dict | None: The updated order row, or None if the order does not exist.

        Raises:
            InvalidTransition: Not a legal edge, or the order changed concurrently.
            Forbidden: Actor may not perform this edge.
            ClaimConflict: Another partner claimed the order first.
        """
        order = await self.get_order(order_id)
        if not order:
            return None

        plan = plan_transition(
            OrderSnapshot.from_row(order),
            target,
            actor,
            estimated_delivery_minutes=self.settings.estimated_delivery_minutes,
        )
        updated = self._write_transition(plan)

        try:
            await self._append_history(plan.order_id, plan.target, actor, note=note)
        except Exception:
            logger.error(
                "Failed to record history for order %s (%s -> %s), reverting",
                plan.order_id,
                plan.source.value,
                plan.target.value,
            )
            self._revert_transition(plan, order)
            raise

        logger.info(
            "Order %s moved %s -> %s by %s %s",
            plan.order_id,
            plan.source.value,
            plan.target.value,
            actor.role.value,
            actor.user_id,
        )

        self.notifier.publish(plan.order_id, updated)
        return updated

    async def claim_order(self, order_id: UUID | str, actor: Actor) -> dict[str, Any] | None:
        """Claim a ready order for a delivery partner (ready -> assigned)."""
        return await self.transition_order(order_id, OrderStatus.ASSIGNED, actor)

    def _write_transition(self, plan: TransitionPlan) -> dict[str, Any]:
        """Apply a plan as one conditional update.

        Zero rows back means the row no longer matches the plan's expected
        values: someone else changed it between our read and this write.
        """
        query = self.client.table("orders").update(plan.changes).eq("id", plan.order_id)
        for column, value in plan.expected.items():
            query = query.is_(column, "null") if value is None else query.eq(column, value)

        response = query.execute()
        if response.data:
            return response.data[0]

        if plan.is_claim:
            logger.info("Claim on order %s by %s lost to another partner", plan.order_id, plan.actor.user_id)
            raise ClaimConflict(plan.order_id)

        logger.warning(
            "Conditional update for order %s (%s -> %s) matched no rows",
            plan.order_id,
            plan.source.value,
            plan.target.value,
        )
        raise InvalidTransition(
            plan.source.value,
            plan.target.value,
            "Order was updated by someone else; refresh and try again",
        )

    def _revert_transition(self, plan: TransitionPlan, previous: Order) -> None:
        """Undo a written plan, provided nobody has moved the order since."""
        restore = {column: previous.get(column) for column in plan.changes}
        query = (
            self.client.table("orders")
            .update(restore)
            .eq("id", plan.order_id)
            .eq("status", plan.target.value)
        )
        if not query.execute().data:
            logger.error("Could not revert order %s; it changed again after %s", plan.order_id, plan.target.value)

    async def _append_history(
        self,
        order_id: str,
        status: OrderStatus,
        actor: Actor,
        note: str | None = None,
    ) -> OrderStatusHistoryEntry:
        entry = {
            "order_id": order_id,
            "status": status.value,
            "note": note,
            "changed_by": actor.user_id,
        }
        response = self.client.table("order_status_history").insert(entry).execute()
        return response.data[0] if response.data else entry

    # Queries

    async def get_order(self, order_id: UUID | str) -> Order | None:
        """Get an order row by ID.

        Args:
            order_id: The order's UUID.

        Returns:
            dict | None: The order data or None if not found.
        """
        response = (
            self.client.table("orders")
            .select("*")
            .eq("id", str(order_id))
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def get_order_with_items(self, order_id: UUID | str) -> dict[str, Any] | None:
        order = await self.get_order(order_id)
        if not order:
            return None
        return (await self.attach_items([order]))[0]

    async def get_status_history(self, order_id: UUID | str) -> list[dict[str, Any]]:
        """Get an order's status history, oldest first."""
        response = (
            self.client.table("order_status_history")
            .select("*")
            .eq("order_id", str(order_id))
            .order("created_at")
            .execute()
        )

        return response.data or []

    async def list_orders_for_customer(self, customer_id: UUID | str) -> list[dict[str, Any]]:
        response = (
            self.client.table("orders")
            .select("*")
            .eq("customer_id", str(customer_id))
            .order("created_at", desc=True)
            .execute()
        )

        return await self.attach_items(response.data or [])

    async def list_orders_for_restaurant(self, restaurant_id: UUID | str) -> list[dict[str, Any]]:
        response = (
            self.client.table("orders")
            .select("*")
            .eq("restaurant_id", str(restaurant_id))
            .order("created_at", desc=True)
            .execute()
        )

        return await self.attach_items(response.data or [])

    async def list_orders_for_delivery_partner(
        self, partner_id: UUID | str, active_only: bool = True
    ) -> list[dict[str, Any]]:
        """Orders claimed by a delivery partner; by default only those still in progress."""
        query = (
            self.client.table("orders")
            .select("*")
            .eq("delivery_partner_id", str(partner_id))
        )
        if active_only:
            query = query.in_("status", ACTIVE_DELIVERY_STATUSES)

        response = query.order("created_at", desc=True).execute()
        return await self.attach_items(response.data or [])

    async def list_candidate_orders(self) -> list[dict[str, Any]]:
        """Ready orders no delivery partner has claimed yet, oldest first."""
        response = (
            self.client.table("orders")
            .select("*")
            .eq("status", OrderStatus.READY.value)
            .is_("delivery_partner_id", "null")
            .order("created_at")
            .execute()
        )

        return response.data or []

    async def list_orders_for_actor(self, actor: Actor) -> list[dict[str, Any]]:
        """Orders visible to the actor, according to their role."""
        if actor.role is Role.CUSTOMER:
            return await self.list_orders_for_customer(actor.user_id)
        if actor.role is Role.RESTAURANT:
            return await self.list_orders_for_restaurant(actor.user_id)
        if actor.role is Role.DELIVERY:
            return await self.list_orders_for_delivery_partner(actor.user_id, active_only=False)
        return []

    @staticmethod
    def can_view_order(order: dict[str, Any], actor: Actor) -> bool:
        """Check whether an actor may see an order.

        Delivery partners can see orders they hold, plus unclaimed ready
        orders they might pick up.
        """
        if actor.role is Role.CUSTOMER:
            return str(order.get("customer_id")) == actor.user_id
        if actor.role is Role.RESTAURANT:
            return str(order.get("restaurant_id")) == actor.user_id
        if actor.role is Role.DELIVERY:
            partner = order.get("delivery_partner_id")
            if partner:
                return str(partner) == actor.user_id
            return order.get("status") == OrderStatus.READY.value
        return False

    async def attach_items(self, orders: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Embed each order's order_items rows under its "items" key."""
        if not orders:
            return []

        order_ids = [str(order["id"]) for order in orders]
        response = (
            self.client.table("order_items")
            .select("*")
            .in_("order_id", order_ids)
            .execute()
        )

        items_by_order: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for item in response.data or []:
            items_by_order[str(item["order_id"])].append(item)

        return [{**order, "items": items_by_order.get(str(order["id"]), [])} for order in orders]
