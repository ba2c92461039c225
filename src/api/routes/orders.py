"""Order API routes: checkout, lifecycle transitions, tracking and ratings."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from src.api.deps import CurrentActor, CustomerActor, DeliveryActor
from src.api.middleware.error_handler import AuthorizationError, NotFoundError
from src.domain.order_state import Actor
from src.schemas.dish import RateOrderRequest, RateOrderResponse
from src.schemas.order import (
    CheckoutRequest,
    OrderListResponse,
    OrderResponse,
    StatusHistoryEntryResponse,
    StatusHistoryResponse,
    TransitionRequest,
)
from src.services.order_service import OrderService
from src.services.rating_service import RatingService

router = APIRouter(prefix="/orders", tags=["orders"])


async def _get_visible_order(service: OrderService, order_id: UUID, actor: Actor) -> dict:
    """Load an order with items, enforcing visibility for the actor."""
    order = await service.get_order_with_items(order_id)
    if not order:
        raise NotFoundError("Order not found")
    if not service.can_view_order(order, actor):
        raise AuthorizationError("Not authorized to view this order")
    return order


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place an order",
    description="Checks out a single-restaurant cart. Prices are recomputed from the current menu.",
)
async def create_order(data: CheckoutRequest, actor: CustomerActor) -> OrderResponse:
    """Place an order from the customer's cart.

    Args:
        data: Restaurant, address and cart lines.
        actor: The ordering customer.

    Returns:
        OrderResponse: The pending order.

    Raises:
        HTTPException: 400 if the cart references unknown or unavailable dishes.
    """
    service = OrderService()

    try:
        order = await service.create_order(
            actor=actor,
            restaurant_id=data.restaurant_id,
            lines=data.items,
            delivery_address=data.delivery_address,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    return OrderResponse(**order)


@router.get(
    "",
    response_model=OrderListResponse,
    summary="List my orders",
    description="Customers see orders they placed, restaurants orders they received, delivery partners orders they claimed.",
)
async def list_orders(actor: CurrentActor) -> OrderListResponse:
    service = OrderService()
    orders = await service.list_orders_for_actor(actor)
    return OrderListResponse(items=[OrderResponse(**order) for order in orders])


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order by ID",
)
async def get_order(order_id: UUID, actor: CurrentActor) -> OrderResponse:
    """Get a single order visible to the caller.

    Raises:
        NotFoundError: 404 if order not found.
        AuthorizationError: 403 if the caller may not see it.
    """
    service = OrderService()
    order = await _get_visible_order(service, order_id, actor)
    return OrderResponse(**order)


@router.get(
    "/{order_id}/history",
    response_model=StatusHistoryResponse,
    summary="Get order status history",
    description="Every status the order has entered, oldest first.",
)
async def get_order_history(order_id: UUID, actor: CurrentActor) -> StatusHistoryResponse:
    service = OrderService()
    await _get_visible_order(service, order_id, actor)
    entries = await service.get_status_history(order_id)
    return StatusHistoryResponse(
        order_id=order_id,
        entries=[StatusHistoryEntryResponse(**entry) for entry in entries],
    )


@router.post(
    "/{order_id}/transitions",
    response_model=OrderResponse,
    summary="Change order status",
    description="Moves the order along its lifecycle. Restaurants confirm, reject, prepare and mark ready; "
    "delivery partners claim, pick up and complete.",
    responses={
        403: {"description": "Caller may not perform this transition"},
        404: {"description": "Order not found"},
        409: {"description": "Illegal transition, or order no longer available"},
    },
)
async def transition_order(
    order_id: UUID,
    data: TransitionRequest,
    actor: CurrentActor,
) -> OrderResponse:
    """Apply a status transition.

    Workflow errors propagate to the error middleware, which renders them
    as 403/409 responses.
    """
    service = OrderService()
    order = await service.transition_order(order_id, data.status, actor, note=data.note)
    if not order:
        raise NotFoundError("Order not found")

    return OrderResponse(**(await service.attach_items([order]))[0])


@router.post(
    "/{order_id}/claim",
    response_model=OrderResponse,
    summary="Claim a ready order",
    description="Delivery partner takes exclusive ownership of a ready order. "
    "Returns 409 order_unavailable if another partner got it first, or 409 invalid_transition "
    "if the order is no longer ready; re-fetch nearby orders in either case.",
)
async def claim_order(order_id: UUID, actor: DeliveryActor) -> OrderResponse:
    service = OrderService()
    order = await service.claim_order(order_id, actor)
    if not order:
        raise NotFoundError("Order not found")

    return OrderResponse(**(await service.attach_items([order]))[0])


@router.post(
    "/{order_id}/ratings",
    response_model=RateOrderResponse,
    summary="Rate dishes in a completed order",
)
async def rate_order(
    order_id: UUID,
    data: RateOrderRequest,
    actor: CustomerActor,
) -> RateOrderResponse:
    """Store the customer's dish ratings for a delivered order.

    Raises:
        HTTPException: 400 if the order is not completed or a dish is not in it.
    """
    order_service = OrderService()
    order = await _get_visible_order(order_service, order_id, actor)

    try:
        stored = await RatingService().rate_order(actor, order, data.ratings)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    return RateOrderResponse(order_id=order_id, rated_dishes=len(stored))
