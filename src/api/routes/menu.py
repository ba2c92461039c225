"""Menu API routes: restaurant directory, dishes and dish ratings."""

from uuid import UUID

from fastapi import APIRouter, Response, status

from src.api.deps import CurrentUser, RestaurantActor
from src.api.middleware.error_handler import NotFoundError
from src.schemas.dish import (
    DishCreate,
    DishListResponse,
    DishRatingSummary,
    DishResponse,
    DishUpdate,
)
from src.schemas.profile import RestaurantListResponse, RestaurantResponse
from src.services.menu_service import MenuService
from src.services.profile_service import ProfileService
from src.services.rating_service import RatingService

router = APIRouter(tags=["menu"])


@router.get(
    "/restaurants",
    response_model=RestaurantListResponse,
    summary="List restaurants",
    description="Restaurants customers can order from, ordered by name.",
)
async def list_restaurants(user: CurrentUser) -> RestaurantListResponse:
    restaurants = await ProfileService().list_restaurants()
    return RestaurantListResponse(items=[RestaurantResponse(**row) for row in restaurants])


@router.get(
    "/restaurants/{restaurant_id}",
    response_model=RestaurantResponse,
    summary="Get a restaurant",
)
async def get_restaurant(restaurant_id: UUID, user: CurrentUser) -> RestaurantResponse:
    restaurant = await ProfileService().get_restaurant(restaurant_id)
    if not restaurant:
        raise NotFoundError("Restaurant not found")
    return RestaurantResponse(**restaurant)


@router.get(
    "/restaurants/{restaurant_id}/dishes",
    response_model=DishListResponse,
    summary="List a restaurant's menu",
)
async def list_dishes(
    restaurant_id: UUID,
    user: CurrentUser,
    include_unavailable: bool = False,
) -> DishListResponse:
    """List dishes; unavailable ones only when the restaurant asks for its own."""
    available_only = not (include_unavailable and user.user_id == restaurant_id)
    dishes = await MenuService().list_dishes(restaurant_id, available_only=available_only)
    return DishListResponse(items=[DishResponse(**dish) for dish in dishes])


@router.post(
    "/dishes",
    response_model=DishResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a dish",
)
async def create_dish(data: DishCreate, actor: RestaurantActor) -> DishResponse:
    dish = await MenuService().create_dish(actor, data)
    return DishResponse(**dish)


@router.patch(
    "/dishes/{dish_id}",
    response_model=DishResponse,
    summary="Update a dish",
)
async def update_dish(dish_id: UUID, data: DishUpdate, actor: RestaurantActor) -> DishResponse:
    dish = await MenuService().update_dish(actor, dish_id, data)
    if not dish:
        raise NotFoundError("Dish not found")
    return DishResponse(**dish)


@router.delete(
    "/dishes/{dish_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a dish",
)
async def delete_dish(dish_id: UUID, actor: RestaurantActor) -> Response:
    if not await MenuService().delete_dish(actor, dish_id):
        raise NotFoundError("Dish not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/dishes/{dish_id}/rating",
    response_model=DishRatingSummary,
    summary="Get a dish's average rating",
)
async def get_dish_rating(dish_id: UUID, user: CurrentUser) -> DishRatingSummary:
    summary = await RatingService().get_dish_rating_summary(dish_id)
    return DishRatingSummary(**summary)
