"""FastAPI dependency injection functions."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from src.api.middleware.auth import AuthError, AuthErrorCode, decode_jwt
from src.domain.order_state import Actor, Role
from src.schemas.auth import UserContext
from src.services.profile_service import ProfileService


async def get_current_user(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Extract and validate the current user from the Authorization header.

    Args:
        authorization: The Authorization header value (Bearer token).

    Returns:
        UserContext: The authenticated user's context.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_jwt(parts[1]).to_user_context()

    except AuthError as e:
        detail = "Token has expired" if e.code == AuthErrorCode.TOKEN_EXPIRED else e.message
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


async def get_actor(user: CurrentUser) -> Actor:
    """Resolve the authenticated user's marketplace role once per request.

    Args:
        user: The authenticated user context.

    Returns:
        Actor: User ID plus role from the user's profile.
    """
    return await ProfileService().get_actor(user.user_id)


CurrentActor = Annotated[Actor, Depends(get_actor)]


def require_role(*roles: Role):
    """Build a dependency that only admits actors with one of the given roles."""

    async def dependency(actor: CurrentActor) -> Actor:
        if actor.role not in roles:
            allowed = ", ".join(role.value for role in roles)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This action requires role: {allowed}",
            )
        return actor

    return dependency


CustomerActor = Annotated[Actor, Depends(require_role(Role.CUSTOMER))]
RestaurantActor = Annotated[Actor, Depends(require_role(Role.RESTAURANT))]
DeliveryActor = Annotated[Actor, Depends(require_role(Role.DELIVERY))]
