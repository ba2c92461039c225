"""Unit tests for FastAPI dependency injection functions."""

import time
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID

import pytest
from fastapi import HTTPException

from src.api.deps import get_actor, get_current_user, require_role
from src.api.middleware.auth import AuthError, AuthErrorCode
from src.domain.order_state import Actor, Role
from src.schemas.auth import TokenPayload, UserContext

USER_ID = "550e8400-e29b-41d4-a716-446655440000"


class TestGetCurrentUser:
    """Tests for get_current_user dependency."""

    @pytest.mark.asyncio
    @patch("src.api.deps.decode_jwt")
    async def test_extracts_user_context_correctly(self, mock_decode: MagicMock) -> None:
        """Test get_current_user extracts UserContext from valid token."""
        mock_decode.return_value = TokenPayload(
            sub=USER_ID,
            email="test@example.com",
            role="authenticated",
            exp=int(time.time()) + 3600,
            iat=int(time.time()),
        )

        user = await get_current_user("Bearer valid-token")

        assert isinstance(user, UserContext)
        assert str(user.user_id) == USER_ID
        assert user.email == "test@example.com"
        mock_decode.assert_called_once_with("valid-token")

    @pytest.mark.asyncio
    async def test_raises_401_for_missing_header(self) -> None:
        """Test get_current_user raises 401 when Authorization header is missing."""
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user("")

        assert exc_info.value.status_code == 401
        assert "Authorization header required" in exc_info.value.detail

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["invalid-token", "Basic some-credentials", "Bearer a b"])
    async def test_raises_401_for_invalid_header_format(self, header: str) -> None:
        """Test get_current_user raises 401 for a malformed header."""
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(header)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @patch("src.api.deps.decode_jwt")
    async def test_raises_401_for_expired_token(self, mock_decode: MagicMock) -> None:
        """Test get_current_user raises 401 for expired token."""
        mock_decode.side_effect = AuthError("Token has expired", AuthErrorCode.TOKEN_EXPIRED)

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user("Bearer expired-token")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"


class TestGetActor:
    """Tests for get_actor dependency."""

    @pytest.mark.asyncio
    async def test_resolves_role_from_profile(self) -> None:
        user = UserContext(user_id=UUID(USER_ID))
        with patch("src.api.deps.ProfileService") as mock_service_cls:
            mock_service_cls.return_value.get_actor = AsyncMock(return_value=Actor(USER_ID, Role.RESTAURANT))

            actor = await get_actor(user)

        assert actor.role is Role.RESTAURANT
        mock_service_cls.return_value.get_actor.assert_awaited_once_with(UUID(USER_ID))


class TestRequireRole:
    """Tests for require_role."""

    @pytest.mark.asyncio
    async def test_admits_matching_role(self) -> None:
        dependency = require_role(Role.CUSTOMER, Role.RESTAURANT)
        actor = Actor(USER_ID, Role.RESTAURANT)

        assert await dependency(actor) is actor

    @pytest.mark.asyncio
    async def test_rejects_other_roles(self) -> None:
        dependency = require_role(Role.DELIVERY)

        with pytest.raises(HTTPException) as exc_info:
            await dependency(Actor(USER_ID, Role.CUSTOMER))

        assert exc_info.value.status_code == 403
        assert "delivery" in exc_info.value.detail
