"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SUPABASE_SIGNING_KEY_JWK", "test-signing-key-jwk")

from tests.fakes import CUSTOMER_ID, DISH_ID, OTHER_PARTNER_ID, PARTNER_ID, RESTAURANT_ID, FakeSupabase  # noqa: E402


@pytest.fixture(scope="session")
def test_settings() -> Generator[Any, None, None]:
    """Provide test settings with cleared cache."""
    from src.core.config import get_settings

    get_settings.cache_clear()
    settings = get_settings()
    yield settings
    get_settings.cache_clear()


@pytest.fixture
def fake_supabase() -> Generator[FakeSupabase, None, None]:
    """Patch every service's Supabase client with one shared in-memory fake."""
    db = FakeSupabase()
    targets = [
        "src.services.order_service.get_supabase_client",
        "src.services.menu_service.get_supabase_client",
        "src.services.profile_service.get_supabase_client",
        "src.services.delivery_service.get_supabase_client",
        "src.services.rating_service.get_supabase_client",
    ]
    patchers = [patch(target, return_value=db) for target in targets]
    for patcher in patchers:
        patcher.start()
    try:
        yield db
    finally:
        for patcher in patchers:
            patcher.stop()


@pytest.fixture
def seeded_supabase(fake_supabase: FakeSupabase) -> FakeSupabase:
    """Fake database with one customer, restaurant, two partners and a dish."""
    fake_supabase.tables["profiles"].extend(
        [
            {
                "id": "aaaaaaaa-0000-4000-8000-000000000001",
                "user_id": CUSTOMER_ID,
                "role": "customer",
                "full_name": "Casey",
            },
            {
                "id": "aaaaaaaa-0000-4000-8000-000000000002",
                "user_id": RESTAURANT_ID,
                "role": "restaurant",
                "restaurant_name": "Sweet Spot",
                "latitude": 0.0,
                "longitude": 0.0,
            },
            {"id": "aaaaaaaa-0000-4000-8000-000000000003", "user_id": PARTNER_ID, "role": "delivery"},
            {"id": "aaaaaaaa-0000-4000-8000-000000000004", "user_id": OTHER_PARTNER_ID, "role": "delivery"},
        ]
    )
    fake_supabase.tables["dishes"].append(
        {
            "id": DISH_ID,
            "restaurant_id": RESTAURANT_ID,
            "name": "Tiramisu",
            "price": 10,
            "category": "Cakes",
            "is_available": True,
            "variants": [{"name": "Large", "price_modifier": 2.5}],
        }
    )
    return fake_supabase


@pytest.fixture
def mock_supabase_client() -> Generator[MagicMock, None, None]:
    """Provide a mocked Supabase client for the health check."""
    mock_client = MagicMock()
    mock_response = MagicMock()
    mock_response.data = []
    mock_client.table.return_value.select.return_value.limit.return_value.execute.return_value = (
        mock_response
    )

    with patch("src.core.supabase.get_supabase_client", return_value=mock_client):
        yield mock_client


@pytest.fixture
def client(mock_supabase_client: MagicMock) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application."""
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client


def make_token_payload(user_id: str) -> Any:
    """TokenPayload as decode_jwt would return it for user_id."""
    import time

    from src.schemas.auth import TokenPayload

    now = int(time.time())
    return TokenPayload(sub=user_id, role="authenticated", exp=now + 3600, iat=now, aud="authenticated")


@pytest.fixture
def api_client(seeded_supabase: FakeSupabase) -> Generator[TestClient, None, None]:
    """TestClient whose bearer token is the user ID itself.

    decode_jwt is patched so "Authorization: Bearer <user_id>" authenticates
    as that user.
    """
    from src.main import app

    with patch("src.api.deps.decode_jwt", side_effect=make_token_payload):
        with TestClient(app) as test_client:
            yield test_client
