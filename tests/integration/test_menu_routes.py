"""Integration tests for menu API routes."""

from fastapi.testclient import TestClient

from tests.fakes import CUSTOMER_ID, DISH_ID, PARTNER_ID, RESTAURANT_ID, FakeSupabase, auth_headers


class TestRestaurants:
    """Tests for GET /api/v1/restaurants and /api/v1/restaurants/{id}."""

    def test_lists_named_restaurants(self, api_client: TestClient, seeded_supabase: FakeSupabase) -> None:
        seeded_supabase.tables["profiles"].extend(
            [
                {
                    "id": "aaaaaaaa-0000-4000-8000-000000000005",
                    "user_id": "bbbbbbbb-0000-4000-8000-000000000005",
                    "role": "restaurant",
                    "restaurant_name": "Crumb & Co",
                    "cuisine_type": "Bakery",
                    "latitude": 0.01,
                    "longitude": 0.01,
                },
                {
                    "id": "aaaaaaaa-0000-4000-8000-000000000006",
                    "user_id": "bbbbbbbb-0000-4000-8000-000000000006",
                    "role": "restaurant",
                    "restaurant_name": None,
                },
            ]
        )

        response = api_client.get("/api/v1/restaurants", headers=auth_headers(CUSTOMER_ID))

        assert response.status_code == 200
        items = response.json()["items"]
        assert [item["restaurant_name"] for item in items] == ["Crumb & Co", "Sweet Spot"]
        assert items[0]["cuisine_type"] == "Bakery"
        assert items[1]["user_id"] == RESTAURANT_ID

    def test_get_restaurant(self, api_client: TestClient, seeded_supabase: FakeSupabase) -> None:
        response = api_client.get(f"/api/v1/restaurants/{RESTAURANT_ID}", headers=auth_headers(CUSTOMER_ID))

        assert response.status_code == 200
        assert response.json()["restaurant_name"] == "Sweet Spot"
        assert response.json()["latitude"] == 0.0

    def test_non_restaurant_profile_is_404(self, api_client: TestClient, seeded_supabase: FakeSupabase) -> None:
        response = api_client.get(f"/api/v1/restaurants/{PARTNER_ID}", headers=auth_headers(CUSTOMER_ID))

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_requires_authentication(self, api_client: TestClient) -> None:
        assert api_client.get("/api/v1/restaurants").status_code == 401


class TestListDishes:
    """Tests for GET /api/v1/restaurants/{id}/dishes."""

    def test_customers_see_available_dishes(self, api_client: TestClient, seeded_supabase: FakeSupabase) -> None:
        seeded_supabase.tables["dishes"].append(
            {
                "id": "99999999-9999-4999-8999-999999999999",
                "restaurant_id": RESTAURANT_ID,
                "name": "Sold out souffle",
                "price": 8,
                "category": "Cakes",
                "is_available": False,
                "variants": [],
            }
        )
        url = f"/api/v1/restaurants/{RESTAURANT_ID}/dishes"

        customer = api_client.get(url, params={"include_unavailable": True}, headers=auth_headers(CUSTOMER_ID))
        owner = api_client.get(url, params={"include_unavailable": True}, headers=auth_headers(RESTAURANT_ID))

        assert [dish["name"] for dish in customer.json()["items"]] == ["Tiramisu"]
        assert len(owner.json()["items"]) == 2
        assert customer.json()["items"][0]["variants"][0]["name"] == "Large"


class TestManageDishes:
    """Tests for creating, updating and deleting dishes."""

    def test_create_update_delete(self, api_client: TestClient) -> None:
        created = api_client.post(
            "/api/v1/dishes",
            json={"name": "Pavlova", "price": "9.00", "category": "Meringue"},
            headers=auth_headers(RESTAURANT_ID),
        )
        assert created.status_code == 201
        dish_id = created.json()["id"]
        assert created.json()["restaurant_id"] == RESTAURANT_ID

        updated = api_client.patch(
            f"/api/v1/dishes/{dish_id}",
            json={"is_available": False},
            headers=auth_headers(RESTAURANT_ID),
        )
        assert updated.status_code == 200
        assert updated.json()["is_available"] is False

        deleted = api_client.delete(f"/api/v1/dishes/{dish_id}", headers=auth_headers(RESTAURANT_ID))
        assert deleted.status_code == 204

        missing = api_client.delete(f"/api/v1/dishes/{dish_id}", headers=auth_headers(RESTAURANT_ID))
        assert missing.status_code == 404

    def test_customers_cannot_create(self, api_client: TestClient) -> None:
        response = api_client.post(
            "/api/v1/dishes",
            json={"name": "Pavlova", "price": "9.00"},
            headers=auth_headers(CUSTOMER_ID),
        )
        assert response.status_code == 403

    def test_negative_price_is_422(self, api_client: TestClient) -> None:
        response = api_client.post(
            "/api/v1/dishes",
            json={"name": "Pavlova", "price": "-1"},
            headers=auth_headers(RESTAURANT_ID),
        )
        assert response.status_code == 422

    def test_unrated_dish_summary(self, api_client: TestClient) -> None:
        response = api_client.get(f"/api/v1/dishes/{DISH_ID}/rating", headers=auth_headers(CUSTOMER_ID))

        assert response.status_code == 200
        assert response.json() == {"dish_id": DISH_ID, "average_rating": None, "rating_count": 0}
