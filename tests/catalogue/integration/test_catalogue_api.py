"""Integration tests for catalogue and inventory endpoints via TestClient."""

import pytest

from marketplace.shared.actor import Actor

ADMIN = Actor(id="admin-1", role="platform-admin")


@pytest.fixture()
def seller(onboard_seller):
    return onboard_seller("seller-1")


def _create(client, headers, seller, **overrides):
    body = {"branch_id": seller.branch_id, "name": "Cotton Shirt", "price": 100.0, "stock": 5, **overrides}
    return client.post("/catalogue/products", json=body, headers=headers(seller))


class TestCatalogueApi:
    def test_create_and_fetch_product(self, client, headers, seller):
        response = _create(client, headers, seller)
        assert response.status_code == 201

        product = client.get(f"/catalogue/products/{response.json()['id']}").json()
        assert product["name"] == "Cotton Shirt"
        assert product["stock"] == 5
        assert product["variants"] == []

    def test_variant_stock_rolls_up(self, client, headers, seller):
        product_id = _create(client, headers, seller, variants=[{"color": "Red", "price": 90.0, "stock": 4}]).json()[
            "id"
        ]

        response = client.post(
            f"/catalogue/products/{product_id}/variants",
            json={"color": "Blue", "price": 95.0, "stock": 6},
            headers=headers(seller),
        )

        assert response.status_code == 201
        assert client.get(f"/catalogue/products/{product_id}").json()["stock"] == 10

    def test_product_for_foreign_branch_is_forbidden(self, client, headers, seller, onboard_seller):
        other = onboard_seller("seller-2")

        response = client.post(
            "/catalogue/products",
            json={"branch_id": seller.branch_id, "name": "Knock-off", "price": 1.0},
            headers=headers(other),
        )
        assert response.status_code == 403

    def test_adjustment_is_logged(self, client, headers, seller):
        product_id = _create(client, headers, seller).json()["id"]

        response = client.post(
            f"/catalogue/products/{product_id}/stock-adjustments",
            json={"change_amount": -2, "reason": "Damaged in storage"},
            headers=headers(seller),
        )

        assert response.json()["stock"] == 3
        logs = client.get(f"/branches/{seller.branch_id}/inventory-logs", headers=headers(seller)).json()
        assert logs[0]["change_amount"] == -2
        assert logs[0]["new_stock"] == 3
        assert logs[0]["reason"] == "Damaged in storage"

    def test_adjusting_below_zero_is_rejected(self, client, headers, seller):
        product_id = _create(client, headers, seller).json()["id"]

        response = client.post(
            f"/catalogue/products/{product_id}/stock-adjustments",
            json={"change_amount": -9, "reason": "Recount"},
            headers=headers(seller),
        )
        assert response.status_code == 400

    def test_only_platform_admin_creates_categories(self, client, headers, seller):
        assert client.post("/catalogue/categories", json={"name": "Books"}, headers=headers(seller)).status_code == 403

        response = client.post("/catalogue/categories", json={"name": "Books", "tax_rate": 5}, headers=headers(ADMIN))
        assert response.status_code == 201

    def test_unknown_product_is_not_found(self, client):
        assert client.get("/catalogue/products/does-not-exist").status_code == 404
