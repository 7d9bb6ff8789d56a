"""Integration tests for checkout, order status and coupon endpoints via TestClient."""

import pytest

from marketplace.shared.actor import Actor

ADMIN = Actor(id="admin-1", role="platform-admin")
BUYER = Actor(id="buyer-1", role="user")

SHIPPING = {
    "full_name": "Rahim Uddin",
    "address": "House 12, Road 4",
    "city": "Dhaka",
    "zip": "1205",
    "phone": "+8801700000000",
}


@pytest.fixture()
def seller(onboard_seller, register_user):
    register_user("buyer-1")
    return onboard_seller("seller-1")


@pytest.fixture()
def product_id(client, headers, seller):
    response = client.post(
        "/catalogue/products",
        json={
            "branch_id": seller.branch_id,
            "name": "Cotton Shirt",
            "price": 100.0,
            "variants": [
                {"color": "Red", "size": "M", "price": 100.0, "stock": 3},
                {"color": "Blue", "size": "L", "price": 100.0, "stock": 2},
            ],
        },
        headers=headers(seller),
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture()
def red(client, product_id):
    product = client.get(f"/catalogue/products/{product_id}").json()
    return next(v["id"] for v in product["variants"] if v["color"] == "Red")


def _checkout(client, headers, seller, product_id, variant_id, quantity=1, **extra):
    return client.post(
        "/orders",
        json={
            "branch_id": seller.branch_id,
            "items": [{"product_id": product_id, "variant_id": variant_id, "quantity": quantity}],
            "shipping_info": SHIPPING,
            **extra,
        },
        headers=headers(BUYER),
    )


class TestCheckoutApi:
    def test_checkout_creates_pending_order(self, client, headers, seller, product_id, red):
        response = _checkout(client, headers, seller, product_id, red, quantity=2)

        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "pending"
        assert order["items"][0]["name"] == "Cotton Shirt (Red / M)"
        assert order["final_amount"] == 200.0

        product = client.get(f"/catalogue/products/{product_id}").json()
        assert product["stock"] == 3

    def test_oversized_checkout_is_rejected(self, client, headers, seller, product_id, red):
        response = _checkout(client, headers, seller, product_id, red, quantity=9)
        assert response.status_code == 400

    def test_idempotency_key_names_the_order(self, client, headers, seller, product_id, red):
        body = {
            "branch_id": seller.branch_id,
            "items": [{"product_id": product_id, "variant_id": red, "quantity": 1}],
            "shipping_info": SHIPPING,
        }
        retry_headers = {**headers(BUYER), "Idempotency-Key": "checkout-1"}

        first = client.post("/orders", json=body, headers=retry_headers)
        second = client.post("/orders", json=body, headers=retry_headers)

        assert first.json()["id"] == second.json()["id"] == "checkout-1"
        assert client.get(f"/catalogue/products/{product_id}").json()["stock"] == 4

    def test_missing_shipping_field_is_unprocessable(self, client, headers, seller, product_id, red):
        response = client.post(
            "/orders",
            json={
                "branch_id": seller.branch_id,
                "items": [{"product_id": product_id, "variant_id": red, "quantity": 1}],
                "shipping_info": {"full_name": "Rahim"},
            },
            headers=headers(BUYER),
        )
        assert response.status_code == 422

    def test_rejected_coupon_reports_reason(self, client, headers, seller, product_id, red):
        client.post(
            "/coupons",
            json={"code": "SAVE10", "branch_id": seller.branch_id, "value": 10, "min_order_amount": 500},
            headers=headers(seller),
        )

        response = _checkout(client, headers, seller, product_id, red, coupon_code="SAVE10")

        assert response.status_code == 400
        assert response.json()["reason"] == "MinimumNotMet"

    def test_coupon_preview(self, client, headers, seller):
        client.post(
            "/coupons",
            json={"code": "SAVE10", "branch_id": seller.branch_id, "value": 10, "min_order_amount": 500},
            headers=headers(seller),
        )

        response = client.post(
            "/coupons/preview",
            json={"code": "save10", "branch_id": seller.branch_id, "subtotal": 1000},
            headers=headers(BUYER),
        )

        assert response.json() == {"is_valid": True, "discount": 100.0, "message": "Coupon applied", "reason": None}


class TestOrderStatusApi:
    def test_seller_completes_order(self, client, headers, seller, product_id, red):
        order_id = _checkout(client, headers, seller, product_id, red).json()["id"]

        response = client.put(f"/orders/{order_id}/status", json={"status": "completed"}, headers=headers(seller))

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert [c["status"] for c in response.json()["status_history"]] == ["completed"]

    def test_terminal_transition_is_a_conflict(self, client, headers, seller, product_id, red):
        order_id = _checkout(client, headers, seller, product_id, red).json()["id"]
        client.put(f"/orders/{order_id}/status", json={"status": "cancelled"}, headers=headers(seller))

        response = client.put(f"/orders/{order_id}/status", json={"status": "completed"}, headers=headers(seller))

        assert response.status_code == 409
        assert client.get(f"/orders/{order_id}", headers=headers(BUYER)).json()["status"] == "cancelled"

    def test_buyer_cannot_complete_order(self, client, headers, seller, product_id, red):
        order_id = _checkout(client, headers, seller, product_id, red).json()["id"]

        response = client.put(f"/orders/{order_id}/status", json={"status": "completed"}, headers=headers(BUYER))
        assert response.status_code == 403

    def test_buyer_removes_finished_order_from_history(self, client, headers, seller, product_id, red):
        order_id = _checkout(client, headers, seller, product_id, red).json()["id"]
        client.put(f"/orders/{order_id}/status", json={"status": "completed"}, headers=headers(seller))

        assert client.delete(f"/orders/{order_id}/history", headers=headers(BUYER)).status_code == 200
        assert client.get("/orders", headers=headers(BUYER)).json() == []
        assert len(client.get("/orders", headers=headers(seller)).json()) == 1

    def test_buyer_is_notified_of_status_change(self, client, headers, seller, product_id, red):
        order_id = _checkout(client, headers, seller, product_id, red).json()["id"]
        client.put(f"/orders/{order_id}/status", json={"status": "completed"}, headers=headers(seller))

        notifications = client.get("/notifications", headers=headers(BUYER)).json()
        assert notifications[0]["title"] == "Order Update"

        marked = client.post("/notifications/read-all", headers=headers(BUYER)).json()
        assert marked["marked"] == 1

    def test_seller_resumes_decrements(self, client, headers, seller, product_id, red):
        order_id = _checkout(client, headers, seller, product_id, red).json()["id"]

        response = client.post(f"/orders/{order_id}/resume-decrements", headers=headers(seller))

        assert response.status_code == 200
        assert [a["new_stock"] for a in response.json()["applied"]] == [2]
        assert client.get(f"/catalogue/products/{product_id}").json()["stock"] == 4
