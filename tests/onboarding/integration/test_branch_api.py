"""Integration tests for account and branch endpoints via TestClient."""

from marketplace.shared.actor import Actor

ADMIN = Actor(id="admin-1", role="platform-admin")
APPLICANT = Actor(id="user-1", role="user")


def _register(client, user_id):
    response = client.post("/accounts", json={"user_id": user_id, "name": user_id.title(), "country": "Bangladesh"})
    assert response.status_code == 201
    return response.json()["id"]


def _apply(client, headers, actor=APPLICANT):
    response = client.post(
        "/branches/requests",
        json={"shop_name": "Dhaka Threads", "shop_category": "Fashion", "country": "Bangladesh"},
        headers=headers(actor),
    )
    assert response.status_code == 201
    return response.json()["id"]


class TestOnboardingApi:
    def test_register_twice_is_a_conflict(self, client):
        _register(client, "user-1")
        response = client.post("/accounts", json={"user_id": "user-1"})
        assert response.status_code == 409

    def test_missing_identity_headers_are_rejected(self, client):
        response = client.post("/branches/requests", json={"shop_name": "X", "country": "Bangladesh"})
        assert response.status_code == 401

    def test_unknown_role_is_rejected(self, client):
        response = client.get("/orders", headers={"X-Actor-Id": "user-1", "X-Actor-Role": "superuser"})
        assert response.status_code == 401

    def test_approve_opens_branch(self, client, headers):
        _register(client, "user-1")
        request_id = _apply(client, headers)

        response = client.post(f"/branches/requests/{request_id}/approve", headers=headers(ADMIN))
        assert response.status_code == 200
        assert response.json()["id"] == "branch-user-1"

        branch = client.get("/branches/branch-user-1").json()
        assert branch["name"] == "Dhaka Threads"
        assert branch["rating"] == 0.0
        assert branch["review_count"] == 0

    def test_approving_again_is_safe(self, client, headers):
        _register(client, "user-1")
        request_id = _apply(client, headers)

        first = client.post(f"/branches/requests/{request_id}/approve", headers=headers(ADMIN))
        second = client.post(f"/branches/requests/{request_id}/approve", headers=headers(ADMIN))

        assert first.json() == second.json()

    def test_applicant_cannot_approve_own_request(self, client, headers):
        _register(client, "user-1")
        request_id = _apply(client, headers)

        response = client.post(f"/branches/requests/{request_id}/approve", headers=headers(APPLICANT))
        assert response.status_code == 403

    def test_listing_requests(self, client, headers):
        _register(client, "user-1")
        _apply(client, headers)

        mine = client.get("/branches/requests", headers=headers(APPLICANT)).json()
        everything = client.get("/branches/requests", headers=headers(ADMIN)).json()
        assert [r["status"] for r in mine] == ["pending"]
        assert len(everything) == 1

    def test_unknown_branch_is_not_found(self, client):
        assert client.get("/branches/branch-nobody").status_code == 404

    def test_slug_conflict(self, client, headers):
        for user_id in ("user-1", "user-2"):
            _register(client, user_id)
            request_id = _apply(client, headers, Actor(id=user_id, role="user"))
            client.post(f"/branches/requests/{request_id}/approve", headers=headers(ADMIN))

        first = Actor(id="user-1", role="branch-admin", branch_id="branch-user-1")
        second = Actor(id="user-2", role="branch-admin", branch_id="branch-user-2")
        assert client.put("/branches/branch-user-1/slug", json={"slug": "threads"}, headers=headers(first)).status_code == 200

        response = client.put("/branches/branch-user-2/slug", json={"slug": "threads"}, headers=headers(second))
        assert response.status_code == 409

    def test_bad_slug_format(self, client, headers):
        _register(client, "user-1")
        request_id = _apply(client, headers)
        client.post(f"/branches/requests/{request_id}/approve", headers=headers(ADMIN))
        seller = Actor(id="user-1", role="branch-admin", branch_id="branch-user-1")

        response = client.put("/branches/branch-user-1/slug", json={"slug": "Not Valid"}, headers=headers(seller))
        assert response.status_code == 400
