"""Seller onboarding load test scenarios.

A seller registers, applies for a shop, gets approved by a platform admin,
lists a product and publishes a coupon. Approval is sent twice to exercise
the idempotent retry path.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import account_data, coupon_data, product_data, shop_request_data, unique_user_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import SellerState

ADMIN_HEADERS = {"X-Actor-Id": "lt-admin", "X-Actor-Role": "platform-admin"}


def user_headers(user_id: str) -> dict:
    return {"X-Actor-Id": user_id, "X-Actor-Role": "user"}


def seller_headers(state: SellerState) -> dict:
    return {"X-Actor-Id": state.user_id, "X-Actor-Role": "branch-admin", "X-Actor-Branch": state.branch_id}


def open_storefront(client, stock: int = 50, usage_limit: int | None = None) -> SellerState | None:
    """Run the whole onboarding flow in one go. Returns None when any step fails."""
    state = SellerState(user_id=unique_user_id("seller"))
    client.post("/accounts", json=account_data(state.user_id), name="POST /accounts")

    resp = client.post(
        "/branches/requests", json=shop_request_data(), headers=user_headers(state.user_id), name="POST /branches/requests"
    )
    if resp.status_code != 201:
        return None
    state.request_id = resp.json()["id"]

    resp = client.post(
        f"/branches/requests/{state.request_id}/approve",
        headers=ADMIN_HEADERS,
        name="POST /branches/requests/{id}/approve",
    )
    if resp.status_code != 200:
        return None
    state.branch_id = resp.json()["id"]

    resp = client.post(
        "/catalogue/products",
        json=product_data(state.branch_id, stock=stock),
        headers=seller_headers(state),
        name="POST /catalogue/products",
    )
    if resp.status_code != 201:
        return None
    state.product = client.get(f"/catalogue/products/{resp.json()['id']}", name="GET /catalogue/products/{id}").json()

    payload = coupon_data(state.branch_id, usage_limit=usage_limit)
    resp = client.post("/coupons", json=payload, headers=seller_headers(state), name="POST /coupons")
    if resp.status_code == 201:
        state.coupon_code = payload["code"]
    return state


class SellerOnboardingJourney(SequentialTaskSet):
    """Register -> Apply -> Approve -> Approve again -> List product -> Publish coupon."""

    def on_start(self):
        self.state = SellerState(user_id=unique_user_id("seller"))

    @task
    def register(self):
        with self.client.post(
            "/accounts", json=account_data(self.state.user_id), catch_response=True, name="POST /accounts"
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Register failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def apply(self):
        with self.client.post(
            "/branches/requests",
            json=shop_request_data(),
            headers=user_headers(self.state.user_id),
            catch_response=True,
            name="POST /branches/requests",
        ) as resp:
            if resp.status_code == 201:
                self.state.request_id = resp.json()["id"]
            else:
                resp.failure(f"Shop application failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def approve(self):
        with self.client.post(
            f"/branches/requests/{self.state.request_id}/approve",
            headers=ADMIN_HEADERS,
            catch_response=True,
            name="POST /branches/requests/{id}/approve",
        ) as resp:
            if resp.status_code == 200:
                self.state.branch_id = resp.json()["id"]
            else:
                resp.failure(f"Approval failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def approve_again(self):
        with self.client.post(
            f"/branches/requests/{self.state.request_id}/approve",
            headers=ADMIN_HEADERS,
            catch_response=True,
            name="POST /branches/requests/{id}/approve (retry)",
        ) as resp:
            if resp.status_code != 200 or resp.json()["id"] != self.state.branch_id:
                resp.failure(f"Approval retry diverged: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def list_product(self):
        with self.client.post(
            "/catalogue/products",
            json=product_data(self.state.branch_id),
            headers=seller_headers(self.state),
            catch_response=True,
            name="POST /catalogue/products",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Create product failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def publish_coupon(self):
        with self.client.post(
            "/coupons",
            json=coupon_data(self.state.branch_id),
            headers=seller_headers(self.state),
            catch_response=True,
            name="POST /coupons",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Create coupon failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class SellerUser(HttpUser):
    wait_time = between(1.0, 3.0)
    tasks = [SellerOnboardingJourney]
