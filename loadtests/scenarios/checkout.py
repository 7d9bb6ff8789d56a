"""Checkout load test scenarios.

CheckoutJourney walks one buyer from checkout to a resolved dispute.
StockContentionUser sends many buyers at a handful of low-stock variants
and a usage-limited coupon: insufficient stock and a reached coupon limit
are expected outcomes, anything else is a failure.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import account_data, cart_items, dispute_data, shipping_info, unique_user_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import BuyerState
from loadtests.scenarios.onboarding import open_storefront, seller_headers, user_headers

EXPECTED_COUPON_REJECTIONS = {"LimitReached", "AlreadyUsed"}


class CheckoutJourney(SequentialTaskSet):
    """Checkout -> Seller completes -> Buyer reports -> Seller resolves -> Buyer closes."""

    def on_start(self):
        self.seller = open_storefront(self.client)
        self.state = BuyerState(user_id=unique_user_id("buyer"))
        self.client.post("/accounts", json=account_data(self.state.user_id), name="POST /accounts")
        if self.seller is None:
            self.interrupt()

    @task
    def checkout(self):
        payload = {
            "branch_id": self.seller.branch_id,
            "items": cart_items(self.seller.product),
            "shipping_info": shipping_info(),
            "coupon_code": self.seller.coupon_code,
        }
        with self.client.post(
            "/orders",
            json=payload,
            headers={**user_headers(self.state.user_id), "Idempotency-Key": unique_user_id("checkout")},
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["id"])
            else:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def complete(self):
        with self.client.put(
            f"/orders/{self.state.order_ids[-1]}/status",
            json={"status": "completed"},
            headers=seller_headers(self.seller),
            catch_response=True,
            name="PUT /orders/{id}/status",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Complete order failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def report(self):
        with self.client.post(
            "/disputes",
            json=dispute_data(self.state.order_ids[-1]),
            headers=user_headers(self.state.user_id),
            catch_response=True,
            name="POST /disputes",
        ) as resp:
            if resp.status_code == 201:
                self.state.dispute_id = resp.json()["id"]
            else:
                resp.failure(f"Raise dispute failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def resolve(self):
        with self.client.post(
            f"/disputes/{self.state.dispute_id}/resolve",
            json={"resolution": "Refund issued"},
            headers=seller_headers(self.seller),
            catch_response=True,
            name="POST /disputes/{id}/resolve",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Resolve dispute failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def close(self):
        with self.client.post(
            f"/disputes/{self.state.dispute_id}/close",
            headers=user_headers(self.state.user_id),
            catch_response=True,
            name="POST /disputes/{id}/close",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Close dispute failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class BuyerUser(HttpUser):
    wait_time = between(0.5, 2.0)
    tasks = [CheckoutJourney]


class StockContentionUser(HttpUser):
    """Many buyers racing for the same few units and the same limited coupon."""

    wait_time = between(0.1, 0.5)
    storefront = None

    def on_start(self):
        if StockContentionUser.storefront is None:
            StockContentionUser.storefront = open_storefront(self.client, stock=20, usage_limit=10)
        self.state = BuyerState(user_id=unique_user_id("racer"))
        self.client.post("/accounts", json=account_data(self.state.user_id), name="POST /accounts")

    @task
    def race_for_stock(self):
        storefront = StockContentionUser.storefront
        if storefront is None:
            return

        payload = {
            "branch_id": storefront.branch_id,
            "items": cart_items(storefront.product, max_quantity=2),
            "shipping_info": shipping_info(),
        }
        if storefront.coupon_code and random.random() < 0.5:
            payload["coupon_code"] = storefront.coupon_code

        with self.client.post(
            "/orders",
            json=payload,
            headers=user_headers(self.state.user_id),
            catch_response=True,
            name="POST /orders (contended)",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["id"])
            elif resp.status_code == 400 and resp.json().get("reason") in EXPECTED_COUPON_REJECTIONS:
                resp.success()
            elif resp.status_code == 400 and "quantity" in (resp.json().get("error") or {}):
                self.state.stock_rejections += 1
                resp.success()
            else:
                resp.failure(f"Unexpected checkout outcome: {resp.status_code} {extract_error_detail(resp)}")
