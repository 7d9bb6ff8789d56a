"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the marketplace's validation
rules and match the field names of the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

COUNTRIES = ["Bangladesh", "USA", "Pakistan", "India"]
CATEGORIES = ["Fashion", "Electronics", "Home", "Books", "Beauty"]


def unique_user_id(prefix: str = "lt") -> str:
    """Generate user ids like 'lt-a1b2c3d4'."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def account_data(user_id: str) -> dict:
    return {
        "user_id": user_id,
        "name": fake.name()[:255],
        "email": f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}",
        "country": random.choice(COUNTRIES),
    }


def shop_request_data(country: str = "Bangladesh") -> dict:
    """Generate a SubmitBranchRequestRequest payload."""
    return {
        "shop_name": f"{fake.company()[:200]} {fake.word().capitalize()}",
        "shop_category": random.choice(CATEGORIES),
        "description": fake.catch_phrase(),
        "country": country,
        "payment_proof_url": f"https://files.example.com/proof/{uuid.uuid4().hex}.png",
        "transaction_reference": f"TRX-{random.randint(10000, 99999)}",
    }


def product_data(branch_id: str, variant_count: int = 2, stock: int = 50) -> dict:
    """Generate a CreateProductRequest payload with ``variant_count`` variants."""
    price = round(random.uniform(5.0, 500.0), 2)
    colors = random.sample(["Red", "Blue", "Green", "Black", "White"], k=variant_count)
    return {
        "branch_id": branch_id,
        "name": f"{fake.word().capitalize()} {random.choice(['Shirt', 'Lamp', 'Mug', 'Novel', 'Serum'])}",
        "category": random.choice(CATEGORIES),
        "price": price,
        "variants": [
            {"color": color, "size": random.choice(["S", "M", "L"]), "price": price, "stock": stock}
            for color in colors
        ],
    }


def coupon_data(branch_id: str, usage_limit: int | None = None) -> dict:
    return {
        "code": f"LT{uuid.uuid4().hex[:6].upper()}",
        "branch_id": branch_id,
        "discount_type": random.choice(["percentage", "fixed"]),
        "value": random.choice([5, 10, 15, 20]),
        "min_order_amount": 0,
        "usage_limit": usage_limit,
    }


def shipping_info() -> dict:
    return {
        "full_name": fake.name()[:255],
        "address": fake.street_address()[:500],
        "city": fake.city()[:100],
        "zip": fake.postcode()[:20],
        "phone": f"+880{random.randint(1300000000, 1999999999)}",
    }


def cart_items(product: dict, max_quantity: int = 3) -> list[dict]:
    """Pick one or more variants of ``product`` (a ProductResponse body)."""
    variants = random.sample(product["variants"], k=random.randint(1, len(product["variants"])))
    return [
        {"product_id": product["id"], "variant_id": v["id"], "quantity": random.randint(1, max_quantity)}
        for v in variants
    ]


def dispute_data(order_id: str) -> dict:
    return {
        "order_id": order_id,
        "reason": random.choice(["Damaged", "Wrong item", "Late delivery"]),
        "description": fake.sentence(),
    }
