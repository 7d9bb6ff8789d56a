import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def _marketplace_domain(request):
    """Initialize the marketplace domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


@pytest.fixture(scope="session", autouse=True)
def setup_db(_marketplace_domain):
    from marketplace.utils.db import drop_db, setup_db

    setup_db(_marketplace_domain)

    yield

    drop_db(_marketplace_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_marketplace_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _marketplace_domain.domain_context()
    ctx.push()

    yield

    from marketplace.countries import reset_country_config
    from marketplace.notifications import reset_notifier
    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    reset_notifier()
    reset_country_config()
    ctx.pop()


# ---------------------------------------------------------------------------
# Actors and builders shared across modules
# ---------------------------------------------------------------------------
@pytest.fixture()
def platform_admin():
    from marketplace.shared.actor import Actor

    return Actor(id="admin-1", role="platform-admin")


@pytest.fixture()
def notifier():
    from marketplace.notifications import get_notifier

    return get_notifier()


@pytest.fixture()
def register_user():
    from marketplace.identity.management import RegisterAccount
    from marketplace.shared.actor import Actor
    from protean import current_domain

    def _register(user_id, country="Bangladesh", name=None):
        current_domain.process(
            RegisterAccount(user_id=user_id, name=name or user_id.title(), country=country),
            asynchronous=False,
        )
        return Actor(id=user_id, role="user")

    return _register


@pytest.fixture()
def onboard_seller(register_user, platform_admin):
    """Register, apply and approve a seller. Returns the seller's branch-admin actor."""
    from marketplace.identity.management import UpdateBranchFinance, UpdateDeliveryFee
    from marketplace.onboarding.approval import ApproveBranchRequest
    from marketplace.onboarding.submission import SubmitBranchRequest
    from marketplace.shared.actor import Actor, branch_id_for
    from protean import current_domain

    def _onboard(user_id="seller-1", country="Bangladesh", shop_name=None, tax_rate=None, delivery_fee=None):
        applicant = register_user(user_id, country=country)
        request_id = current_domain.process(
            SubmitBranchRequest(
                shop_name=shop_name or f"{user_id} shop",
                shop_category="General",
                country=country,
                payment_proof_url="https://files.example.com/proof.png",
                **applicant.as_command_fields(),
            ),
            asynchronous=False,
        )
        current_domain.process(
            ApproveBranchRequest(request_id=request_id, **platform_admin.as_command_fields()),
            asynchronous=False,
        )
        branch_id = branch_id_for(user_id)

        if tax_rate is not None:
            current_domain.process(
                UpdateBranchFinance(branch_id=branch_id, tax_rate=tax_rate, **platform_admin.as_command_fields()),
                asynchronous=False,
            )
        seller = Actor(id=user_id, role="branch-admin", branch_id=branch_id)
        if delivery_fee is not None:
            current_domain.process(
                UpdateDeliveryFee(branch_id=branch_id, delivery_fee=delivery_fee, **seller.as_command_fields()),
                asynchronous=False,
            )
        return seller

    return _onboard


@pytest.fixture()
def list_product():
    """Create a product through the catalogue command. Returns the persisted Product."""
    import json

    from marketplace.catalogue.management import CreateProduct
    from marketplace.catalogue.product import Product
    from protean import current_domain

    def _list(seller, name="Cotton Shirt", price=100.0, stock=10, category=None, variants=None):
        product_id = current_domain.process(
            CreateProduct(
                branch_id=seller.branch_id,
                name=name,
                category=category,
                price=price,
                stock=stock,
                variants=json.dumps(variants) if variants else None,
                **seller.as_command_fields(),
            ),
            asynchronous=False,
        )
        return current_domain.repository_for(Product).get(product_id)

    return _list


@pytest.fixture()
def shipping_info():
    return {
        "full_name": "Rahim Uddin",
        "address": "House 12, Road 4",
        "city": "Dhaka",
        "zip": "1205",
        "phone": "+8801700000000",
    }


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
@pytest.fixture()
def client(_marketplace_domain):
    from fastapi import FastAPI
    from fastapi.testclient import TestClient
    from marketplace.api import ROUTERS, register_error_handlers
    from marketplace.api.middleware import install_domain_context

    app = FastAPI()
    install_domain_context(app, _marketplace_domain)
    register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)
    return TestClient(app)


@pytest.fixture()
def headers():
    """Identity-provider headers for an actor."""

    def _headers(actor):
        values = {"X-Actor-Id": actor.id, "X-Actor-Role": actor.role}
        if actor.branch_id:
            values["X-Actor-Branch"] = actor.branch_id
        return values

    return _headers
