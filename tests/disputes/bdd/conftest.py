"""Shared BDD fixtures and step definitions for the Disputes context."""

import pytest
from pytest_bdd import given, parsers, then

from marketplace.ordering.order import Order


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@given(parsers.cfparse('a {status} order bought by "{buyer_id}"'), target_fixture="order")
def order_with_status(status, buyer_id):
    order = Order.draft(
        order_id="order-77",
        buyer_id=buyer_id,
        branch_id="branch-seller-1",
        lines=[{"line_no": 0, "product_id": "prod-1", "name": "Lamp", "quantity": 1, "unit_price": 60.0}],
    )
    order.finalize(tax_amount=0.0)
    if status != "pending":
        order.transition_to(status, updated_by="seller-1")
    return order


@pytest.fixture()
def holder():
    """Carries the dispute between steps."""
    return {"dispute": None}


@then(parsers.cfparse('the dispute status is "{status}"'))
def dispute_status_is(holder, status):
    assert holder["dispute"].status == status


@then(parsers.cfparse("the step is refused with {error_type}"))
def refused_with(error, error_type):
    assert type(error["exc"]).__name__ == error_type
