"""Shared BDD fixtures and step definitions for the Ordering context."""

import pytest
from pytest_bdd import given, parsers, then

from marketplace.ordering.events import OrderPlaced, OrderStatusChanged
from marketplace.ordering.order import Order

_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderStatusChanged": OrderStatusChanged,
}


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("a pending order for {quantity:d} items at {unit_price:f} each"),
    target_fixture="order",
)
def pending_order(quantity, unit_price):
    order = Order.draft(
        order_id="8c3f1d6a-0000-4000-8000-000000000042",
        buyer_id="buyer-1",
        branch_id="branch-seller-1",
        lines=[
            {
                "line_no": 0,
                "product_id": "prod-1",
                "variant_id": None,
                "name": "Cotton Shirt",
                "quantity": quantity,
                "unit_price": unit_price,
            }
        ],
    )
    order.finalize(tax_amount=0.0)
    order._events.clear()
    return order


@given(parsers.cfparse('the order was marked "{status}" by "{actor_id}"'))
def order_marked(order, status, actor_id):
    order.transition_to(status, updated_by=actor_id)
    order._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse("an {event_type} order event is raised"))
def order_event_raised(order, event_type):
    event_cls = _EVENT_CLASSES[event_type]
    assert any(isinstance(e, event_cls) for e in order._events)


@then("the transition is refused")
def transition_refused(error):
    assert error["exc"] is not None


@then("no order event is raised")
def no_order_event(order):
    assert order._events == []
