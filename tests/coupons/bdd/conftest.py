"""Shared BDD fixtures and step definitions for the Coupons context."""

import pytest
from pytest_bdd import given, parsers, then

from marketplace.coupons.coupon import Coupon, DiscountType


@pytest.fixture()
def error():
    """Container for captured coupon rejections."""
    return {"exc": None}


@pytest.fixture()
def discounts():
    return []


@given(
    parsers.cfparse('a {percent:d}% coupon "{code}" with a minimum order of {minimum:f}'),
    target_fixture="coupon",
)
def percentage_coupon(percent, code, minimum):
    coupon = Coupon.create(
        code=code,
        branch_id="branch-seller-1",
        discount_type=DiscountType.PERCENTAGE.value,
        value=float(percent),
        min_order_amount=minimum,
    )
    coupon._events.clear()
    return coupon


@given(parsers.cfparse("the coupon may be used {limit:d} times"))
def coupon_limit(coupon, limit):
    coupon.usage_limit = limit


@then(parsers.cfparse('the coupon is rejected with reason "{reason}"'))
def rejected_with(error, reason):
    assert error["exc"] is not None
    assert error["exc"].reason == reason


@then(parsers.cfparse("the coupon has been used {count:d} times"))
def used_times(coupon, count):
    assert coupon.usage_count == count
    assert len(coupon.redemptions) == count
