"""Application tests for coupon management, preview and redemption."""

import pytest
from protean import current_domain

from marketplace.coupons.coupon import Coupon
from marketplace.coupons.management import CreateCoupon, DeactivateCoupon, DeleteCoupon, UpdateCoupon
from marketplace.coupons.redemption import RedeemCoupon, preview_coupon
from marketplace.shared.errors import ConflictError, CouponRejected, PermissionDenied


@pytest.fixture()
def seller(onboard_seller):
    return onboard_seller("seller-1")


@pytest.fixture()
def save10(seller):
    return current_domain.process(
        CreateCoupon(
            code="save10",
            branch_id=seller.branch_id,
            discount_type="percentage",
            value=10.0,
            min_order_amount=500.0,
            **seller.as_command_fields(),
        ),
        asynchronous=False,
    )


def _redeem(order_id, subtotal=1000.0, buyer_id="buyer-1", code="SAVE10", branch_id="branch-seller-1"):
    return current_domain.process(
        RedeemCoupon(code=code, branch_id=branch_id, buyer_id=buyer_id, order_id=order_id, subtotal=subtotal),
        asynchronous=False,
    )


class TestCouponManagement:
    def test_duplicate_code_per_branch_conflicts(self, seller, save10):
        with pytest.raises(ConflictError):
            current_domain.process(
                CreateCoupon(code="SAVE10", branch_id=seller.branch_id, value=5.0, **seller.as_command_fields()),
                asynchronous=False,
            )

    def test_same_code_in_another_branch_is_allowed(self, save10, onboard_seller):
        other = onboard_seller("seller-2")
        coupon_id = current_domain.process(
            CreateCoupon(code="SAVE10", branch_id=other.branch_id, value=5.0, **other.as_command_fields()),
            asynchronous=False,
        )
        assert coupon_id != save10

    def test_other_branch_cannot_edit(self, save10, onboard_seller):
        other = onboard_seller("seller-2")
        with pytest.raises(PermissionDenied):
            current_domain.process(
                UpdateCoupon(coupon_id=save10, value=90.0, **other.as_command_fields()),
                asynchronous=False,
            )

    def test_update_changes_only_given_fields(self, seller, save10):
        current_domain.process(
            UpdateCoupon(coupon_id=save10, usage_limit=5, **seller.as_command_fields()),
            asynchronous=False,
        )
        coupon = current_domain.repository_for(Coupon).get(save10)
        assert coupon.usage_limit == 5
        assert coupon.value == 10.0

    def test_deactivated_coupon_is_invalid(self, seller, save10):
        current_domain.process(DeactivateCoupon(coupon_id=save10, **seller.as_command_fields()), asynchronous=False)
        with pytest.raises(CouponRejected) as exc:
            _redeem("order-1")
        assert exc.value.reason == CouponRejected.INVALID

    def test_deleted_coupon_is_invalid(self, seller, save10):
        current_domain.process(DeleteCoupon(coupon_id=save10, **seller.as_command_fields()), asynchronous=False)
        assert current_domain.repository_for(Coupon).find_by_code("SAVE10", seller.branch_id) is None


class TestRedeemCoupon:
    def test_save10_on_1000_gives_100_and_counts_a_use(self, save10):
        assert _redeem("order-1") == 100.0
        assert current_domain.repository_for(Coupon).get(save10).usage_count == 1

    def test_lookup_is_case_insensitive(self, save10):
        assert _redeem("order-1", code="save10") == 100.0

    def test_unknown_code_is_invalid(self, save10):
        with pytest.raises(CouponRejected) as exc:
            _redeem("order-1", code="NOPE")
        assert exc.value.reason == CouponRejected.INVALID

    def test_code_is_scoped_to_branch(self, save10, onboard_seller):
        onboard_seller("seller-2")
        with pytest.raises(CouponRejected) as exc:
            _redeem("order-1", branch_id="branch-seller-2")
        assert exc.value.reason == CouponRejected.INVALID

    def test_retrying_same_order_counts_once(self, save10):
        _redeem("order-1")
        _redeem("order-1")
        assert current_domain.repository_for(Coupon).get(save10).usage_count == 1

    def test_second_order_by_same_buyer_is_already_used(self, save10):
        _redeem("order-1")
        with pytest.raises(CouponRejected) as exc:
            _redeem("order-2")
        assert exc.value.reason == CouponRejected.ALREADY_USED

    def test_single_use_coupon_sequential_attempts(self, seller, save10):
        current_domain.process(
            UpdateCoupon(coupon_id=save10, usage_limit=1, **seller.as_command_fields()),
            asynchronous=False,
        )
        _redeem("order-1", buyer_id="buyer-1")
        with pytest.raises(CouponRejected) as exc:
            _redeem("order-2", buyer_id="buyer-2")

        assert exc.value.reason == CouponRejected.LIMIT_REACHED
        assert current_domain.repository_for(Coupon).get(save10).usage_count == 1


class TestPreview:
    def test_preview_does_not_count_a_use(self, save10):
        quote = preview_coupon("SAVE10", "branch-seller-1", "buyer-1", 1000.0)

        assert quote.is_valid
        assert quote.discount == 100.0
        assert current_domain.repository_for(Coupon).get(save10).usage_count == 0

    def test_preview_reports_rejection_reason(self, save10):
        quote = preview_coupon("SAVE10", "branch-seller-1", "buyer-1", 100.0)

        assert not quote.is_valid
        assert quote.reason == CouponRejected.MINIMUM_NOT_MET
        assert "500.00" in quote.message
