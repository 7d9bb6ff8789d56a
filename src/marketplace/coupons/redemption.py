"""Coupon validation and redemption at checkout."""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.coupons.coupon import Coupon, normalize_code
from marketplace.domain import marketplace
from marketplace.shared.errors import CouponRejected

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CouponQuote:
    is_valid: bool
    discount: float = 0.0
    message: str = ""
    reason: str | None = None


def _find_coupon(code: str, branch_id) -> Coupon:
    coupon = current_domain.repository_for(Coupon).find_active(code, branch_id)
    if coupon is None:
        raise CouponRejected(CouponRejected.INVALID, "Invalid coupon")
    return coupon


def _used_in_earlier_order(coupon: Coupon, buyer_id, exclude_order_id=None) -> bool:
    """An existing order by ``buyer_id`` with this code at this branch, other than ``exclude_order_id``."""
    from marketplace.ordering.order import Order

    orders = current_domain.repository_for(Order).with_coupon(buyer_id, coupon.code, coupon.branch_id)
    return any(str(o.id) != str(exclude_order_id) for o in orders)


def preview_coupon(code: str, branch_id, buyer_id, subtotal: float) -> CouponQuote:
    """Price a coupon against a cart without counting a use."""
    try:
        coupon = _find_coupon(code, branch_id)
        discount = coupon.evaluate(buyer_id, subtotal, used_elsewhere=_used_in_earlier_order(coupon, buyer_id))
    except CouponRejected as exc:
        return CouponQuote(is_valid=False, message=exc.messages["coupon_code"][0], reason=exc.reason)

    return CouponQuote(is_valid=True, discount=discount, message="Coupon applied")


@marketplace.command(part_of="Coupon")
class RedeemCoupon:
    code: String(required=True, max_length=50)
    branch_id: Identifier(required=True)
    buyer_id: Identifier(required=True)
    order_id: Identifier(required=True)
    subtotal: Float(required=True, min_value=0.0)


@marketplace.command_handler(part_of=Coupon)
class RedeemCouponHandler:
    @handle(RedeemCoupon)
    def redeem_coupon(self, command):
        coupon = _find_coupon(command.code, command.branch_id)
        discount = coupon.redeem(
            buyer_id=command.buyer_id,
            order_id=command.order_id,
            subtotal=command.subtotal,
            used_elsewhere=_used_in_earlier_order(coupon, command.buyer_id, exclude_order_id=command.order_id),
        )
        current_domain.repository_for(Coupon).add(coupon)

        logger.info(
            "Coupon redeemed",
            code=normalize_code(command.code),
            branch_id=str(command.branch_id),
            order_id=str(command.order_id),
            discount=discount,
            usage_count=coupon.usage_count,
        )
        return discount
