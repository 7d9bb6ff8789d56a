"""Domain events for the Coupon aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Coupon")
class CouponCreated:
    __version__ = 1

    coupon_id: Identifier(required=True)
    code: String(required=True)
    branch_id: Identifier(required=True)
    discount_type: String(required=True)
    value: Float(required=True)


@marketplace.event(part_of="Coupon")
class CouponUpdated:
    __version__ = 1

    coupon_id: Identifier(required=True)
    code: String(required=True)
    branch_id: Identifier(required=True)


@marketplace.event(part_of="Coupon")
class CouponDeactivated:
    __version__ = 1

    coupon_id: Identifier(required=True)
    code: String(required=True)
    branch_id: Identifier(required=True)


@marketplace.event(part_of="Coupon")
class CouponRedeemed:
    """A buyer's order used a coupon; the usage counter moved with it."""

    __version__ = 1

    coupon_id: Identifier(required=True)
    code: String(required=True)
    branch_id: Identifier(required=True)
    buyer_id: Identifier(required=True)
    order_id: Identifier(required=True)
    discount: Float(required=True)
    usage_count: Integer(required=True)
    redeemed_at: DateTime(required=True)
