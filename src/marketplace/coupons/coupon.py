"""Coupon aggregate: a branch-scoped discount code with usage accounting.

Validation and the usage increment happen on the same aggregate in the same
write, so a redemption either passes every check and is counted, or changes
nothing. Redemptions are kept on the coupon itself, which makes the
one-use-per-buyer rule independent of the buyer's order history.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.shared.errors import CouponRejected
from marketplace.shared.settings import as_utc


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


@marketplace.entity(part_of="Coupon")
class CouponRedemption:
    buyer_id: Identifier(required=True)
    order_id: Identifier(required=True)
    discount: Float(required=True, min_value=0.0)
    redeemed_at: DateTime()


@marketplace.aggregate
class Coupon:
    code: String(required=True, max_length=50)
    branch_id: Identifier(required=True)
    discount_type: String(choices=DiscountType, default=DiscountType.PERCENTAGE.value)
    value: Float(required=True, min_value=0.0)
    min_order_amount: Float(default=0.0, min_value=0.0)
    expiry_date: DateTime()
    is_active: Boolean(default=True)
    usage_count: Integer(default=0, min_value=0)
    usage_limit: Integer(min_value=0)
    redemptions: HasMany(CouponRedemption)
    created_at: DateTime()

    @invariant.post
    def usage_never_exceeds_limit(self):
        if self.usage_limit and (self.usage_count or 0) > self.usage_limit:
            raise ValidationError({"usage_count": ["Usage count cannot exceed the usage limit"]})

    @invariant.post
    def percentage_is_at_most_one_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.value or 0) > 100:
            raise ValidationError({"value": ["A percentage discount cannot exceed 100"]})

    @classmethod
    def create(
        cls,
        code,
        branch_id,
        discount_type,
        value,
        min_order_amount=0.0,
        expiry_date=None,
        usage_limit=None,
    ):
        from marketplace.coupons.events import CouponCreated

        coupon = cls(
            code=normalize_code(code),
            branch_id=branch_id,
            discount_type=discount_type,
            value=value,
            min_order_amount=min_order_amount or 0.0,
            expiry_date=expiry_date,
            usage_limit=usage_limit or None,
            created_at=datetime.now(UTC),
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=coupon.id,
                code=coupon.code,
                branch_id=str(branch_id),
                discount_type=discount_type,
                value=value,
            )
        )
        return coupon

    @property
    def has_usage_limit(self) -> bool:
        return bool(self.usage_limit)

    def redemption_for_order(self, order_id) -> CouponRedemption | None:
        return next((r for r in self.redemptions if str(r.order_id) == str(order_id)), None)

    def redeemed_by(self, buyer_id) -> bool:
        return any(str(r.buyer_id) == str(buyer_id) for r in self.redemptions)

    def discount_for(self, subtotal: float) -> float:
        if self.discount_type == DiscountType.PERCENTAGE.value:
            discount = subtotal * self.value / 100
        else:
            discount = self.value
        return min(discount, subtotal)

    def evaluate(self, buyer_id, subtotal: float, now: datetime | None = None, used_elsewhere: bool = False) -> float:
        """Run the redemption checks in order and return the discount.

        ``used_elsewhere`` reports an earlier order by the same buyer with this
        code at this branch that the coupon itself has no redemption for.
        """
        now = now or datetime.now(UTC)
        if not self.is_active:
            raise CouponRejected(CouponRejected.INVALID, "Invalid coupon")
        if self.expiry_date is not None and now > as_utc(self.expiry_date):
            raise CouponRejected(CouponRejected.EXPIRED, "Coupon has expired")
        if subtotal < (self.min_order_amount or 0.0):
            raise CouponRejected(
                CouponRejected.MINIMUM_NOT_MET,
                f"Minimum order amount of {self.min_order_amount:.2f} required",
            )
        if self.has_usage_limit and (self.usage_count or 0) >= self.usage_limit:
            raise CouponRejected(CouponRejected.LIMIT_REACHED, "Coupon usage limit reached")
        if used_elsewhere or self.redeemed_by(buyer_id):
            raise CouponRejected(CouponRejected.ALREADY_USED, "You have already used this coupon")
        return self.discount_for(subtotal)

    def redeem(self, buyer_id, order_id, subtotal: float, used_elsewhere: bool = False) -> float:
        """Validate and count one use for ``order_id``. Repeating it for the same order is a no-op."""
        from marketplace.coupons.events import CouponRedeemed

        previous = self.redemption_for_order(order_id)
        if previous is not None:
            return previous.discount

        discount = self.evaluate(buyer_id, subtotal, used_elsewhere=used_elsewhere)
        now = datetime.now(UTC)
        with atomic_change(self):
            self.add_redemptions(
                CouponRedemption(buyer_id=buyer_id, order_id=order_id, discount=discount, redeemed_at=now)
            )
            self.usage_count = (self.usage_count or 0) + 1

        self.raise_(
            CouponRedeemed(
                coupon_id=self.id,
                code=self.code,
                branch_id=str(self.branch_id),
                buyer_id=str(buyer_id),
                order_id=str(order_id),
                discount=discount,
                usage_count=self.usage_count,
                redeemed_at=now,
            )
        )
        return discount

    def update(self, **changes):
        from marketplace.coupons.events import CouponUpdated

        with atomic_change(self):
            for field_name, value in changes.items():
                setattr(self, field_name, value)
        self.raise_(CouponUpdated(coupon_id=self.id, code=self.code, branch_id=str(self.branch_id)))

    def deactivate(self):
        from marketplace.coupons.events import CouponDeactivated

        if not self.is_active:
            return
        self.is_active = False
        self.raise_(CouponDeactivated(coupon_id=self.id, code=self.code, branch_id=str(self.branch_id)))


@marketplace.repository(part_of=Coupon)
class CouponRepository:
    def find_by_code(self, code: str, branch_id) -> Coupon | None:
        results = self._dao.query.filter(code=normalize_code(code), branch_id=str(branch_id)).limit(None).all().items
        return results[0] if results else None

    def find_active(self, code: str, branch_id) -> Coupon | None:
        coupon = self.find_by_code(code, branch_id)
        if coupon is None or not coupon.is_active:
            return None
        return coupon

    def for_branch(self, branch_id) -> list[Coupon]:
        return self._dao.query.filter(branch_id=str(branch_id)).limit(None).all().items
