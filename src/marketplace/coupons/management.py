"""Coupon CRUD for branch admins: commands and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.coupons.coupon import Coupon, DiscountType
from marketplace.domain import marketplace
from marketplace.shared.actor import Actor
from marketplace.shared.errors import ConflictError

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Coupon")
class CreateCoupon:
    code: String(required=True, max_length=50)
    branch_id: Identifier(required=True)
    discount_type: String(choices=DiscountType, default=DiscountType.PERCENTAGE.value)
    value: Float(required=True, min_value=0.0)
    min_order_amount: Float(default=0.0, min_value=0.0)
    expiry_date: DateTime()
    usage_limit: Integer(min_value=0)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Coupon")
class UpdateCoupon:
    coupon_id: Identifier(required=True)
    value: Float(min_value=0.0)
    min_order_amount: Float(min_value=0.0)
    expiry_date: DateTime()
    usage_limit: Integer(min_value=0)
    is_active: Boolean()
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Coupon")
class DeactivateCoupon:
    coupon_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Coupon")
class DeleteCoupon:
    coupon_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=Coupon)
class ManageCouponHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        Actor.from_command(command).require_branch_or_platform(command.branch_id)

        repo = current_domain.repository_for(Coupon)
        if repo.find_by_code(command.code, command.branch_id) is not None:
            raise ConflictError({"code": [f"Coupon `{command.code.upper()}` already exists for this branch"]})

        coupon = Coupon.create(
            code=command.code,
            branch_id=command.branch_id,
            discount_type=command.discount_type,
            value=command.value,
            min_order_amount=command.min_order_amount,
            expiry_date=command.expiry_date,
            usage_limit=command.usage_limit,
        )
        repo.add(coupon)
        logger.info("Coupon created", coupon_id=str(coupon.id), code=coupon.code, branch_id=str(command.branch_id))
        return str(coupon.id)

    @handle(UpdateCoupon)
    def update_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)
        Actor.from_command(command).require_branch_or_platform(coupon.branch_id)

        changes = {
            name: getattr(command, name)
            for name in ("value", "min_order_amount", "expiry_date", "usage_limit", "is_active")
            if getattr(command, name) is not None
        }
        coupon.update(**changes)
        repo.add(coupon)

    @handle(DeactivateCoupon)
    def deactivate_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)
        Actor.from_command(command).require_branch_or_platform(coupon.branch_id)

        coupon.deactivate()
        repo.add(coupon)

    @handle(DeleteCoupon)
    def delete_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)
        Actor.from_command(command).require_branch_or_platform(coupon.branch_id)

        repo._dao.delete(coupon)
        logger.info("Coupon deleted", coupon_id=str(command.coupon_id), code=coupon.code)
