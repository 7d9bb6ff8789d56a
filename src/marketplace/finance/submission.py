"""Finance payment submission and review: commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.finance.payment import FinancePayment, PaymentStatus, PaymentType
from marketplace.notifications import notify
from marketplace.notifications.port import NotificationKind
from marketplace.shared.actor import Actor, Role, owner_id_for

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="FinancePayment")
class SubmitFinancePayment:
    branch_id: Identifier(required=True)
    amount: Float(required=True, min_value=0.01)
    transaction_reference: String(required=True, max_length=255)
    payment_type: String(required=True, choices=PaymentType)
    message: String(max_length=1000)
    period: String(max_length=50)
    screenshot_url: String(max_length=2048)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="FinancePayment")
class ReviewFinancePayment:
    payment_id: Identifier(required=True)
    decision: String(required=True, choices=PaymentStatus)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=FinancePayment)
class FinancePaymentHandler:
    @handle(SubmitFinancePayment)
    def submit_finance_payment(self, command):
        actor = Actor.from_command(command)
        actor.require_role(Role.BRANCH_ADMIN)
        actor.require_branch_or_platform(command.branch_id)
        if not command.transaction_reference.strip():
            raise ValidationError({"transaction_reference": ["A transaction reference is required"]})

        payment = FinancePayment.submit(
            branch_id=command.branch_id,
            amount=command.amount,
            transaction_reference=command.transaction_reference,
            payment_type=command.payment_type,
            message=command.message,
            period=command.period,
            screenshot_url=command.screenshot_url,
        )
        current_domain.repository_for(FinancePayment).add(payment)

        logger.info(
            "Finance payment submitted",
            payment_id=str(payment.id),
            branch_id=str(command.branch_id),
            amount=command.amount,
            payment_type=command.payment_type,
        )
        return str(payment.id)

    @handle(ReviewFinancePayment)
    def review_finance_payment(self, command):
        actor = Actor.from_command(command)
        actor.require_role(Role.PLATFORM_ADMIN)

        repo = current_domain.repository_for(FinancePayment)
        payment = repo.get(command.payment_id)
        payment.review(command.decision, reviewed_by=actor.id)
        repo.add(payment)

        logger.info(
            "Finance payment reviewed",
            payment_id=str(payment.id),
            branch_id=str(payment.branch_id),
            decision=payment.status,
        )
        notify(
            owner_id_for(payment.branch_id),
            "Payment Reviewed",
            f"Your {payment.payment_type} payment of {payment.amount:.2f} was {payment.status}.",
            NotificationKind.SYSTEM.value,
        )
