"""FinancePayment aggregate: a branch's self-reported settlement of dues.

State Machine:
    PENDING → APPROVED
    PENDING → REJECTED
Both outcomes are final and only a platform admin reaches them.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String

from marketplace.domain import marketplace
from marketplace.shared.errors import InvalidTransition
from marketplace.shared.settings import as_utc


class PaymentType(Enum):
    TAX = "tax"
    SUBSCRIPTION = "subscription"


class PaymentStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.APPROVED, PaymentStatus.REJECTED},
    PaymentStatus.APPROVED: set(),
    PaymentStatus.REJECTED: set(),
}


@marketplace.aggregate
class FinancePayment:
    branch_id: Identifier(required=True)
    amount: Float(required=True, min_value=0.01)
    transaction_reference: String(required=True, max_length=255)
    payment_type: String(required=True, choices=PaymentType)
    status: String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    message: String(max_length=1000)
    period: String(max_length=50)
    screenshot_url: String(max_length=2048)
    reviewed_by: Identifier()
    reviewed_at: DateTime()
    created_at: DateTime()

    @classmethod
    def submit(
        cls,
        branch_id,
        amount,
        transaction_reference,
        payment_type,
        message=None,
        period=None,
        screenshot_url=None,
    ):
        from marketplace.finance.events import FinancePaymentSubmitted

        now = datetime.now(UTC)
        payment = cls(
            branch_id=branch_id,
            amount=amount,
            transaction_reference=transaction_reference.strip(),
            payment_type=payment_type,
            message=message,
            period=period,
            screenshot_url=screenshot_url,
            created_at=now,
        )
        payment.raise_(
            FinancePaymentSubmitted(
                payment_id=payment.id,
                branch_id=str(branch_id),
                amount=amount,
                payment_type=payment_type,
                transaction_reference=payment.transaction_reference,
                submitted_at=now,
            )
        )
        return payment

    @property
    def is_approved(self) -> bool:
        return self.status == PaymentStatus.APPROVED.value

    def review(self, decision: str, reviewed_by):
        from marketplace.finance.events import FinancePaymentReviewed

        target = PaymentStatus(decision)
        current = PaymentStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(current.value, target.value)

        now = datetime.now(UTC)
        self.status = target.value
        self.reviewed_by = str(reviewed_by)
        self.reviewed_at = now
        self.raise_(
            FinancePaymentReviewed(
                payment_id=self.id,
                branch_id=str(self.branch_id),
                amount=self.amount,
                payment_type=self.payment_type,
                decision=target.value,
                reviewed_by=str(reviewed_by),
                reviewed_at=now,
            )
        )


@marketplace.repository(part_of=FinancePayment)
class FinancePaymentRepository:
    def for_branch(self, branch_id) -> list[FinancePayment]:
        results = self._dao.query.filter(branch_id=str(branch_id)).limit(None).all().items
        return sorted(results, key=lambda p: as_utc(p.created_at), reverse=True)

    def everything(self) -> list[FinancePayment]:
        return sorted(self._dao.query.limit(None).all().items, key=lambda p: as_utc(p.created_at), reverse=True)

    def approved(self, branch_id, payment_type: str) -> list[FinancePayment]:
        return self._dao.query.filter(
            branch_id=str(branch_id),
            payment_type=payment_type,
            status=PaymentStatus.APPROVED.value,
        ).limit(None).all().items
