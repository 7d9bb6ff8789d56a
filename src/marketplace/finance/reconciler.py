"""Settlement reconciler: what a branch owes the platform.

Nothing here is stored. Every figure is recomputed from orders, payments and
the seller's finance settings on each call, so a late edit or cancellation
of a historical order shows up on the next read.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from marketplace.finance.payment import FinancePayment, PaymentType
from marketplace.finance.tax import TaxContext
from marketplace.identity.account import Account
from marketplace.onboarding.branch import Branch
from marketplace.ordering.order import Order, OrderStatus
from marketplace.shared.actor import Actor, owner_id_for
from marketplace.shared.settings import as_utc


def _money(value: float) -> float:
    return round(value, 2)


def billing_months(opened_at: datetime, as_of: datetime) -> int:
    """Calendar months from ``opened_at``'s month to ``as_of``'s month, both inclusive."""
    opened_at, as_of = as_utc(opened_at), as_utc(as_of)
    months = (as_of.year - opened_at.year) * 12 + (as_of.month - opened_at.month) + 1
    return max(0, months)


@dataclass(frozen=True)
class SettlementStatement:
    branch_id: str
    as_of: datetime
    accrued_tax: float
    paid_tax: float
    outstanding_tax: float
    accrued_subscription: float
    paid_subscription: float
    outstanding_subscription: float

    @property
    def total_outstanding(self) -> float:
        return _money(self.outstanding_tax + self.outstanding_subscription)


class SettlementReconciler:
    def accrued_tax(self, branch_id) -> float:
        context = TaxContext.for_branch(branch_id)
        orders = current_domain.repository_for(Order).for_branch(branch_id)
        return _money(
            sum(context.accrue(order) for order in orders if order.status != OrderStatus.CANCELLED.value)
        )

    def paid_tax(self, branch_id) -> float:
        return self._paid(branch_id, PaymentType.TAX)

    def outstanding_tax(self, branch_id) -> float:
        return _money(max(0.0, self.accrued_tax(branch_id) - self.paid_tax(branch_id)))

    def accrued_subscription(self, branch_id, as_of: datetime | None = None) -> float:
        as_of = as_of or datetime.now(UTC)
        owner = current_domain.repository_for(Account).get(owner_id_for(branch_id))
        if not owner.monthly_subscription_fee:
            return 0.0

        branch = current_domain.repository_for(Branch).get(branch_id)
        return _money(owner.monthly_subscription_fee * billing_months(branch.opened_at, as_of))

    def paid_subscription(self, branch_id) -> float:
        return self._paid(branch_id, PaymentType.SUBSCRIPTION)

    def outstanding_subscription(self, branch_id, as_of: datetime | None = None) -> float:
        return _money(max(0.0, self.accrued_subscription(branch_id, as_of) - self.paid_subscription(branch_id)))

    def statement(self, branch_id, as_of: datetime | None = None) -> SettlementStatement:
        as_of = as_of or datetime.now(UTC)
        accrued_tax = self.accrued_tax(branch_id)
        paid_tax = self.paid_tax(branch_id)
        accrued_subscription = self.accrued_subscription(branch_id, as_of)
        paid_subscription = self.paid_subscription(branch_id)
        return SettlementStatement(
            branch_id=str(branch_id),
            as_of=as_of,
            accrued_tax=accrued_tax,
            paid_tax=paid_tax,
            outstanding_tax=_money(max(0.0, accrued_tax - paid_tax)),
            accrued_subscription=accrued_subscription,
            paid_subscription=paid_subscription,
            outstanding_subscription=_money(max(0.0, accrued_subscription - paid_subscription)),
        )

    def _paid(self, branch_id, payment_type: PaymentType) -> float:
        payments = current_domain.repository_for(FinancePayment).approved(branch_id, payment_type.value)
        return _money(sum(p.amount for p in payments))


def payments_for(actor: Actor) -> list[FinancePayment]:
    repo = current_domain.repository_for(FinancePayment)
    if actor.is_platform_admin:
        return repo.everything()
    if actor.is_branch_admin:
        return repo.for_branch(actor.managed_branch_id)
    return []
