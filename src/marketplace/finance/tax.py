"""Tax accrual: what an order owes in tax.

The rule is a three-tier fallback and its order is part of the historical
record: changing it would silently re-state past accruals.

1. A persisted non-zero ``tax_amount`` is returned unchanged; it is what the
   buyer was shown at checkout.
2. Otherwise a positive branch ``tax_rate`` override applies to
   ``subtotal - discount + shipping``.
3. Otherwise each line is taxed at its product category's rate (0 when the
   product or category is unknown).
"""

from dataclasses import dataclass, field

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.shared.actor import owner_id_for


def tax_accrual(order, branch_tax_rate: float | None = None, category_rates: dict | None = None) -> float:
    """Tax owed on ``order``. Unrounded; callers round when they persist.

    ``category_rates`` maps product id to the percentage rate of the
    product's category.
    """
    if order.tax_amount and order.tax_amount > 0:
        return order.tax_amount

    if branch_tax_rate and branch_tax_rate > 0:
        taxable = order.subtotal - (order.discount_amount or 0.0) + (order.shipping_cost or 0.0)
        return taxable * branch_tax_rate / 100

    rates = category_rates or {}
    return sum(item.unit_price * item.quantity * rates.get(str(item.product_id), 0.0) / 100 for item in order.items)


@dataclass(frozen=True)
class TaxContext:
    """The rates tax accrual needs for one branch."""

    branch_tax_rate: float | None = None
    category_rates: dict = field(default_factory=dict)

    @classmethod
    def for_branch(cls, branch_id) -> "TaxContext":
        from marketplace.catalogue.category import Category
        from marketplace.catalogue.product import Product
        from marketplace.identity.account import Account

        try:
            owner = current_domain.repository_for(Account).get(owner_id_for(branch_id))
            branch_tax_rate = owner.tax_rate
        except ObjectNotFoundError:
            branch_tax_rate = None

        by_category = current_domain.repository_for(Category).tax_rates()
        products = current_domain.repository_for(Product).for_branch(branch_id)
        category_rates = {str(p.id): by_category.get(p.category, 0.0) for p in products}

        return cls(branch_tax_rate=branch_tax_rate, category_rates=category_rates)

    @property
    def uses_branch_rate(self) -> bool:
        return bool(self.branch_tax_rate and self.branch_tax_rate > 0)

    def accrue(self, order) -> float:
        return tax_accrual(order, self.branch_tax_rate, self.category_rates)
