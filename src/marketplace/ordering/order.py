"""Order aggregate: the durable record of a checkout.

State Machine:
    PENDING → COMPLETED
    PENDING → CANCELLED
Both targets are terminal. Every transition appends a StatusChange to the
order's history; the history is never rewritten.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from marketplace.catalogue.product import LABEL_MAX_LENGTH
from marketplace.domain import marketplace
from marketplace.shared.errors import ConflictError, InvalidTransition, PermissionDenied
from marketplace.shared.settings import as_utc


class OrderStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_TERMINAL_STATES = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}


@marketplace.value_object(part_of="Order")
class ShippingInfo:
    """Where the order goes. Captured at checkout and never edited."""

    full_name = String(required=True, max_length=255)
    address = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    zip = String(required=True, max_length=20)
    phone = String(required=True, max_length=30)


@marketplace.entity(part_of="Order")
class OrderItem:
    """A priced line. Name and unit price are snapshots taken at checkout."""

    line_no = Integer(required=True, min_value=0)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    name = String(required=True, max_length=LABEL_MAX_LENGTH)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@marketplace.entity(part_of="Order")
class StatusChange:
    status = String(required=True, choices=OrderStatus)
    timestamp = DateTime(required=True)
    updated_by = String(required=True, max_length=255)


@marketplace.aggregate
class Order:
    buyer_id = Identifier(required=True)
    branch_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total_amount = Float(default=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    tax_rate = Float()
    discount_amount = Float(default=0.0, min_value=0.0)
    final_amount = Float(default=0.0)
    currency = String(max_length=3, default="USD")
    coupon_code = String(max_length=50)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusChange)
    shipping_info = ValueObject(ShippingInfo)
    payment_method = String(max_length=50)
    payment_details = Text()  # JSON: trx_id, screenshot_url, account_title, ...
    removed_from_history_at = DateTime()
    created_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def draft(
        cls,
        order_id,
        buyer_id,
        branch_id,
        lines,
        shipping_info=None,
        shipping_cost=0.0,
        discount_amount=0.0,
        coupon_code=None,
        payment_method=None,
        payment_details=None,
        currency="USD",
    ):
        """Build an unsaved pending order. Totals are set by ``finalize``.

        Args:
            lines: List of dicts with line_no, product_id, variant_id, name,
                   quantity, unit_price.
        """
        return cls(
            id=str(order_id),
            buyer_id=buyer_id,
            branch_id=branch_id,
            items=[OrderItem(**line) for line in lines],
            shipping_info=ShippingInfo(**shipping_info) if shipping_info else None,
            shipping_cost=shipping_cost or 0.0,
            discount_amount=discount_amount or 0.0,
            coupon_code=coupon_code,
            payment_method=payment_method,
            payment_details=json.dumps(payment_details) if payment_details else None,
            currency=currency,
            created_at=datetime.now(UTC),
        )

    def finalize(self, tax_amount: float, tax_rate: float | None = None):
        """Lock the checkout totals: total = subtotal - discount + shipping; final = total + tax."""
        from marketplace.ordering.events import OrderPlaced

        with atomic_change(self):
            self.tax_amount = round(tax_amount, 2)
            self.tax_rate = tax_rate
            self.total_amount = round(self.subtotal - self.discount_amount + self.shipping_cost, 2)
            self.final_amount = round(self.total_amount + self.tax_amount, 2)

        self.raise_(
            OrderPlaced(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                branch_id=str(self.branch_id),
                item_count=len(self.items),
                total_amount=self.total_amount,
                tax_amount=self.tax_amount,
                discount_amount=self.discount_amount,
                final_amount=self.final_amount,
                coupon_code=self.coupon_code,
                placed_at=self.created_at,
            )
        )

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self.items)

    @property
    def reference(self) -> str:
        return order_reference(self.id)

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in _TERMINAL_STATES

    @property
    def payment(self) -> dict:
        return json.loads(self.payment_details) if self.payment_details else {}

    @property
    def lines(self) -> list[OrderItem]:
        return sorted(self.items, key=lambda i: i.line_no)

    @property
    def history(self) -> list[StatusChange]:
        return sorted(self.status_history, key=lambda c: as_utc(c.timestamp))

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransition(current.value, target_status.value)

    def transition_to(self, status: str, updated_by: str):
        from marketplace.ordering.events import OrderStatusChanged

        target = OrderStatus(status)
        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.add_status_history(StatusChange(status=target.value, timestamp=now, updated_by=str(updated_by)))

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                branch_id=str(self.branch_id),
                previous_status=previous,
                new_status=target.value,
                updated_by=str(updated_by),
                changed_at=now,
            )
        )

    def remove_from_history(self, buyer_id):
        """Hide a finished order from the buyer's list. Ledgers still count it."""
        from marketplace.ordering.events import OrderRemovedFromHistory

        if str(buyer_id) != str(self.buyer_id):
            raise PermissionDenied("Only the buyer can remove an order from their history")
        if not self.is_terminal:
            raise ConflictError({"status": ["Only completed or cancelled orders can be removed from history"]})
        if self.removed_from_history_at is not None:
            return

        now = datetime.now(UTC)
        self.removed_from_history_at = now
        self.raise_(OrderRemovedFromHistory(order_id=str(self.id), buyer_id=str(self.buyer_id), removed_at=now))


@marketplace.repository(part_of=Order)
class OrderRepository:
    def for_buyer(self, buyer_id, include_removed: bool = False) -> list[Order]:
        orders = self._dao.query.filter(buyer_id=str(buyer_id)).limit(None).all().items
        if not include_removed:
            orders = [o for o in orders if o.removed_from_history_at is None]
        return _newest_first(orders)

    def for_branch(self, branch_id) -> list[Order]:
        return _newest_first(self._dao.query.filter(branch_id=str(branch_id)).limit(None).all().items)

    def everything(self) -> list[Order]:
        return _newest_first(self._dao.query.limit(None).all().items)

    def with_coupon(self, buyer_id, coupon_code, branch_id) -> list[Order]:
        return self._dao.query.filter(
            buyer_id=str(buyer_id),
            coupon_code=coupon_code,
            branch_id=str(branch_id),
        ).limit(None).all().items


def order_reference(order_id) -> str:
    """Short reference shown to buyers and sellers, e.g. ``#1A2B3C4D``."""
    return str(order_id)[:8].upper()


def _newest_first(orders: list[Order]) -> list[Order]:
    return sorted(orders, key=lambda o: as_utc(o.created_at), reverse=True)
