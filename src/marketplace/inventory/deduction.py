"""Checkout stock deduction: the inventory ledger's write path.

Each order line is one ``DeductStock`` command: one product write plus one
ledger append. Lines run sequentially. The store offers no cross-document
transaction, so a failure partway through raises ``PartialApplicationError``
listing what was applied. Re-running the order's decrements is safe because a
line that already has a ledger entry for the order is skipped.
"""

from collections import defaultdict

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product, StockPolicy
from marketplace.domain import marketplace
from marketplace.inventory.log import SYSTEM_ORDER_ACTOR, InventoryLogEntry
from marketplace.ordering.order import order_reference
from marketplace.shared.errors import InsufficientStock, PartialApplicationError
from marketplace.shared.settings import setting

logger = structlog.get_logger(__name__)


def order_reason(order_id) -> str:
    return f"Order #{order_reference(order_id)}"


@marketplace.command(part_of="Product")
class DeductStock:
    """Take one order line's quantity out of product or variant stock."""

    product_id: Identifier(required=True)
    variant_id: Identifier()
    quantity: Integer(required=True, min_value=1)
    order_id: Identifier(required=True)
    order_line: Integer(required=True, min_value=0)
    performed_by: String(default=SYSTEM_ORDER_ACTOR)


@marketplace.command_handler(part_of=Product)
class DeductStockHandler:
    @handle(DeductStock)
    def deduct_stock(self, command):
        log_repo = current_domain.repository_for(InventoryLogEntry)
        existing = log_repo.for_order_line(command.order_id, command.order_line)
        if existing is not None:
            logger.info(
                "Order line already deducted, skipping",
                order_id=str(command.order_id),
                order_line=command.order_line,
            )
            return existing.new_stock

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        before = product.stock_for(command.variant_id)
        new_stock = product.deduct(
            command.quantity,
            variant_id=command.variant_id,
            policy=setting("STOCK_POLICY", StockPolicy.REJECT),
        )
        repo.add(product)

        entry = InventoryLogEntry.record(
            product,
            change_amount=new_stock - before,
            new_stock=new_stock,
            reason=order_reason(command.order_id),
            performed_by=command.performed_by or SYSTEM_ORDER_ACTOR,
            variant_id=command.variant_id,
            order_id=command.order_id,
            order_line=command.order_line,
        )
        log_repo.add(entry)

        logger.info(
            "Stock deducted",
            product_id=str(product.id),
            variant_id=str(command.variant_id) if command.variant_id else None,
            quantity=command.quantity,
            new_stock=new_stock,
            order_id=str(command.order_id),
        )
        return new_stock


def check_availability(items: list[dict]) -> None:
    """Reject the checkout before anything is written when stock cannot cover it.

    ``items`` are dicts with ``product_id``, optional ``variant_id`` and
    ``quantity``. Quantities for the same product/variant are summed. Under
    the ``clamp`` policy nothing is rejected.
    """
    if setting("STOCK_POLICY", StockPolicy.REJECT) == StockPolicy.CLAMP:
        return

    requested: dict[tuple, int] = defaultdict(int)
    for item in items:
        requested[(str(item["product_id"]), item.get("variant_id") or None)] += int(item["quantity"])

    repo = current_domain.repository_for(Product)
    for (product_id, variant_id), quantity in requested.items():
        product = repo.get(product_id)
        available = product.stock_for(variant_id)
        if quantity > available:
            raise InsufficientStock(
                product_id=product_id,
                variant_id=variant_id,
                requested=quantity,
                available=available,
            )


def _line_ref(item) -> dict:
    return {
        "order_line": item.line_no,
        "product_id": str(item.product_id),
        "variant_id": str(item.variant_id) if item.variant_id else None,
        "quantity": item.quantity,
    }


def apply_order_decrements(order, performed_by: str = SYSTEM_ORDER_ACTOR) -> list[dict]:
    """Deduct stock for every line of ``order``, in line order.

    Returns the applied line refs, each with its resulting ``new_stock``.
    """
    lines = sorted(order.items, key=lambda i: i.line_no)
    applied: list[dict] = []

    for index, item in enumerate(lines):
        ref = _line_ref(item)
        try:
            new_stock = current_domain.process(
                DeductStock(
                    product_id=item.product_id,
                    variant_id=item.variant_id,
                    quantity=item.quantity,
                    order_id=order.id,
                    order_line=item.line_no,
                    performed_by=performed_by,
                ),
                asynchronous=False,
            )
        except Exception as exc:
            remaining = [_line_ref(i) for i in lines[index + 1 :]]
            logger.warning(
                "Stock deduction stopped partway through order",
                order_id=str(order.id),
                applied=len(applied),
                failed_product_id=ref["product_id"],
                remaining=len(remaining),
                error=str(exc),
            )
            raise PartialApplicationError(
                order_id=str(order.id),
                applied=applied,
                failed=ref,
                remaining=remaining,
                cause=exc,
            ) from exc

        applied.append({**ref, "new_stock": new_stock})

    return applied


def resume_order_decrements(order_id, performed_by: str = SYSTEM_ORDER_ACTOR) -> list[dict]:
    """Re-run the decrements of an order after a partial failure."""
    from marketplace.ordering.order import Order

    order = current_domain.repository_for(Order).get(order_id)
    return apply_order_decrements(order, performed_by=performed_by)
