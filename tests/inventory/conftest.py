import pytest
from protean import current_domain

from marketplace.ordering.order import Order


@pytest.fixture()
def order_line():
    def _line(line_no, product, quantity, variant_id=None, unit_price=10.0):
        return {
            "line_no": line_no,
            "product_id": product if isinstance(product, str) else str(product.id),
            "variant_id": variant_id,
            "name": "Line item",
            "quantity": quantity,
            "unit_price": unit_price,
        }

    return _line


@pytest.fixture()
def persist_order():
    """Persist a pending order straight from priced lines, bypassing checkout."""

    def _persist(branch_id, lines, order_id="order-0001", buyer_id="buyer-1"):
        order = Order.draft(order_id=order_id, buyer_id=buyer_id, branch_id=branch_id, lines=lines)
        order.finalize(tax_amount=0.0)
        current_domain.repository_for(Order).add(order)
        return current_domain.repository_for(Order).get(order_id)

    return _persist
