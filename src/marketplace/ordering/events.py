"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A checkout was priced and recorded as a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    branch_id = Identifier(required=True)
    item_count = Integer(required=True)
    total_amount = Float(required=True)
    tax_amount = Float()
    discount_amount = Float()
    final_amount = Float(required=True)
    coupon_code = String()
    placed_at = DateTime()


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    branch_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    updated_by = String(required=True)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderRemovedFromHistory:
    """The buyer hid a finished order. Financial records are unaffected."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    removed_at = DateTime(required=True)
