"""Domain events for the inventory ledger."""

from protean.fields import DateTime, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="InventoryLogEntry")
class StockChangeRecorded:
    """A product's stock changed and the change was written to the ledger."""

    __version__ = 1

    entry_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant_id: Identifier()
    branch_id: Identifier(required=True)
    change_amount: Integer(required=True)
    new_stock: Integer(required=True)
    reason: String(required=True)
    performed_by: String(required=True)
    order_id: Identifier()
    recorded_at: DateTime(required=True)
