"""InventoryLogEntry aggregate: the append-only audit trail of stock changes.

Entries are written once and never updated. Entries written for an order
line double as the idempotency marker for that line's decrement.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import LABEL_MAX_LENGTH
from marketplace.domain import marketplace
from marketplace.shared.settings import as_utc, setting

SYSTEM_ORDER_ACTOR = "System (Order)"


@marketplace.aggregate
class InventoryLogEntry:
    product_id: Identifier(required=True)
    variant_id: Identifier()
    branch_id: Identifier(required=True)
    product_name: String(required=True, max_length=LABEL_MAX_LENGTH)
    change_amount: Integer(required=True)
    new_stock: Integer(required=True, min_value=0)
    reason: String(required=True, max_length=255)
    performed_by: String(required=True, max_length=255)
    order_id: Identifier()
    order_line: Integer()
    created_at: DateTime()

    @classmethod
    def record(
        cls,
        product,
        change_amount,
        new_stock,
        reason,
        performed_by,
        variant_id=None,
        order_id=None,
        order_line=None,
    ):
        from marketplace.inventory.events import StockChangeRecorded

        now = datetime.now(UTC)
        entry = cls(
            product_id=str(product.id),
            variant_id=str(variant_id) if variant_id else None,
            branch_id=str(product.branch_id),
            product_name=product.label_for(variant_id),
            change_amount=change_amount,
            new_stock=new_stock,
            reason=reason,
            performed_by=performed_by,
            order_id=str(order_id) if order_id else None,
            order_line=order_line,
            created_at=now,
        )
        entry.raise_(
            StockChangeRecorded(
                entry_id=entry.id,
                product_id=entry.product_id,
                variant_id=entry.variant_id,
                branch_id=entry.branch_id,
                change_amount=change_amount,
                new_stock=new_stock,
                reason=reason,
                performed_by=performed_by,
                order_id=entry.order_id,
                recorded_at=now,
            )
        )
        return entry


@marketplace.repository(part_of=InventoryLogEntry)
class InventoryLogRepository:
    def for_order_line(self, order_id, order_line) -> InventoryLogEntry | None:
        results = self._dao.query.filter(order_id=str(order_id), order_line=order_line).limit(None).all().items
        return results[0] if results else None

    def for_order(self, order_id) -> list[InventoryLogEntry]:
        results = self._dao.query.filter(order_id=str(order_id)).limit(None).all().items
        return sorted(results, key=lambda e: e.order_line or 0)

    def for_product(self, product_id) -> list[InventoryLogEntry]:
        results = self._dao.query.filter(product_id=str(product_id)).limit(None).all().items
        return sorted(results, key=lambda e: as_utc(e.created_at), reverse=True)

    def for_branch(self, branch_id, limit: int | None = None) -> list[InventoryLogEntry]:
        limit = limit or int(setting("INVENTORY_LOG_PAGE_SIZE", 100))
        results = self._dao.query.filter(branch_id=str(branch_id)).limit(None).all().items
        return sorted(results, key=lambda e: as_utc(e.created_at), reverse=True)[:limit]


def inventory_logs_for_branch(branch_id, limit: int | None = None) -> list[InventoryLogEntry]:
    """Newest-first stock history for a branch."""
    return current_domain.repository_for(InventoryLogEntry).for_branch(branch_id, limit)
