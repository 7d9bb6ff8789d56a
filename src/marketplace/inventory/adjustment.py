"""Manual stock adjustment: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.inventory.log import InventoryLogEntry
from marketplace.shared.actor import Actor

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class AdjustStock:
    """Restock or correct product or variant stock by a signed amount."""

    product_id: Identifier(required=True)
    variant_id: Identifier()
    change_amount: Integer(required=True)
    reason: String(required=True, max_length=255)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=Product)
class StockAdjustmentHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        actor = Actor.from_command(command)
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        actor.require_branch_or_platform(product.branch_id)

        new_stock = product.adjust(command.change_amount, variant_id=command.variant_id)
        repo.add(product)

        entry = InventoryLogEntry.record(
            product,
            change_amount=command.change_amount,
            new_stock=new_stock,
            reason=command.reason,
            performed_by=actor.id,
            variant_id=command.variant_id,
        )
        current_domain.repository_for(InventoryLogEntry).add(entry)

        logger.info(
            "Stock adjusted",
            product_id=str(product.id),
            change_amount=command.change_amount,
            new_stock=new_stock,
            performed_by=actor.id,
        )
        return new_stock
