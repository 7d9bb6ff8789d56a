"""Order status changes and history removal: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.notifications import notify
from marketplace.notifications.port import NotificationKind
from marketplace.ordering.order import Order, OrderStatus
from marketplace.shared.actor import Actor

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    """Move a pending order to completed or cancelled."""

    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)
    actor_branch_id = Identifier()


@marketplace.command(part_of="Order")
class RemoveOrderFromHistory:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True)
    actor_branch_id = Identifier()


@marketplace.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        actor = Actor.from_command(command)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        actor.require_branch_or_platform(order.branch_id)

        previous = order.status
        order.transition_to(command.status, updated_by=actor.id)
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
            updated_by=actor.id,
        )
        notify(
            order.buyer_id,
            "Order Update",
            f"Order #{order.reference} is now {order.status}.",
            NotificationKind.ORDER.value,
        )

    @handle(RemoveOrderFromHistory)
    def remove_order_from_history(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.remove_from_history(buyer_id=command.actor_id)
        repo.add(order)
