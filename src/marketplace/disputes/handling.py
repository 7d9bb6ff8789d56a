"""Dispute lifecycle: commands, handler and listings."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.disputes.dispute import Dispute
from marketplace.domain import marketplace
from marketplace.notifications import notify
from marketplace.notifications.port import NotificationKind
from marketplace.ordering.order import Order
from marketplace.shared.actor import Actor, owner_id_for
from marketplace.shared.errors import PermissionDenied

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Dispute")
class RaiseDispute:
    order_id: Identifier(required=True)
    reason: String(required=True, max_length=255)
    description: Text()
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Dispute")
class ResolveDispute:
    dispute_id: Identifier(required=True)
    resolution: Text(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Dispute")
class CloseDispute:
    dispute_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=Dispute)
class DisputeHandler:
    @handle(RaiseDispute)
    def raise_dispute(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        dispute = Dispute.raise_for(
            order,
            buyer_id=command.actor_id,
            reason=command.reason,
            description=command.description,
        )
        current_domain.repository_for(Dispute).add(dispute)

        logger.info("Dispute raised", dispute_id=str(dispute.id), order_id=str(order.id))
        notify(
            owner_id_for(dispute.branch_id),
            "New Customer Report",
            f"A customer reported an issue with order #{order.reference}: {dispute.reason}",
            NotificationKind.SYSTEM.value,
        )
        return str(dispute.id)

    @handle(ResolveDispute)
    def resolve_dispute(self, command):
        actor = Actor.from_command(command)
        repo = current_domain.repository_for(Dispute)
        dispute = repo.get(command.dispute_id)
        actor.require_branch_or_platform(dispute.branch_id)

        if not dispute.resolve(command.resolution, resolved_by=actor.id):
            logger.info("Dispute already resolved, ignoring", dispute_id=str(dispute.id), actor_id=actor.id)
            return False

        repo.add(dispute)
        logger.info("Dispute resolved", dispute_id=str(dispute.id), resolved_by=actor.id)
        notify(
            dispute.buyer_id,
            "Response to your Report",
            f"Your report has been answered: {dispute.resolution}",
            NotificationKind.SYSTEM.value,
        )
        return True

    @handle(CloseDispute)
    def close_dispute(self, command):
        actor = Actor.from_command(command)
        repo = current_domain.repository_for(Dispute)
        dispute = repo.get(command.dispute_id)
        if actor.id != str(dispute.buyer_id) and not actor.is_platform_admin:
            raise PermissionDenied("Only the buyer or a platform admin can close a dispute")

        dispute.close(closed_by=actor.id)
        repo.add(dispute)


def disputes_for(actor: Actor) -> list[Dispute]:
    repo = current_domain.repository_for(Dispute)
    if actor.is_platform_admin:
        return repo.everything()
    if actor.is_branch_admin:
        return repo.for_branch(actor.managed_branch_id)
    return repo.for_buyer(actor.id)
