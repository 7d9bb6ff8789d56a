"""Branch suspension: commands and handler.

Suspending a seller blocks checkout against their branch until the window
ends and tells the seller why.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.account import Account
from marketplace.notifications import notify
from marketplace.notifications.port import NotificationKind
from marketplace.shared.actor import Actor, Role, owner_id_for

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Account")
class SuspendBranch:
    branch_id: Identifier(required=True)
    days: Integer(required=True, min_value=1)
    reason: String(required=True, max_length=500)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Account")
class LiftSuspension:
    branch_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=Account)
class SuspensionHandler:
    @handle(SuspendBranch)
    def suspend_branch(self, command):
        Actor.from_command(command).require_role(Role.PLATFORM_ADMIN)

        repo = current_domain.repository_for(Account)
        account = repo.get(owner_id_for(command.branch_id))
        account.suspend(days=command.days, reason=command.reason)
        repo.add(account)

        logger.info(
            "Branch suspended",
            branch_id=str(command.branch_id),
            days=command.days,
            until=account.suspension_until.isoformat(),
        )
        notify(
            account.id,
            "Account Suspended",
            f"Your shop is suspended for {command.days} day(s). Reason: {account.suspension_reason}",
            NotificationKind.SYSTEM.value,
        )

    @handle(LiftSuspension)
    def lift_suspension(self, command):
        Actor.from_command(command).require_role(Role.PLATFORM_ADMIN)

        repo = current_domain.repository_for(Account)
        account = repo.get(owner_id_for(command.branch_id))
        account.lift_suspension()
        repo.add(account)
        logger.info("Branch suspension lifted", branch_id=str(command.branch_id))
