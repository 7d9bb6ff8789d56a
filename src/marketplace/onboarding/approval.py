"""Branch approval saga.

Approving a request writes two other aggregates that the store cannot
update together:

    1. PromoteToBranchAdmin  (Account)  -- no-op when already promoted
    2. OpenBranch            (Branch)   -- upsert at branch-<user_id>
    3. request -> approved   (BranchRequest)

The deterministic branch id is the idempotency key. A crash between any two
steps leaves a state that approving again completes, and approving an
already-approved request re-runs the steps without changing anything.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.management import PromoteToBranchAdmin
from marketplace.notifications import notify
from marketplace.notifications.port import NotificationKind
from marketplace.onboarding.branch import Branch
from marketplace.onboarding.request import BranchRequest, RequestStatus
from marketplace.shared.actor import Actor, Role, branch_id_for
from marketplace.shared.errors import ConflictError

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Branch")
class OpenBranch:
    """Create the branch at its deterministic id, or refresh it if it exists."""

    branch_id: Identifier(required=True)
    owner_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    country: String(max_length=100)
    shop_category: String(max_length=100)
    description: Text()


@marketplace.command(part_of="BranchRequest")
class ApproveBranchRequest:
    request_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="BranchRequest")
class RejectBranchRequest:
    request_id: Identifier(required=True)
    reason: String(max_length=500)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=Branch)
class OpenBranchHandler:
    @handle(OpenBranch)
    def open_branch(self, command):
        repo = current_domain.repository_for(Branch)
        try:
            branch = repo.get(command.branch_id)
        except ObjectNotFoundError:
            branch = Branch.open(
                branch_id=command.branch_id,
                owner_id=command.owner_id,
                name=command.name,
                country=command.country,
                shop_category=command.shop_category,
                description=command.description,
            )
            repo.add(branch)
            return True

        if branch.refresh(
            name=command.name,
            country=command.country,
            shop_category=command.shop_category,
            description=command.description,
        ):
            repo.add(branch)
        return False


@marketplace.command_handler(part_of=BranchRequest)
class BranchApprovalHandler:
    @handle(ApproveBranchRequest)
    def approve_branch_request(self, command):
        actor = Actor.from_command(command)
        actor.require_role(Role.PLATFORM_ADMIN)

        repo = current_domain.repository_for(BranchRequest)
        request = repo.get(command.request_id)
        if request.status == RequestStatus.REJECTED.value:
            raise ConflictError({"status": ["A rejected request cannot be approved"]})

        branch_id = branch_id_for(request.user_id)

        current_domain.process(
            PromoteToBranchAdmin(
                user_id=request.user_id,
                branch_id=branch_id,
                shop_category=request.shop_category,
                branch_country=request.country,
                **actor.as_command_fields(),
            ),
            asynchronous=False,
        )
        created = current_domain.process(
            OpenBranch(
                branch_id=branch_id,
                owner_id=request.user_id,
                name=request.branch_name,
                country=request.country,
                shop_category=request.shop_category,
                description=request.description,
            ),
            asynchronous=False,
        )

        if request.approve(reviewed_by=actor.id):
            repo.add(request)
            notify(
                request.user_id,
                "Shop Approved",
                f"Your shop {request.branch_name} is live.",
                NotificationKind.SYSTEM.value,
            )

        logger.info(
            "Branch request approved",
            request_id=str(request.id),
            user_id=str(request.user_id),
            branch_id=branch_id,
            branch_created=created,
        )
        return branch_id

    @handle(RejectBranchRequest)
    def reject_branch_request(self, command):
        actor = Actor.from_command(command)
        actor.require_role(Role.PLATFORM_ADMIN)

        repo = current_domain.repository_for(BranchRequest)
        request = repo.get(command.request_id)
        request.reject(reviewed_by=actor.id, reason=command.reason)
        repo.add(request)
        logger.info("Branch request rejected", request_id=str(request.id), user_id=str(request.user_id))
