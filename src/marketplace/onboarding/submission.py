"""Seller applications: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.countries import normalize_country
from marketplace.domain import marketplace
from marketplace.onboarding.request import BranchRequest
from marketplace.shared.actor import Actor, Role
from marketplace.shared.errors import ConflictError

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="BranchRequest")
class SubmitBranchRequest:
    """Apply to open a shop. The payment proof is a URL to an uploaded screenshot."""

    shop_name: String(required=True, max_length=255)
    shop_category: String(max_length=100)
    description: Text()
    country: String(required=True, max_length=100)
    payment_proof_url: String(max_length=2048)
    transaction_reference: String(max_length=255)
    user_name: String(max_length=255)
    user_email: String(max_length=254)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=BranchRequest)
class SubmitBranchRequestHandler:
    @handle(SubmitBranchRequest)
    def submit_branch_request(self, command):
        actor = Actor.from_command(command)
        actor.require_role(Role.USER)
        if not normalize_country(command.country):
            raise ValidationError({"country": ["Country is required"]})

        repo = current_domain.repository_for(BranchRequest)
        if any(r.is_open for r in repo.for_user(actor.id)):
            raise ConflictError({"user_id": ["You already have a pending or approved shop application"]})

        request = BranchRequest.submit(
            user_id=actor.id,
            country=command.country,
            shop_name=command.shop_name,
            shop_category=command.shop_category,
            description=command.description,
            user_name=command.user_name,
            user_email=command.user_email,
            payment_proof_url=command.payment_proof_url,
            transaction_reference=command.transaction_reference,
        )
        repo.add(request)
        logger.info("Branch request submitted", request_id=str(request.id), user_id=actor.id)
        return str(request.id)
