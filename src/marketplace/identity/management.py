"""Account registration and seller settings: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.account import Account
from marketplace.shared.actor import Actor, Role, owner_id_for
from marketplace.shared.errors import ConflictError, PermissionDenied


@marketplace.command(part_of="Account")
class RegisterAccount:
    """Make an identity-provider user known to the marketplace."""

    user_id: Identifier(required=True)
    name: String(max_length=255)
    email: String(max_length=254)
    country: String(max_length=100)


@marketplace.command(part_of="Account")
class PromoteToBranchAdmin:
    """Attach the deterministic branch id and the branch-admin role to a user."""

    user_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    shop_category: String(max_length=100)
    branch_country: String(max_length=100)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Account")
class UpdateBranchFinance:
    """Set a branch's tax rate and monthly subscription overrides."""

    branch_id: Identifier(required=True)
    tax_rate: Float(min_value=0.0)
    monthly_subscription_fee: Float(min_value=0.0)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Account")
class UpdateDeliveryFee:
    branch_id: Identifier(required=True)
    delivery_fee: Float(required=True, min_value=0.0)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command(part_of="Account")
class UpgradePlan:
    user_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=Account)
class ManageAccountHandler:
    @handle(RegisterAccount)
    def register_account(self, command):
        repo = current_domain.repository_for(Account)
        try:
            repo.get(command.user_id)
        except ObjectNotFoundError:
            pass
        else:
            raise ConflictError({"user_id": [f"Account `{command.user_id}` is already registered"]})

        account = Account.register(
            user_id=command.user_id,
            name=command.name,
            email=command.email,
            country=command.country,
        )
        repo.add(account)
        return account.id

    @handle(PromoteToBranchAdmin)
    def promote_to_branch_admin(self, command):
        Actor.from_command(command).require_role(Role.PLATFORM_ADMIN)

        repo = current_domain.repository_for(Account)
        account = repo.get(command.user_id)
        changed = account.promote_to_branch_admin(
            branch_id=command.branch_id,
            shop_category=command.shop_category,
            branch_country=command.branch_country,
        )
        if changed:
            repo.add(account)
        return changed

    @handle(UpdateBranchFinance)
    def update_branch_finance(self, command):
        Actor.from_command(command).require_role(Role.PLATFORM_ADMIN)

        repo = current_domain.repository_for(Account)
        account = repo.get(owner_id_for(command.branch_id))
        account.update_finance(
            tax_rate=command.tax_rate,
            monthly_subscription_fee=command.monthly_subscription_fee,
        )
        repo.add(account)

    @handle(UpdateDeliveryFee)
    def update_delivery_fee(self, command):
        Actor.from_command(command).require_branch_or_platform(command.branch_id)

        repo = current_domain.repository_for(Account)
        account = repo.get(owner_id_for(command.branch_id))
        account.update_delivery_fee(command.delivery_fee)
        repo.add(account)

    @handle(UpgradePlan)
    def upgrade_plan(self, command):
        actor = Actor.from_command(command)
        if actor.id != str(command.user_id) and not actor.is_platform_admin:
            raise PermissionDenied("Only the account owner or a platform admin can change the plan")

        repo = current_domain.repository_for(Account)
        account = repo.get(command.user_id)
        account.upgrade_plan()
        repo.add(account)
