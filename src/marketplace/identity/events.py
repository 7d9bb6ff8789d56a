"""Domain events for the Account aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Account")
class AccountRegistered:
    """A user account became known to the marketplace."""

    __version__ = 1

    user_id: Identifier(required=True)
    role: String(required=True)
    country: String()
    registered_at: DateTime(required=True)


@marketplace.event(part_of="Account")
class AccountPromoted:
    """A user was promoted to branch admin of their deterministic branch."""

    __version__ = 1

    user_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    shop_category: String()
    branch_country: String()


@marketplace.event(part_of="Account")
class BranchFinanceUpdated:
    __version__ = 1

    user_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    tax_rate: Float()
    monthly_subscription_fee: Float()


@marketplace.event(part_of="Account")
class DeliveryFeeUpdated:
    __version__ = 1

    user_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    delivery_fee: Float(required=True)


@marketplace.event(part_of="Account")
class PlanUpgraded:
    __version__ = 1

    user_id: Identifier(required=True)
    plan: String(required=True)


@marketplace.event(part_of="Account")
class BranchSuspended:
    """A seller was suspended; checkout against their branch is blocked until the window ends."""

    __version__ = 1

    user_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    reason: String(required=True)
    suspended_until: DateTime(required=True)


@marketplace.event(part_of="Account")
class SuspensionLifted:
    __version__ = 1

    user_id: Identifier(required=True)
    branch_id: Identifier(required=True)
