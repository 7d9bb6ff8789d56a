"""Account aggregate: the user / seller profile the core checks roles against.

Accounts are keyed by the identity provider's user id. A seller account
carries the branch it owns plus the finance overrides (tax rate, monthly
subscription fee), delivery fee, plan tier and suspension window that
checkout and settlement read.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.countries import normalize_country
from marketplace.domain import marketplace
from marketplace.shared.actor import Role
from marketplace.shared.errors import ConflictError
from marketplace.shared.settings import as_utc, setting


class Plan(Enum):
    FREE = "free"
    PRO = "pro"


@marketplace.aggregate
class Account:
    """A platform user. Promotion to branch-admin attaches the deterministic branch id."""

    name: String(max_length=255)
    email: String(max_length=254)
    role: String(choices=Role, default=Role.USER.value)
    country: String(max_length=100)
    branch_id: Identifier()
    branch_country: String(max_length=100)
    shop_category: String(max_length=100)
    delivery_fee: Float(default=0.0, min_value=0.0)
    plan: String(choices=Plan, default=Plan.FREE.value)
    tax_rate: Float(min_value=0.0)
    monthly_subscription_fee: Float(min_value=0.0)
    suspension_until: DateTime()
    suspension_reason: String(max_length=500)
    suspension_count: Integer(default=0)
    registered_at: DateTime()

    @invariant.post
    def branch_admin_owns_a_branch(self):
        if self.role == Role.BRANCH_ADMIN.value and not self.branch_id:
            raise ValidationError({"branch_id": ["A branch admin must be attached to a branch"]})

    @classmethod
    def register(cls, user_id, name=None, email=None, country=None, role=Role.USER.value):
        from marketplace.identity.events import AccountRegistered

        now = datetime.now(UTC)
        account = cls(
            id=str(user_id),
            name=name,
            email=email,
            country=normalize_country(country) or None,
            role=role,
            registered_at=now,
        )
        account.raise_(
            AccountRegistered(
                user_id=account.id,
                role=role,
                country=account.country,
                registered_at=now,
            )
        )
        return account

    @property
    def product_limit(self) -> int:
        if self.plan == Plan.PRO.value:
            return int(setting("PRO_PLAN_PRODUCT_LIMIT", 100))
        return int(setting("FREE_PLAN_PRODUCT_LIMIT", 10))

    def is_suspended(self, at: datetime | None = None) -> bool:
        if self.suspension_until is None:
            return False
        at = as_utc(at) if at else datetime.now(UTC)
        return as_utc(self.suspension_until) > at

    def promote_to_branch_admin(self, branch_id, shop_category=None, branch_country=None) -> bool:
        """Attach ``branch_id`` and the branch-admin role.

        Returns False when the account already carries exactly this promotion,
        so a retried onboarding approval leaves the record untouched.
        """
        from marketplace.identity.events import AccountPromoted

        if self.role == Role.PLATFORM_ADMIN.value:
            raise ConflictError({"role": ["Platform admins cannot be promoted to branch admin"]})
        if self.role == Role.BRANCH_ADMIN.value and self.branch_id and self.branch_id != str(branch_id):
            raise ConflictError({"branch_id": [f"Account already owns branch `{self.branch_id}`"]})

        branch_country = normalize_country(branch_country) or None
        if (
            self.role == Role.BRANCH_ADMIN.value
            and self.branch_id == str(branch_id)
            and self.shop_category == shop_category
            and self.branch_country == branch_country
        ):
            return False

        with atomic_change(self):
            self.role = Role.BRANCH_ADMIN.value
            self.branch_id = str(branch_id)
            self.shop_category = shop_category
            self.branch_country = branch_country

        self.raise_(
            AccountPromoted(
                user_id=self.id,
                branch_id=str(branch_id),
                shop_category=shop_category,
                branch_country=branch_country,
            )
        )
        return True

    def update_finance(self, tax_rate=None, monthly_subscription_fee=None):
        from marketplace.identity.events import BranchFinanceUpdated

        self._require_branch_admin()
        if tax_rate is not None:
            self.tax_rate = tax_rate
        if monthly_subscription_fee is not None:
            self.monthly_subscription_fee = monthly_subscription_fee

        self.raise_(
            BranchFinanceUpdated(
                user_id=self.id,
                branch_id=self.branch_id,
                tax_rate=self.tax_rate,
                monthly_subscription_fee=self.monthly_subscription_fee,
            )
        )

    def update_delivery_fee(self, delivery_fee):
        from marketplace.identity.events import DeliveryFeeUpdated

        self._require_branch_admin()
        self.delivery_fee = delivery_fee
        self.raise_(DeliveryFeeUpdated(user_id=self.id, branch_id=self.branch_id, delivery_fee=self.delivery_fee))

    def upgrade_plan(self):
        from marketplace.identity.events import PlanUpgraded

        if self.plan == Plan.PRO.value:
            raise ConflictError({"plan": ["Account is already on the pro plan"]})
        self.plan = Plan.PRO.value
        self.raise_(PlanUpgraded(user_id=self.id, plan=self.plan))

    def suspend(self, days: int, reason: str, now: datetime | None = None):
        from marketplace.identity.events import BranchSuspended

        self._require_branch_admin()
        if days is None or days < 1:
            raise ValidationError({"days": ["Suspension must last at least one day"]})
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A suspension reason is required"]})

        now = now or datetime.now(UTC)
        until = now + timedelta(days=days)
        with atomic_change(self):
            self.suspension_until = until
            self.suspension_reason = reason.strip()
            self.suspension_count = (self.suspension_count or 0) + 1

        self.raise_(
            BranchSuspended(
                user_id=self.id,
                branch_id=self.branch_id,
                reason=self.suspension_reason,
                suspended_until=until,
            )
        )

    def lift_suspension(self):
        from marketplace.identity.events import SuspensionLifted

        if self.suspension_until is None:
            raise ConflictError({"suspension_until": ["Account is not suspended"]})
        with atomic_change(self):
            self.suspension_until = None
            self.suspension_reason = None
        self.raise_(SuspensionLifted(user_id=self.id, branch_id=self.branch_id))

    def _require_branch_admin(self):
        if self.role != Role.BRANCH_ADMIN.value:
            raise ValidationError({"role": ["Only branch admin accounts carry branch settings"]})
