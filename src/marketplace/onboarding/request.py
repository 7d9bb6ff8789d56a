"""BranchRequest aggregate: a user's application to open a shop.

State Machine:
    PENDING → APPROVED
    PENDING → REJECTED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from marketplace.countries import normalize_country
from marketplace.domain import marketplace
from marketplace.shared.actor import branch_id_for
from marketplace.shared.errors import ConflictError
from marketplace.shared.settings import as_utc


class RequestStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@marketplace.aggregate
class BranchRequest:
    user_id: Identifier(required=True)
    user_name: String(max_length=255)
    user_email: String(max_length=254)
    shop_name: String(max_length=255)
    shop_category: String(max_length=100)
    description: Text()
    country: String(required=True, max_length=100)
    payment_proof_url: String(max_length=2048)
    transaction_reference: String(max_length=255)
    status: String(choices=RequestStatus, default=RequestStatus.PENDING.value)
    rejection_reason: String(max_length=500)
    reviewed_by: Identifier()
    reviewed_at: DateTime()
    created_at: DateTime()

    @classmethod
    def submit(
        cls,
        user_id,
        country,
        shop_name=None,
        shop_category=None,
        description=None,
        user_name=None,
        user_email=None,
        payment_proof_url=None,
        transaction_reference=None,
    ):
        from marketplace.onboarding.events import BranchRequestSubmitted

        now = datetime.now(UTC)
        request = cls(
            user_id=user_id,
            user_name=user_name,
            user_email=user_email,
            shop_name=shop_name,
            shop_category=shop_category,
            description=description,
            country=normalize_country(country),
            payment_proof_url=payment_proof_url,
            transaction_reference=transaction_reference,
            created_at=now,
        )
        request.raise_(
            BranchRequestSubmitted(
                request_id=request.id,
                user_id=str(user_id),
                shop_name=shop_name,
                country=request.country,
                submitted_at=now,
            )
        )
        return request

    @property
    def branch_id(self) -> str:
        return branch_id_for(self.user_id)

    @property
    def branch_name(self) -> str:
        return self.shop_name or self.user_name or f"Shop {self.user_id}"

    @property
    def is_open(self) -> bool:
        return self.status in (RequestStatus.PENDING.value, RequestStatus.APPROVED.value)

    def approve(self, reviewed_by) -> bool:
        """Mark approved. Returns False when it already was."""
        from marketplace.onboarding.events import BranchRequestApproved

        if self.status == RequestStatus.REJECTED.value:
            raise ConflictError({"status": ["A rejected request cannot be approved"]})
        if self.status == RequestStatus.APPROVED.value:
            return False

        now = datetime.now(UTC)
        self.status = RequestStatus.APPROVED.value
        self.reviewed_by = str(reviewed_by)
        self.reviewed_at = now
        self.raise_(
            BranchRequestApproved(
                request_id=self.id,
                user_id=str(self.user_id),
                branch_id=self.branch_id,
                reviewed_by=str(reviewed_by),
                approved_at=now,
            )
        )
        return True

    def reject(self, reviewed_by, reason=None):
        from marketplace.onboarding.events import BranchRequestRejected

        if self.status == RequestStatus.APPROVED.value:
            raise ConflictError({"status": ["An approved request cannot be rejected"]})
        if self.status == RequestStatus.REJECTED.value:
            return

        now = datetime.now(UTC)
        self.status = RequestStatus.REJECTED.value
        self.rejection_reason = reason
        self.reviewed_by = str(reviewed_by)
        self.reviewed_at = now
        self.raise_(
            BranchRequestRejected(
                request_id=self.id,
                user_id=str(self.user_id),
                reason=reason,
                reviewed_by=str(reviewed_by),
                rejected_at=now,
            )
        )


@marketplace.repository(part_of=BranchRequest)
class BranchRequestRepository:
    def for_user(self, user_id) -> list[BranchRequest]:
        results = self._dao.query.filter(user_id=str(user_id)).limit(None).all().items
        return sorted(results, key=lambda r: as_utc(r.created_at), reverse=True)

    def with_status(self, status: str) -> list[BranchRequest]:
        results = self._dao.query.filter(status=status).limit(None).all().items
        return sorted(results, key=lambda r: as_utc(r.created_at), reverse=True)

    def everything(self) -> list[BranchRequest]:
        return sorted(self._dao.query.limit(None).all().items, key=lambda r: as_utc(r.created_at), reverse=True)
