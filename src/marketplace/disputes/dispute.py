"""Dispute aggregate: a buyer's report against a placed order.

State Machine:
    OPEN → RESOLVED → CLOSED

The first resolution wins. A later resolve attempt, whether from the branch
or from the platform, leaves the resolution, its timestamp and the buyer's
notifications exactly as they were.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from marketplace.domain import marketplace
from marketplace.ordering.order import OrderStatus
from marketplace.shared.errors import ConflictError, InvalidTransition, PermissionDenied
from marketplace.shared.settings import as_utc


class DisputeStatus(Enum):
    OPEN = "open"
    RESOLVED = "resolved"
    CLOSED = "closed"


@marketplace.aggregate
class Dispute:
    order_id: Identifier(required=True)
    buyer_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    reason: String(required=True, max_length=255)
    description: Text()
    status: String(choices=DisputeStatus, default=DisputeStatus.OPEN.value)
    resolution: Text()
    resolved_by: Identifier()
    resolved_at: DateTime()
    closed_at: DateTime()
    created_at: DateTime()

    @classmethod
    def raise_for(cls, order, buyer_id, reason, description=None):
        from marketplace.disputes.events import DisputeRaised

        if str(order.buyer_id) != str(buyer_id):
            raise PermissionDenied("Only the buyer of an order can report it")
        if order.status == OrderStatus.PENDING.value:
            raise ConflictError({"order_id": ["Pending orders cannot be disputed yet"]})
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A reason is required"]})

        now = datetime.now(UTC)
        dispute = cls(
            order_id=str(order.id),
            buyer_id=str(buyer_id),
            branch_id=str(order.branch_id),
            reason=reason.strip(),
            description=description,
            created_at=now,
        )
        dispute.raise_(
            DisputeRaised(
                dispute_id=dispute.id,
                order_id=dispute.order_id,
                buyer_id=dispute.buyer_id,
                branch_id=dispute.branch_id,
                reason=dispute.reason,
                raised_at=now,
            )
        )
        return dispute

    def resolve(self, resolution: str, resolved_by) -> bool:
        """Record the resolution. Returns False if the dispute was already resolved."""
        from marketplace.disputes.events import DisputeResolved

        if self.status != DisputeStatus.OPEN.value:
            return False
        if not resolution or not resolution.strip():
            raise ValidationError({"resolution": ["A resolution message is required"]})

        now = datetime.now(UTC)
        self.status = DisputeStatus.RESOLVED.value
        self.resolution = resolution.strip()
        self.resolved_by = str(resolved_by)
        self.resolved_at = now
        self.raise_(
            DisputeResolved(
                dispute_id=self.id,
                order_id=str(self.order_id),
                buyer_id=str(self.buyer_id),
                resolved_by=str(resolved_by),
                resolved_at=now,
            )
        )
        return True

    def close(self, closed_by):
        from marketplace.disputes.events import DisputeClosed

        if self.status != DisputeStatus.RESOLVED.value:
            raise InvalidTransition(self.status, DisputeStatus.CLOSED.value)

        now = datetime.now(UTC)
        self.status = DisputeStatus.CLOSED.value
        self.closed_at = now
        self.raise_(DisputeClosed(dispute_id=self.id, closed_by=str(closed_by), closed_at=now))


@marketplace.repository(part_of=Dispute)
class DisputeRepository:
    def for_buyer(self, buyer_id) -> list[Dispute]:
        return _newest_first(self._dao.query.filter(buyer_id=str(buyer_id)).limit(None).all().items)

    def for_branch(self, branch_id) -> list[Dispute]:
        return _newest_first(self._dao.query.filter(branch_id=str(branch_id)).limit(None).all().items)

    def everything(self) -> list[Dispute]:
        return _newest_first(self._dao.query.limit(None).all().items)


def _newest_first(disputes: list[Dispute]) -> list[Dispute]:
    return sorted(disputes, key=lambda d: as_utc(d.created_at), reverse=True)
