"""Domain events for the Dispute aggregate."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Dispute")
class DisputeRaised:
    __version__ = 1

    dispute_id: Identifier(required=True)
    order_id: Identifier(required=True)
    buyer_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    reason: String(required=True)
    raised_at: DateTime(required=True)


@marketplace.event(part_of="Dispute")
class DisputeResolved:
    __version__ = 1

    dispute_id: Identifier(required=True)
    order_id: Identifier(required=True)
    buyer_id: Identifier(required=True)
    resolved_by: Identifier(required=True)
    resolved_at: DateTime(required=True)


@marketplace.event(part_of="Dispute")
class DisputeClosed:
    __version__ = 1

    dispute_id: Identifier(required=True)
    closed_by: Identifier(required=True)
    closed_at: DateTime(required=True)
