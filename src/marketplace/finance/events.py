"""Domain events for the FinancePayment aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="FinancePayment")
class FinancePaymentSubmitted:
    """A branch reported paying tax or subscription dues."""

    __version__ = 1

    payment_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    amount: Float(required=True)
    payment_type: String(required=True)
    transaction_reference: String(required=True)
    submitted_at: DateTime(required=True)


@marketplace.event(part_of="FinancePayment")
class FinancePaymentReviewed:
    """A platform admin approved or rejected a reported payment."""

    __version__ = 1

    payment_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    amount: Float(required=True)
    payment_type: String(required=True)
    decision: String(required=True)
    reviewed_by: Identifier(required=True)
    reviewed_at: DateTime(required=True)
