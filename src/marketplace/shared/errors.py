"""Marketplace error taxonomy layered on Protean's exceptions.

Every class keeps Protean's ``messages`` convention (field -> list of
messages) so the FastAPI integration can render them unchanged.
"""

from protean.exceptions import (
    InvalidOperationError,
    InvalidStateError,
    ObjectNotFoundError,
    ValidationError,
)


class CouponRejected(ValidationError):
    """A discount code failed validation. ``reason`` is a stable machine code."""

    INVALID = "InvalidCoupon"
    EXPIRED = "Expired"
    MINIMUM_NOT_MET = "MinimumNotMet"
    LIMIT_REACHED = "LimitReached"
    ALREADY_USED = "AlreadyUsed"

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__({"coupon_code": [message]})


class InsufficientStock(ValidationError):
    def __init__(self, product_id: str, requested: int, available: int, variant_id: str | None = None):
        self.product_id = product_id
        self.variant_id = variant_id
        self.requested = requested
        self.available = available
        super().__init__({"quantity": [f"Insufficient stock: {available} available, {requested} requested"]})


class ConflictError(InvalidStateError):
    """The request collides with the current state of an aggregate."""

    def __init__(self, messages):
        super().__init__(messages)
        self.messages = messages


class InvalidTransition(ConflictError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__({"status": [f"Cannot transition from {current} to {target}"]})


class PermissionDenied(InvalidOperationError):
    """The actor's role does not allow the requested operation."""

    def __init__(self, message: str):
        self.messages = {"actor": [message]}
        super().__init__(self.messages)


class PartialApplicationError(InvalidOperationError):
    """Inventory decrements stopped partway through an order.

    ``applied`` lists the line items whose decrement was persisted (with the
    resulting stock), ``failed`` the line that raised, and ``remaining`` the
    lines never attempted. Retrying the order's decrements is safe: lines
    that already carry a ledger entry for the order are skipped.
    """

    def __init__(self, order_id: str, applied: list[dict], failed: dict, remaining: list[dict], cause: Exception):
        self.order_id = order_id
        self.applied = applied
        self.failed = failed
        self.remaining = remaining
        self.cause = cause
        self.messages = {
            "inventory": [f"Stock deduction for order {order_id} stopped at product {failed.get('product_id')}: {cause}"]
        }
        super().__init__(self.messages)

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "applied": self.applied,
            "failed": self.failed,
            "remaining": self.remaining,
            "error": getattr(self.cause, "messages", None) or str(self.cause),
        }


def not_found(kind: str, identifier: str) -> ObjectNotFoundError:
    return ObjectNotFoundError({kind: [f"{kind} `{identifier}` does not exist"]})
