"""Domain events for branch onboarding."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="BranchRequest")
class BranchRequestSubmitted:
    __version__ = 1

    request_id: Identifier(required=True)
    user_id: Identifier(required=True)
    shop_name: String()
    country: String(required=True)
    submitted_at: DateTime(required=True)


@marketplace.event(part_of="BranchRequest")
class BranchRequestApproved:
    """The application was accepted; the seller and their branch now exist."""

    __version__ = 1

    request_id: Identifier(required=True)
    user_id: Identifier(required=True)
    branch_id: Identifier(required=True)
    reviewed_by: Identifier(required=True)
    approved_at: DateTime(required=True)


@marketplace.event(part_of="BranchRequest")
class BranchRequestRejected:
    __version__ = 1

    request_id: Identifier(required=True)
    user_id: Identifier(required=True)
    reason: String()
    reviewed_by: Identifier(required=True)
    rejected_at: DateTime(required=True)


@marketplace.event(part_of="Branch")
class BranchOpened:
    __version__ = 1

    branch_id: Identifier(required=True)
    owner_id: Identifier(required=True)
    name: String(required=True)
    country: String()
    opened_at: DateTime(required=True)


@marketplace.event(part_of="Branch")
class BranchSlugChanged:
    __version__ = 1

    branch_id: Identifier(required=True)
    previous_slug: String()
    new_slug: String(required=True)
