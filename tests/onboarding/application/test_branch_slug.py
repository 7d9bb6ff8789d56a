"""Application tests for storefront slugs."""

import pytest
from protean import current_domain

from marketplace.onboarding.branch import Branch
from marketplace.onboarding.slug import UpdateBranchSlug
from marketplace.shared.errors import ConflictError, PermissionDenied


def _set_slug(actor, branch_id, slug):
    return current_domain.process(
        UpdateBranchSlug(branch_id=branch_id, slug=slug, **actor.as_command_fields()),
        asynchronous=False,
    )


def test_seller_sets_slug(onboard_seller):
    seller = onboard_seller("seller-1")
    assert _set_slug(seller, seller.branch_id, "rahim-fabrics") == "rahim-fabrics"
    assert current_domain.repository_for(Branch).find_by_slug("rahim-fabrics").id == seller.branch_id


def test_duplicate_slug_conflicts(onboard_seller):
    first = onboard_seller("seller-1")
    second = onboard_seller("seller-2")
    _set_slug(first, first.branch_id, "rahim-fabrics")

    with pytest.raises(ConflictError):
        _set_slug(second, second.branch_id, "rahim-fabrics")


def test_resetting_own_slug_is_allowed(onboard_seller):
    seller = onboard_seller("seller-1")
    _set_slug(seller, seller.branch_id, "rahim-fabrics")
    assert _set_slug(seller, seller.branch_id, "rahim-fabrics") == "rahim-fabrics"


def test_other_seller_cannot_change_slug(onboard_seller):
    onboard_seller("seller-1")
    other = onboard_seller("seller-2")
    with pytest.raises(PermissionDenied):
        _set_slug(other, "branch-seller-1", "stolen")
