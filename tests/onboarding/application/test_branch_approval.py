"""Application tests for the branch onboarding workflow."""

import pytest
from protean import current_domain

from marketplace.identity.account import Account
from marketplace.identity.management import PromoteToBranchAdmin
from marketplace.onboarding.approval import ApproveBranchRequest, OpenBranch, RejectBranchRequest
from marketplace.onboarding.branch import Branch
from marketplace.onboarding.request import BranchRequest, RequestStatus
from marketplace.onboarding.submission import SubmitBranchRequest
from marketplace.shared.errors import ConflictError, PermissionDenied


@pytest.fixture()
def applicant(register_user):
    return register_user("user-1", country="Bangladesh")


@pytest.fixture()
def request_id(applicant):
    return current_domain.process(
        SubmitBranchRequest(
            shop_name="Rahim Fabrics",
            shop_category="Fashion",
            description="Handwoven cotton",
            country="Bangladesh",
            payment_proof_url="https://files.example.com/proof.png",
            transaction_reference="TRX-991",
            **applicant.as_command_fields(),
        ),
        asynchronous=False,
    )


def _approve(request_id, admin):
    return current_domain.process(
        ApproveBranchRequest(request_id=request_id, **admin.as_command_fields()),
        asynchronous=False,
    )


class TestSubmission:
    def test_submission_is_pending(self, request_id):
        request = current_domain.repository_for(BranchRequest).get(request_id)
        assert request.status == RequestStatus.PENDING.value
        assert request.payment_proof_url == "https://files.example.com/proof.png"

    def test_second_open_application_conflicts(self, applicant, request_id):
        with pytest.raises(ConflictError):
            current_domain.process(
                SubmitBranchRequest(shop_name="Again", country="Bangladesh", **applicant.as_command_fields()),
                asynchronous=False,
            )

    def test_reapplying_after_rejection_is_allowed(self, applicant, request_id, platform_admin):
        current_domain.process(
            RejectBranchRequest(request_id=request_id, reason="Blurry proof", **platform_admin.as_command_fields()),
            asynchronous=False,
        )
        second = current_domain.process(
            SubmitBranchRequest(shop_name="Again", country="Bangladesh", **applicant.as_command_fields()),
            asynchronous=False,
        )
        assert second != request_id


class TestApproval:
    def test_approval_promotes_user_and_opens_branch(self, request_id, platform_admin, notifier):
        branch_id = _approve(request_id, platform_admin)

        assert branch_id == "branch-user-1"
        account = current_domain.repository_for(Account).get("user-1")
        assert account.role == "branch-admin"
        assert account.branch_id == "branch-user-1"
        assert account.shop_category == "Fashion"

        branch = current_domain.repository_for(Branch).get(branch_id)
        assert branch.name == "Rahim Fabrics"
        assert branch.description == "Handwoven cotton"
        assert branch.rating == 0.0
        assert branch.review_count == 0

        assert current_domain.repository_for(BranchRequest).get(request_id).status == "approved"
        assert notifier.list_by_user("user-1")[0]["title"] == "Shop Approved"

    def test_approving_twice_leaves_one_branch_and_same_account(self, request_id, platform_admin, notifier):
        _approve(request_id, platform_admin)
        first = current_domain.repository_for(Account).get("user-1")

        _approve(request_id, platform_admin)
        second = current_domain.repository_for(Account).get("user-1")

        branches = current_domain.repository_for(Branch).for_owner("user-1")
        assert len(branches) == 1
        assert branches[0].id == "branch-user-1"
        assert (second.role, second.branch_id) == (first.role, first.branch_id)
        assert len(notifier.list_by_user("user-1")) == 1

    def test_retry_after_promotion_only_completes_approval(self, request_id, platform_admin):
        # Crash after step one: the account is promoted but no branch exists yet.
        current_domain.process(
            PromoteToBranchAdmin(
                user_id="user-1",
                branch_id="branch-user-1",
                shop_category="Fashion",
                branch_country="Bangladesh",
                **platform_admin.as_command_fields(),
            ),
            asynchronous=False,
        )

        _approve(request_id, platform_admin)

        assert current_domain.repository_for(Branch).get("branch-user-1").owner_id == "user-1"
        assert current_domain.repository_for(BranchRequest).get(request_id).status == "approved"

    def test_retry_after_branch_exists_keeps_branch(self, request_id, platform_admin):
        current_domain.process(
            OpenBranch(branch_id="branch-user-1", owner_id="user-1", name="Rahim Fabrics", country="Bangladesh"),
            asynchronous=False,
        )

        _approve(request_id, platform_admin)

        assert len(current_domain.repository_for(Branch).for_owner("user-1")) == 1

    def test_open_branch_reports_creation_once(self):
        command = OpenBranch(branch_id="branch-user-1", owner_id="user-1", name="Rahim Fabrics")
        assert current_domain.process(command, asynchronous=False) is True
        assert current_domain.process(command, asynchronous=False) is False

    def test_only_platform_admin_approves(self, request_id, applicant):
        with pytest.raises(PermissionDenied):
            _approve(request_id, applicant)
        assert current_domain.repository_for(Account).get("user-1").role == "user"


class TestRejection:
    def test_rejection_has_no_side_effects(self, request_id, platform_admin):
        current_domain.process(
            RejectBranchRequest(request_id=request_id, reason="Blurry proof", **platform_admin.as_command_fields()),
            asynchronous=False,
        )

        assert current_domain.repository_for(BranchRequest).get(request_id).status == "rejected"
        assert current_domain.repository_for(Account).get("user-1").role == "user"
        assert current_domain.repository_for(Branch).for_owner("user-1") == []

    def test_rejected_request_cannot_be_approved(self, request_id, platform_admin):
        current_domain.process(
            RejectBranchRequest(request_id=request_id, **platform_admin.as_command_fields()),
            asynchronous=False,
        )
        with pytest.raises(ConflictError):
            _approve(request_id, platform_admin)
