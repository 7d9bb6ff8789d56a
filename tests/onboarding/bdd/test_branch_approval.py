"""BDD tests for shop application approval and its retries."""

from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

from marketplace.identity.management import PromoteToBranchAdmin
from marketplace.onboarding.approval import ApproveBranchRequest
from marketplace.onboarding.branch import Branch
from marketplace.shared.actor import Actor, branch_id_for
from marketplace.shared.errors import PermissionDenied

scenarios("features/branch_approval.feature")


def _approve(request_id, actor):
    return current_domain.process(
        ApproveBranchRequest(request_id=request_id, **actor.as_command_fields()),
        asynchronous=False,
    )


@given("the platform admin approved the application")
def approved(request_id, platform_admin):
    _approve(request_id, platform_admin)


@given(parsers.cfparse('"{user_id}" was promoted but the branch was never opened'))
def promoted_only(user_id, platform_admin):
    current_domain.process(
        PromoteToBranchAdmin(
            user_id=user_id,
            branch_id=branch_id_for(user_id),
            shop_category="Fashion",
            branch_country="Bangladesh",
            **platform_admin.as_command_fields(),
        ),
        asynchronous=False,
    )


@when("the platform admin approves the application")
def approve(request_id, platform_admin):
    _approve(request_id, platform_admin)


@when(parsers.cfparse('"{user_id}" tries to approve the application'))
def approve_as(request_id, user_id, error):
    try:
        _approve(request_id, Actor(id=user_id, role="user"))
    except PermissionDenied as exc:
        error["exc"] = exc


@then("the approval is refused")
def refused(error):
    assert isinstance(error["exc"], PermissionDenied)


@then(parsers.cfparse('"{user_id}" owns no branch'))
def no_branch(user_id):
    assert current_domain.repository_for(Branch).for_owner(user_id) == []
