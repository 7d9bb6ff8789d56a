"""Shared BDD fixtures and step definitions for the Onboarding context."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from marketplace.identity.account import Account
from marketplace.onboarding.branch import Branch
from marketplace.onboarding.submission import SubmitBranchRequest
from marketplace.shared.actor import branch_id_for


@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@given(parsers.cfparse('"{user_id}" has applied to open "{shop_name}"'), target_fixture="request_id")
def applied(register_user, user_id, shop_name):
    applicant = register_user(user_id)
    return current_domain.process(
        SubmitBranchRequest(
            shop_name=shop_name,
            shop_category="Fashion",
            country="Bangladesh",
            payment_proof_url="https://files.example.com/proof.png",
            **applicant.as_command_fields(),
        ),
        asynchronous=False,
    )


@then(parsers.cfparse('"{user_id}" is a branch admin of their own branch'))
def is_branch_admin(user_id):
    account = current_domain.repository_for(Account).get(user_id)
    assert account.role == "branch-admin"
    assert account.branch_id == branch_id_for(user_id)


@then(parsers.cfparse('"{user_id}" owns exactly one branch named "{shop_name}"'))
def one_branch(user_id, shop_name):
    branches = current_domain.repository_for(Branch).for_owner(user_id)
    assert [b.name for b in branches] == [shop_name]


@then(parsers.cfparse('"{user_id}" received {count:d} "{title}" notification'))
def received(notifier, user_id, count, title):
    assert [n["title"] for n in notifier.for_user(user_id)].count(title) == count
