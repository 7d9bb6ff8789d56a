"""Storefront slug: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.onboarding.branch import Branch
from marketplace.shared.actor import Actor
from marketplace.shared.errors import ConflictError


@marketplace.command(part_of="Branch")
class UpdateBranchSlug:
    branch_id: Identifier(required=True)
    slug: String(required=True, max_length=100)
    actor_id: Identifier(required=True)
    actor_role: String(required=True)
    actor_branch_id: Identifier()


@marketplace.command_handler(part_of=Branch)
class BranchSlugHandler:
    @handle(UpdateBranchSlug)
    def update_branch_slug(self, command):
        Actor.from_command(command).require_branch_or_platform(command.branch_id)

        repo = current_domain.repository_for(Branch)
        branch = repo.get(command.branch_id)

        taken_by = repo.find_by_slug(command.slug.strip())
        if taken_by is not None and str(taken_by.id) != str(branch.id):
            raise ConflictError({"slug": [f"Slug `{command.slug}` is already taken"]})

        if branch.change_slug(command.slug):
            repo.add(branch)
        return branch.slug
