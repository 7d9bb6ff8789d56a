"""Branch aggregate: a seller's storefront.

A branch's id is derived from its owner's user id (``branch-<user_id>``), so
the onboarding saga can recreate or refresh it without ever producing a
second branch for the same seller.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from marketplace.countries import normalize_country
from marketplace.domain import marketplace

DEFAULT_DESCRIPTION = "New verified seller."

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


class BranchStatus(Enum):
    APPROVED = "approved"
    CLOSED = "closed"


@marketplace.aggregate
class Branch:
    owner_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    country: String(max_length=100)
    status: String(choices=BranchStatus, default=BranchStatus.APPROVED.value)
    shop_category: String(max_length=100)
    description: Text()
    slug: String(max_length=100)
    rating: Float(default=0.0, min_value=0.0)
    review_count: Integer(default=0, min_value=0)
    opened_at: DateTime()

    @classmethod
    def open(cls, branch_id, owner_id, name, country=None, shop_category=None, description=None):
        from marketplace.onboarding.events import BranchOpened

        now = datetime.now(UTC)
        branch = cls(
            id=str(branch_id),
            owner_id=owner_id,
            name=name,
            country=normalize_country(country) or None,
            shop_category=shop_category,
            description=description or DEFAULT_DESCRIPTION,
            rating=0.0,
            review_count=0,
            opened_at=now,
        )
        branch.raise_(
            BranchOpened(
                branch_id=branch.id,
                owner_id=str(owner_id),
                name=name,
                country=branch.country,
                opened_at=now,
            )
        )
        return branch

    def refresh(self, name, country=None, shop_category=None, description=None) -> bool:
        """Bring shop details in line with an approved request. Returns False when nothing changed."""
        details = {
            "name": name,
            "country": normalize_country(country) or None,
            "shop_category": shop_category,
            "description": description or DEFAULT_DESCRIPTION,
        }
        changed = {k: v for k, v in details.items() if getattr(self, k) != v}
        for field_name, value in changed.items():
            setattr(self, field_name, value)
        return bool(changed)

    def change_slug(self, slug: str) -> bool:
        from marketplace.onboarding.events import BranchSlugChanged

        slug = (slug or "").strip()
        if not SLUG_PATTERN.match(slug):
            raise ValidationError({"slug": ["Slug may only contain lowercase letters, digits and hyphens"]})
        if slug == self.slug:
            return False

        previous = self.slug
        self.slug = slug
        self.raise_(BranchSlugChanged(branch_id=self.id, previous_slug=previous, new_slug=slug))
        return True


@marketplace.repository(part_of=Branch)
class BranchRepository:
    def find_by_slug(self, slug: str) -> Branch | None:
        results = self._dao.query.filter(slug=slug).limit(None).all().items
        return results[0] if results else None

    def for_owner(self, owner_id) -> list[Branch]:
        return self._dao.query.filter(owner_id=str(owner_id)).limit(None).all().items
