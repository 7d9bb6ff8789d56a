"""Per-request actor context.

The identity provider authenticates callers; this core only receives the
resulting ``Actor`` and checks roles against it. Nothing reads an ambient
session.
"""

from dataclasses import dataclass
from enum import Enum

from marketplace.shared.errors import PermissionDenied

BRANCH_ID_PREFIX = "branch-"


class Role(Enum):
    USER = "user"
    BRANCH_ADMIN = "branch-admin"
    PLATFORM_ADMIN = "platform-admin"


def branch_id_for(user_id: str) -> str:
    """Deterministic branch id owned by ``user_id``."""
    return f"{BRANCH_ID_PREFIX}{user_id}"


def owner_id_for(branch_id: str) -> str:
    return str(branch_id).removeprefix(BRANCH_ID_PREFIX)


@dataclass(frozen=True)
class Actor:
    id: str
    role: str
    country: str | None = None
    branch_id: str | None = None

    @classmethod
    def from_command(cls, command) -> "Actor":
        return cls(
            id=str(command.actor_id),
            role=command.actor_role,
            branch_id=str(command.actor_branch_id) if getattr(command, "actor_branch_id", None) else None,
        )

    def as_command_fields(self) -> dict:
        return {
            "actor_id": self.id,
            "actor_role": self.role,
            "actor_branch_id": self.branch_id,
        }

    @property
    def is_platform_admin(self) -> bool:
        return self.role == Role.PLATFORM_ADMIN.value

    @property
    def is_branch_admin(self) -> bool:
        return self.role == Role.BRANCH_ADMIN.value

    @property
    def managed_branch_id(self) -> str | None:
        if not self.is_branch_admin:
            return None
        return self.branch_id or branch_id_for(self.id)

    def manages_branch(self, branch_id: str) -> bool:
        return self.is_branch_admin and self.managed_branch_id == str(branch_id)

    def require_role(self, *roles: Role) -> None:
        if self.role not in {r.value for r in roles}:
            allowed = ", ".join(r.value for r in roles)
            raise PermissionDenied(f"Role `{self.role}` cannot perform this action (requires {allowed})")

    def require_branch_or_platform(self, branch_id: str) -> None:
        """Allow the branch's own admin or any platform admin."""
        if self.is_platform_admin or self.manages_branch(branch_id):
            return
        raise PermissionDenied(f"Actor `{self.id}` cannot act on branch `{branch_id}`")
