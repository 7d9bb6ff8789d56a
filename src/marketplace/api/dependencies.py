"""Request-scoped actor context built from identity-provider headers."""

from fastapi import Header, HTTPException

from marketplace.countries import normalize_country
from marketplace.shared.actor import Actor, Role
from marketplace.utils.logging import add_context

_ROLES = {r.value for r in Role}


def current_actor(
    x_actor_id: str = Header(default=""),
    x_actor_role: str = Header(default=""),
    x_actor_branch: str = Header(default=""),
    x_actor_country: str = Header(default=""),
) -> Actor:
    if not x_actor_id:
        raise HTTPException(status_code=401, detail="Missing actor identity")
    if x_actor_role not in _ROLES:
        raise HTTPException(status_code=401, detail=f"Unknown actor role `{x_actor_role}`")

    actor = Actor(
        id=x_actor_id,
        role=x_actor_role,
        country=normalize_country(x_actor_country) or None,
        branch_id=x_actor_branch or None,
    )
    add_context(actor_id=actor.id, actor_role=actor.role)
    return actor
