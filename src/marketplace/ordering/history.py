"""Order listings, scoped to what the actor may see."""

from protean.utils.globals import current_domain

from marketplace.ordering.order import Order
from marketplace.shared.actor import Actor
from marketplace.shared.errors import PermissionDenied


def orders_for(actor: Actor) -> list[Order]:
    """Platform admins see every order, branch admins their branch's, users their own."""
    repo = current_domain.repository_for(Order)
    if actor.is_platform_admin:
        return repo.everything()
    if actor.is_branch_admin:
        return repo.for_branch(actor.managed_branch_id)
    return repo.for_buyer(actor.id)


def order_for(actor: Actor, order_id) -> Order:
    order = current_domain.repository_for(Order).get(order_id)
    if actor.is_platform_admin or actor.manages_branch(order.branch_id) or str(order.buyer_id) == actor.id:
        return order
    raise PermissionDenied(f"Actor `{actor.id}` cannot view order {order_id}")
