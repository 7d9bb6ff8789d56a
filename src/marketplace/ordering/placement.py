"""Checkout: turning a cart into a pending order.

``place_order`` is a plain orchestration function rather than a command
handler: every step that writes is its own command, so each lands as its
own document write, in this order:

    1. validate the request          (no writes)
    2. branch open, seller active    (no writes)
    3. price lines from catalogue    (no writes)
    4. payment method allowed        (no writes)
    5. stock covers every line       (no writes)
    6. draft the order               (no writes)
    7. RedeemCoupon                  (coupon write)
    8. CreateOrder                   (order write, tax computed here)
    9. DeductStock per line          (product write + ledger append each)
    10. notify the seller

Anything that fails in steps 1-7 leaves the order unwritten and stock
untouched. If step 8 fails after the coupon was counted, checking out again
with the same ``order_id`` reuses that redemption. A failure in step 9 raises
``PartialApplicationError`` and leaves the order pending;
``resume_order_decrements`` finishes it.
"""

import json
from uuid import uuid4

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.countries import CASH_ON_DELIVERY, get_country_config
from marketplace.coupons.coupon import normalize_code
from marketplace.domain import marketplace
from marketplace.finance.tax import TaxContext
from marketplace.identity.account import Account
from marketplace.inventory.deduction import apply_order_decrements, check_availability
from marketplace.notifications import notify
from marketplace.notifications.port import NotificationKind
from marketplace.onboarding.branch import Branch, BranchStatus
from marketplace.ordering.order import Order
from marketplace.shared.actor import Actor, owner_id_for
from marketplace.shared.errors import ConflictError, PermissionDenied
from marketplace.shared.settings import setting

logger = structlog.get_logger(__name__)

SHIPPING_FIELDS = ("full_name", "address", "city", "zip", "phone")


@marketplace.command(part_of="Order")
class CreateOrder:
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    branch_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of priced line dicts
    shipping_info = Text(required=True)  # JSON: ShippingInfo dict
    shipping_cost = Float(default=0.0, min_value=0.0)
    discount_amount = Float(default=0.0, min_value=0.0)
    coupon_code = String(max_length=50)
    payment_method = String(max_length=50)
    payment_details = Text()  # JSON
    currency = String(max_length=3, default="USD")


@marketplace.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        order = draft_from(command)

        tax = TaxContext.for_branch(command.branch_id)
        order.finalize(
            tax_amount=tax.accrue(order),
            tax_rate=tax.branch_tax_rate if tax.uses_branch_rate else None,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)


def draft_from(command: CreateOrder) -> Order:
    """Build the unsaved order a ``CreateOrder`` describes."""
    return Order.draft(
        order_id=command.order_id,
        buyer_id=command.buyer_id,
        branch_id=command.branch_id,
        lines=json.loads(command.items),
        shipping_info=json.loads(command.shipping_info),
        shipping_cost=command.shipping_cost,
        discount_amount=command.discount_amount,
        coupon_code=command.coupon_code,
        payment_method=command.payment_method,
        payment_details=json.loads(command.payment_details) if command.payment_details else None,
        currency=command.currency,
    )


def _validate_request(actor: Actor, items: list[dict], shipping_info: dict | None) -> None:
    if not actor or not actor.id:
        raise PermissionDenied("Checkout requires an authenticated buyer")
    if not items:
        raise ValidationError({"items": ["An order needs at least one item"]})
    for item in items:
        if not item.get("product_id"):
            raise ValidationError({"items": ["Every item needs a product_id"]})
        if int(item.get("quantity") or 0) < 1:
            raise ValidationError({"items": ["Quantities must be at least 1"]})

    missing = [f for f in SHIPPING_FIELDS if not (shipping_info or {}).get(f)]
    if missing:
        raise ValidationError({"shipping_info": [f"Missing shipping fields: {', '.join(missing)}"]})


def _open_branch(branch_id) -> tuple[Branch, Account]:
    branch = current_domain.repository_for(Branch).get(branch_id)
    if branch.status != BranchStatus.APPROVED.value:
        raise ConflictError({"branch_id": [f"Branch `{branch_id}` is not accepting orders"]})

    owner = current_domain.repository_for(Account).get(owner_id_for(branch_id))
    if owner.is_suspended():
        raise ConflictError({"branch_id": ["This shop is temporarily suspended and cannot accept orders"]})
    return branch, owner


def _placed_order(order_id: str, actor: Actor) -> Order | None:
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        return None
    if str(order.buyer_id) != str(actor.id):
        raise ConflictError({"order_id": [f"Order `{order_id}` belongs to another checkout"]})
    return order


def _price_lines(branch_id, items: list[dict]) -> list[dict]:
    repo = current_domain.repository_for(Product)
    lines = []
    for line_no, item in enumerate(items):
        product = repo.get(item["product_id"])
        if str(product.branch_id) != str(branch_id):
            raise ValidationError({"items": [f"Product {product.id} is not sold by branch {branch_id}"]})

        variant_id = item.get("variant_id") or None
        lines.append(
            {
                "line_no": line_no,
                "product_id": str(product.id),
                "variant_id": str(variant_id) if variant_id else None,
                "name": product.label_for(variant_id),
                "quantity": int(item["quantity"]),
                "unit_price": product.price_for(variant_id),
            }
        )
    return lines


def _check_payment(country: str, payment_method: str, payment_details: dict) -> str:
    """Validate the payment choice and return the currency to charge in."""
    config = get_country_config().get(country) if country else None
    currency = config.currency if config else setting("DEFAULT_CURRENCY", "USD")

    if payment_method == CASH_ON_DELIVERY:
        if config is not None and config.payment_methods and config.method(CASH_ON_DELIVERY) is None:
            raise ValidationError({"payment_method": ["Cash on delivery is not available in this country"]})
        return currency

    if config is not None and config.method(payment_method) is None:
        raise ValidationError({"payment_method": [f"Payment method `{payment_method}` is not available here"]})
    if not (payment_details or {}).get("trx_id"):
        raise ValidationError({"payment_details": ["A transaction reference is required for this payment method"]})
    return currency


def place_order(
    actor: Actor,
    branch_id,
    items: list[dict],
    shipping_info: dict,
    payment_method: str = CASH_ON_DELIVERY,
    payment_details: dict | None = None,
    coupon_code: str | None = None,
    order_id: str | None = None,
) -> Order:
    """Check out ``items`` from ``branch_id`` for ``actor``. Returns the persisted order.

    ``order_id`` doubles as an idempotency key. Retrying a failed checkout with
    the same id reuses its coupon redemption instead of counting a second use,
    and retrying one that already produced an order finishes its stock
    decrements and returns it.
    """
    _validate_request(actor, items, shipping_info)
    order_id = str(order_id or uuid4())
    previous = _placed_order(order_id, actor)
    if previous is not None:
        apply_order_decrements(previous)
        return previous

    branch, owner = _open_branch(branch_id)
    lines = _price_lines(branch_id, items)
    currency = _check_payment(branch.country, payment_method, payment_details)
    check_availability(lines)

    subtotal = sum(line["unit_price"] * line["quantity"] for line in lines)
    code = normalize_code(coupon_code) if coupon_code else None

    def order_command(discount: float) -> CreateOrder:
        return CreateOrder(
            order_id=order_id,
            buyer_id=actor.id,
            branch_id=branch_id,
            items=json.dumps(lines),
            shipping_info=json.dumps({f: shipping_info[f] for f in SHIPPING_FIELDS}),
            shipping_cost=owner.delivery_fee or 0.0,
            discount_amount=discount,
            coupon_code=code,
            payment_method=payment_method,
            payment_details=json.dumps(payment_details) if payment_details else None,
            currency=currency,
        )

    # Raises ValidationError for anything the order would refuse, before the coupon is counted
    draft_from(order_command(0.0))

    discount = 0.0
    if code:
        from marketplace.coupons.redemption import RedeemCoupon

        discount = current_domain.process(
            RedeemCoupon(
                code=code,
                branch_id=branch_id,
                buyer_id=actor.id,
                order_id=order_id,
                subtotal=subtotal,
            ),
            asynchronous=False,
        )

    current_domain.process(order_command(discount), asynchronous=False)

    order = current_domain.repository_for(Order).get(order_id)
    apply_order_decrements(order)

    logger.info(
        "Order placed",
        order_id=order_id,
        buyer_id=actor.id,
        branch_id=str(branch_id),
        final_amount=order.final_amount,
        coupon_code=code,
    )
    notify(
        owner.id,
        "New Order Received",
        f"You have received a new order #{order.reference} for {order.currency} {order.final_amount:.2f}.",
        NotificationKind.ORDER.value,
    )
    return order
