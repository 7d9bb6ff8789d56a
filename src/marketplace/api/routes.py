"""FastAPI endpoints for the marketplace core."""

import json

from fastapi import APIRouter, Depends, Header
from protean.utils.globals import current_domain

from marketplace.api.dependencies import current_actor
from marketplace.api.schemas import (
    AdjustStockRequest,
    BranchRequestResponse,
    BranchResponse,
    CouponQuoteResponse,
    CreateCategoryRequest,
    CreateCouponRequest,
    CreateProductRequest,
    DecrementsResponse,
    DisputeResponse,
    IdResponse,
    InventoryLogResponse,
    MarkReadResponse,
    NotificationResponse,
    OrderResponse,
    PaymentResponse,
    PlaceOrderRequest,
    PreviewCouponRequest,
    ProductResponse,
    RaiseDisputeRequest,
    RegisterAccountRequest,
    RejectBranchRequestRequest,
    ResolveDisputeRequest,
    ReviewPaymentRequest,
    StatementResponse,
    StatusResponse,
    SubmitBranchRequestRequest,
    SubmitPaymentRequest,
    SuspendBranchRequest,
    UpdateCouponRequest,
    UpdateDeliveryFeeRequest,
    UpdateFinanceRequest,
    UpdateOrderStatusRequest,
    UpdateSlugRequest,
    UpdateTaxRateRequest,
    VariantInput,
)
from marketplace.catalogue.management import AddVariant, CreateCategory, CreateProduct, UpdateCategoryTaxRate
from marketplace.catalogue.product import Product
from marketplace.coupons.management import CreateCoupon, DeactivateCoupon, DeleteCoupon, UpdateCoupon
from marketplace.coupons.redemption import preview_coupon
from marketplace.disputes.handling import CloseDispute, RaiseDispute, ResolveDispute, disputes_for
from marketplace.finance.reconciler import SettlementReconciler, payments_for
from marketplace.finance.submission import ReviewFinancePayment, SubmitFinancePayment
from marketplace.identity.management import RegisterAccount, UpdateBranchFinance, UpdateDeliveryFee, UpgradePlan
from marketplace.identity.suspension import LiftSuspension, SuspendBranch
from marketplace.inventory.adjustment import AdjustStock
from marketplace.inventory.deduction import resume_order_decrements
from marketplace.inventory.log import inventory_logs_for_branch
from marketplace.notifications import get_notifier
from marketplace.onboarding.approval import ApproveBranchRequest, RejectBranchRequest
from marketplace.onboarding.branch import Branch
from marketplace.onboarding.request import BranchRequest
from marketplace.onboarding.slug import UpdateBranchSlug
from marketplace.onboarding.submission import SubmitBranchRequest
from marketplace.ordering.history import order_for, orders_for
from marketplace.ordering.placement import place_order
from marketplace.ordering.status import RemoveOrderFromHistory, UpdateOrderStatus
from marketplace.shared.actor import Actor

account_router = APIRouter(prefix="/accounts", tags=["accounts"])
branch_router = APIRouter(prefix="/branches", tags=["branches"])
catalogue_router = APIRouter(prefix="/catalogue", tags=["catalogue"])
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
dispute_router = APIRouter(prefix="/disputes", tags=["disputes"])
finance_router = APIRouter(prefix="/finance", tags=["finance"])
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------
def _order_response(order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        buyer_id=str(order.buyer_id),
        branch_id=str(order.branch_id),
        status=order.status,
        items=[
            {
                "product_id": str(i.product_id),
                "variant_id": str(i.variant_id) if i.variant_id else None,
                "name": i.name,
                "quantity": i.quantity,
                "unit_price": i.unit_price,
            }
            for i in order.lines
        ],
        total_amount=order.total_amount,
        shipping_cost=order.shipping_cost,
        tax_amount=order.tax_amount,
        tax_rate=order.tax_rate,
        discount_amount=order.discount_amount,
        final_amount=order.final_amount,
        currency=order.currency,
        coupon_code=order.coupon_code,
        payment_method=order.payment_method,
        status_history=[
            {"status": c.status, "timestamp": c.timestamp, "updated_by": c.updated_by} for c in order.history
        ],
        created_at=order.created_at,
    )


def _product_response(product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        branch_id=str(product.branch_id),
        name=product.name,
        category=product.category,
        price=product.price,
        stock=product.stock,
        variants=[
            {"id": str(v.id), "color": v.color, "size": v.size, "price": v.price, "stock": v.stock}
            for v in product.variants
        ],
    )


def _branch_response(branch) -> BranchResponse:
    return BranchResponse(
        id=str(branch.id),
        owner_id=str(branch.owner_id),
        name=branch.name,
        country=branch.country,
        status=branch.status,
        shop_category=branch.shop_category,
        description=branch.description,
        slug=branch.slug,
        rating=branch.rating or 0.0,
        review_count=branch.review_count or 0,
    )


def _request_response(request) -> BranchRequestResponse:
    return BranchRequestResponse(
        id=str(request.id),
        user_id=str(request.user_id),
        shop_name=request.shop_name,
        country=request.country,
        status=request.status,
        created_at=request.created_at,
    )


def _dispute_response(dispute) -> DisputeResponse:
    return DisputeResponse(
        id=str(dispute.id),
        order_id=str(dispute.order_id),
        buyer_id=str(dispute.buyer_id),
        branch_id=str(dispute.branch_id),
        reason=dispute.reason,
        description=dispute.description,
        status=dispute.status,
        resolution=dispute.resolution,
        resolved_at=dispute.resolved_at,
        created_at=dispute.created_at,
    )


def _payment_response(payment) -> PaymentResponse:
    return PaymentResponse(
        id=str(payment.id),
        branch_id=str(payment.branch_id),
        amount=payment.amount,
        transaction_reference=payment.transaction_reference,
        payment_type=payment.payment_type,
        status=payment.status,
        message=payment.message,
        period=payment.period,
        created_at=payment.created_at,
    )


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
@account_router.post("", status_code=201, response_model=IdResponse)
async def register_account(body: RegisterAccountRequest) -> IdResponse:
    command = RegisterAccount(user_id=body.user_id, name=body.name, email=body.email, country=body.country)
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=str(result))


@account_router.post("/{user_id}/upgrade", response_model=StatusResponse)
async def upgrade_plan(user_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(UpgradePlan(user_id=user_id, **actor.as_command_fields()), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Branches and onboarding
# ---------------------------------------------------------------------------
@branch_router.post("/requests", status_code=201, response_model=IdResponse)
async def submit_branch_request(
    body: SubmitBranchRequestRequest, actor: Actor = Depends(current_actor)
) -> IdResponse:
    command = SubmitBranchRequest(**body.model_dump(), **actor.as_command_fields())
    result = current_domain.process(command, asynchronous=False)
    return IdResponse(id=result)


@branch_router.get("/requests", response_model=list[BranchRequestResponse])
async def list_branch_requests(actor: Actor = Depends(current_actor)) -> list[BranchRequestResponse]:
    repo = current_domain.repository_for(BranchRequest)
    requests = repo.everything() if actor.is_platform_admin else repo.for_user(actor.id)
    return [_request_response(r) for r in requests]


@branch_router.post("/requests/{request_id}/approve", response_model=IdResponse)
async def approve_branch_request(request_id: str, actor: Actor = Depends(current_actor)) -> IdResponse:
    command = ApproveBranchRequest(request_id=request_id, **actor.as_command_fields())
    branch_id = current_domain.process(command, asynchronous=False)
    return IdResponse(id=branch_id)


@branch_router.post("/requests/{request_id}/reject", response_model=StatusResponse)
async def reject_branch_request(
    request_id: str, body: RejectBranchRequestRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = RejectBranchRequest(request_id=request_id, reason=body.reason, **actor.as_command_fields())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@branch_router.get("/{branch_id}", response_model=BranchResponse)
async def get_branch(branch_id: str) -> BranchResponse:
    return _branch_response(current_domain.repository_for(Branch).get(branch_id))


@branch_router.put("/{branch_id}/slug", response_model=StatusResponse)
async def update_branch_slug(
    branch_id: str, body: UpdateSlugRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = UpdateBranchSlug(branch_id=branch_id, slug=body.slug, **actor.as_command_fields())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@branch_router.put("/{branch_id}/finance", response_model=StatusResponse)
async def update_branch_finance(
    branch_id: str, body: UpdateFinanceRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = UpdateBranchFinance(
        branch_id=branch_id,
        tax_rate=body.tax_rate,
        monthly_subscription_fee=body.monthly_subscription_fee,
        **actor.as_command_fields(),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@branch_router.put("/{branch_id}/delivery-fee", response_model=StatusResponse)
async def update_delivery_fee(
    branch_id: str, body: UpdateDeliveryFeeRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = UpdateDeliveryFee(branch_id=branch_id, delivery_fee=body.delivery_fee, **actor.as_command_fields())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@branch_router.post("/{branch_id}/suspension", response_model=StatusResponse)
async def suspend_branch(
    branch_id: str, body: SuspendBranchRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = SuspendBranch(branch_id=branch_id, days=body.days, reason=body.reason, **actor.as_command_fields())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@branch_router.delete("/{branch_id}/suspension", response_model=StatusResponse)
async def lift_suspension(branch_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(LiftSuspension(branch_id=branch_id, **actor.as_command_fields()), asynchronous=False)
    return StatusResponse()


@branch_router.get("/{branch_id}/inventory-logs", response_model=list[InventoryLogResponse])
async def list_inventory_logs(
    branch_id: str, limit: int | None = None, actor: Actor = Depends(current_actor)
) -> list[InventoryLogResponse]:
    actor.require_branch_or_platform(branch_id)
    return [
        InventoryLogResponse(
            id=str(e.id),
            product_id=str(e.product_id),
            variant_id=str(e.variant_id) if e.variant_id else None,
            product_name=e.product_name,
            change_amount=e.change_amount,
            new_stock=e.new_stock,
            reason=e.reason,
            performed_by=e.performed_by,
            created_at=e.created_at,
        )
        for e in inventory_logs_for_branch(branch_id, limit)
    ]


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
@catalogue_router.post("/categories", status_code=201, response_model=IdResponse)
async def create_category(body: CreateCategoryRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    command = CreateCategory(name=body.name, tax_rate=body.tax_rate, **actor.as_command_fields())
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@catalogue_router.put("/categories/{category_id}/tax-rate", response_model=StatusResponse)
async def update_category_tax_rate(
    category_id: str, body: UpdateTaxRateRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = UpdateCategoryTaxRate(category_id=category_id, tax_rate=body.tax_rate, **actor.as_command_fields())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@catalogue_router.post("/products", status_code=201, response_model=IdResponse)
async def create_product(body: CreateProductRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    command = CreateProduct(
        branch_id=body.branch_id,
        name=body.name,
        category=body.category,
        price=body.price,
        stock=body.stock,
        variants=json.dumps([v.model_dump() for v in body.variants]) if body.variants else None,
        **actor.as_command_fields(),
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@catalogue_router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return _product_response(current_domain.repository_for(Product).get(product_id))


@catalogue_router.post("/products/{product_id}/variants", status_code=201, response_model=IdResponse)
async def add_variant(product_id: str, body: VariantInput, actor: Actor = Depends(current_actor)) -> IdResponse:
    command = AddVariant(product_id=product_id, **body.model_dump(), **actor.as_command_fields())
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@catalogue_router.post("/products/{product_id}/stock-adjustments", response_model=ProductResponse)
async def adjust_stock(
    product_id: str, body: AdjustStockRequest, actor: Actor = Depends(current_actor)
) -> ProductResponse:
    command = AdjustStock(
        product_id=product_id,
        variant_id=body.variant_id,
        change_amount=body.change_amount,
        reason=body.reason,
        **actor.as_command_fields(),
    )
    current_domain.process(command, asynchronous=False)
    return _product_response(current_domain.repository_for(Product).get(product_id))


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------
@coupon_router.post("", status_code=201, response_model=IdResponse)
async def create_coupon(body: CreateCouponRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    command = CreateCoupon(**body.model_dump(), **actor.as_command_fields())
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@coupon_router.put("/{coupon_id}", response_model=StatusResponse)
async def update_coupon(
    coupon_id: str, body: UpdateCouponRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = UpdateCoupon(coupon_id=coupon_id, **body.model_dump(), **actor.as_command_fields())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@coupon_router.post("/{coupon_id}/deactivate", response_model=StatusResponse)
async def deactivate_coupon(coupon_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(DeactivateCoupon(coupon_id=coupon_id, **actor.as_command_fields()), asynchronous=False)
    return StatusResponse()


@coupon_router.delete("/{coupon_id}", response_model=StatusResponse)
async def delete_coupon(coupon_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(DeleteCoupon(coupon_id=coupon_id, **actor.as_command_fields()), asynchronous=False)
    return StatusResponse()


@coupon_router.post("/preview", response_model=CouponQuoteResponse)
async def preview(body: PreviewCouponRequest, actor: Actor = Depends(current_actor)) -> CouponQuoteResponse:
    quote = preview_coupon(body.code, body.branch_id, actor.id, body.subtotal)
    return CouponQuoteResponse(
        is_valid=quote.is_valid,
        discount=quote.discount,
        message=quote.message,
        reason=quote.reason,
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(
    body: PlaceOrderRequest,
    actor: Actor = Depends(current_actor),
    idempotency_key: str | None = Header(default=None),
) -> OrderResponse:
    order = place_order(
        actor,
        branch_id=body.branch_id,
        items=[i.model_dump() for i in body.items],
        shipping_info=body.shipping_info.model_dump(),
        payment_method=body.payment_method,
        payment_details=body.payment_details.model_dump(exclude_none=True) if body.payment_details else None,
        coupon_code=body.coupon_code,
        order_id=idempotency_key,
    )
    return _order_response(order)


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(actor: Actor = Depends(current_actor)) -> list[OrderResponse]:
    return [_order_response(o) for o in orders_for(actor)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    return _order_response(order_for(actor, order_id))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, actor: Actor = Depends(current_actor)
) -> OrderResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status, **actor.as_command_fields())
    current_domain.process(command, asynchronous=False)
    return _order_response(order_for(actor, order_id))


@order_router.delete("/{order_id}/history", response_model=StatusResponse)
async def remove_from_history(order_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    command = RemoveOrderFromHistory(order_id=order_id, **actor.as_command_fields())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/resume-decrements", response_model=DecrementsResponse)
async def resume_decrements(order_id: str, actor: Actor = Depends(current_actor)) -> DecrementsResponse:
    order = order_for(actor, order_id)
    actor.require_branch_or_platform(order.branch_id)
    applied = resume_order_decrements(order_id)
    return DecrementsResponse(order_id=order_id, applied=applied)


# ---------------------------------------------------------------------------
# Disputes
# ---------------------------------------------------------------------------
@dispute_router.post("", status_code=201, response_model=IdResponse)
async def raise_dispute(body: RaiseDisputeRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    command = RaiseDispute(
        order_id=body.order_id,
        reason=body.reason,
        description=body.description,
        **actor.as_command_fields(),
    )
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@dispute_router.get("", response_model=list[DisputeResponse])
async def list_disputes(actor: Actor = Depends(current_actor)) -> list[DisputeResponse]:
    return [_dispute_response(d) for d in disputes_for(actor)]


@dispute_router.post("/{dispute_id}/resolve", response_model=StatusResponse)
async def resolve_dispute(
    dispute_id: str, body: ResolveDisputeRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = ResolveDispute(dispute_id=dispute_id, resolution=body.resolution, **actor.as_command_fields())
    changed = current_domain.process(command, asynchronous=False)
    return StatusResponse(status="resolved" if changed else "unchanged")


@dispute_router.post("/{dispute_id}/close", response_model=StatusResponse)
async def close_dispute(dispute_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    current_domain.process(CloseDispute(dispute_id=dispute_id, **actor.as_command_fields()), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Finance
# ---------------------------------------------------------------------------
@finance_router.post("/payments", status_code=201, response_model=IdResponse)
async def submit_payment(body: SubmitPaymentRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    command = SubmitFinancePayment(**body.model_dump(), **actor.as_command_fields())
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@finance_router.get("/payments", response_model=list[PaymentResponse])
async def list_payments(actor: Actor = Depends(current_actor)) -> list[PaymentResponse]:
    return [_payment_response(p) for p in payments_for(actor)]


@finance_router.post("/payments/{payment_id}/review", response_model=StatusResponse)
async def review_payment(
    payment_id: str, body: ReviewPaymentRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    command = ReviewFinancePayment(payment_id=payment_id, decision=body.decision, **actor.as_command_fields())
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@finance_router.get("/branches/{branch_id}/statement", response_model=StatementResponse)
async def branch_statement(branch_id: str, actor: Actor = Depends(current_actor)) -> StatementResponse:
    actor.require_branch_or_platform(branch_id)
    statement = SettlementReconciler().statement(branch_id)
    return StatementResponse(
        branch_id=statement.branch_id,
        as_of=statement.as_of,
        accrued_tax=statement.accrued_tax,
        paid_tax=statement.paid_tax,
        outstanding_tax=statement.outstanding_tax,
        accrued_subscription=statement.accrued_subscription,
        paid_subscription=statement.paid_subscription,
        outstanding_subscription=statement.outstanding_subscription,
        total_outstanding=statement.total_outstanding,
    )


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
@notification_router.get("", response_model=list[NotificationResponse])
async def list_notifications(actor: Actor = Depends(current_actor)) -> list[NotificationResponse]:
    return [
        NotificationResponse(
            id=n["id"],
            title=n["title"],
            message=n["message"],
            kind=n["kind"],
            is_read=n["is_read"],
            created_at=n["created_at"],
        )
        for n in get_notifier().list_by_user(actor.id)
    ]


@notification_router.post("/read-all", response_model=MarkReadResponse)
async def mark_all_read(actor: Actor = Depends(current_actor)) -> MarkReadResponse:
    return MarkReadResponse(marked=get_notifier().mark_all_read(actor.id))


ROUTERS = [
    account_router,
    branch_router,
    catalogue_router,
    coupon_router,
    order_router,
    dispute_router,
    finance_router,
    notification_router,
]
