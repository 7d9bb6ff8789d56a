"""Pydantic request/response schemas for the marketplace API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Shared ---


class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


# --- Accounts ---


class RegisterAccountRequest(BaseModel):
    user_id: str = Field(..., max_length=255)
    name: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=254)
    country: str | None = Field(None, max_length=100)


# --- Branches / onboarding ---


class SubmitBranchRequestRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shop_name": "Dhaka Threads",
                    "shop_category": "Fashion",
                    "country": "Bangladesh",
                    "payment_proof_url": "https://files.example.com/proof/123.png",
                    "transaction_reference": "TRX-88812",
                }
            ]
        }
    }

    shop_name: str = Field(..., max_length=255)
    shop_category: str | None = Field(None, max_length=100)
    description: str | None = None
    country: str = Field(..., max_length=100)
    payment_proof_url: str | None = Field(None, max_length=2048)
    transaction_reference: str | None = Field(None, max_length=255)
    user_name: str | None = Field(None, max_length=255)
    user_email: str | None = Field(None, max_length=254)


class RejectBranchRequestRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class BranchRequestResponse(BaseModel):
    id: str
    user_id: str
    shop_name: str | None = None
    country: str
    status: str
    created_at: datetime | None = None


class BranchResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    country: str | None = None
    status: str
    shop_category: str | None = None
    description: str | None = None
    slug: str | None = None
    rating: float = 0.0
    review_count: int = 0


class UpdateSlugRequest(BaseModel):
    slug: str = Field(..., max_length=100)


class UpdateFinanceRequest(BaseModel):
    tax_rate: float | None = Field(None, ge=0)
    monthly_subscription_fee: float | None = Field(None, ge=0)


class UpdateDeliveryFeeRequest(BaseModel):
    delivery_fee: float = Field(..., ge=0)


class SuspendBranchRequest(BaseModel):
    days: int = Field(..., ge=1)
    reason: str = Field(..., max_length=500)


class InventoryLogResponse(BaseModel):
    id: str
    product_id: str
    variant_id: str | None = None
    product_name: str
    change_amount: int
    new_stock: int
    reason: str
    performed_by: str
    created_at: datetime | None = None


# --- Catalogue ---


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., max_length=100)
    tax_rate: float = Field(0.0, ge=0)


class UpdateTaxRateRequest(BaseModel):
    tax_rate: float = Field(..., ge=0)


class VariantInput(BaseModel):
    color: str | None = Field(None, max_length=50)
    size: str | None = Field(None, max_length=50)
    price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)


class CreateProductRequest(BaseModel):
    branch_id: str
    name: str = Field(..., max_length=255)
    category: str | None = Field(None, max_length=100)
    price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    variants: list[VariantInput] = Field(default_factory=list)


class AdjustStockRequest(BaseModel):
    change_amount: int
    reason: str = Field(..., max_length=255)
    variant_id: str | None = None


class VariantResponse(BaseModel):
    id: str
    color: str | None = None
    size: str | None = None
    price: float
    stock: int


class ProductResponse(BaseModel):
    id: str
    branch_id: str
    name: str
    category: str | None = None
    price: float
    stock: int
    variants: list[VariantResponse] = Field(default_factory=list)


# --- Coupons ---


class CreateCouponRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "SAVE10",
                    "branch_id": "branch-u-100",
                    "discount_type": "percentage",
                    "value": 10,
                    "min_order_amount": 500,
                    "usage_limit": 100,
                }
            ]
        }
    }

    code: str = Field(..., max_length=50)
    branch_id: str
    discount_type: str = Field("percentage", pattern="^(percentage|fixed)$")
    value: float = Field(..., ge=0)
    min_order_amount: float = Field(0.0, ge=0)
    expiry_date: datetime | None = None
    usage_limit: int | None = Field(None, ge=0)


class UpdateCouponRequest(BaseModel):
    value: float | None = Field(None, ge=0)
    min_order_amount: float | None = Field(None, ge=0)
    expiry_date: datetime | None = None
    usage_limit: int | None = Field(None, ge=0)
    is_active: bool | None = None


class PreviewCouponRequest(BaseModel):
    code: str = Field(..., max_length=50)
    branch_id: str
    subtotal: float = Field(..., ge=0)


class CouponQuoteResponse(BaseModel):
    is_valid: bool
    discount: float
    message: str
    reason: str | None = None


# --- Orders ---


class OrderLineInput(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(..., ge=1)


class ShippingInfoInput(BaseModel):
    full_name: str = Field(..., max_length=255)
    address: str = Field(..., max_length=500)
    city: str = Field(..., max_length=100)
    zip: str = Field(..., max_length=20)
    phone: str = Field(..., max_length=30)


class PaymentDetailsInput(BaseModel):
    trx_id: str | None = Field(None, max_length=255)
    screenshot_url: str | None = Field(None, max_length=2048)
    account_title: str | None = Field(None, max_length=255)
    account_number: str | None = Field(None, max_length=100)


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "branch_id": "branch-u-100",
                    "items": [{"product_id": "p-1", "quantity": 2}],
                    "shipping_info": {
                        "full_name": "Rahim Uddin",
                        "address": "House 12, Road 4",
                        "city": "Dhaka",
                        "zip": "1205",
                        "phone": "+8801700000000",
                    },
                    "payment_method": "cod",
                    "coupon_code": "SAVE10",
                }
            ]
        }
    }

    branch_id: str
    items: list[OrderLineInput] = Field(..., min_length=1)
    shipping_info: ShippingInfoInput
    payment_method: str = Field("cod", max_length=50)
    payment_details: PaymentDetailsInput | None = None
    coupon_code: str | None = Field(None, max_length=50)


class UpdateOrderStatusRequest(BaseModel):
    status: str = Field(..., pattern="^(pending|completed|cancelled)$")


class OrderItemResponse(BaseModel):
    product_id: str
    variant_id: str | None = None
    name: str
    quantity: int
    unit_price: float


class StatusChangeResponse(BaseModel):
    status: str
    timestamp: datetime
    updated_by: str


class OrderResponse(BaseModel):
    id: str
    buyer_id: str
    branch_id: str
    status: str
    items: list[OrderItemResponse]
    total_amount: float
    shipping_cost: float
    tax_amount: float
    tax_rate: float | None = None
    discount_amount: float
    final_amount: float
    currency: str
    coupon_code: str | None = None
    payment_method: str | None = None
    status_history: list[StatusChangeResponse] = Field(default_factory=list)
    created_at: datetime | None = None


class DecrementsResponse(BaseModel):
    order_id: str
    applied: list[dict]


# --- Disputes ---


class RaiseDisputeRequest(BaseModel):
    order_id: str
    reason: str = Field(..., max_length=255)
    description: str | None = None


class ResolveDisputeRequest(BaseModel):
    resolution: str


class DisputeResponse(BaseModel):
    id: str
    order_id: str
    buyer_id: str
    branch_id: str
    reason: str
    description: str | None = None
    status: str
    resolution: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None


# --- Finance ---


class SubmitPaymentRequest(BaseModel):
    branch_id: str
    amount: float = Field(..., gt=0)
    transaction_reference: str = Field(..., max_length=255)
    payment_type: str = Field(..., pattern="^(tax|subscription)$")
    message: str | None = Field(None, max_length=1000)
    period: str | None = Field(None, max_length=50)
    screenshot_url: str | None = Field(None, max_length=2048)


class ReviewPaymentRequest(BaseModel):
    decision: str = Field(..., pattern="^(approved|rejected)$")


class PaymentResponse(BaseModel):
    id: str
    branch_id: str
    amount: float
    transaction_reference: str
    payment_type: str
    status: str
    message: str | None = None
    period: str | None = None
    created_at: datetime | None = None


class StatementResponse(BaseModel):
    branch_id: str
    as_of: datetime
    accrued_tax: float
    paid_tax: float
    outstanding_tax: float
    accrued_subscription: float
    paid_subscription: float
    outstanding_subscription: float
    total_outstanding: float


# --- Notifications ---


class NotificationResponse(BaseModel):
    id: str
    title: str
    message: str
    kind: str
    is_read: bool
    created_at: datetime


class MarkReadResponse(BaseModel):
    marked: int
