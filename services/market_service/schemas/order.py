"""Order request/response schemas."""

import uuid
from typing import Optional

from pydantic import Field, HttpUrl, field_validator
from services.market_service.models import (
    AfterSaleStatus,
    AfterSaleType,
    CheckpointKind,
    Order,
    OrderStatus,
    PaymentMethod,
    RefundMethod,
)
from services.market_service.schemas.common import (
    CamelModel,
    MobilePhone,
    Money,
    PositiveMoney,
    UtcDatetime,
    money,
)

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateOrderRequest(CamelModel):
    contact_name: str = Field(..., min_length=1, max_length=64)
    contact_phone: MobilePhone
    address: str = Field(..., min_length=5)
    payment_method: PaymentMethod
    note: Optional[str] = Field(None, max_length=500)

    @field_validator("contact_name", "address")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class UpdateOrderStatusRequest(CamelModel):
    status: OrderStatus
    note: Optional[str] = Field(None, max_length=500)


class CancelOrderRequest(CamelModel):
    reason: Optional[str] = Field(None, max_length=500)


class SetLogisticsRequest(CamelModel):
    carrier: str = Field(..., min_length=1, max_length=64)
    tracking_number: str = Field(..., min_length=1, max_length=64)
    contact_phone: Optional[str] = Field(None, max_length=20)


class CheckpointRequest(CamelModel):
    status: str = Field(..., min_length=1, max_length=64)
    kind: Optional[CheckpointKind] = None
    description: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=255)


class ApplyAfterSaleRequest(CamelModel):
    type: AfterSaleType
    reason: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    attachments: list[HttpUrl] = Field(default_factory=list, max_length=5)


class RefundRequest(CamelModel):
    amount: PositiveMoney
    method: RefundMethod
    reference_id: Optional[str] = Field(None, max_length=128)
    completed_at: Optional[UtcDatetime] = None


class UpdateAfterSaleRequest(CamelModel):
    status: AfterSaleStatus
    resolution_note: Optional[str] = Field(None, max_length=1000)
    refund: Optional[RefundRequest] = None

    @field_validator("status")
    @classmethod
    def not_applied(cls, v: AfterSaleStatus) -> AfterSaleStatus:
        if v is AfterSaleStatus.APPLIED:
            raise ValueError("status must be processing, resolved or rejected")
        return v


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class OrderItemResponse(CamelModel):
    product_id: uuid.UUID
    name: str
    thumbnail: str
    unit: str
    price: Money
    quantity: int
    subtotal: Money


class StatusHistoryResponse(CamelModel):
    status: OrderStatus
    timestamp: UtcDatetime
    note: Optional[str] = None


class CheckpointResponse(CamelModel):
    status: str
    kind: CheckpointKind
    description: Optional[str] = None
    location: Optional[str] = None
    timestamp: UtcDatetime


class LogisticsResponse(CamelModel):
    carrier: str
    tracking_number: str
    contact_phone: Optional[str] = None
    updated_at: UtcDatetime
    checkpoints: list[CheckpointResponse]


class CancellationResponse(CamelModel):
    reason: str
    cancelled_at: UtcDatetime


class RefundResponse(CamelModel):
    amount: Money
    method: RefundMethod
    reference_id: Optional[str] = None
    completed_at: UtcDatetime


class AfterSaleResponse(CamelModel):
    type: AfterSaleType
    reason: str
    description: Optional[str] = None
    attachments: list[str]
    status: AfterSaleStatus
    applied_at: UtcDatetime
    updated_at: UtcDatetime
    resolution_note: Optional[str] = None
    refund: Optional[RefundResponse] = None


class OrderResponse(CamelModel):
    id: uuid.UUID
    order_number: str
    user_id: uuid.UUID
    farmer_id: uuid.UUID
    status: OrderStatus
    subtotal: Money
    discount: Money
    delivery_fee: Money
    total: Money
    contact_name: str
    contact_phone: str
    address: str
    payment_method: PaymentMethod
    note: Optional[str] = None
    items: list[OrderItemResponse]
    status_history: list[StatusHistoryResponse]
    logistics: Optional[LogisticsResponse] = None
    cancellation: Optional[CancellationResponse] = None
    after_sale: Optional[AfterSaleResponse] = None
    version: int
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        logistics = None
        if order.logistics is not None:
            logistics = LogisticsResponse(
                carrier=order.logistics.carrier,
                tracking_number=order.logistics.tracking_number,
                contact_phone=order.logistics.contact_phone,
                updated_at=order.logistics.updated_at,
                checkpoints=[
                    CheckpointResponse(
                        status=cp.status,
                        kind=cp.kind,
                        description=cp.description,
                        location=cp.location,
                        timestamp=cp.created_at,
                    )
                    for cp in order.logistics.checkpoints
                ],
            )

        cancellation = None
        if order.cancelled_at is not None:
            cancellation = CancellationResponse(
                reason=order.cancel_reason or "",
                cancelled_at=order.cancelled_at,
            )

        after_sale = None
        record = order.after_sale
        if record is not None:
            refund = None
            if record.refund_amount_fen is not None:
                refund = RefundResponse(
                    amount=money(record.refund_amount_fen),
                    method=record.refund_method,
                    reference_id=record.refund_reference_id,
                    completed_at=record.refund_completed_at,
                )
            after_sale = AfterSaleResponse(
                type=record.type,
                reason=record.reason,
                description=record.description,
                attachments=list(record.attachments or []),
                status=record.status,
                applied_at=record.applied_at,
                updated_at=record.updated_at,
                resolution_note=record.resolution_note,
                refund=refund,
            )

        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=order.customer_id,
            farmer_id=order.farmer_id,
            status=order.status,
            subtotal=money(order.subtotal_fen),
            discount=money(order.discount_fen),
            delivery_fee=money(order.delivery_fee_fen),
            total=money(order.total_fen),
            contact_name=order.contact_name,
            contact_phone=order.contact_phone,
            address=order.address,
            payment_method=order.payment_method,
            note=order.note,
            items=[
                OrderItemResponse(
                    product_id=item.product_id,
                    name=item.product_name,
                    thumbnail=item.thumbnail,
                    unit=item.unit,
                    price=money(item.unit_price_fen),
                    quantity=item.quantity,
                    subtotal=money(item.subtotal_fen),
                )
                for item in order.items
            ],
            status_history=[
                StatusHistoryResponse(
                    status=entry.status, timestamp=entry.created_at, note=entry.note
                )
                for entry in order.status_history
            ],
            logistics=logistics,
            cancellation=cancellation,
            after_sale=after_sale,
            version=order.version,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListResponse(CamelModel):
    items: list[OrderResponse]
    total: int
    page: int
    page_size: int
