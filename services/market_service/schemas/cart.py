"""Cart request/response schemas."""

import uuid
from typing import Optional

from pydantic import Field, model_validator
from services.market_service.models import CartItem
from services.market_service.schemas.catalog import ProductResponse
from services.market_service.schemas.common import CamelModel, Money, money
from services.market_service.services.pricing import CheckoutSummary


class CartAddRequest(CamelModel):
    product_id: uuid.UUID
    quantity: int = Field(1, ge=1, le=999)


class CartUpdateRequest(CamelModel):
    quantity: Optional[int] = Field(None, le=999)
    selected: Optional[bool] = None

    @model_validator(mode="after")
    def at_least_one_field(self) -> "CartUpdateRequest":
        if self.quantity is None and self.selected is None:
            raise ValueError("quantity 或 selected 至少提供一个")
        return self


class CartSelectAllRequest(CamelModel):
    selected: bool


class SummaryLine(CamelModel):
    label: str
    value: Money


class CartSummaryResponse(CamelModel):
    subtotal: Money
    discount: Money
    delivery_fee: Money
    total: Money
    details: list[SummaryLine]

    @classmethod
    def from_summary(cls, summary: CheckoutSummary) -> "CartSummaryResponse":
        return cls(
            subtotal=money(summary.subtotal_fen),
            discount=money(summary.discount_fen),
            delivery_fee=money(summary.delivery_fee_fen),
            total=money(summary.total_fen),
            details=[
                SummaryLine(label="商品小计", value=money(summary.subtotal_fen)),
                SummaryLine(label="优惠减免", value=money(-summary.discount_fen)),
                SummaryLine(label="冷链配送", value=money(summary.delivery_fee_fen)),
            ],
        )


class CartItemResponse(CamelModel):
    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    selected: bool
    product: ProductResponse

    @classmethod
    def from_item(cls, item: CartItem) -> "CartItemResponse":
        return cls(
            id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            selected=item.selected,
            product=ProductResponse.from_product(item.product),
        )


class CartResponse(CamelModel):
    items: list[CartItemResponse]
    summary: CartSummaryResponse
