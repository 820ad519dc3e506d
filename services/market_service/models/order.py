"""Order aggregate: the order row plus the sub-records it owns exclusively.

Items, status history, logistics (with checkpoints) and the after-sale
record have no lifecycle of their own; they cascade with the order and are
always loaded together with it. Sequence children carry a ``position`` so
reads return them in insertion order regardless of timestamp resolution.
"""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import JSONType
from services.market_service.models.enums import (
    AfterSaleStatus,
    AfterSaleType,
    CheckpointKind,
    OrderStatus,
    PaymentMethod,
    RefundMethod,
    enum_values,
    persisted_values,
)
from sqlalchemy import CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# ORDER
# ============================================================================


class Order(Base):
    """A placed order. One customer, one farmer, money in fen."""

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_number: Mapped[str] = mapped_column(String(32), unique=True, index=True)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    farmer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("farmer_profiles.id"), index=True
    )

    # Financial snapshot
    subtotal_fen: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_fen: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    delivery_fee_fen: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_fen: Mapped[int] = mapped_column(Integer, nullable=False)

    # Shipping snapshot
    contact_name: Mapped[str] = mapped_column(String(64), nullable=False)
    contact_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            name="payment_method_enum",
            values_callable=persisted_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(
            OrderStatus,
            name="order_status_enum",
            values_callable=persisted_values,
            validate_strings=True,
        ),
        default=OrderStatus.PENDING,
        index=True,
        nullable=False,
    )

    # Cancellation (set once, on entering cancelled)
    cancel_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )
    status_history: Mapped[list["OrderStatusHistory"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderStatusHistory.position",
    )
    logistics: Mapped[Optional["OrderLogistics"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", uselist=False
    )
    after_sale: Mapped[Optional["OrderAfterSale"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", uselist=False
    )

    __table_args__ = (CheckConstraint("total_fen >= 0", name="total_non_negative"),)

    def __repr__(self) -> str:
        return f"<Order {self.order_number} status={self.status.value}>"


class OrderItem(Base):
    """Line item snapshot taken at order creation; never updated."""

    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String, nullable=False)
    unit: Mapped[str] = mapped_column(String(32), nullable=False)
    unit_price_fen: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal_fen: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")


class OrderStatusHistory(Base):
    """Append-only audit trail of status changes."""

    __tablename__ = "order_status_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(
            OrderStatus,
            name="order_status_enum",
            values_callable=persisted_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    order: Mapped["Order"] = relationship(back_populates="status_history")


# ============================================================================
# LOGISTICS
# ============================================================================


class OrderLogistics(Base):
    __tablename__ = "order_logistics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), unique=True, index=True
    )
    carrier: Mapped[str] = mapped_column(String(64), nullable=False)
    tracking_number: Mapped[str] = mapped_column(String(64), nullable=False)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    order: Mapped["Order"] = relationship(back_populates="logistics")
    checkpoints: Mapped[list["LogisticsCheckpoint"]] = relationship(
        back_populates="logistics",
        cascade="all, delete-orphan",
        order_by="LogisticsCheckpoint.position",
    )


class LogisticsCheckpoint(Base):
    """Append-only shipment event."""

    __tablename__ = "logistics_checkpoints"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    logistics_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("order_logistics.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(64), nullable=False)
    kind: Mapped[CheckpointKind] = mapped_column(
        SAEnum(
            CheckpointKind,
            name="checkpoint_kind_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=CheckpointKind.OTHER,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    logistics: Mapped["OrderLogistics"] = relationship(back_populates="checkpoints")


# ============================================================================
# AFTER-SALE
# ============================================================================


class OrderAfterSale(Base):
    """Refund / return / exchange request. Refund columns are set on resolution."""

    __tablename__ = "order_after_sales"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), unique=True, index=True
    )
    type: Mapped[AfterSaleType] = mapped_column(
        SAEnum(
            AfterSaleType,
            name="after_sale_type_enum",
            values_callable=persisted_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    status: Mapped[AfterSaleStatus] = mapped_column(
        SAEnum(
            AfterSaleStatus,
            name="after_sale_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=AfterSaleStatus.APPLIED,
        nullable=False,
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    attachments: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    resolution_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    refund_amount_fen: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    refund_method: Mapped[Optional[RefundMethod]] = mapped_column(
        SAEnum(
            RefundMethod,
            name="refund_method_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )
    refund_reference_id: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True
    )
    refund_completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    order: Mapped["Order"] = relationship(back_populates="after_sale")

    __table_args__ = (
        CheckConstraint(
            "refund_amount_fen IS NULL OR refund_amount_fen > 0",
            name="refund_amount_positive",
        ),
    )
