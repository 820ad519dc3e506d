"""Catalog models: farmer-owned products."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import JSONType
from services.market_service.models.enums import ProductStatus, enum_values
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

FALLBACK_THUMBNAIL = (
    "https://images.unsplash.com/photo-1502741338009-cac2772e18bc"
    "?auto=format&fit=crop&w=1200&q=60"
)


class Product(Base):
    """A catalog entry. Prices are stored in fen."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    farmer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("farmer_profiles.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    images: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    price_fen: Mapped[int] = mapped_column(Integer, nullable=False)
    original_price_fen: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    unit: Mapped[str] = mapped_column(String(32), nullable=False)
    origin: Mapped[str] = mapped_column(String(128), nullable=False)
    category_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    seasonal_tag: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_organic: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[ProductStatus] = mapped_column(
        SAEnum(
            ProductStatus,
            name="product_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=ProductStatus.ACTIVE,
        index=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("stock >= 0", name="stock_non_negative"),
        CheckConstraint("price_fen > 0", name="price_positive"),
    )

    @property
    def thumbnail(self) -> str:
        return self.images[0] if self.images else FALLBACK_THUMBNAIL

    def __repr__(self) -> str:
        return f"<Product {self.id} name={self.name} stock={self.stock}>"
