"""Catalog request/response schemas."""

import uuid
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from services.market_service.models import Product, ProductStatus
from services.market_service.schemas.common import (
    CamelModel,
    Money,
    PositiveMoney,
    UtcDatetime,
    money,
)


def _clean_images(images: list[str]) -> list[str]:
    return [url.strip() for url in images if url and url.strip()]


class ProductBase(CamelModel):
    description: Optional[str] = None
    original_price: Optional[PositiveMoney] = None
    seasonal_tag: Optional[str] = Field(None, max_length=64)
    is_organic: Optional[bool] = None


class ProductCreate(ProductBase):
    name: str = Field(..., max_length=255)
    images: list[str] = Field(..., min_length=1)
    price: PositiveMoney
    unit: str = Field(..., min_length=1, max_length=32)
    origin: str = Field(..., min_length=1, max_length=128)
    category_id: str = Field(..., min_length=1, max_length=64)
    stock: int = Field(..., ge=0)
    status: ProductStatus = ProductStatus.ACTIVE
    # Admins create on behalf of a farmer; ignored for farmer callers.
    farmer_id: Optional[uuid.UUID] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("商品名称不能为空")
        return v

    @field_validator("images")
    @classmethod
    def at_least_one_image(cls, v: list[str]) -> list[str]:
        v = _clean_images(v)
        if not v:
            raise ValueError("请至少上传一张商品图片")
        return v


class ProductUpdate(ProductBase):
    name: Optional[str] = Field(None, max_length=255)
    images: Optional[list[str]] = None
    price: Optional[PositiveMoney] = None
    unit: Optional[str] = Field(None, min_length=1, max_length=32)
    origin: Optional[str] = Field(None, min_length=1, max_length=128)
    category_id: Optional[str] = Field(None, min_length=1, max_length=64)
    stock: Optional[int] = Field(None, ge=0)
    status: Optional[ProductStatus] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("商品名称不能为空")
        return v

    @field_validator("images")
    @classmethod
    def keep_one_image(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        v = _clean_images(v)
        if not v:
            raise ValueError("请至少保留一张商品图片")
        return v

    @model_validator(mode="after")
    def at_least_one_field(self) -> "ProductUpdate":
        if not self.model_fields_set:
            raise ValueError("至少需要更新一个字段")
        return self


class ProductStatusUpdate(CamelModel):
    status: ProductStatus


class ProductListParams(CamelModel):
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1, le=100)
    category_id: Optional[str] = None
    keyword: Optional[str] = None
    sort_by: Optional[Literal["price", "name", "stock"]] = None
    sort_order: Literal["asc", "desc"] = "asc"
    status: Literal["draft", "active", "inactive", "all"] = "active"
    farmer_id: Optional[uuid.UUID] = None


class ProductListItem(CamelModel):
    id: uuid.UUID
    farmer_id: uuid.UUID
    name: str
    price: Money
    unit: str
    origin: str
    category_id: str
    thumbnail: str
    seasonal_tag: Optional[str] = None
    is_organic: Optional[bool] = None
    stock: int
    status: ProductStatus

    @classmethod
    def from_product(cls, product: Product) -> "ProductListItem":
        return cls(
            id=product.id,
            farmer_id=product.farmer_id,
            name=product.name,
            price=money(product.price_fen),
            unit=product.unit,
            origin=product.origin,
            category_id=product.category_id,
            thumbnail=product.thumbnail,
            seasonal_tag=product.seasonal_tag,
            is_organic=product.is_organic,
            stock=product.stock,
            status=product.status,
        )


class ProductResponse(CamelModel):
    id: uuid.UUID
    farmer_id: uuid.UUID
    name: str
    description: Optional[str] = None
    images: list[str]
    price: Money
    original_price: Optional[Money] = None
    unit: str
    origin: str
    category_id: str
    seasonal_tag: Optional[str] = None
    is_organic: Optional[bool] = None
    stock: int
    status: ProductStatus
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            farmer_id=product.farmer_id,
            name=product.name,
            description=product.description,
            images=list(product.images or []),
            price=money(product.price_fen),
            original_price=money(product.original_price_fen),
            unit=product.unit,
            origin=product.origin,
            category_id=product.category_id,
            seasonal_tag=product.seasonal_tag,
            is_organic=product.is_organic,
            stock=product.stock,
            status=product.status,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductListResponse(CamelModel):
    items: list[ProductListItem]
    total: int
    page: int
    page_size: int


class StockAdjustRequest(CamelModel):
    delta: int = Field(..., ge=-100_000, le=100_000)

    @field_validator("delta")
    @classmethod
    def non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("库存变动不能为 0")
        return v
