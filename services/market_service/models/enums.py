"""Enums for the Market Service models.

Wire values are the lower-case hyphenated tokens clients send and receive
(``after-sale``). Databases store the underscore form (``after_sale``);
``persisted_values`` is the single place that mapping is defined.
"""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


def to_persisted(value: str) -> str:
    return value.replace("-", "_")


def persisted_values(enum_cls):
    """SAEnum values_callable for enums whose wire tokens contain hyphens."""
    return [to_persisted(member.value) for member in enum_cls]


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    FARMER = "farmer"
    ADMIN = "admin"


class ProductStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    AFTER_SALE = "after-sale"


class PaymentMethod(str, enum.Enum):
    WECHAT = "wechat"
    ALIPAY = "alipay"
    CASH_ON_DELIVERY = "cash-on-delivery"


class AfterSaleType(str, enum.Enum):
    REFUND = "refund"
    RETURN_REFUND = "return-refund"
    EXCHANGE = "exchange"


class AfterSaleStatus(str, enum.Enum):
    APPLIED = "applied"
    PROCESSING = "processing"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class RefundMethod(str, enum.Enum):
    ORIGINAL = "original"
    WALLET = "wallet"
    BANK = "bank"


class CheckpointKind(str, enum.Enum):
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    EXCEPTION = "exception"
    OTHER = "other"


class SubscriptionCycle(str, enum.Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    SEASONAL = "seasonal"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
