"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(farmer_id=profile.id, stock=3)
    db_session.add(product)
    await db_session.commit()
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from libs.auth.passwords import hash_password
from libs.auth.tokens import create_access_token

DEFAULT_PASSWORD = "secret123"

# Hashing is slow; every factory user shares one hash of DEFAULT_PASSWORD.
_PASSWORD_HASH = hash_password(DEFAULT_PASSWORD)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_phone() -> str:
    return f"13{uuid.uuid4().int % 10**9:09d}"


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class UserFactory:
    @staticmethod
    def create(**overrides):
        from services.market_service.models import User, UserRole

        defaults = {
            "id": _uuid(),
            "phone": _unique_phone(),
            "password_hash": _PASSWORD_HASH,
            "name": "测试用户",
            "role": UserRole.CUSTOMER,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return User(**defaults)


class FarmerProfileFactory:
    @staticmethod
    def create(user_id=None, **overrides):
        from services.market_service.models import FarmerProfile

        defaults = {
            "id": _uuid(),
            "user_id": user_id or _uuid(),
            "farm_name": "青山有机农场",
            "description": "高山生态种植",
            "region": "浙江 丽水",
            "highlights": [],
            "gallery": [],
            "certifications": [],
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return FarmerProfile(**defaults)


# ---------------------------------------------------------------------------
# Catalog & cart
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(farmer_id=None, **overrides):
        from services.market_service.models import Product, ProductStatus

        defaults = {
            "id": _uuid(),
            "farmer_id": farmer_id or _uuid(),
            "name": "高山有机番茄",
            "description": "自然成熟，现摘现发",
            "images": ["https://img.farmdirect.test/tomato.jpg"],
            "price_fen": 2990,
            "unit": "500g",
            "origin": "云南 玉溪",
            "category_id": "vegetables",
            "stock": 100,
            "status": ProductStatus.ACTIVE,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Product(**defaults)


class CartItemFactory:
    @staticmethod
    def create(user_id, product_id, **overrides):
        from services.market_service.models import CartItem

        defaults = {
            "id": _uuid(),
            "user_id": user_id,
            "product_id": product_id,
            "quantity": 1,
            "selected": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return CartItem(**defaults)


# ---------------------------------------------------------------------------
# Customer data
# ---------------------------------------------------------------------------


class AddressFactory:
    @staticmethod
    def create(user_id, **overrides):
        from services.market_service.models import Address

        defaults = {
            "id": _uuid(),
            "user_id": user_id,
            "contact_name": "张三",
            "contact_phone": "13800000000",
            "province": "浙江省",
            "city": "杭州市",
            "district": "西湖区",
            "street": "文三路 100 号",
            "is_default": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Address(**defaults)


class SubscriptionPlanFactory:
    @staticmethod
    def create(farmer_id=None, **overrides):
        from services.market_service.models import SubscriptionCycle, SubscriptionPlan

        defaults = {
            "id": _uuid(),
            "farmer_id": farmer_id,
            "title": "每周时令蔬菜箱",
            "price_fen": 9900,
            "cycle": SubscriptionCycle.WEEKLY,
            "deliver_weekday": None,
            "items": [{"name": "时令叶菜", "quantity": "2kg"}],
            "benefits": ["包邮"],
            "is_active": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return SubscriptionPlan(**defaults)


# ---------------------------------------------------------------------------
# Signed-in accounts
# ---------------------------------------------------------------------------


@dataclass
class Account:
    """A persisted user plus the bearer header to act as them."""

    user: object
    headers: dict
    profile: Optional[object] = None


def auth_headers(user, profile=None) -> dict:
    token = create_access_token(
        user_id=str(user.id),
        role=user.role.value,
        phone=user.phone,
        name=user.name,
        farmer_profile_id=str(profile.id) if profile else None,
    )
    return {"Authorization": f"Bearer {token}"}


async def make_customer(db, **overrides) -> Account:
    user = UserFactory.create(**overrides)
    db.add(user)
    await db.commit()
    return Account(user=user, headers=auth_headers(user))


async def make_farmer(db, **overrides) -> Account:
    """Farmer user with a profile; ``overrides`` apply to the profile."""
    from services.market_service.models import UserRole

    user = UserFactory.create(role=UserRole.FARMER)
    db.add(user)
    await db.flush()
    profile = FarmerProfileFactory.create(user_id=user.id, **overrides)
    db.add(profile)
    await db.commit()
    return Account(user=user, headers=auth_headers(user, profile), profile=profile)
