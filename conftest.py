import os
from typing import AsyncGenerator

# Settings are cached on first import, so the test environment is fixed here.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-for-farmdirect-tests")
os.environ["RATE_LIMIT_ENABLED"] = "false"
for _key in ("OSS_ACCESS_KEY_ID", "OSS_ACCESS_KEY_SECRET", "OSS_BUCKET", "OSS_REGION"):
    os.environ.pop(_key, None)

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.market_service import models as _market_models  # noqa: F401
from services.market_service.app.main import app
from services.market_service.models import UserRole
from tests.factories import Account, make_customer, make_farmer

get_settings.cache_clear()
settings = get_settings()


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh in-memory database per test. StaticPool keeps the single
    connection alive so every session sees the same tables.
    """
    engine = create_async_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the app with the DB dependency overridden.
    """

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_async_db] = _override_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def customer(db_session) -> Account:
    return await make_customer(db_session)


@pytest_asyncio.fixture
async def farmer(db_session) -> Account:
    return await make_farmer(db_session)


@pytest_asyncio.fixture
async def admin(db_session) -> Account:
    return await make_customer(db_session, role=UserRole.ADMIN)
