"""Pytest configuration and fixtures for testing."""

from datetime import timedelta
from decimal import Decimal
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import storefront.models  # noqa: F401  registers all tables on Base.metadata
from storefront.core.database import Base
from storefront.core.security import get_password_hash
from storefront.models import Brand, Campaign, Product, ProductColorImage, ProductVariant, User
from storefront.models.base import utcnow
from storefront.services.cart_service import CartOwner


# Mock Redis client fixture
@pytest.fixture
def mock_redis() -> AsyncMock:
    """Create a mock Redis client."""
    redis = AsyncMock()

    # Mock common Redis operations
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.hset = AsyncMock(return_value=1)
    redis.hgetall = AsyncMock(return_value={})
    redis.expire = AsyncMock(return_value=True)

    # pipeline() is synchronous on redis.asyncio clients; only execute() is awaited
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[1, True])
    redis.pipeline = MagicMock(return_value=pipe)

    return redis


@pytest_asyncio.fixture
async def session_maker() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """In-memory SQLite database shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def customer(db_session: AsyncSession) -> User:
    user = User(
        email="customer@example.com",
        password_hash=get_password_hash("password123"),
        name="Maria Customer",
        phone="11999990000",
        status="active",
        is_admin=False,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    user = User(
        email="admin@example.com",
        password_hash=get_password_hash("admin1234"),
        name="Admin",
        status="active",
        is_admin=True,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
def make_campaign(db_session: AsyncSession):
    """Factory creating a campaign; active now unless a window or status is given."""

    async def _make(
        name: str | None = None,
        starts_in: timedelta = timedelta(hours=-1),
        lasts: timedelta = timedelta(days=1),
        status: str = "active",
        gender: str = "female",
    ) -> Campaign:
        brand = Brand(name=f"Brand {uuid4().hex[:8]}")
        db_session.add(brand)
        await db_session.flush()

        start = utcnow() + starts_in
        campaign = Campaign(
            name=name or f"Campaign {uuid4().hex[:8]}",
            brand_id=brand.brand_id,
            gender=gender,
            start_time=start,
            end_time=start + lasts,
            status=status,
        )
        db_session.add(campaign)
        await db_session.commit()
        return campaign

    return _make


@pytest.fixture
def make_product(db_session: AsyncSession, make_campaign):
    """Factory creating a product with one variant per (size, color) pair."""

    async def _make(
        price: Decimal = Decimal("20.00"),
        sizes: tuple[str, ...] = ("M",),
        colors: tuple[str | None, ...] = ("Azul",),
        campaign: Campaign | None = None,
        name: str = "Vestido Midi",
    ) -> Product:
        if campaign is None:
            campaign = await make_campaign()

        product = Product(
            name=name,
            description="Test product",
            price=price,
            campaign_id=campaign.campaign_id,
            brand_id=campaign.brand_id,
            variants=[
                ProductVariant(size=size, color=color, price=price)
                for color in colors
                for size in sizes
            ],
            color_images=[
                ProductColorImage(color=color, image_path=f"images/{color}.jpg")
                for color in colors
                if color is not None
            ],
        )
        db_session.add(product)
        await db_session.commit()
        return product

    return _make


@pytest.fixture
def anonymous_owner() -> CartOwner:
    return CartOwner.for_session(f"session-{uuid4().hex}")


@pytest.fixture
def customer_owner(customer: User) -> CartOwner:
    return CartOwner.for_user(customer.user_id)
