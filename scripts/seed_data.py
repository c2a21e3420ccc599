"""Seed data script for development and testing.

Creates:
- 1 admin + USER_COUNT customers
- 1 brand with 1 active campaign
- 3 products with size/color variants and color images

Environment Variables:
    CAMPAIGN_DURATION_DAYS: Campaign duration in days (default: 7)
    USER_COUNT: Number of customer accounts (default: 20)

Usage:
    python -m scripts.seed_data

Accounts:
    admin@test.com / admin1234
    user0001@test.com ~ userNNNN@test.com / password123
"""

import asyncio
import os
from datetime import timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import async_session_maker, engine
from storefront.core.security import get_password_hash
from storefront.models import Brand, Campaign, Product, ProductColorImage, ProductVariant, User
from storefront.models.base import utcnow

CAMPAIGN_DURATION_DAYS = int(os.getenv("CAMPAIGN_DURATION_DAYS", "7"))
USER_COUNT = int(os.getenv("USER_COUNT", "20"))

PRODUCTS = [
    ("Vestido Midi Floral", "Vestido midi em viscose", Decimal("189.90"), ["Azul", "Rosa"]),
    ("Blusa Tricot", "Blusa de tricot canelado", Decimal("119.90"), ["Preto", "Off White"]),
    ("Calça Wide Leg", "Calça de alfaiataria", Decimal("219.90"), ["Caramelo"]),
]
SIZES = ["P", "M", "G"]


async def seed_users(session: AsyncSession) -> list[User]:
    """Create the admin account and USER_COUNT customers."""
    print("Seeding users...")

    result = await session.execute(select(User).limit(1))
    if result.scalar_one_or_none():
        print("  Users already exist, skipping...")
        result = await session.execute(select(User))
        return list(result.scalars().all())

    users = [
        User(
            email="admin@test.com",
            password_hash=get_password_hash("admin1234"),
            name="Admin",
            status="active",
            is_admin=True,
        )
    ]
    print("  Created admin: admin@test.com / admin1234")

    password_hash = get_password_hash("password123")
    for i in range(1, USER_COUNT + 1):
        users.append(
            User(
                email=f"user{i:04d}@test.com",
                password_hash=password_hash,
                name=f"Cliente {i:04d}",
                phone=f"1199999{i:04d}",
                status="active",
            )
        )

    session.add_all(users)
    await session.commit()

    print(f"  Created {len(users)} users")
    return users


async def seed_catalog(session: AsyncSession) -> Campaign:
    """Create one brand, one running campaign and its products."""
    print("Seeding catalog...")

    result = await session.execute(select(Campaign).limit(1))
    existing = result.scalar_one_or_none()
    if existing:
        print("  Campaign already exists, skipping...")
        return existing

    brand = Brand(name="Atelier Demo")
    session.add(brand)
    await session.flush()

    now = utcnow()
    campaign = Campaign(
        name="Coleção Demo",
        brand_id=brand.brand_id,
        gender="female",
        start_time=now - timedelta(hours=1),
        end_time=now + timedelta(days=CAMPAIGN_DURATION_DAYS),
        status="active",
    )
    session.add(campaign)
    await session.flush()

    for name, description, price, colors in PRODUCTS:
        product = Product(
            name=name,
            description=description,
            price=price,
            campaign_id=campaign.campaign_id,
            brand_id=brand.brand_id,
            variants=[
                ProductVariant(size=size, color=color, price=price)
                for color in colors
                for size in SIZES
            ],
            color_images=[
                ProductColorImage(
                    color=color,
                    image_path=f"images/{name.lower().replace(' ', '-')}-{color.lower()}.jpg",
                )
                for color in colors
            ],
        )
        session.add(product)
        print(f"  Created product: {name} ({len(colors) * len(SIZES)} variants)")

    await session.commit()

    print(f"  Created campaign: {campaign.campaign_id}")
    print(f"    Start: {campaign.start_time}")
    print(f"    End: {campaign.end_time}")
    return campaign


async def main():
    """Main seed function."""
    print("=" * 60)
    print("Storefront - Seed Data Script")
    print("=" * 60)
    print(f"  CAMPAIGN_DURATION_DAYS: {CAMPAIGN_DURATION_DAYS}")
    print(f"  USER_COUNT: {USER_COUNT}")
    print("=" * 60)

    async with async_session_maker() as session:
        users = await seed_users(session)
        campaign = await seed_catalog(session)

    print("=" * 60)
    print("Seed data complete!")
    print(f"  Users: {len(users)}")
    print(f"  Active Campaign: {campaign.campaign_id}")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
