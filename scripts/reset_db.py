"""Reset database to empty state.

Clears all data from:
- order_lines, orders
- cart_lines
- feedback
- product_color_images, product_variants, products
- campaigns, brands
- users

Also clears Redis data (user cache, rate limit windows).

Usage:
    python -m scripts.reset_db
"""

import asyncio

from redis.exceptions import RedisError
from sqlalchemy import text

from storefront.core.database import async_session_maker, engine
from storefront.core.redis import close_redis, get_redis


async def reset_database():
    """Clear all data from the database."""
    print("=" * 60)
    print("Resetting database to empty state...")
    print("=" * 60)

    async with async_session_maker() as session:
        # Delete in correct order due to foreign key constraints
        tables = [
            "order_lines",
            "orders",
            "cart_lines",
            "feedback",
            "product_color_images",
            "product_variants",
            "products",
            "campaigns",
            "brands",
            "users",
        ]

        for table in tables:
            result = await session.execute(text(f"DELETE FROM {table}"))
            print(f"  Deleted {result.rowcount} rows from {table}")

        await session.commit()
        print("\nDatabase cleared successfully!")


async def reset_redis():
    """Clear all Redis data."""
    print("\nResetting Redis...")

    try:
        redis = await get_redis()
        await redis.flushdb()
        print("  Redis flushed successfully!")
    except (RedisError, OSError) as e:
        print(f"  Warning: Could not clear Redis: {e}")
        print("  (This is OK if Redis is not running locally)")
    finally:
        await close_redis()


async def main():
    await reset_database()
    await reset_redis()

    print("\n" + "=" * 60)
    print("Reset complete!")
    print("=" * 60)
    print("\nTo re-seed the database, run:")
    print("  python -m scripts.seed_data")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
