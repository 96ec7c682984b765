#!/usr/bin/env python
"""Check database connectivity.

Usage:
    uv run python scripts/check_db.py
"""

import asyncio
import sys

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine

from djcafe.core.config import get_settings

REQUIRED_TABLES = ("categories", "products", "tables", "video_campaigns", "jobs")


async def check_database() -> int:
    """Verify connection, the unaccent extension and the migrated schema."""
    settings = get_settings()

    print("DJ Cafe - Database Connectivity Check")
    print("=" * 40)
    print(f"Database URL: {settings.database_url.split('@')[-1]}")  # Hide credentials
    print()

    engine = create_async_engine(settings.database_url)

    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT version()"))
            version = result.scalar() or ""
            print(f"[OK] PostgreSQL version: {version[:50]}...")

            result = await conn.execute(
                text("SELECT extname FROM pg_extension WHERE extname = 'unaccent'")
            )
            if result.scalar():
                print("[OK] unaccent extension installed")
            else:
                print("[WARN] unaccent extension not installed (product search needs it)")
                print("       Run: uv run alembic upgrade head")

            result = await conn.execute(
                text("SELECT tablename FROM pg_tables WHERE schemaname = 'public'")
            )
            present = set(result.scalars().all())
            missing = [name for name in REQUIRED_TABLES if name not in present]
            if missing:
                print(f"[WARN] Missing tables: {', '.join(missing)}")
                print("       Run: uv run alembic upgrade head")
            else:
                print("[OK] Schema migrated")

        print()
        print("Database check completed successfully!")
        return 0

    except (OSError, SQLAlchemyError) as e:
        print(f"[FAIL] Connection failed: {e}")
        print()
        print("Troubleshooting:")
        print("  1. Ensure PostgreSQL is running: docker compose up -d")
        print("  2. Check DATABASE_URL in .env file")
        return 1

    finally:
        await engine.dispose()


def main() -> None:
    sys.exit(asyncio.run(check_database()))


if __name__ == "__main__":
    main()
