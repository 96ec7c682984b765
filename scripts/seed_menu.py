#!/usr/bin/env python
"""Seed a demo menu and tables.

Creates a few categories with priced drinks plus numbered tables, so the
admin and the TV board have something to show. Existing categories (by
slug) and tables (by number) are left alone.

Usage:
    uv run python scripts/seed_menu.py
    uv run python scripts/seed_menu.py --tables 12
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from djcafe.core.config import get_settings
from djcafe.core.logging import configure_logging, get_logger
from djcafe.features.catalog.models import Category, Product, ProductStatus, Trend
from djcafe.features.tables.models import DiningTable

logger = get_logger(__name__)

# slug -> (name, [(product, base price, min price, max price)])
MENU: dict[str, tuple[str, list[tuple[str, int, int, int]]]] = {
    "kafa": (
        "Kafa",
        [
            ("Espresso", 180, 140, 240),
            ("Cappuccino", 240, 190, 320),
            ("Ledena kafa", 320, 260, 420),
        ],
    ),
    "kokteli": (
        "Kokteli",
        [
            ("Mojito", 650, 500, 900),
            ("Aperol Spritz", 700, 550, 950),
            ("Negroni", 800, 600, 1000),
            ("Caipirinha", 700, 550, 950),
        ],
    ),
    "pivo": (
        "Pivo",
        [
            ("Jelen 0.5", 300, 240, 420),
            ("Craft IPA", 450, 360, 600),
        ],
    ),
    "sokovi": (
        "Sokovi",
        [
            ("Limunada", 280, 220, 380),
            ("Ceđena pomorandža", 350, 280, 460),
        ],
    ),
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the DJ Cafe demo menu.")
    parser.add_argument(
        "--tables",
        type=int,
        default=10,
        help="Number of tables to create (default: 10)",
    )
    return parser.parse_args(argv)


async def seed_menu(session: AsyncSession) -> int:
    """Create missing categories and their products; returns products added."""
    result = await session.execute(select(Category.slug))
    existing = set(result.scalars().all())
    added = 0

    for slug, (name, products) in MENU.items():
        if slug in existing:
            continue
        category = Category(name=name, slug=slug)
        session.add(category)
        await session.flush()

        for product_name, base, low, high in products:
            price = Decimal(base)
            session.add(
                Product(
                    name=product_name,
                    category_id=category.id,
                    base_price=price,
                    min_price=Decimal(low),
                    max_price=Decimal(high),
                    current_price=price,
                    previous_price=price,
                    sales_count=0,
                    trend=Trend.DOWN.value,
                    status=ProductStatus.ACTIVE.value,
                )
            )
            added += 1

    return added


async def seed_tables(session: AsyncSession, count: int) -> int:
    """Create tables 1..count that do not exist yet."""
    result = await session.execute(select(DiningTable.number))
    existing = set(result.scalars().all())
    missing = [n for n in range(1, count + 1) if n not in existing]
    session.add_all(DiningTable(number=n) for n in missing)
    return len(missing)


async def run(args: argparse.Namespace) -> int:
    configure_logging()
    engine = create_async_engine(get_settings().database_url)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with session_maker() as session:
            products = await seed_menu(session)
            tables = await seed_tables(session, args.tables)
            await session.commit()
    except (OSError, SQLAlchemyError) as e:
        logger.error("seed.failed", error=str(e), error_type=type(e).__name__)
        return 1
    finally:
        await engine.dispose()

    logger.info("seed.completed", products_added=products, tables_added=tables)
    return 0


def main() -> None:
    sys.exit(asyncio.run(run(parse_args())))


if __name__ == "__main__":
    main()
