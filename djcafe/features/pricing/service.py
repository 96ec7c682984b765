"""Service layer for dynamic pricing.

Covers the periodic price update run, the pricing admin page (status, bulk
edit, global config, window reset, sales sync), price history, the price
update interval setting, and promotional prices applied by campaigns and
quick ads.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.config import get_settings
from djcafe.core.exceptions import NotFoundError
from djcafe.core.logging import get_logger
from djcafe.features.catalog.models import Category, PriceHistory, Product, ProductStatus, Trend
from djcafe.features.notifications.publisher import publish
from djcafe.features.notifications.schemas import PRICE_CHANNEL, PriceUpdateEvent
from djcafe.features.pricing.calculator import (
    RandomSource,
    calculate_price,
    promotional_price,
    sales_window,
    trend_for,
)
from djcafe.features.pricing.models import PRICE_UPDATE_INTERVAL_KEY, AppSetting
from djcafe.features.pricing.schemas import (
    PriceHistoryPoint,
    PriceUpdate,
    PriceUpdateResult,
    PricingConfigUpdate,
    PricingStatusItem,
)
from djcafe.features.tables.models import TableOrder
from djcafe.shared.utils import round_price

logger = get_logger(__name__)


class PricingService:
    """Service for the dynamic pricing engine and its admin page."""

    def __init__(self, rng: RandomSource | None = None) -> None:
        """Initialize pricing service.

        Args:
            rng: Random source for price variance (module ``random`` if None).
        """
        self.settings = get_settings()
        self.rng = rng

    async def update_all_prices(
        self,
        db: AsyncSession,
        manual: bool = False,
        now: datetime | None = None,
    ) -> PriceUpdateResult:
        """Run one pricing window over every active product.

        Products whose price moves get previous/current price, trend and
        timestamps updated, the sales snapshot reset and a history row. When
        anything changed a ``price_update`` notification is queued on the
        session; it is delivered on commit.

        Args:
            db: Database session.
            manual: True when triggered from the admin "change prices now" button.
            now: Time of the run (defaults to the current UTC time).

        Returns:
            Updated and unchanged product counts.
        """
        now = now or datetime.now(UTC)
        result = await db.execute(
            select(Product).where(Product.status == ProductStatus.ACTIVE.value)
        )
        products = result.scalars().all()

        updated = 0
        unchanged = 0
        for product in products:
            old_price = Decimal(product.current_price)
            new_price = calculate_price(product, sales_window(product), self.rng)
            if new_price == old_price:
                unchanged += 1
                continue

            product.previous_price = old_price
            product.current_price = new_price
            product.trend = trend_for(new_price, old_price, product.trend)
            product.last_price_update = now
            product.sales_count_at_last_update = product.sales_count
            db.add(PriceHistory(product_id=product.id, price=new_price, timestamp=now))
            updated += 1

        await db.flush()

        if updated:
            await publish(db, PRICE_CHANNEL, PriceUpdateEvent(count=updated, timestamp=now))

        logger.info(
            "pricing.prices_updated",
            manual=manual,
            updated=updated,
            unchanged=unchanged,
        )
        return PriceUpdateResult(updated_count=updated, unchanged_count=unchanged, manual=manual)

    async def get_pricing_status(self, db: AsyncSession) -> list[PricingStatusItem]:
        """Active products with every pricing field, ordered by name."""
        stmt = (
            select(Product, Category.name.label("category_name"))
            .outerjoin(Category, Product.category_id == Category.id)
            .where(Product.status == ProductStatus.ACTIVE.value)
            .order_by(Product.name)
        )
        rows = (await db.execute(stmt)).all()

        items = []
        for product, category_name in rows:
            item = PricingStatusItem.model_validate(product)
            item.category_name = category_name
            items.append(item)
        return items

    async def bulk_update_prices(self, db: AsyncSession, updates: list[PriceUpdate]) -> int:
        """Apply edited rows from the pricing table.

        Prices are rounded to whole dinars. The entered total sales count is
        stored as ``manual_sales_adjustment = total - sales_count`` so real
        sales from table orders are never overwritten.

        Raises:
            NotFoundError: If any product does not exist.
        """
        for item in updates:
            product = await db.get(Product, item.id)
            if product is None:
                raise NotFoundError(
                    f"Product not found: {item.id}",
                    details={"product_id": str(item.id)},
                )
            product.base_price = round_price(item.base_price)
            product.min_price = round_price(item.min_price)
            product.max_price = round_price(item.max_price)
            product.manual_sales_adjustment = item.total_sales_count - product.sales_count

        await db.flush()
        logger.info("pricing.prices_bulk_updated", count=len(updates))
        return len(updates)

    async def update_pricing_config(self, db: AsyncSession, config: PricingConfigUpdate) -> int:
        """Apply mode and percentages to every active product; returns the count."""
        result = await db.execute(
            update(Product)
            .where(Product.status == ProductStatus.ACTIVE.value)
            .values(
                pricing_mode=config.pricing_mode.value,
                price_increase_percent=config.price_increase_percent,
                price_increase_random_percent=config.price_increase_random_percent,
                price_decrease_percent=config.price_decrease_percent,
                price_decrease_random_percent=config.price_decrease_random_percent,
            )
            .returning(Product.id)
        )
        count = len(result.all())
        logger.info(
            "pricing.config_updated",
            pricing_mode=config.pricing_mode.value,
            updated=count,
        )
        return count

    async def reset_session_quantities(
        self,
        db: AsyncSession,
        now: datetime | None = None,
    ) -> int:
        """Restart the counting window of every active product.

        Only ``last_price_update`` moves; sales counters and settings are
        left alone.
        """
        result = await db.execute(
            update(Product)
            .where(Product.status == ProductStatus.ACTIVE.value)
            .values(last_price_update=now or datetime.now(UTC))
            .returning(Product.id)
        )
        count = len(result.all())
        logger.info("pricing.session_reset", count=count)
        return count

    async def sync_sales_count(self, db: AsyncSession) -> int:
        """Recompute every product's sales count from its table orders.

        Sets both ``sales_count`` and ``sales_count_at_last_update`` so the
        next window starts empty.
        """
        ordered = (
            select(func.coalesce(func.sum(TableOrder.quantity), 0))
            .where(TableOrder.product_id == Product.id)
            .scalar_subquery()
        )
        result = await db.execute(
            update(Product)
            .values(sales_count=ordered, sales_count_at_last_update=ordered)
            .returning(Product.id)
        )
        count = len(result.all())
        logger.info("pricing.sales_count_synced", count=count)
        return count

    async def get_price_history(
        self,
        db: AsyncSession,
        product_id: uuid.UUID,
        limit: int | None = None,
    ) -> list[PriceHistoryPoint]:
        """Newest ``limit`` price changes of a product, oldest first."""
        limit = limit or self.settings.price_history_default_limit
        result = await db.execute(
            select(PriceHistory.price, PriceHistory.timestamp)
            .where(PriceHistory.product_id == product_id)
            .order_by(PriceHistory.timestamp.desc())
            .limit(limit)
        )
        points = [PriceHistoryPoint.model_validate(dict(row._mapping)) for row in result.all()]
        points.reverse()
        return points

    async def get_price_update_interval(self, db: AsyncSession) -> int:
        """Minutes between scheduled price updates (configured default if unset)."""
        result = await db.execute(
            select(AppSetting.value).where(AppSetting.key == PRICE_UPDATE_INTERVAL_KEY)
        )
        value = result.scalar_one_or_none()
        default = self.settings.default_price_update_interval_minutes
        if not value:
            return default
        return int(value.get("minutes", default))

    async def set_price_update_interval(self, db: AsyncSession, minutes: int) -> int:
        """Store the price update interval (1-60 minutes, validated by the schema)."""
        stmt = pg_insert(AppSetting).values(
            id=uuid.uuid4(),
            key=PRICE_UPDATE_INTERVAL_KEY,
            value={"minutes": minutes},
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[AppSetting.key],
            set_={"value": stmt.excluded.value, "updated_at": func.now()},
        )
        await db.execute(stmt)
        logger.info("pricing.interval_updated", minutes=minutes)
        return minutes

    async def apply_promotional_price(
        self,
        db: AsyncSession,
        product: Product,
        price: Decimal,
        now: datetime | None = None,
    ) -> tuple[Decimal, Decimal]:
        """Set a campaign or quick ad price on a product.

        The price is clamped to the product bounds and kept to two decimals.
        Previous price, trend and history are recorded like a regular update.

        Returns:
            Tuple of (new price, old price).
        """
        now = now or datetime.now(UTC)
        old_price = Decimal(product.current_price)
        new_price = promotional_price(price, product.min_price, product.max_price)

        product.previous_price = old_price
        product.current_price = new_price
        product.trend = Trend.UP.value if new_price > old_price else Trend.DOWN.value
        product.last_price_update = now
        db.add(PriceHistory(product_id=product.id, price=new_price, timestamp=now))
        await db.flush()

        logger.info(
            "pricing.promotional_price_applied",
            product_id=str(product.id),
            old_price=str(old_price),
            new_price=str(new_price),
        )
        return new_price, old_price
