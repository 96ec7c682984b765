"""Service layer for menu administration.

Covers product CRUD, bulk actions from the products table, the active
product picker used when adding orders to a table, and category listing.
"""

import math
import uuid

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.config import get_settings
from djcafe.core.exceptions import NotFoundError
from djcafe.core.logging import get_logger
from djcafe.features.catalog.models import Category, Product, ProductStatus, Trend
from djcafe.features.catalog.schemas import (
    ActiveProductOption,
    CategoryResponse,
    ProductCreate,
    ProductListItem,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from djcafe.shared.utils import round_price

logger = get_logger(__name__)


def name_matches(search: str) -> ColumnElement[bool]:
    """Accent-insensitive substring match on product name (ä → a, š → s)."""
    return func.unaccent(Product.name).ilike(func.unaccent(f"%{search}%"))


class CatalogService:
    """Service for products and categories."""

    def __init__(self) -> None:
        """Initialize catalog service."""
        self.settings = get_settings()

    async def list_products(
        self,
        db: AsyncSession,
        page: int = 1,
        search: str | None = None,
    ) -> ProductListResponse:
        """List products newest first with optional name search.

        Args:
            db: Database session.
            page: Page number (1-indexed).
            search: Accent-insensitive name filter.

        Returns:
            One page of products with category names.
        """
        page_size = self.settings.products_page_size
        where = name_matches(search) if search else None

        count_stmt = select(func.count()).select_from(Product)
        if where is not None:
            count_stmt = count_stmt.where(where)
        total = (await db.execute(count_stmt)).scalar_one()

        stmt = (
            select(
                Product.id,
                Product.name,
                Product.current_price,
                Product.status,
                Product.category_id,
                Category.name.label("category_name"),
            )
            .outerjoin(Category, Product.category_id == Category.id)
            .order_by(Product.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        if where is not None:
            stmt = stmt.where(where)
        rows = (await db.execute(stmt)).all()

        return ProductListResponse(
            products=[ProductListItem.model_validate(dict(row._mapping)) for row in rows],
            total=total,
            total_pages=math.ceil(total / page_size),
            current_page=page,
        )

    async def get_product_model(self, db: AsyncSession, product_id: uuid.UUID) -> Product:
        """Load a product row or raise NotFoundError."""
        product = await db.get(Product, product_id)
        if product is None:
            raise NotFoundError(
                f"Product not found: {product_id}",
                details={"product_id": str(product_id)},
            )
        return product

    async def get_product(self, db: AsyncSession, product_id: uuid.UUID) -> ProductResponse:
        """Get one product by ID."""
        product = await self.get_product_model(db, product_id)
        return ProductResponse.model_validate(product)

    async def create_product(self, db: AsyncSession, data: ProductCreate) -> ProductResponse:
        """Create a product; current and previous price start at the base price.

        Args:
            db: Database session.
            data: Validated form data.

        Returns:
            Created product.
        """
        base_price = round_price(data.base_price)
        product = Product(
            name=data.name,
            category_id=data.category_id,
            base_price=base_price,
            min_price=round_price(data.min_price),
            max_price=round_price(data.max_price),
            current_price=base_price,
            previous_price=base_price,
            sales_count=0,
            trend=Trend.DOWN.value,
            status=data.status.value,
        )
        db.add(product)
        await db.flush()
        await db.refresh(product)

        logger.info("catalog.product_created", product_id=str(product.id), name=product.name)
        return ProductResponse.model_validate(product)

    async def update_product(
        self,
        db: AsyncSession,
        product_id: uuid.UUID,
        data: ProductUpdate,
    ) -> ProductResponse:
        """Update product details; prices are rounded to whole dinars."""
        product = await self.get_product_model(db, product_id)

        product.name = data.name
        product.category_id = data.category_id
        product.base_price = round_price(data.base_price)
        product.min_price = round_price(data.min_price)
        product.max_price = round_price(data.max_price)
        product.status = data.status.value

        await db.flush()
        await db.refresh(product)

        logger.info("catalog.product_updated", product_id=str(product_id))
        return ProductResponse.model_validate(product)

    async def delete_product(self, db: AsyncSession, product_id: uuid.UUID) -> ProductResponse:
        """Delete a product and return the deleted record."""
        product = await self.get_product_model(db, product_id)
        deleted = ProductResponse.model_validate(product)
        await db.delete(product)
        await db.flush()

        logger.info("catalog.product_deleted", product_id=str(product_id))
        return deleted

    async def toggle_product_status(
        self,
        db: AsyncSession,
        product_id: uuid.UUID,
    ) -> ProductResponse:
        """Flip a product between active and draft."""
        product = await self.get_product_model(db, product_id)
        product.status = (
            ProductStatus.DRAFT.value
            if product.status == ProductStatus.ACTIVE.value
            else ProductStatus.ACTIVE.value
        )
        await db.flush()
        await db.refresh(product)

        logger.info(
            "catalog.product_status_toggled",
            product_id=str(product_id),
            status=product.status,
        )
        return ProductResponse.model_validate(product)

    async def bulk_delete_products(self, db: AsyncSession, ids: list[uuid.UUID]) -> int:
        """Delete the selected products; returns how many were removed."""
        result = await db.execute(delete(Product).where(Product.id.in_(ids)).returning(Product.id))
        count = len(result.all())
        logger.info("catalog.products_bulk_deleted", requested=len(ids), deleted=count)
        return count

    async def bulk_draft_products(self, db: AsyncSession, ids: list[uuid.UUID]) -> int:
        """Move the selected products to draft; returns how many changed."""
        result = await db.execute(
            update(Product)
            .where(Product.id.in_(ids))
            .values(status=ProductStatus.DRAFT.value)
            .returning(Product.id)
        )
        count = len(result.all())
        logger.info("catalog.products_bulk_drafted", requested=len(ids), updated=count)
        return count

    async def list_categories(self, db: AsyncSession) -> list[CategoryResponse]:
        """All categories ordered by name."""
        result = await db.execute(select(Category).order_by(Category.name))
        return [CategoryResponse.model_validate(c) for c in result.scalars().all()]

    async def list_active_products(
        self,
        db: AsyncSession,
        search: str | None = None,
    ) -> list[ActiveProductOption]:
        """Active products for the add-to-table picker, ordered by name."""
        stmt = (
            select(
                Product.id,
                Product.name,
                Category.name.label("category_name"),
                Product.current_price,
            )
            .join(Category, Product.category_id == Category.id)
            .where(Product.status == ProductStatus.ACTIVE.value)
            .order_by(Product.name)
        )
        if search:
            stmt = stmt.where(name_matches(search))

        rows = (await db.execute(stmt)).all()
        return [ActiveProductOption.model_validate(dict(row._mapping)) for row in rows]
