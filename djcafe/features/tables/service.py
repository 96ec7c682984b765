"""Service layer for tables and table orders.

Every order change keeps ``Product.sales_count`` in step with the quantity
booked, since the pricing job reads sales from that counter.
"""

import math
import uuid
from decimal import Decimal

from sqlalchemy import Text, cast, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.config import get_settings
from djcafe.core.exceptions import ConflictError, NotFoundError
from djcafe.core.logging import get_logger
from djcafe.features.catalog.models import Category, Product
from djcafe.features.tables.models import DiningTable, PaymentStatus, TableOrder, TableStatus
from djcafe.features.tables.schemas import (
    OrderChangeResponse,
    OrderLine,
    TableDetailResponse,
    TableListItem,
    TableListResponse,
    TableOrderResponse,
    TableResponse,
    TableUpdate,
)
from djcafe.shared.utils import CENT

logger = get_logger(__name__)


def revenue(lines: list[OrderLine]) -> Decimal:
    """Sum of ordered price times quantity."""
    total = sum((line.ordered_price * line.quantity for line in lines), Decimal(0))
    return total.quantize(CENT)


class TableService:
    """Service for tables, order lines and their effect on sales counts."""

    def __init__(self) -> None:
        """Initialize table service."""
        self.settings = get_settings()

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    async def list_tables(
        self,
        db: AsyncSession,
        page: int = 1,
        search: str | None = None,
    ) -> TableListResponse:
        """List tables by number descending with the quantity ordered at each.

        Args:
            db: Database session.
            page: Page number (1-indexed).
            search: Substring of the table number.

        Returns:
            One page of tables.
        """
        page_size = self.settings.tables_page_size
        where = cast(DiningTable.number, Text).ilike(f"%{search}%") if search else None

        count_stmt = select(func.count()).select_from(DiningTable)
        if where is not None:
            count_stmt = count_stmt.where(where)
        total = (await db.execute(count_stmt)).scalar_one()

        stmt = (
            select(
                DiningTable.id,
                DiningTable.number,
                DiningTable.status,
                DiningTable.created_at,
                func.coalesce(func.sum(TableOrder.quantity), 0).label("ordered_quantity"),
            )
            .outerjoin(TableOrder, TableOrder.table_id == DiningTable.id)
            .group_by(DiningTable.id)
            .order_by(DiningTable.number.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        if where is not None:
            stmt = stmt.where(where)
        rows = (await db.execute(stmt)).all()

        return TableListResponse(
            tables=[TableListItem.model_validate(dict(row._mapping)) for row in rows],
            total=total,
            total_pages=math.ceil(total / page_size),
            current_page=page,
        )

    async def _get_table_model(self, db: AsyncSession, table_id: uuid.UUID) -> DiningTable:
        table = await db.get(DiningTable, table_id)
        if table is None:
            raise NotFoundError(
                f"Table not found: {table_id}",
                details={"table_id": str(table_id)},
            )
        return table

    async def get_table(self, db: AsyncSession, table_id: uuid.UUID) -> TableDetailResponse:
        """Table with its order lines (newest first) and revenue totals."""
        table = await self._get_table_model(db, table_id)

        stmt = (
            select(
                TableOrder.id,
                TableOrder.table_id,
                TableOrder.product_id,
                Product.name.label("product_name"),
                Category.name.label("category_name"),
                TableOrder.quantity,
                TableOrder.payment_status,
                TableOrder.ordered_price,
                TableOrder.created_at,
            )
            .join(Product, TableOrder.product_id == Product.id)
            .join(Category, Product.category_id == Category.id)
            .where(TableOrder.table_id == table_id)
            .order_by(TableOrder.created_at.desc())
        )
        rows = (await db.execute(stmt)).all()
        orders = [OrderLine.model_validate(dict(row._mapping)) for row in rows]

        total = revenue(orders)
        paid = revenue([o for o in orders if o.payment_status == PaymentStatus.PAID])
        return TableDetailResponse(
            table=TableResponse.model_validate(table),
            orders=orders,
            total_revenue=total,
            paid_revenue=paid,
            unpaid_revenue=total - paid,
        )

    async def _ensure_number_free(
        self,
        db: AsyncSession,
        number: int,
        exclude_id: uuid.UUID | None = None,
    ) -> None:
        stmt = select(DiningTable.id).where(DiningTable.number == number)
        if exclude_id is not None:
            stmt = stmt.where(DiningTable.id != exclude_id)
        if (await db.execute(stmt.limit(1))).scalar_one_or_none() is not None:
            raise ConflictError(
                f"Table number {number} already exists",
                details={"number": number},
            )

    async def create_table(self, db: AsyncSession, number: int) -> TableResponse:
        """Create an active table.

        Raises:
            ConflictError: If the number is taken.
        """
        await self._ensure_number_free(db, number)
        table = DiningTable(number=number, status=TableStatus.ACTIVE.value)
        db.add(table)
        await db.flush()
        await db.refresh(table)

        logger.info("tables.table_created", table_id=str(table.id), number=number)
        return TableResponse.model_validate(table)

    async def update_table(
        self,
        db: AsyncSession,
        table_id: uuid.UUID,
        data: TableUpdate,
    ) -> TableResponse:
        """Change number and status.

        Raises:
            NotFoundError: If the table does not exist.
            ConflictError: If another table already has the number.
        """
        table = await self._get_table_model(db, table_id)
        await self._ensure_number_free(db, data.number, exclude_id=table_id)

        table.number = data.number
        table.status = data.status.value
        await db.flush()
        await db.refresh(table)

        logger.info("tables.table_updated", table_id=str(table_id), number=data.number)
        return TableResponse.model_validate(table)

    async def delete_table(self, db: AsyncSession, table_id: uuid.UUID) -> TableResponse:
        """Delete a table; its order lines cascade."""
        table = await self._get_table_model(db, table_id)
        deleted = TableResponse.model_validate(table)
        await db.delete(table)
        await db.flush()

        logger.info("tables.table_deleted", table_id=str(table_id))
        return deleted

    async def bulk_delete_tables(self, db: AsyncSession, ids: list[uuid.UUID]) -> int:
        """Delete the selected tables; returns how many were removed."""
        result = await db.execute(
            delete(DiningTable).where(DiningTable.id.in_(ids)).returning(DiningTable.id)
        )
        count = len(result.all())
        logger.info("tables.tables_bulk_deleted", requested=len(ids), deleted=count)
        return count

    # -------------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------------

    async def _adjust_sales(self, db: AsyncSession, product_id: uuid.UUID, delta: int) -> None:
        if delta == 0:
            return
        await db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(sales_count=Product.sales_count + delta)
        )

    async def _get_order_model(self, db: AsyncSession, order_id: uuid.UUID) -> TableOrder:
        order = await db.get(TableOrder, order_id)
        if order is None:
            raise NotFoundError(
                f"Order not found: {order_id}",
                details={"order_id": str(order_id)},
            )
        return order

    async def add_product_to_table(
        self,
        db: AsyncSession,
        table_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int,
    ) -> TableOrderResponse:
        """Book a product on a table at its current price.

        An existing line for the same product at the same price absorbs the
        quantity; otherwise a new unpaid line is created. The product's
        sales count grows by ``quantity`` either way.

        Raises:
            NotFoundError: If the table or product does not exist.
        """
        await self._get_table_model(db, table_id)
        product = await db.get(Product, product_id)
        if product is None:
            raise NotFoundError(
                f"Product not found: {product_id}",
                details={"product_id": str(product_id)},
            )

        result = await db.execute(
            select(TableOrder)
            .where(
                TableOrder.table_id == table_id,
                TableOrder.product_id == product_id,
                TableOrder.ordered_price == product.current_price,
            )
            .limit(1)
        )
        order = result.scalar_one_or_none()

        if order is not None:
            order.quantity += quantity
            merged = True
        else:
            order = TableOrder(
                table_id=table_id,
                product_id=product_id,
                quantity=quantity,
                ordered_price=product.current_price,
                payment_status=PaymentStatus.UNPAID.value,
            )
            db.add(order)
            merged = False

        await db.flush()
        await self._adjust_sales(db, product_id, quantity)
        await db.refresh(order)

        logger.info(
            "tables.order_added",
            table_id=str(table_id),
            product_id=str(product_id),
            quantity=quantity,
            merged=merged,
        )
        return TableOrderResponse.model_validate(order)

    async def update_order_quantity(
        self,
        db: AsyncSession,
        order_id: uuid.UUID,
        quantity: int,
    ) -> OrderChangeResponse:
        """Set the quantity of an order line.

        A quantity of zero or less deletes the line and takes its old quantity
        off the product's sales; otherwise sales move by the difference.
        """
        order = await self._get_order_model(db, order_id)
        old_quantity = order.quantity

        if quantity <= 0:
            snapshot = TableOrderResponse.model_validate(order)
            await db.delete(order)
            await db.flush()
            await self._adjust_sales(db, snapshot.product_id, -old_quantity)
            logger.info("tables.order_removed", order_id=str(order_id), quantity=old_quantity)
            return OrderChangeResponse(order=snapshot, deleted=True)

        order.quantity = quantity
        await db.flush()
        await self._adjust_sales(db, order.product_id, quantity - old_quantity)
        await db.refresh(order)

        logger.info(
            "tables.order_quantity_updated",
            order_id=str(order_id),
            old_quantity=old_quantity,
            quantity=quantity,
        )
        return OrderChangeResponse(order=TableOrderResponse.model_validate(order))

    async def set_order_payment_status(
        self,
        db: AsyncSession,
        order_id: uuid.UUID,
        status: PaymentStatus,
    ) -> TableOrderResponse:
        """Mark one order line paid or unpaid."""
        order = await self._get_order_model(db, order_id)
        order.payment_status = status.value
        await db.flush()
        await db.refresh(order)
        return TableOrderResponse.model_validate(order)

    async def bulk_set_payment_status(
        self,
        db: AsyncSession,
        order_ids: list[uuid.UUID],
        status: PaymentStatus,
    ) -> int:
        """Mark several order lines paid or unpaid; returns how many changed."""
        result = await db.execute(
            update(TableOrder)
            .where(TableOrder.id.in_(order_ids))
            .values(payment_status=status.value)
            .returning(TableOrder.id)
        )
        count = len(result.all())
        logger.info("tables.payment_status_bulk_updated", status=status.value, updated=count)
        return count

    async def delete_order(self, db: AsyncSession, order_id: uuid.UUID) -> TableOrderResponse:
        """Remove an order line and take its quantity off the product's sales."""
        order = await self._get_order_model(db, order_id)
        deleted = TableOrderResponse.model_validate(order)
        await db.delete(order)
        await db.flush()
        await self._adjust_sales(db, deleted.product_id, -deleted.quantity)

        logger.info("tables.order_deleted", order_id=str(order_id))
        return deleted

    async def clear_table_orders(self, db: AsyncSession, table_id: uuid.UUID) -> int:
        """Remove every order line of a table; returns how many were removed."""
        await self._get_table_model(db, table_id)
        result = await db.execute(
            delete(TableOrder)
            .where(TableOrder.table_id == table_id)
            .returning(TableOrder.product_id, TableOrder.quantity)
        )
        removed = result.all()
        for product_id, quantity in removed:
            await self._adjust_sales(db, product_id, -quantity)

        logger.info("tables.orders_cleared", table_id=str(table_id), removed=len(removed))
        return len(removed)
