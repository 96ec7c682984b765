"""API routes for tables and their orders."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.database import get_db
from djcafe.features.tables.schemas import (
    AddOrderRequest,
    BulkPaymentStatusUpdate,
    OrderChangeResponse,
    OrderQuantityUpdate,
    PaymentStatusUpdate,
    TableCreate,
    TableDetailResponse,
    TableListResponse,
    TableOrderResponse,
    TableResponse,
    TableUpdate,
)
from djcafe.features.tables.service import TableService
from djcafe.shared.schemas import CountResponse, IdList

router = APIRouter(tags=["tables"])


# =============================================================================
# Tables
# =============================================================================


@router.get(
    "/tables",
    response_model=TableListResponse,
    summary="List tables",
    description="Tables by number descending, 25 per page. `search` matches part of the number.",
)
async def list_tables(
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    search: str | None = Query(None, description="Table number filter"),
) -> TableListResponse:
    """List tables with the quantity ordered at each."""
    return await TableService().list_tables(db=db, page=page, search=search)


@router.post(
    "/tables",
    response_model=TableResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a table",
)
async def create_table(body: TableCreate, db: AsyncSession = Depends(get_db)) -> TableResponse:
    """Create a table; 409 if the number already exists."""
    return await TableService().create_table(db=db, number=body.number)


@router.post(
    "/tables/bulk-delete",
    response_model=CountResponse,
    summary="Delete selected tables",
)
async def bulk_delete_tables(body: IdList, db: AsyncSession = Depends(get_db)) -> CountResponse:
    """Delete the selected tables and their orders."""
    count = await TableService().bulk_delete_tables(db=db, ids=body.ids)
    return CountResponse(count=count)


@router.get(
    "/tables/{table_id}",
    response_model=TableDetailResponse,
    summary="Table detail with orders and revenue",
)
async def get_table(
    table_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> TableDetailResponse:
    """Get a table, its order lines and total/paid/unpaid revenue."""
    return await TableService().get_table(db=db, table_id=table_id)


@router.put(
    "/tables/{table_id}",
    response_model=TableResponse,
    summary="Update a table",
)
async def update_table(
    table_id: uuid.UUID,
    body: TableUpdate,
    db: AsyncSession = Depends(get_db),
) -> TableResponse:
    """Change table number and status; 409 if the number is taken."""
    return await TableService().update_table(db=db, table_id=table_id, data=body)


@router.delete(
    "/tables/{table_id}",
    response_model=TableResponse,
    summary="Delete a table",
)
async def delete_table(
    table_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> TableResponse:
    """Delete a table and return the removed record."""
    return await TableService().delete_table(db=db, table_id=table_id)


# =============================================================================
# Orders
# =============================================================================


@router.post(
    "/tables/{table_id}/orders",
    response_model=TableOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a product to a table",
    description="""
Books the product at its current price. If the table already has a line for
the same product at the same price, the quantity is added to that line.
""",
)
async def add_product_to_table(
    table_id: uuid.UUID,
    body: AddOrderRequest,
    db: AsyncSession = Depends(get_db),
) -> TableOrderResponse:
    """Add an order line (or merge into an existing one)."""
    return await TableService().add_product_to_table(
        db=db,
        table_id=table_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )


@router.delete(
    "/tables/{table_id}/orders",
    response_model=CountResponse,
    summary="Clear all orders of a table",
)
async def clear_table_orders(
    table_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> CountResponse:
    """Remove every order line of the table."""
    count = await TableService().clear_table_orders(db=db, table_id=table_id)
    return CountResponse(count=count)


@router.post(
    "/orders/payment-status",
    response_model=CountResponse,
    summary="Set payment status of selected orders",
)
async def bulk_set_payment_status(
    body: BulkPaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> CountResponse:
    """Mark several order lines paid or unpaid."""
    count = await TableService().bulk_set_payment_status(
        db=db, order_ids=body.order_ids, status=body.status
    )
    return CountResponse(count=count)


@router.patch(
    "/orders/{order_id}/quantity",
    response_model=OrderChangeResponse,
    summary="Change order quantity",
)
async def update_order_quantity(
    order_id: uuid.UUID,
    body: OrderQuantityUpdate,
    db: AsyncSession = Depends(get_db),
) -> OrderChangeResponse:
    """Set the quantity; zero or less removes the line."""
    return await TableService().update_order_quantity(
        db=db, order_id=order_id, quantity=body.quantity
    )


@router.patch(
    "/orders/{order_id}/payment-status",
    response_model=TableOrderResponse,
    summary="Set payment status of an order",
)
async def set_order_payment_status(
    order_id: uuid.UUID,
    body: PaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> TableOrderResponse:
    """Mark one order line paid or unpaid."""
    return await TableService().set_order_payment_status(
        db=db, order_id=order_id, status=body.status
    )


@router.delete(
    "/orders/{order_id}",
    response_model=TableOrderResponse,
    summary="Delete an order line",
)
async def delete_order(
    order_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> TableOrderResponse:
    """Remove an order line."""
    return await TableService().delete_order(db=db, order_id=order_id)
