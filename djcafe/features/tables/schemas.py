"""Pydantic schemas for table and table order endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from djcafe.features.tables.models import PaymentStatus, TableStatus

# =============================================================================
# Tables
# =============================================================================


class TableCreate(BaseModel):
    """Request body for POST /tables."""

    number: int = Field(..., ge=1, description="Table number (unique)")


class TableUpdate(BaseModel):
    """Request body for PUT /tables/{table_id}."""

    number: int = Field(..., ge=1, description="Table number (unique)")
    status: TableStatus = TableStatus.ACTIVE


class TableResponse(BaseModel):
    """Table record."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    number: int
    status: TableStatus
    created_at: datetime
    updated_at: datetime


class TableListItem(BaseModel):
    """Row in the tables list with the number of items ordered."""

    id: uuid.UUID
    number: int
    status: TableStatus
    created_at: datetime
    ordered_quantity: int = Field(..., ge=0, description="Sum of order line quantities")


class TableListResponse(BaseModel):
    """Paginated table listing."""

    tables: list[TableListItem]
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    current_page: int = Field(..., ge=1)


# =============================================================================
# Orders
# =============================================================================


class AddOrderRequest(BaseModel):
    """Add a product to a table at its current price."""

    product_id: uuid.UUID
    quantity: int = Field(1, ge=1)


class OrderQuantityUpdate(BaseModel):
    """New quantity of an order line; zero or less removes the line."""

    quantity: int


class PaymentStatusUpdate(BaseModel):
    """Payment status for one order line."""

    status: PaymentStatus


class BulkPaymentStatusUpdate(BaseModel):
    """Payment status for several order lines."""

    order_ids: list[uuid.UUID] = Field(..., min_length=1)
    status: PaymentStatus


class TableOrderResponse(BaseModel):
    """Order line record."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    table_id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    ordered_price: Decimal
    payment_status: PaymentStatus
    created_at: datetime


class OrderChangeResponse(BaseModel):
    """Result of a quantity change; ``deleted`` when the line was removed."""

    order: TableOrderResponse
    deleted: bool = False


class OrderLine(BaseModel):
    """Order line with product and category names for the table detail page."""

    id: uuid.UUID
    table_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    category_name: str
    quantity: int
    payment_status: PaymentStatus
    ordered_price: Decimal
    created_at: datetime


class TableDetailResponse(BaseModel):
    """Table with its orders and revenue split by payment status."""

    table: TableResponse
    orders: list[OrderLine]
    total_revenue: Decimal
    paid_revenue: Decimal
    unpaid_revenue: Decimal
