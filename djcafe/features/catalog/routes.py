"""API routes for menu administration (products and categories)."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from djcafe.core.database import get_db
from djcafe.features.catalog.schemas import (
    ActiveProductOption,
    CategoryResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from djcafe.features.catalog.service import CatalogService
from djcafe.shared.schemas import CountResponse, IdList

router = APIRouter(tags=["catalog"])


# =============================================================================
# Categories
# =============================================================================


@router.get(
    "/categories",
    response_model=list[CategoryResponse],
    summary="List categories",
)
async def list_categories(db: AsyncSession = Depends(get_db)) -> list[CategoryResponse]:
    """List all categories ordered by name."""
    return await CatalogService().list_categories(db)


# =============================================================================
# Products
# =============================================================================


@router.get(
    "/products",
    response_model=ProductListResponse,
    summary="List products",
    description="""
List products newest first, 25 per page.

`search` matches the product name case- and accent-insensitively
(`kafa` finds `Káfa`).
""",
)
async def list_products(
    db: AsyncSession = Depends(get_db),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    search: str | None = Query(None, description="Name filter"),
) -> ProductListResponse:
    """List products with pagination and search."""
    return await CatalogService().list_products(db=db, page=page, search=search)


@router.get(
    "/products/active",
    response_model=list[ActiveProductOption],
    summary="Active products for the table order picker",
)
async def list_active_products(
    db: AsyncSession = Depends(get_db),
    search: str | None = Query(None, description="Name filter"),
) -> list[ActiveProductOption]:
    """List active products ordered by name."""
    return await CatalogService().list_active_products(db=db, search=search)


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(
    product: ProductCreate,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """Create a product; prices are rounded to whole dinars."""
    return await CatalogService().create_product(db=db, data=product)


@router.post(
    "/products/bulk-delete",
    response_model=CountResponse,
    summary="Delete selected products",
)
async def bulk_delete_products(
    body: IdList,
    db: AsyncSession = Depends(get_db),
) -> CountResponse:
    """Delete the selected products."""
    count = await CatalogService().bulk_delete_products(db=db, ids=body.ids)
    return CountResponse(count=count)


@router.post(
    "/products/bulk-draft",
    response_model=CountResponse,
    summary="Move selected products to draft",
)
async def bulk_draft_products(
    body: IdList,
    db: AsyncSession = Depends(get_db),
) -> CountResponse:
    """Set status=draft on the selected products."""
    count = await CatalogService().bulk_draft_products(db=db, ids=body.ids)
    return CountResponse(count=count)


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
)
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """Get product details; 404 if it does not exist."""
    return await CatalogService().get_product(db=db, product_id=product_id)


@router.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
)
async def update_product(
    product_id: uuid.UUID,
    product: ProductUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """Update product details."""
    return await CatalogService().update_product(db=db, product_id=product_id, data=product)


@router.delete(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="Delete a product",
)
async def delete_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """Delete a product and return the removed record."""
    return await CatalogService().delete_product(db=db, product_id=product_id)


@router.post(
    "/products/{product_id}/toggle-status",
    response_model=ProductResponse,
    summary="Toggle active/draft",
)
async def toggle_product_status(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    """Flip a product between active and draft."""
    return await CatalogService().toggle_product_status(db=db, product_id=product_id)
