from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import require_admin
from app.db.session import get_db
from app.schemas.product import (
    CategoryAssignment, EnhancementData, EnhancementResponse, ProductResponse, ProductUpdate,
)
from app.services.category import set_product_categories
from app.services.product import get_active_products, get_product, set_product_active, upsert_enhancement


router = APIRouter(prefix="/api/v1/products", tags=["products"])
admin_router = APIRouter(
    prefix="/api/v1/admin/products",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=list[ProductResponse])
async def list_products(
    category: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    return await get_active_products(db, category_slug=category)


@router.get("/{product_id}", response_model=ProductResponse)
async def read_product(
    product_id: int,
    db: AsyncSession = Depends(get_db)
):
    try:
        return await get_product(db, product_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@admin_router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db)
):
    if data.is_active is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update")
    try:
        return await set_product_active(db, product_id, data.is_active)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@admin_router.put("/{product_id}/enhancement", response_model=EnhancementResponse)
async def save_enhancement(
    product_id: int,
    data: EnhancementData,
    db: AsyncSession = Depends(get_db)
):
    try:
        enhancement = await upsert_enhancement(db, product_id, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return EnhancementResponse.model_validate(enhancement)


@admin_router.put("/{product_id}/categories", response_model=ProductResponse)
async def assign_categories(
    product_id: int,
    data: CategoryAssignment,
    db: AsyncSession = Depends(get_db)
):
    try:
        await set_product_categories(db, product_id, data.category_ids, data.primary_category_id)
    except ValueError as e:
        if "not found" in str(e):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return await get_product(db, product_id, include_inactive=True)
