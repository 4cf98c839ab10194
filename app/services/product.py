import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.models import (
    Product, Variant, ProductEnhancement, ProductCategory, ProductTag, Category,
    SyncLog, SyncStatus, ACTIVE_SYNC_STATUSES,
)
from app.schemas.printful import RemoteProduct, RemoteVariant
from app.schemas.product import (
    EnhancementData, EnhancementResponse, ProductResponse, VariantResponse, ProductCategoryResponse,
)
from app.schemas.sync import ProductSyncResult

logger = logging.getLogger(__name__)


def _with_details(query):
    return query.options(
        selectinload(Product.variants),
        selectinload(Product.enhancement),
        selectinload(Product.category_links).selectinload(ProductCategory.category),
        selectinload(Product.tag_links).selectinload(ProductTag.tag),
    )


async def count_products(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Product.id)))
    return result.scalar() or 0


async def get_product_by_printful_id(db: AsyncSession, printful_id: int) -> Optional[Product]:
    result = await db.execute(
        select(Product)
        .options(selectinload(Product.variants), selectinload(Product.enhancement))
        .where(Product.printful_id == printful_id)
    )
    return result.scalar_one_or_none()


async def list_all_products(db: AsyncSession) -> List[Product]:
    result = await db.execute(select(Product).order_by(Product.created_at.desc()))
    return list(result.scalars().all())


async def upsert_product(db: AsyncSession, remote: RemoteProduct) -> tuple[Product, bool]:
    """Insert or update the row for `remote`. Returns (product, created)."""
    product = await get_product_by_printful_id(db, remote.id)
    now = datetime.utcnow()
    created = product is None

    if created:
        product = Product(printful_id=remote.id, created_at=now)
        db.add(product)

    product.external_id = remote.external_id
    product.name = remote.name
    product.thumbnail_url = remote.thumbnail_url
    product.tags = list(remote.tags)
    product.product_metadata = dict(remote.metadata)
    product.is_ignored = remote.is_ignored
    product.synced_at = now
    product.updated_at = now

    await db.flush()
    return product, created


def _apply_variant(variant: Variant, remote: RemoteVariant, now: datetime) -> None:
    variant.external_id = remote.external_id
    variant.catalog_variant_id = remote.variant_id
    variant.name = remote.name
    variant.retail_price = remote.retail_price
    variant.currency = remote.currency
    variant.size = remote.size
    variant.color = remote.color
    variant.sku = remote.sku
    variant.is_enabled = remote.is_enabled
    variant.in_stock = remote.in_stock
    variant.is_ignored = remote.is_ignored
    variant.files = [f.model_dump() for f in remote.files]
    variant.preview_images = remote.preview_images
    variant.options = list(remote.options)
    variant.synced_at = now
    variant.updated_at = now


async def upsert_variants(db: AsyncSession, product: Product, remote_variants: List[RemoteVariant]) -> ProductSyncResult:
    """Make the product's variant rows match `remote_variants`; stale rows are removed."""
    result = await db.execute(select(Variant).where(Variant.product_id == product.id))
    existing = {v.printful_id: v for v in result.scalars().all()}
    incoming_ids = {v.id for v in remote_variants}
    counts = ProductSyncResult()
    now = datetime.utcnow()

    for printful_id, variant in existing.items():
        if printful_id not in incoming_ids:
            await db.delete(variant)
            counts.variants_deleted += 1

    for remote in remote_variants:
        variant = existing.get(remote.id)
        if variant is None:
            variant = Variant(product_id=product.id, printful_id=remote.id, created_at=now)
            db.add(variant)
            counts.variants_created += 1
        else:
            counts.variants_updated += 1
        _apply_variant(variant, remote, now)

    await db.flush()
    return counts


async def delete_product(db: AsyncSession, product_id: int) -> None:
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if not product:
        raise ValueError(f"Product with ID {product_id} not found")
    await db.delete(product)
    await db.commit()


async def set_product_active(db: AsyncSession, product_id: int, is_active: bool) -> ProductResponse:
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if not product:
        raise ValueError("Product not found")
    product.is_active = is_active
    product.updated_at = datetime.utcnow()
    await db.commit()
    return await get_product(db, product_id, include_inactive=True)


async def upsert_enhancement(db: AsyncSession, product_id: int, data: EnhancementData) -> ProductEnhancement:
    """Admin write path for enhancements; the sync engine never calls this."""
    result = await db.execute(select(Product).where(Product.id == product_id))
    if not result.scalar_one_or_none():
        raise ValueError("Product not found")

    result = await db.execute(select(ProductEnhancement).where(ProductEnhancement.product_id == product_id))
    enhancement = result.scalar_one_or_none()
    if not enhancement:
        enhancement = ProductEnhancement(product_id=product_id)
        db.add(enhancement)

    apply_enhancement_data(enhancement, data)
    enhancement.is_active = True
    enhancement.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(enhancement)
    return enhancement


def apply_enhancement_data(enhancement: ProductEnhancement, data: EnhancementData) -> None:
    enhancement.description = data.description
    enhancement.short_description = data.shortDescription
    enhancement.features = data.features
    enhancement.specifications = data.specifications
    enhancement.additional_images = (
        [image.model_dump() for image in data.additionalImages] if data.additionalImages else None
    )
    enhancement.seo = data.seo.model_dump() if data.seo else None
    enhancement.default_variant_id = data.defaultVariant


def to_product_response(product: Product) -> ProductResponse:
    variants = [VariantResponse.model_validate(v) for v in product.variants]
    images: List[str] = []
    for variant in variants:
        for url in variant.preview_images:
            if url not in images:
                images.append(url)

    enhancement = None
    if product.enhancement and product.enhancement.is_active:
        enhancement = EnhancementResponse.model_validate(product.enhancement)

    return ProductResponse(
        id=product.id,
        printful_id=product.printful_id,
        external_id=product.external_id,
        name=product.name,
        thumbnail_url=product.thumbnail_url,
        description=enhancement.description if enhancement and enhancement.description else product.description,
        is_active=product.is_active,
        is_ignored=product.is_ignored,
        synced_at=product.synced_at,
        images=images,
        variants=variants,
        categories=[
            ProductCategoryResponse(
                id=link.category.id,
                name=link.category.name,
                slug=link.category.slug,
                color=link.category.color,
                is_primary=link.is_primary,
            )
            for link in product.category_links
        ],
        tags=[link.tag.name for link in product.tag_links],
        enhancement=enhancement,
    )


async def get_active_products(db: AsyncSession, category_slug: Optional[str] = None) -> List[ProductResponse]:
    query = (
        select(Product)
        .where(Product.is_active.is_(True), Product.is_ignored.is_(False))
        .order_by(Product.created_at.desc())
    )
    if category_slug:
        query = (
            query.join(ProductCategory, ProductCategory.product_id == Product.id)
            .join(Category, Category.id == ProductCategory.category_id)
            .where(Category.slug == category_slug)
        )
    result = await db.execute(_with_details(query))
    return [to_product_response(p) for p in result.scalars().unique().all()]


async def get_product(db: AsyncSession, product_id: int, include_inactive: bool = False) -> ProductResponse:
    query = select(Product).where(Product.id == product_id)
    if not include_inactive:
        query = query.where(Product.is_active.is_(True))
    result = await db.execute(_with_details(query).execution_options(populate_existing=True))
    product = result.scalar_one_or_none()
    if not product:
        raise ValueError("Product not found")
    return to_product_response(product)


async def create_sync_log(db: AsyncSession, operation: str, **data) -> SyncLog:
    now = datetime.utcnow()
    sync_log = SyncLog(
        operation=operation,
        status=data.pop("status", SyncStatus.QUEUED.value),
        current_step=data.pop("current_step", "Sync queued for processing"),
        progress=data.pop("progress", 0),
        started_at=now,
        last_updated=now,
        **data,
    )
    db.add(sync_log)
    await db.commit()
    await db.refresh(sync_log)
    return sync_log


async def get_sync_log_by_id(db: AsyncSession, sync_log_id: int) -> Optional[SyncLog]:
    result = await db.execute(select(SyncLog).where(SyncLog.id == sync_log_id))
    return result.scalar_one_or_none()


async def update_sync_log(db: AsyncSession, sync_log_id: int, updates: dict) -> SyncLog:
    sync_log = await get_sync_log_by_id(db, sync_log_id)
    if not sync_log:
        raise ValueError(f"Sync log with ID {sync_log_id} not found")

    for field, value in updates.items():
        setattr(sync_log, field, value)
    sync_log.last_updated = datetime.utcnow()
    await db.commit()
    return sync_log


async def get_active_sync_logs(db: AsyncSession, stale_after_minutes: Optional[int] = None) -> List[SyncLog]:
    """Runs that have not reached a terminal status, newest first.

    With `stale_after_minutes`, runs that have not reported progress within
    that window are left out.
    """
    query = select(SyncLog).where(SyncLog.status.in_(ACTIVE_SYNC_STATUSES))
    if stale_after_minutes is not None:
        cutoff = datetime.utcnow() - timedelta(minutes=stale_after_minutes)
        query = query.where(SyncLog.last_updated >= cutoff)
    result = await db.execute(query.order_by(SyncLog.started_at.desc()))
    return list(result.scalars().all())


async def get_recent_sync_logs(db: AsyncSession, limit: int = 10, include_active: bool = True) -> List[SyncLog]:
    query = select(SyncLog)
    if not include_active:
        query = query.where(SyncLog.status.not_in(ACTIVE_SYNC_STATUSES))
    result = await db.execute(query.order_by(SyncLog.started_at.desc(), SyncLog.id.desc()).limit(limit))
    return list(result.scalars().all())


async def cancel_stuck_sync_logs(db: AsyncSession, older_than_minutes: int) -> List[SyncLog]:
    now = datetime.utcnow()
    cutoff = now - timedelta(minutes=older_than_minutes)
    result = await db.execute(
        select(SyncLog).where(
            SyncLog.status.in_(ACTIVE_SYNC_STATUSES),
            SyncLog.last_updated < cutoff,
        )
    )
    stuck = list(result.scalars().all())

    for sync_log in stuck:
        logger.warning(f"Cancelling stuck sync {sync_log.id} (status: {sync_log.status}, started: {sync_log.started_at})")
        sync_log.status = SyncStatus.CANCELLED.value
        sync_log.error_message = "Sync cancelled due to being stuck"
        sync_log.current_step = "Cancelled"
        sync_log.completed_at = now
        sync_log.last_updated = now
        sync_log.duration = int((now - sync_log.started_at).total_seconds() * 1000)

    await db.commit()
    return stuck
