import re
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.db.models import Product, Tag, ProductTag


TRENDING_KEYWORDS = ["new", "trending", "popular", "best", "top", "featured"]
MAX_UPSTREAM_TAGS = 3


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


async def create_tag_if_not_exists(db: AsyncSession, name: str, description: str = None, color: str = None) -> Tag:
    slug = slugify(name)
    result = await db.execute(select(Tag).where(Tag.slug == slug))
    tag = result.scalar_one_or_none()
    if tag:
        return tag

    tag = Tag(name=name, slug=slug, description=description, color=color)
    db.add(tag)
    await db.flush()
    return tag


async def auto_tag_product(db: AsyncSession, product: Product) -> List[int]:
    tag_ids: List[int] = []
    words = set(re.findall(r"[a-z0-9]+", product.name.lower()))

    for keyword in TRENDING_KEYWORDS:
        if keyword in words:
            tag = await create_tag_if_not_exists(
                db, keyword.capitalize(), f"Auto-generated tag for {keyword} products", "#6B7280"
            )
            tag_ids.append(tag.id)

    for name in (product.tags or [])[:MAX_UPSTREAM_TAGS]:
        tag = await create_tag_if_not_exists(db, name, "Auto-generated tag from Printful", "#3B82F6")
        if tag.id not in tag_ids:
            tag_ids.append(tag.id)

    return tag_ids


async def assign_tags_to_product(db: AsyncSession, product_id: int, tag_ids: List[int]) -> None:
    result = await db.execute(select(ProductTag.tag_id).where(ProductTag.product_id == product_id))
    existing = set(result.scalars().all())

    for tag_id in tag_ids:
        if tag_id not in existing:
            db.add(ProductTag(product_id=product_id, tag_id=tag_id))
    await db.flush()

    for tag_id in tag_ids:
        count_result = await db.execute(select(func.count()).select_from(ProductTag).where(ProductTag.tag_id == tag_id))
        tag = await db.get(Tag, tag_id)
        tag.usage_count = count_result.scalar() or 0
    await db.flush()
