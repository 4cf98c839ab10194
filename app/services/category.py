import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from app.db.models import Category, CategoryMappingRule, CategoryRuleType, Product, ProductCategory
from app.schemas.product import CategoryResponse

logger = logging.getLogger(__name__)


DEFAULT_CATEGORIES = [
    {"name": "Kids", "slug": "kids", "description": "Products designed for kids and children", "color": "#FF6B6B", "sort_order": 1},
    {"name": "Adults", "slug": "adults", "description": "Products designed for adults", "color": "#4ECDC4", "sort_order": 2},
    {"name": "Accessories", "slug": "accessories", "description": "Fashion accessories and add-ons", "color": "#96CEB4", "sort_order": 3},
    {"name": "Home & Living", "slug": "home-living", "description": "Home decor and lifestyle products", "color": "#FFA726", "sort_order": 4},
]

# Fallback when no mapping rule matches; checked in this order
NAME_KEYWORDS = {
    "kids": ["kids", "child", "children", "baby", "toddler", "youth", "junior"],
    "adults": ["adult", "men", "women", "grown", "mature"],
    "accessories": ["bag", "backpack", "hat", "cap", "accessory", "accessories"],
    "home-living": ["home", "living", "decor", "decoration", "house", "room", "wall", "cushion", "pillow", "blanket"],
}


async def list_categories(db: AsyncSession) -> list[CategoryResponse]:
    result = await db.execute(
        select(Category).where(Category.is_active.is_(True)).order_by(Category.sort_order, Category.name)
    )
    categories = result.scalars().all()

    return [CategoryResponse.model_validate(cat) for cat in categories]


async def ensure_default_categories(db: AsyncSession) -> int:
    """Create the system categories that are missing. Returns how many were added."""
    result = await db.execute(select(Category.slug))
    existing = set(result.scalars().all())
    created = 0
    for data in DEFAULT_CATEGORIES:
        if data["slug"] in existing:
            continue
        db.add(Category(is_system=True, **data))
        created += 1
    if created:
        await db.commit()
        logger.info(f"Created {created} default categories")
    return created


def _rule_matches(rule: CategoryMappingRule, product: Product) -> bool:
    value = rule.rule_value.lower()
    if rule.rule_type == CategoryRuleType.NAME_KEYWORD.value:
        return value in product.name.lower()
    if rule.rule_type == CategoryRuleType.TAG_KEYWORD.value:
        return any(value in tag.lower() for tag in (product.tags or []))
    if rule.rule_type == CategoryRuleType.METADATA_KEY.value:
        return bool((product.product_metadata or {}).get(rule.rule_value))
    return False


async def auto_categorize_product(db: AsyncSession, product: Product) -> Optional[int]:
    """Pick a category id for `product`, or None when nothing matches."""
    result = await db.execute(
        select(CategoryMappingRule, Category)
        .join(Category, CategoryMappingRule.category_id == Category.id)
        .where(CategoryMappingRule.is_active.is_(True), Category.is_active.is_(True))
        .order_by(CategoryMappingRule.priority.desc(), CategoryMappingRule.id)
    )
    for rule, category in result.all():
        if _rule_matches(rule, product):
            return category.id

    name = product.name.lower()
    for slug, keywords in NAME_KEYWORDS.items():
        if any(keyword in name for keyword in keywords):
            category_result = await db.execute(
                select(Category.id).where(Category.slug == slug, Category.is_active.is_(True))
            )
            category_id = category_result.scalar_one_or_none()
            if category_id:
                return category_id
    return None


async def assign_category_to_product(db: AsyncSession, product_id: int, category_id: int, is_primary: bool = False) -> None:
    result = await db.execute(
        select(ProductCategory).where(
            ProductCategory.product_id == product_id,
            ProductCategory.category_id == category_id,
        )
    )
    link = result.scalar_one_or_none()

    if is_primary:
        others = await db.execute(
            select(ProductCategory).where(
                ProductCategory.product_id == product_id,
                ProductCategory.is_primary.is_(True),
            )
        )
        for other in others.scalars().all():
            other.is_primary = False

    if link:
        link.is_primary = is_primary
    else:
        db.add(ProductCategory(product_id=product_id, category_id=category_id, is_primary=is_primary))
    await db.flush()


async def set_product_categories(
    db: AsyncSession,
    product_id: int,
    category_ids: List[int],
    primary_category_id: Optional[int] = None,
) -> None:
    product_result = await db.execute(select(Product.id).where(Product.id == product_id))
    if product_result.scalar_one_or_none() is None:
        raise ValueError("Product not found")

    if primary_category_id is not None and primary_category_id not in category_ids:
        raise ValueError("Primary category must be one of the assigned categories")

    found = await db.execute(select(Category.id).where(Category.id.in_(category_ids)))
    missing = set(category_ids) - set(found.scalars().all())
    if missing:
        raise ValueError(f"Unknown categories: {sorted(missing)}")

    await db.execute(delete(ProductCategory).where(ProductCategory.product_id == product_id))
    for category_id in category_ids:
        db.add(ProductCategory(
            product_id=product_id,
            category_id=category_id,
            is_primary=category_id == primary_category_id,
        ))
    await db.commit()
