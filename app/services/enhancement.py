import json
import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Product, ProductEnhancement
from app.schemas.product import EnhancementData
from app.services.product import apply_enhancement_data

logger = logging.getLogger(__name__)

_enhancement_map = TypeAdapter(Dict[str, EnhancementData])


class EnhancementCatalog:
    """Read-only map of Printful external_id to locally authored content."""

    def __init__(self, entries: Optional[Dict[str, EnhancementData]] = None):
        self._entries = dict(entries or {})

    @classmethod
    def from_file(cls, path) -> "EnhancementCatalog":
        path = Path(path)
        if not path.exists():
            logger.warning(f"Enhancements file {path} not found, starting with an empty catalog")
            return cls()
        with open(path, "r", encoding="utf-8") as f:
            entries = _enhancement_map.validate_python(json.load(f))
        logger.info(f"Loaded {len(entries)} product enhancements from {path}")
        return cls(entries)

    def get_by_external_id(self, external_id: str) -> Optional[EnhancementData]:
        return self._entries.get(external_id)

    def __contains__(self, external_id: str) -> bool:
        return external_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


async def preserve_enhancement(db: AsyncSession, product: Product, catalog: EnhancementCatalog) -> bool:
    """
    Copy the static enhancement for a newly created product.

    Does nothing when the product already owns an enhancement, so content
    edited through the admin panel is never replaced. Returns True when a
    row was created.
    """
    data = catalog.get_by_external_id(product.external_id)
    if data is None:
        return False

    result = await db.execute(
        select(ProductEnhancement.id).where(ProductEnhancement.product_id == product.id)
    )
    if result.scalar_one_or_none() is not None:
        return False

    enhancement = ProductEnhancement(product_id=product.id, is_active=True)
    apply_enhancement_data(enhancement, data)
    db.add(enhancement)
    await db.commit()
    return True
