import json
from pathlib import Path

import pytest
from sqlalchemy import select

from app.db.models import ProductEnhancement
from app.schemas.product import EnhancementData
from app.services.enhancement import EnhancementCatalog, preserve_enhancement
from app.services.product import upsert_product

from tests.helpers import make_product


BUNDLED_FILE = Path(__file__).resolve().parents[1] / "app" / "data" / "product_enhancements.json"


def test_bundled_enhancements_load():
    catalog = EnhancementCatalog.from_file(BUNDLED_FILE)

    assert len(catalog) == 2
    assert "68ad4d026311b3" in catalog
    assert catalog.get_by_external_id("68ac95d1455845").defaultVariant == "68ac95d1455845-gold-m"


def test_missing_file_gives_empty_catalog(tmp_path):
    catalog = EnhancementCatalog.from_file(tmp_path / "missing.json")

    assert len(catalog) == 0
    assert catalog.get_by_external_id("anything") is None


def test_invalid_entry_is_rejected(tmp_path):
    path = tmp_path / "enhancements.json"
    path.write_text(json.dumps({"abc": {"features": "not a list"}}))

    with pytest.raises(ValueError):
        EnhancementCatalog.from_file(path)


@pytest.mark.asyncio
async def test_preserve_creates_enhancement_once(db_session):
    product, _ = await upsert_product(db_session, make_product(1, external_id="abc"))
    await db_session.commit()
    catalog = EnhancementCatalog({
        "abc": EnhancementData(description="Heavyweight cotton", shortDescription="Heavy tee", seo={"keywords": ["tee"]}),
    })

    assert await preserve_enhancement(db_session, product, catalog) is True
    assert await preserve_enhancement(db_session, product, catalog) is False

    result = await db_session.execute(select(ProductEnhancement).where(ProductEnhancement.product_id == product.id))
    enhancement = result.scalar_one()
    assert enhancement.description == "Heavyweight cotton"
    assert enhancement.short_description == "Heavy tee"
    assert enhancement.seo == {"keywords": ["tee"], "metaDescription": ""}


@pytest.mark.asyncio
async def test_preserve_never_overwrites_existing(db_session):
    product, _ = await upsert_product(db_session, make_product(1, external_id="abc"))
    db_session.add(ProductEnhancement(product_id=product.id, description="Admin copy", is_active=True))
    await db_session.commit()
    catalog = EnhancementCatalog({"abc": EnhancementData(description="Static copy")})

    assert await preserve_enhancement(db_session, product, catalog) is False

    result = await db_session.execute(select(ProductEnhancement.description))
    assert result.scalars().all() == ["Admin copy"]


@pytest.mark.asyncio
async def test_preserve_without_catalog_entry(db_session):
    product, _ = await upsert_product(db_session, make_product(1, external_id="unknown"))
    await db_session.commit()

    assert await preserve_enhancement(db_session, product, EnhancementCatalog()) is False
