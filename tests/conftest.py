import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db import models  # noqa: F401
from app.schemas.sync import SyncOptions
from app.services.enhancement import EnhancementCatalog

from tests.helpers import FakePrintfulClient, make_product, make_variant


DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    engine = create_async_engine(DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def sync_options():
    return SyncOptions(
        max_products=50,
        timeout=30,
        batch_size=2,
        retry_attempts=1,
        batch_timeout=10,
        max_deletions=10,
        cleanup_margin=0,
        item_retry_attempts=1,
        item_retry_delay=0,
        fetch_retry_delay=0,
        request_delay=0,
        batch_pause=0,
    )


@pytest.fixture
def catalog():
    return EnhancementCatalog()


@pytest.fixture
def remote_products():
    return [
        make_product(1, "Rainbow Tee", variants=[make_variant(101, color="Black", size="M"), make_variant(102, color="White", size="L")]),
        make_product(2, "Canvas Tote Bag"),
        make_product(3, "Ceramic Mug"),
    ]


@pytest.fixture
def fake_printful(remote_products):
    return FakePrintfulClient(remote_products)
