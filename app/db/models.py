from datetime import datetime
from sqlalchemy import Column, Integer, BigInteger, String, Text, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
import enum

from app.db.base import Base


class SyncStatus(str, enum.Enum):
    QUEUED = "queued"
    FETCHING_PRODUCTS = "fetching_products"
    PROCESSING_PRODUCTS = "processing_products"
    FINALIZING = "finalizing"
    SUCCESS = "success"
    PARTIAL = "partial"
    ERROR = "error"
    CANCELLED = "cancelled"


ACTIVE_SYNC_STATUSES = (
    SyncStatus.QUEUED.value,
    SyncStatus.FETCHING_PRODUCTS.value,
    SyncStatus.PROCESSING_PRODUCTS.value,
    SyncStatus.FINALIZING.value,
)


class CategoryRuleType(str, enum.Enum):
    NAME_KEYWORD = "name_keyword"
    TAG_KEYWORD = "tag_keyword"
    METADATA_KEY = "metadata_key"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    printful_id = Column(BigInteger, unique=True, nullable=False, index=True)
    external_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    thumbnail_url = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    tags = Column(JSON, default=list, nullable=False)
    product_metadata = Column("metadata", JSON, default=dict, nullable=False)
    is_ignored = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    synced_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    variants = relationship(
        "Variant", back_populates="product", cascade="all, delete-orphan"
    )
    enhancement = relationship(
        "ProductEnhancement", back_populates="product", uselist=False,
        cascade="all, delete-orphan"
    )
    category_links = relationship(
        "ProductCategory", back_populates="product", cascade="all, delete-orphan"
    )
    tag_links = relationship(
        "ProductTag", back_populates="product", cascade="all, delete-orphan"
    )


class Variant(Base):
    __tablename__ = "variants"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    printful_id = Column(BigInteger, nullable=False)
    external_id = Column(String(255), nullable=False)
    catalog_variant_id = Column(BigInteger, nullable=True)
    name = Column(String(255), nullable=False)
    retail_price = Column(String(32), nullable=False)
    currency = Column(String(8), nullable=False)
    size = Column(String(64), nullable=True)
    color = Column(String(64), nullable=True)
    sku = Column(String(255), nullable=True)
    is_enabled = Column(Boolean, default=True, nullable=False, index=True)
    in_stock = Column(Boolean, default=True, nullable=False)
    is_ignored = Column(Boolean, default=False, nullable=False)
    files = Column(JSON, default=list, nullable=False)
    preview_images = Column(JSON, default=list, nullable=False)
    options = Column(JSON, default=list, nullable=False)
    synced_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    product = relationship("Product", back_populates="variants")

    __table_args__ = (
        UniqueConstraint('product_id', 'printful_id', name='_product_variant_uc'),
    )


class ProductEnhancement(Base):
    __tablename__ = "product_enhancements"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), unique=True, nullable=False, index=True
    )
    description = Column(Text, nullable=True)
    short_description = Column(Text, nullable=True)
    features = Column(JSON, nullable=True)
    specifications = Column(JSON, nullable=True)
    additional_images = Column(JSON, nullable=True)
    seo = Column(JSON, nullable=True)
    default_variant_id = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    product = relationship("Product", back_populates="enhancement")


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    color = Column(String(32), nullable=True)
    icon = Column(String(32), nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_system = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    product_links = relationship("ProductCategory", back_populates="category", cascade="all, delete-orphan")
    mapping_rules = relationship("CategoryMappingRule", back_populates="category", cascade="all, delete-orphan")


class ProductCategory(Base):
    __tablename__ = "product_categories"

    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True)
    is_primary = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    product = relationship("Product", back_populates="category_links")
    category = relationship("Category", back_populates="product_links")


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    color = Column(String(32), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    usage_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    product_links = relationship("ProductTag", back_populates="tag", cascade="all, delete-orphan")


class ProductTag(Base):
    __tablename__ = "product_tags"

    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    product = relationship("Product", back_populates="tag_links")
    tag = relationship("Tag", back_populates="product_links")


class CategoryMappingRule(Base):
    __tablename__ = "category_mapping_rules"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)
    rule_type = Column(String(32), nullable=False, index=True)
    rule_value = Column(String(255), nullable=False)
    priority = Column(Integer, default=0, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    category = relationship("Category", back_populates="mapping_rules")


class SyncLog(Base):
    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, index=True)
    operation = Column(String(50), nullable=False, index=True)
    status = Column(String(32), default=SyncStatus.QUEUED.value, nullable=False, index=True)
    current_step = Column(Text, nullable=True)
    progress = Column(Integer, default=0, nullable=False)
    total_products = Column(Integer, default=0, nullable=False)
    current_product_index = Column(Integer, default=0, nullable=False)
    current_product_name = Column(String(255), nullable=True)
    estimated_time_remaining = Column(Integer, nullable=True)
    products_processed = Column(Integer, default=0, nullable=False)
    products_created = Column(Integer, default=0, nullable=False)
    products_updated = Column(Integer, default=0, nullable=False)
    products_deleted = Column(Integer, default=0, nullable=False)
    variants_processed = Column(Integer, default=0, nullable=False)
    variants_created = Column(Integer, default=0, nullable=False)
    variants_updated = Column(Integer, default=0, nullable=False)
    variants_deleted = Column(Integer, default=0, nullable=False)
    warnings = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)
    started_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    duration = Column(Integer, nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_SYNC_STATUSES
