from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime


class EnhancementImage(BaseModel):
    url: str
    alt: str = ""
    caption: Optional[str] = None


class EnhancementSEO(BaseModel):
    keywords: List[str] = []
    metaDescription: str = ""


class EnhancementData(BaseModel):
    description: Optional[str] = None
    shortDescription: Optional[str] = None
    features: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None
    additionalImages: Optional[List[EnhancementImage]] = None
    seo: Optional[EnhancementSEO] = None
    defaultVariant: Optional[str] = None


class EnhancementResponse(BaseModel):
    description: Optional[str] = None
    short_description: Optional[str] = None
    features: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None
    additional_images: Optional[List[EnhancementImage]] = None
    seo: Optional[EnhancementSEO] = None
    default_variant_id: Optional[str] = None

    class Config:
        from_attributes = True


class VariantResponse(BaseModel):
    id: int
    printful_id: int
    external_id: str
    name: str
    retail_price: str
    currency: str
    size: Optional[str] = None
    color: Optional[str] = None
    is_enabled: bool = True
    in_stock: bool = True
    preview_images: List[str] = []

    class Config:
        from_attributes = True


class ProductCategoryResponse(BaseModel):
    id: int
    name: str
    slug: str
    color: Optional[str] = None
    is_primary: bool = False


class ProductResponse(BaseModel):
    id: int
    printful_id: int
    external_id: str
    name: str
    thumbnail_url: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    is_ignored: bool = False
    synced_at: Optional[datetime] = None
    images: List[str] = []
    variants: List[VariantResponse] = []
    categories: List[ProductCategoryResponse] = []
    tags: List[str] = []
    enhancement: Optional[EnhancementResponse] = None


class ProductUpdate(BaseModel):
    is_active: Optional[bool] = None


class CategoryAssignment(BaseModel):
    category_ids: List[int]
    primary_category_id: Optional[int] = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None

    class Config:
        from_attributes = True
