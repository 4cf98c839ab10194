"""
Typed shapes for Printful store payloads.

Responses are validated once, at the client boundary, so the sync engine
works with complete objects instead of loosely shaped dicts.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator


OUT_OF_STOCK_STATUSES = {"out_of_stock", "temporary_out_of_stock", "discontinued"}


def is_http_url(value: Optional[str]) -> bool:
    if not value or not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class RemoteFile(BaseModel):
    id: Optional[int] = None
    type: str = "default"
    url: Optional[str] = None
    preview_url: Optional[str] = None
    thumbnail_url: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, value):
        return value or "default"

    @property
    def image_url(self) -> Optional[str]:
        for candidate in (self.preview_url, self.url):
            if is_http_url(candidate):
                return candidate
        return None


class RemoteVariant(BaseModel):
    id: int
    external_id: str = ""
    name: str
    retail_price: str
    currency: str = "USD"
    size: Optional[str] = None
    color: Optional[str] = None
    sku: Optional[str] = None
    variant_id: Optional[int] = None
    is_ignored: bool = False
    availability_status: Optional[str] = None
    files: List[RemoteFile] = []
    options: List[Dict[str, Any]] = []

    @field_validator("external_id", "currency", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else str(value)

    @field_validator("retail_price", mode="before")
    @classmethod
    def validate_price(cls, value):
        if value is None or value == "":
            raise ValueError("retail_price is required")
        try:
            price = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Invalid retail price: {value!r}")
        if not price.is_finite():
            raise ValueError(f"Invalid retail price: {value!r}")
        return str(price)

    @field_validator("files", "options", mode="before")
    @classmethod
    def none_to_list(cls, value):
        return value or []

    @property
    def price(self) -> Decimal:
        return Decimal(self.retail_price)

    @property
    def in_stock(self) -> bool:
        return (self.availability_status or "active") not in OUT_OF_STOCK_STATUSES

    @property
    def is_enabled(self) -> bool:
        return not self.is_ignored

    @property
    def preview_images(self) -> List[str]:
        """Product photos only; print files and mockup sources are dropped."""
        return [f.image_url for f in self.files if f.type == "preview" and f.image_url]


class RemoteProductSummary(BaseModel):
    id: int
    external_id: str = ""
    name: str
    thumbnail_url: Optional[str] = None
    is_ignored: bool = False
    variants: int = 0
    synced: int = 0

    @field_validator("external_id", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else str(value)


class RemoteProductPage(BaseModel):
    items: List[RemoteProductSummary]
    total: Optional[int] = None
    offset: int = 0
    limit: int = 0


class RemoteProduct(BaseModel):
    id: int
    external_id: str = ""
    name: str
    thumbnail_url: Optional[str] = None
    is_ignored: bool = False
    tags: List[str] = []
    metadata: Dict[str, Any] = {}
    variants: List[RemoteVariant] = []

    @field_validator("external_id", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else str(value)

    @field_validator("tags", "variants", mode="before")
    @classmethod
    def none_to_list(cls, value):
        return value or []

    @field_validator("metadata", mode="before")
    @classmethod
    def none_to_dict(cls, value):
        return value or {}

    @classmethod
    def from_detail(cls, payload: dict) -> "RemoteProduct":
        """Build from the `result` of GET /store/products/{id}."""
        data = dict(payload.get("sync_product") or {})
        data["variants"] = payload.get("sync_variants") or []
        return cls(**data)

    @property
    def preview_images(self) -> List[str]:
        images: List[str] = []
        for variant in self.variants:
            for url in variant.preview_images:
                if url not in images:
                    images.append(url)
        return images
