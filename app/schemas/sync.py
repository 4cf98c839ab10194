from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class SyncOptions(BaseModel):
    max_products: int = Field(200, ge=1)
    timeout: float = Field(15 * 60, gt=0)
    batch_size: int = Field(5, ge=1)
    retry_attempts: int = Field(2, ge=0)
    batch_timeout: float = Field(60.0, gt=0)
    max_deletions: int = Field(10, ge=0)
    cleanup_margin: float = Field(30.0, ge=0)
    page_size: int = Field(20, ge=1, le=100)
    item_retry_attempts: int = Field(2, ge=0)
    item_retry_delay: float = Field(1.0, ge=0)
    fetch_retry_delay: float = Field(2.0, ge=0)
    request_delay: float = Field(0.05, ge=0)
    batch_pause: float = Field(1.0, ge=0)
    operation: str = "improved_sync"


class ProductSyncResult(BaseModel):
    created: bool = False
    updated: bool = False
    variants_created: int = 0
    variants_updated: int = 0
    variants_deleted: int = 0


class SyncLogResponse(BaseModel):
    id: int
    operation: str
    status: str
    current_step: Optional[str] = None
    progress: int = 0
    total_products: int = 0
    current_product_index: int = 0
    current_product_name: Optional[str] = None
    estimated_time_remaining: Optional[int] = None
    products_processed: int = 0
    products_created: int = 0
    products_updated: int = 0
    products_deleted: int = 0
    variants_processed: int = 0
    variants_created: int = 0
    variants_updated: int = 0
    variants_deleted: int = 0
    warnings: Optional[str] = None
    error_message: Optional[str] = None
    started_at: datetime
    last_updated: datetime
    completed_at: Optional[datetime] = None
    duration: Optional[int] = None

    class Config:
        from_attributes = True


class SyncTriggerResponse(BaseModel):
    message: str
    sync_log_id: int
    mode: str
