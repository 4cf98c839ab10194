"""
Progress bookkeeping for a single sync run.

The tracker never touches the database. Each method returns a snapshot dict
whose keys are `SyncLog` columns, and the caller decides when to persist it.
Percentages are split into bands so a progress bar only moves forward:

    queued        1
    fetching      5 - 15
    processing   15 - 85
    cleanup      90
    finalizing   95
    done        100
"""
import time
from datetime import datetime
from typing import Callable, List, Optional

from app.db.models import SyncStatus
from app.schemas.sync import ProductSyncResult

QUEUED_PROGRESS = 1
FETCH_START = 5
FETCH_END = 15
PROCESSING_START = 15
PROCESSING_END = 85
CLEANUP_PROGRESS = 90
FINALIZING_PROGRESS = 95
COMPLETE_PROGRESS = 100


def fetch_progress(fetched: int, expected: int) -> int:
    if expected <= 0:
        return FETCH_START
    ratio = min(fetched / expected, 1.0)
    return FETCH_START + round(ratio * (FETCH_END - FETCH_START))


class SyncProgressTracker:
    def __init__(self, sync_log_id: int, clock: Callable[[], float] = time.monotonic, progress: int = 0):
        self.sync_log_id = sync_log_id
        self._clock = clock
        self._started = clock()
        self._processing_started: Optional[float] = None

        self.status = SyncStatus.QUEUED.value
        self.current_step = "Initializing sync process"
        self.progress = progress
        self.total_products = 0
        self.current_product_index = 0
        self.current_product_name: Optional[str] = None
        self.estimated_time_remaining: Optional[int] = None
        self.items_done = 0

        self.products_processed = 0
        self.products_created = 0
        self.products_updated = 0
        self.products_deleted = 0
        self.variants_processed = 0
        self.variants_created = 0
        self.variants_updated = 0
        self.variants_deleted = 0

        self.warnings: List[str] = []
        self.errors: List[str] = []

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    def _set_progress(self, value: int) -> None:
        value = max(0, min(COMPLETE_PROGRESS, int(value)))
        self.progress = max(self.progress, value)

    def _processing_progress(self, done: int) -> int:
        if self.total_products <= 0:
            return PROCESSING_END
        ratio = min(done / self.total_products, 1.0)
        return PROCESSING_START + round(ratio * (PROCESSING_END - PROCESSING_START))

    def counters(self) -> dict:
        return {
            "products_processed": self.products_processed,
            "products_created": self.products_created,
            "products_updated": self.products_updated,
            "products_deleted": self.products_deleted,
            "variants_processed": self.variants_processed,
            "variants_created": self.variants_created,
            "variants_updated": self.variants_updated,
            "variants_deleted": self.variants_deleted,
        }

    def snapshot(self) -> dict:
        return {
            "status": self.status,
            "current_step": self.current_step,
            "progress": self.progress,
            "total_products": self.total_products,
            "current_product_index": self.current_product_index,
            "current_product_name": self.current_product_name,
            "estimated_time_remaining": self.estimated_time_remaining,
            **self.counters(),
        }

    def advance(self, status: str, current_step: str, progress: int) -> dict:
        """Phase transition outside the per-product loop (queued, fetch, cleanup, finalize)."""
        self.status = status
        self.current_step = current_step
        self._set_progress(progress)
        return self.snapshot()

    def initialize(self, total_products: int) -> dict:
        self.status = SyncStatus.PROCESSING_PRODUCTS.value
        self.total_products = total_products
        self.current_product_index = 0
        self.current_product_name = None
        self.items_done = 0
        self.estimated_time_remaining = None
        self._processing_started = self._clock()
        self.current_step = f"Processing {total_products} products"
        self._set_progress(PROCESSING_START)
        return self.snapshot()

    def start_product(self, index: int, name: str) -> dict:
        self.current_product_index = index + 1
        self.current_product_name = name
        self.current_step = f"Processing {name} ({index + 1}/{self.total_products})"
        self._set_progress(self._processing_progress(index))
        return self.snapshot()

    def complete_product(self, result: ProductSyncResult) -> dict:
        self.products_processed += 1
        if result.created:
            self.products_created += 1
        if result.updated:
            self.products_updated += 1
        self.variants_created += result.variants_created
        self.variants_updated += result.variants_updated
        self.variants_deleted += result.variants_deleted
        self.variants_processed += result.variants_created + result.variants_updated
        return self._item_finished()

    def fail_product(self, message: str) -> dict:
        self.errors.append(message)
        return self._item_finished()

    def _item_finished(self) -> dict:
        self.items_done += 1
        started = self._processing_started if self._processing_started is not None else self._started
        elapsed = self._clock() - started
        remaining = max(self.total_products - self.items_done, 0)
        self.estimated_time_remaining = round(elapsed / self.items_done * remaining)
        self._set_progress(self._processing_progress(self.items_done))
        return self.snapshot()

    def record_deletion(self) -> None:
        self.products_deleted += 1

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def final_status(self) -> str:
        return SyncStatus.PARTIAL.value if self.errors else SyncStatus.SUCCESS.value

    def complete(self, status: str, error_message: Optional[str] = None) -> dict:
        self.status = status
        self.estimated_time_remaining = 0
        self.current_product_name = None
        if status == SyncStatus.ERROR.value:
            self.current_step = "Sync failed with error"
        else:
            self._set_progress(COMPLETE_PROGRESS)
            if status == SyncStatus.PARTIAL.value:
                self.current_step = "Sync completed with errors"
            else:
                self.current_step = "Sync completed successfully"

        if error_message is None and self.errors:
            error_message = "; ".join(self.errors)

        return {
            **self.snapshot(),
            "error_message": error_message,
            "warnings": "\n".join(self.warnings) if self.warnings else None,
            "completed_at": datetime.utcnow(),
            "duration": round(self.elapsed * 1000),
        }
