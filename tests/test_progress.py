from app.db.models import SyncStatus
from app.schemas.sync import ProductSyncResult
from app.services.progress import (
    FETCH_END, FETCH_START, PROCESSING_END, PROCESSING_START, SyncProgressTracker, fetch_progress,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def created(variants=1):
    return ProductSyncResult(created=True, variants_created=variants)


def test_fetch_progress_stays_in_band():
    assert fetch_progress(0, 10) == FETCH_START
    assert fetch_progress(5, 10) == 10
    assert fetch_progress(10, 10) == FETCH_END
    assert fetch_progress(50, 10) == FETCH_END
    assert fetch_progress(3, 0) == FETCH_START


def test_processing_band_and_completion():
    tracker = SyncProgressTracker(1, clock=FakeClock())
    assert tracker.advance(SyncStatus.QUEUED.value, "Checking", 1)["progress"] == 1
    assert tracker.advance(SyncStatus.FETCHING_PRODUCTS.value, "Fetching", 5)["progress"] == 5

    snapshot = tracker.initialize(2)
    assert snapshot["progress"] == PROCESSING_START
    assert snapshot["total_products"] == 2
    assert snapshot["status"] == SyncStatus.PROCESSING_PRODUCTS.value

    tracker.start_product(0, "Tee")
    assert tracker.current_product_index == 1
    assert tracker.current_product_name == "Tee"
    tracker.complete_product(created(variants=2))
    tracker.start_product(1, "Mug")
    snapshot = tracker.complete_product(ProductSyncResult(updated=True, variants_updated=1, variants_deleted=1))
    assert snapshot["progress"] == PROCESSING_END
    assert snapshot["products_created"] == 1
    assert snapshot["products_updated"] == 1
    assert snapshot["variants_processed"] == 3
    assert snapshot["variants_deleted"] == 1

    final = tracker.complete(tracker.final_status())
    assert final["status"] == SyncStatus.SUCCESS.value
    assert final["progress"] == 100
    assert final["error_message"] is None
    assert final["warnings"] is None


def test_progress_never_moves_backwards():
    tracker = SyncProgressTracker(1, clock=FakeClock())
    tracker.advance(SyncStatus.PROCESSING_PRODUCTS.value, "Cleanup", 90)
    snapshot = tracker.advance(SyncStatus.FETCHING_PRODUCTS.value, "Fetching", 5)
    assert snapshot["progress"] == 90


def test_starting_progress_is_a_floor():
    tracker = SyncProgressTracker(1, clock=FakeClock(), progress=40)
    assert tracker.advance(SyncStatus.QUEUED.value, "Queued", 1)["progress"] == 40
    assert tracker.initialize(10)["progress"] == 40


def test_progress_is_clamped():
    tracker = SyncProgressTracker(1, clock=FakeClock())
    assert tracker.advance(SyncStatus.QUEUED.value, "Queued", 250)["progress"] == 100


def test_estimated_time_remaining():
    clock = FakeClock()
    tracker = SyncProgressTracker(1, clock=clock)
    tracker.initialize(4)

    tracker.start_product(0, "Tee")
    clock.now = 10.0
    snapshot = tracker.complete_product(created())

    assert snapshot["estimated_time_remaining"] == 30


def test_errors_make_run_partial():
    tracker = SyncProgressTracker(1, clock=FakeClock())
    tracker.initialize(2)
    tracker.complete_product(created())
    tracker.fail_product("Failed to process product Mug")
    tracker.add_warning("Failed to fetch details for product 7")

    assert tracker.final_status() == SyncStatus.PARTIAL.value
    final = tracker.complete(tracker.final_status())
    assert final["progress"] == 100
    assert final["error_message"] == "Failed to process product Mug"
    assert final["warnings"] == "Failed to fetch details for product 7"
    assert final["current_step"] == "Sync completed with errors"


def test_error_keeps_last_progress_and_records_duration():
    clock = FakeClock()
    tracker = SyncProgressTracker(1, clock=clock)
    tracker.initialize(4)
    tracker.start_product(0, "Tee")
    tracker.complete_product(created())
    before = tracker.progress
    clock.now = 2.5

    final = tracker.complete(SyncStatus.ERROR.value, error_message="Sync timeout after 2s")

    assert final["status"] == SyncStatus.ERROR.value
    assert final["progress"] == before
    assert final["error_message"] == "Sync timeout after 2s"
    assert final["duration"] == 2500
    assert final["products_processed"] == 1
    assert final["completed_at"] is not None
