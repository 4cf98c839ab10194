"""
Printful -> local catalog reconciliation.

A run lists the remote store, upserts every product and its variants in
small sequential batches, removes a bounded number of products that are no
longer listed upstream, and records its progress in a `SyncLog` row that
the admin panel polls.
"""
import asyncio
import logging
import math
import time
from typing import Callable, List, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_fixed

from app.core.circuit_breaker import CircuitBreaker
from app.core.config import settings
from app.core.printful_client import PrintfulClient, printful_client
from app.db.models import Product, SyncLog, SyncStatus
from app.db.session import async_session
from app.schemas.printful import RemoteProduct
from app.schemas.sync import ProductSyncResult, SyncOptions
from app.services.category import assign_category_to_product, auto_categorize_product
from app.services.enhancement import EnhancementCatalog, preserve_enhancement
from app.services.product import (
    count_products,
    create_sync_log,
    delete_product,
    get_sync_log_by_id,
    list_all_products,
    update_sync_log,
    upsert_product,
    upsert_variants,
)
from app.services.progress import (
    CLEANUP_PROGRESS,
    FETCH_START,
    FINALIZING_PROGRESS,
    QUEUED_PROGRESS,
    SyncProgressTracker,
    fetch_progress,
)
from app.services.tag import assign_tags_to_product, auto_tag_product

logger = logging.getLogger(__name__)

SUMMARY_SAMPLE_SIZE = 3


class SyncError(Exception):
    pass


class SyncTimeoutError(SyncError):
    pass


def default_breaker() -> CircuitBreaker:
    return CircuitBreaker(
        failure_threshold=settings.CIRCUIT_FAILURE_THRESHOLD,
        call_timeout=settings.CIRCUIT_CALL_TIMEOUT_SECONDS,
        reset_timeout=settings.CIRCUIT_RESET_SECONDS,
    )


class ProductSync:
    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = None,
        client: PrintfulClient = None,
        catalog: EnhancementCatalog = None,
        options: SyncOptions = None,
        breaker: CircuitBreaker = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session_factory = session_factory or async_session
        self.client = client or printful_client
        self.catalog = catalog if catalog is not None else EnhancementCatalog.from_file(settings.ENHANCEMENTS_FILE)
        self.options = options or settings.sync_options()
        self.breaker = breaker or default_breaker()
        self._clock = clock

        self.sync_log_id: Optional[int] = None
        self.tracker: Optional[SyncProgressTracker] = None
        self.listed_ids: Set[int] = set()
        self.listing_truncated = False
        self._batch_done = 0

    async def run(self, sync_log_id: Optional[int] = None) -> SyncLog:
        """Run one full sync. Raises SyncError after recording the failure."""
        await self._initialize_sync_log(sync_log_id)
        logger.info(
            f"Starting product sync {self.sync_log_id} - max products: {self.options.max_products}, "
            f"timeout: {self.options.timeout}s, batch size: {self.options.batch_size}"
        )

        task = asyncio.ensure_future(self._execute())
        try:
            done, _ = await asyncio.wait({task}, timeout=self.options.timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if not done:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            error = SyncTimeoutError(f"Sync timeout after {self.options.timeout}s")
            await self._fail(error)
            raise error

        try:
            task.result()
        except SyncError as e:
            await self._fail(e)
            raise
        except Exception as e:
            await self._fail(e)
            raise SyncError(f"Sync failed: {str(e)}") from e

        return await self._load_sync_log()

    async def _execute(self) -> None:
        await self._update_progress(self.tracker.advance(
            SyncStatus.QUEUED.value, "Checking environment and connections...", QUEUED_PROGRESS
        ))
        await self._check_environment()

        await self._update_progress(self.tracker.advance(
            SyncStatus.FETCHING_PRODUCTS.value, "Fetching products from Printful API...", FETCH_START
        ))
        products = await self._fetch_products_with_retry()
        logger.info(f"Fetched {len(products)} products from Printful")

        await self._update_progress(self.tracker.initialize(len(products)))
        await self._process_in_batches(products)

        remaining = self.options.timeout - self.tracker.elapsed
        if remaining > self.options.cleanup_margin:
            await self._cleanup()
        else:
            message = f"Skipped cleanup: only {remaining:.0f}s left before timeout"
            self.tracker.add_warning(message)
            logger.warning(message)

        await self._finalize()

    async def _initialize_sync_log(self, sync_log_id: Optional[int]) -> None:
        async with self.session_factory() as db:
            if sync_log_id is not None:
                sync_log = await get_sync_log_by_id(db, sync_log_id)
                if not sync_log:
                    raise SyncError(f"Sync log with ID {sync_log_id} not found")
            else:
                sync_log = await create_sync_log(
                    db, operation=self.options.operation, current_step="Initializing sync process"
                )
        self.sync_log_id = sync_log.id
        # a reused row keeps its progress so the stored value never moves backwards
        self.tracker = SyncProgressTracker(sync_log.id, clock=self._clock, progress=sync_log.progress or 0)

    async def _load_sync_log(self) -> SyncLog:
        async with self.session_factory() as db:
            return await get_sync_log_by_id(db, self.sync_log_id)

    async def _update_progress(self, updates: dict) -> None:
        try:
            async with self.session_factory() as db:
                await update_sync_log(db, self.sync_log_id, updates)
        except Exception as e:
            logger.warning(f"Failed to update progress for sync {self.sync_log_id}: {str(e)}")

    async def _check_environment(self) -> None:
        try:
            async with self.session_factory() as db:
                existing = await count_products(db)
        except Exception as e:
            raise SyncError(f"Database connection failed: {str(e)}") from e
        logger.info(f"Database reachable, {existing} products stored locally")

        try:
            await self.breaker.execute(lambda: self.client.list_products(offset=0, limit=1))
        except Exception as e:
            raise SyncError(f"Printful API connection failed: {str(e)}") from e

    def _log_fetch_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        message = f"Fetch attempt {retry_state.attempt_number} failed: {str(error)}"
        self.tracker.add_warning(message)
        logger.warning(f"{message}, retrying in {self.options.fetch_retry_delay}s")

    async def _fetch_products_with_retry(self) -> List[RemoteProduct]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.options.retry_attempts + 1),
            wait=wait_fixed(self.options.fetch_retry_delay),
            before_sleep=self._log_fetch_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._fetch_all_products()
        except Exception as e:
            raise SyncError(
                f"Failed to fetch products after {self.options.retry_attempts} retries: {str(e)}"
            ) from e

    async def _fetch_all_products(self) -> List[RemoteProduct]:
        max_products = self.options.max_products
        limit = self.options.page_size
        products: List[RemoteProduct] = []
        self.listed_ids = set()
        self.listing_truncated = False
        offset = 0

        while True:
            page = await self.breaker.execute(lambda: self.client.list_products(offset=offset, limit=limit))
            if not page.items:
                break

            for summary in page.items:
                if len(products) >= max_products:
                    self.listing_truncated = True
                    break
                self.listed_ids.add(summary.id)
                try:
                    products.append(await self._fetch_detail(summary.id))
                except Exception as e:
                    message = f"Failed to fetch details for product {summary.id} ({summary.name}): {str(e)}"
                    self.tracker.add_warning(message)
                    logger.warning(message)
                if self.options.request_delay:
                    await asyncio.sleep(self.options.request_delay)

            offset += len(page.items)
            expected = min(max_products, page.total) if page.total is not None else max_products
            await self._update_progress(self.tracker.advance(
                SyncStatus.FETCHING_PRODUCTS.value,
                f"Fetched {len(products)} products from Printful",
                fetch_progress(len(products), expected),
            ))

            if self.listing_truncated:
                break
            if page.total is not None and offset >= page.total:
                break
            if len(page.items) < limit:
                break
            if len(products) >= max_products:
                self.listing_truncated = True
                break

        return products

    async def _fetch_detail(self, product_id: int) -> RemoteProduct:
        # Per-product errors skip the product; they must not open the shared breaker
        try:
            return await asyncio.wait_for(
                self.client.get_product_detail(product_id), timeout=self.breaker.call_timeout
            )
        except asyncio.TimeoutError:
            raise TimeoutError(f"Operation timeout after {self.breaker.call_timeout}s")

    async def _process_in_batches(self, products: List[RemoteProduct]) -> None:
        batch_size = self.options.batch_size
        total = len(products)
        total_batches = math.ceil(total / batch_size)

        for batch_number in range(total_batches):
            start = batch_number * batch_size
            batch = products[start:start + batch_size]
            logger.info(f"Processing batch {batch_number + 1}/{total_batches} ({len(batch)} products)")

            self._batch_done = 0
            try:
                await asyncio.wait_for(self._process_batch(batch, start), timeout=self.options.batch_timeout)
            except asyncio.TimeoutError:
                unprocessed = batch[self._batch_done:]
                logger.error(
                    f"Batch {batch_number + 1}/{total_batches} timed out after {self.options.batch_timeout}s, "
                    f"{len(unprocessed)} products not processed"
                )
                for remote in unprocessed:
                    self.tracker.fail_product(f"Batch timeout: product {remote.name} was not processed")

            processed = min(start + len(batch), total)
            await self._update_progress(self.tracker.advance(
                SyncStatus.PROCESSING_PRODUCTS.value,
                f"Processed {processed}/{total} products",
                self.tracker.progress,
            ))

            if batch_number < total_batches - 1 and self.options.batch_pause:
                await asyncio.sleep(self.options.batch_pause)

    async def _process_batch(self, batch: List[RemoteProduct], start: int) -> None:
        for position, remote in enumerate(batch):
            index = start + position
            self.tracker.start_product(index, remote.name)
            try:
                result = await self._process_product_with_retry(remote)
            except Exception as e:
                message = f"Failed to process product {remote.name} ({remote.id}): {str(e)}"
                self.tracker.fail_product(message)
                logger.error(message)
            else:
                self.tracker.complete_product(result)
                logger.debug(f"Processed {remote.name} ({index + 1}/{self.tracker.total_products})")
            self._batch_done = position + 1

    def _log_item_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        logger.warning(f"Product upsert attempt {retry_state.attempt_number} failed: {str(error)}, retrying")

    async def _process_product_with_retry(self, remote: RemoteProduct) -> ProductSyncResult:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.options.item_retry_attempts + 1),
            wait=wait_fixed(self.options.item_retry_delay),
            before_sleep=self._log_item_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                result, product = await self._upsert_product(remote)

        if result.created:
            await self._on_product_created(product)
        return result

    async def _upsert_product(self, remote: RemoteProduct) -> tuple[ProductSyncResult, Product]:
        async with self.session_factory() as db:
            product, created = await upsert_product(db, remote)
            result = await upsert_variants(db, product, remote.variants)
            await db.commit()
        result.created = created
        result.updated = not created
        return result, product

    async def _on_product_created(self, product: Product) -> None:
        try:
            async with self.session_factory() as db:
                category_id = await auto_categorize_product(db, product)
                if category_id:
                    await assign_category_to_product(db, product.id, category_id, is_primary=True)
                tag_ids = await auto_tag_product(db, product)
                if tag_ids:
                    await assign_tags_to_product(db, product.id, tag_ids)
                await db.commit()
        except Exception as e:
            message = f"Failed to categorize product {product.name}: {str(e)}"
            self.tracker.add_warning(message)
            logger.warning(message)

        try:
            async with self.session_factory() as db:
                if await preserve_enhancement(db, product, self.catalog):
                    logger.info(f"Copied static enhancement for {product.name} ({product.external_id})")
        except Exception as e:
            message = f"Failed to preserve enhancement for {product.name}: {str(e)}"
            self.tracker.add_warning(message)
            logger.warning(message)

    async def _cleanup(self) -> None:
        await self._update_progress(self.tracker.advance(
            SyncStatus.PROCESSING_PRODUCTS.value, "Performing safe cleanup of obsolete data...", CLEANUP_PROGRESS
        ))

        if self.listing_truncated:
            message = (
                f"Skipped cleanup: Printful listing was cut off at {self.options.max_products} products, "
                "unlisted products may still exist upstream"
            )
            self.tracker.add_warning(message)
            logger.warning(message)
            return
        if self.options.max_deletions <= 0:
            return

        try:
            async with self.session_factory() as db:
                local_products = await list_all_products(db)
        except Exception as e:
            message = f"Cleanup phase failed: {str(e)}"
            self.tracker.add_warning(message)
            logger.warning(message)
            return

        orphans = [p for p in local_products if p.printful_id not in self.listed_ids]
        if len(orphans) > self.options.max_deletions:
            logger.warning(
                f"{len(orphans)} products no longer exist in Printful, "
                f"deleting only {self.options.max_deletions} this run"
            )

        for product in orphans[:self.options.max_deletions]:
            try:
                await self._delete_product(product)
                self.tracker.record_deletion()
                logger.info(f"Deleted product {product.name} (Printful ID {product.printful_id}), no longer in Printful")
            except Exception as e:
                message = f"Failed to delete product {product.name}: {str(e)}"
                self.tracker.add_warning(message)
                logger.warning(message)

    async def _delete_product(self, product: Product) -> None:
        async with self.session_factory() as db:
            await delete_product(db, product.id)

    async def _finalize(self) -> None:
        await self._update_progress(self.tracker.advance(
            SyncStatus.FINALIZING.value, "Finalizing sync...", FINALIZING_PROGRESS
        ))
        await self._update_progress(self.tracker.complete(self.tracker.final_status()))
        logger.info(self.summary())

    async def _fail(self, error: Exception) -> None:
        message = str(error) or error.__class__.__name__
        logger.error(f"Sync {self.sync_log_id} failed: {message}")
        if self.tracker is None:
            return
        await self._update_progress(self.tracker.complete(SyncStatus.ERROR.value, error_message=message))
        logger.info(self.summary())

    def summary(self) -> str:
        tracker = self.tracker
        lines = [
            f"Sync {self.sync_log_id} finished with status {tracker.status} in {tracker.elapsed:.1f}s",
            f"  Products: {tracker.products_processed} processed, {tracker.products_created} created, "
            f"{tracker.products_updated} updated, {tracker.products_deleted} deleted",
            f"  Variants: {tracker.variants_processed} processed, {tracker.variants_created} created, "
            f"{tracker.variants_updated} updated, {tracker.variants_deleted} deleted",
        ]
        if tracker.warnings:
            lines.append(f"  Warnings ({len(tracker.warnings)}):")
            lines.extend(f"    - {w}" for w in tracker.warnings[:SUMMARY_SAMPLE_SIZE])
        if tracker.errors:
            lines.append(f"  Errors ({len(tracker.errors)}):")
            lines.extend(f"    - {e}" for e in tracker.errors[:SUMMARY_SAMPLE_SIZE])
        return "\n".join(lines)


async def run_product_sync(sync_log_id: Optional[int] = None, **overrides) -> SyncLog:
    """Run a sync with settings-derived options; `overrides` replace individual knobs."""
    sync = ProductSync(options=settings.sync_options(**overrides))
    return await sync.run(sync_log_id=sync_log_id)


async def run_product_sync_in_background(sync_log_id: int) -> None:
    try:
        await run_product_sync(sync_log_id=sync_log_id)
    except SyncError as e:
        logger.error(f"Background sync {sync_log_id} failed: {str(e)}")
    except Exception as e:
        logger.exception(f"Background sync {sync_log_id} crashed: {str(e)}")
