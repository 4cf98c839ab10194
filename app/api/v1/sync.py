import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import require_admin
from app.core.config import settings
from app.db.models import SyncStatus
from app.db.session import get_db
from app.schemas.sync import SyncLogResponse, SyncTriggerResponse
from app.services.product import (
    cancel_stuck_sync_logs, create_sync_log, get_active_sync_logs, get_recent_sync_logs, get_sync_log_by_id,
)
from app.services.sync import run_product_sync_in_background

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/admin/sync",
    tags=["sync"],
    dependencies=[Depends(require_admin)],
)


@router.post("", response_model=SyncTriggerResponse, status_code=status.HTTP_202_ACCEPTED)
async def trigger_sync(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    active = await get_active_sync_logs(db, stale_after_minutes=settings.SYNC_STALE_AFTER_MINUTES)
    if active:
        logger.warning(f"Sync trigger rejected, sync {active[0].id} is still {active[0].status}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Sync {active[0].id} is already in progress",
        )

    options = settings.sync_options()
    sync_log = await create_sync_log(
        db,
        operation=options.operation,
        status=SyncStatus.QUEUED.value,
        current_step="Sync queued for processing",
    )
    background_tasks.add_task(run_product_sync_in_background, sync_log.id)
    logger.info(f"Sync {sync_log.id} queued")

    return SyncTriggerResponse(
        message="Sync started",
        sync_log_id=sync_log.id,
        mode="serverless" if settings.is_serverless else "local",
    )


@router.get("", response_model=list[SyncLogResponse])
async def list_sync_logs(
    active: bool = False,
    limit: int = 10,
    db: AsyncSession = Depends(get_db),
):
    if limit < 1 or limit > 100:
        limit = 10
    if active:
        return await get_active_sync_logs(db)
    return await get_recent_sync_logs(db, limit=limit)


@router.get("/{sync_log_id}", response_model=SyncLogResponse)
async def read_sync_log(
    sync_log_id: int,
    db: AsyncSession = Depends(get_db),
):
    sync_log = await get_sync_log_by_id(db, sync_log_id)
    if not sync_log:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sync log not found")
    return sync_log


@router.post("/cleanup-stuck")
async def cleanup_stuck_syncs(
    older_than_minutes: int = None,
    db: AsyncSession = Depends(get_db),
):
    minutes = older_than_minutes or settings.SYNC_STALE_AFTER_MINUTES
    stuck = await cancel_stuck_sync_logs(db, minutes)
    return {
        "cancelled": len(stuck),
        "sync_log_ids": [sync_log.id for sync_log in stuck],
    }
