"""Admin API routes: reconciliation, reindexing and object event intake."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from common.logging_config import get_logger
from pagevault import config, service_locator
from pagevault.auth import get_admin_user
from pagevault.reconciler import OUTCOME_SKIPPED, Reconciler
from pagevault.repositories.user_repository import User
from pagevault.schemas.admin import (
    EventOutcome,
    ObjectEventsRequest,
    ObjectEventsResponse,
    ReconcileResponse,
    ReindexResponse
)
from pagevault.services.index_service import IndexService
from pagevault.sync_task import SyncTask

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

OBJECT_CREATED_ACTIONS = ("PutObject", "CompleteMultipartUpload", "ObjectCreated:")


def _get_sync_task() -> SyncTask:
    task = service_locator.get_sync_task()
    if task is None:
        task = SyncTask()
        service_locator.set_sync_task(task)
    return task


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile(current_user: User = Depends(get_admin_user)):
    """
    Run a reconciliation sweep now.

    Raises:
        - 403: Caller is not an admin
        - 409: A sweep is already running
        - 503: Object store listing failed
    """
    logger.info(f"Manual reconciliation requested [user_id={current_user.user_id}]")
    report = await _get_sync_task().run_sweep()
    return ReconcileResponse(**report.to_dict())


@router.post("/reindex", response_model=ReindexResponse)
async def reindex(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    current_user: User = Depends(get_admin_user)
):
    """
    Process one batch of the reindex backlog.

    Parameters:
        - limit: Maximum files to process (default REINDEX_BATCH_SIZE)
    """
    index_service = IndexService()
    processed = await index_service.reindex_batch(limit or config.REINDEX_BATCH_SIZE)
    return ReindexResponse(processed=processed)


@router.post("/events", response_model=ObjectEventsResponse)
async def object_events(
    request: ObjectEventsRequest,
    current_user: User = Depends(get_admin_user)
):
    """
    Intake object notifications from the bucket's event queue.

    Object-created events run the single-key reconciliation path; other
    actions are acknowledged and ignored.
    """
    reconciler = Reconciler()
    results = []

    for event in request.events:
        key = event.object_key
        if not event.action.startswith(OBJECT_CREATED_ACTIONS):
            results.append(EventOutcome(key=key, action=event.action, outcome="ignored"))
            continue
        if not key:
            logger.warning(f"Object event without a key, skipping [action={event.action}]")
            results.append(EventOutcome(key=None, action=event.action, outcome=OUTCOME_SKIPPED))
            continue

        outcome = await reconciler.reconcile_key(key)
        results.append(EventOutcome(key=key, action=event.action, outcome=outcome))

    return ObjectEventsResponse(results=results)
