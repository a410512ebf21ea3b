import logging
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from crumbs.core.auth import SessionUser, require_user_session
from crumbs.core.config import PRODUCTION_HISTORY_LIMIT
from crumbs.schemas.production import ProductionBatchRequest, ProductionLogResponse
from crumbs.schemas.response import SuccessResponse
from crumbs.services.production_service import (
    execute_production_batch,
    list_production_logs,
    undo_production,
)

log = logging.getLogger("crumbs.api.production")

router = APIRouter()


@router.post("/batches", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def produce_batch_endpoint(request_data: ProductionBatchRequest,
                                 session: SessionUser = Depends(require_user_session)):
    """
    Produces every requested recipe and deducts stock, or rejects the whole
    batch (404 unknown recipe, 409 insufficient stock) without changing anything.
    """
    result = await execute_production_batch(session.id, request_data.items)
    log.info(f"Batch produced for tenant {session.id}: {len(result.log_ids)} log(s).")
    return SuccessResponse(data=result.model_dump(mode="json"))


@router.get("/logs", response_model=SuccessResponse)
async def list_logs_endpoint(limit: int = Query(PRODUCTION_HISTORY_LIMIT, gt=0, le=PRODUCTION_HISTORY_LIMIT),
                             session: SessionUser = Depends(require_user_session)):
    """Most recent production logs, newest first."""
    logs = await list_production_logs(session.id, limit=limit)
    return SuccessResponse(data=[ProductionLogResponse.from_model(entry).model_dump(mode="json") for entry in logs])


@router.delete("/logs/{log_id}", response_model=SuccessResponse)
async def undo_log_endpoint(log_id: UUID, session: SessionUser = Depends(require_user_session)):
    """Undoes a production log and restores the stock it deducted."""
    await undo_production(session.id, log_id)
    return SuccessResponse(data={"id": str(log_id), "undone": True})
