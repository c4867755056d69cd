"""On-demand task generation for the calling user."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.generation import GenerateTasksRequest, GenerateTasksResponse
from app.core.auth import get_current_user_id
from app.db.deps import get_db
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.generation_client import TaskGenerationClient, get_generation_client
from app.services.task_generator import generate_tasks_for_user

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


@router.post("/tasks/generate", response_model=GenerateTasksResponse, tags=["generation"])
def generate_tasks(
    http_request: Request,
    payload: Optional[GenerateTasksRequest] = None,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    client: TaskGenerationClient = Depends(get_generation_client),
) -> GenerateTasksResponse:
    """Generate tasks for the given date, defaulting to tomorrow."""
    payload = payload or GenerateTasksRequest()
    target_date = payload.date or date.today() + timedelta(days=1)
    return _run_generation(http_request, db, client, user_id, target_date, payload.replace_existing)


@router.post("/generate-tasks", response_model=GenerateTasksResponse, tags=["generation"])
def generate_tasks_for_today(
    http_request: Request,
    payload: Optional[GenerateTasksRequest] = None,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    client: TaskGenerationClient = Depends(get_generation_client),
) -> GenerateTasksResponse:
    """Generate tasks for today."""
    payload = payload or GenerateTasksRequest()
    logger.info("Manual task generation triggered for user %s", user_id)
    return _run_generation(http_request, db, client, user_id, date.today(), payload.replace_existing)


def _run_generation(
    http_request: Request,
    db: Session,
    client: TaskGenerationClient,
    user_id: UUID,
    target_date: date,
    replace_existing: bool,
) -> GenerateTasksResponse:
    request_id = getattr(http_request.state, "request_id", None)
    try:
        with trace(
            "generation.manual",
            metadata={"route": http_request.url.path, "target_date": target_date.isoformat()},
            user_id=str(user_id),
            request_id=request_id,
        ):
            result = generate_tasks_for_user(
                db,
                user_id,
                target_date,
                replace_existing=replace_existing,
                client=client,
            )
    except Exception:
        logger.exception("Manual task generation failed for user %s", user_id)
        log_metric("generation.manual.failure", 1, metadata={"user_id": str(user_id)})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate tasks")

    log_metric("generation.manual.success", 1, metadata={"user_id": str(user_id)})
    message = "No journals or goals to generate from" if result.skipped else "Tasks generated successfully"
    return GenerateTasksResponse(
        message=message,
        date=target_date,
        skipped=result.skipped,
        tasks_generated=result.tasks_written,
        fallback_used=result.fallback_used,
    )
