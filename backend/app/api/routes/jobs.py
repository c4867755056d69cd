"""Operational endpoints for the daily generation job."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.jobs import JobRunRequest, JobRunResponse
from app.core.config import settings
from app.db.deps import get_db
from app.observability.metrics import log_metric, record_latency
from app.observability.tracing import trace
from app.services.generation_client import TaskGenerationClient, get_generation_client
from app.services.task_generator import (
    JobRunResult,
    generate_tasks_for_all_users,
    generate_tasks_for_user,
)
from app.worker.scheduler_main import next_generation_time

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/jobs", tags=["jobs"])
def get_jobs_config(request: Request) -> dict:
    request_id = getattr(request.state, "request_id", None)
    with trace("jobs.config", metadata={"request_id": request_id}, request_id=request_id):
        next_run = next_generation_time(datetime.now(timezone.utc))
        data = {
            "scheduler_enabled": settings.scheduler_enabled,
            "schedule": {
                "timezone": settings.scheduler_timezone,
                "daily_time": f"{settings.daily_job_hour:02d}:{settings.daily_job_minute:02d}",
                "next_run": next_run.isoformat() if next_run else None,
            },
        }
    return {**data, "request_id": request_id or ""}


@router.post("/jobs/run-now", response_model=JobRunResponse, tags=["jobs"])
def run_job_now(
    request: Request,
    payload: JobRunRequest,
    db: Session = Depends(get_db),
    client: TaskGenerationClient = Depends(get_generation_client),
) -> JobRunResponse:
    """Run tomorrow's generation immediately for one user or every active user."""
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Run-now only allowed in debug mode")

    request_id = getattr(request.state, "request_id", None)
    metadata = {"job": "daily_generation", "user_id": str(payload.user_id) if payload.user_id else None}
    try:
        with record_latency("jobs.run_now", metadata=metadata), trace(
            "jobs.run_now", metadata=metadata, request_id=request_id
        ):
            if payload.user_id:
                result = _run_single_user(db, client, payload.user_id, payload.replace_existing)
            else:
                result = generate_tasks_for_all_users(db, client=client, replace_existing=payload.replace_existing)
    except Exception:
        logger.exception("Run-now generation failed (user=%s)", payload.user_id or "all")
        log_metric("jobs.run_now.failure", 1, metadata=metadata)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate tasks")

    log_metric("jobs.run_now.success", 1, metadata=metadata)
    return JobRunResponse(
        job="daily_generation",
        target_date=result.target_date,
        users_processed=result.users_processed,
        users_skipped=result.users_skipped,
        users_failed=result.users_failed,
        tasks_written=result.tasks_written,
        request_id=request_id or "",
    )


def _run_single_user(
    db: Session, client: TaskGenerationClient, user_id: UUID, replace_existing: bool
) -> JobRunResult:
    target_date = date.today() + timedelta(days=1)
    outcome = generate_tasks_for_user(db, user_id, target_date, replace_existing=replace_existing, client=client)
    return JobRunResult(
        target_date=target_date,
        users_processed=0 if outcome.skipped else 1,
        users_skipped=1 if outcome.skipped else 0,
        tasks_written=outcome.tasks_written,
    )
