"""Task listing and completion routes."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.task import TaskSummary, TaskUpdateRequest, TaskUpdateResponse
from app.core.auth import get_current_user_id
from app.db.deps import get_db
from app.db.models.action_log import ActionLog
from app.db.models.task import Task
from app.observability.metrics import log_metric, record_latency
from app.observability.tracing import trace
from app.services import storage

router = APIRouter(prefix="/api")


@router.get("/tasks", response_model=List[TaskSummary], tags=["tasks"])
def list_tasks(
    http_request: Request,
    task_date: Optional[date] = Query(default=None, alias="date"),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> List[TaskSummary]:
    """List tasks for one date, or the caller's most recent tasks."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata: Dict[str, Any] = {
        "route": "/api/tasks",
        "date": task_date.isoformat() if task_date else None,
        "limit": limit,
    }

    with trace("task.list", metadata=metadata, user_id=str(user_id), request_id=request_id):
        if task_date:
            tasks = storage.get_tasks_for_date(db, user_id, task_date)
        else:
            tasks = storage.get_user_tasks(db, user_id, limit)

    log_metric("task.list.count", len(tasks), metadata={"user_id": str(user_id)})
    return [TaskSummary.model_validate(task) for task in tasks]


@router.patch("/tasks/{task_id}", response_model=TaskUpdateResponse, tags=["tasks"])
def update_task_completion(
    task_id: UUID,
    payload: TaskUpdateRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TaskUpdateResponse:
    """Mark a task complete or incomplete."""
    task = db.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    if task.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Task does not belong to user")

    request_id = getattr(http_request.state, "request_id", None)
    metadata: Dict[str, Any] = {
        "route": f"/api/tasks/{task_id}",
        "task_id": str(task_id),
        "completed": payload.completed,
    }

    changed = False
    try:
        with record_latency("task.complete", metadata={"task_id": str(task_id)}), trace(
            "task.complete",
            metadata=metadata,
            user_id=str(user_id),
            request_id=request_id,
        ):
            if task.completed != payload.completed:
                changed = True
                task.completed = payload.completed
                task.completed_at = datetime.now(timezone.utc) if payload.completed else None
                db.add(
                    ActionLog(
                        user_id=user_id,
                        action_type="task_completed" if payload.completed else "task_uncompleted",
                        action_payload={
                            "task_id": str(task.id),
                            "date": task.date.isoformat(),
                            "related_goal_id": str(task.related_goal_id) if task.related_goal_id else None,
                            "request_id": request_id,
                        },
                        reason="Task completion toggled",
                    )
                )
                db.add(task)
                db.commit()
    except Exception:
        db.rollback()
        raise

    log_metric(
        "task.complete.changed",
        1 if changed else 0,
        metadata={"user_id": str(user_id), "task_id": str(task_id)},
    )

    return TaskUpdateResponse(
        id=task.id,
        completed=bool(task.completed),
        completed_at=task.completed_at,
        request_id=request_id or "",
    )
