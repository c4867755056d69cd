"""Goal API routes."""
from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.goal import GoalCreateRequest, GoalDeleteResponse, GoalResponse, GoalUpdateRequest
from app.core.auth import get_current_user_id
from app.db.deps import get_db
from app.db.models.goal import Goal
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import storage
from app.services.user_service import get_or_create_user

router = APIRouter(prefix="/api")


@router.get("/goals", response_model=List[GoalResponse], tags=["goals"])
def list_goals(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> List[GoalResponse]:
    return [GoalResponse.model_validate(goal) for goal in storage.get_user_goals(db, user_id)]


@router.post("/goals", response_model=GoalResponse, status_code=status.HTTP_201_CREATED, tags=["goals"])
def create_goal(
    payload: GoalCreateRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalResponse:
    request_id = getattr(http_request.state, "request_id", None)
    try:
        with trace(
            "goal.create",
            metadata={"route": "/api/goals", "duration": payload.duration, "category": payload.category},
            user_id=str(user_id),
            request_id=request_id,
        ):
            get_or_create_user(db, user_id)
            goal = storage.create_goal(db, user_id, **payload.model_dump())
            db.commit()
            db.refresh(goal)
    except Exception:
        db.rollback()
        raise

    log_metric("goal.create.success", 1, metadata={"user_id": str(user_id)})
    return GoalResponse.model_validate(goal)


@router.patch("/goals/{goal_id}", response_model=GoalResponse, tags=["goals"])
def update_goal(
    goal_id: UUID,
    payload: GoalUpdateRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalResponse:
    """Apply a partial update (progress, status, ...)."""
    goal = _owned_goal(db, goal_id, user_id)
    updates = payload.model_dump(exclude_unset=True)
    request_id = getattr(http_request.state, "request_id", None)
    try:
        with trace(
            "goal.update",
            metadata={"goal_id": str(goal_id), "fields": sorted(updates)},
            user_id=str(user_id),
            request_id=request_id,
        ):
            if updates:
                storage.update_goal(db, goal, updates)
                db.commit()
                db.refresh(goal)
    except Exception:
        db.rollback()
        raise

    log_metric("goal.update.success", 1, metadata={"goal_id": str(goal_id)})
    return GoalResponse.model_validate(goal)


@router.delete("/goals/{goal_id}", response_model=GoalDeleteResponse, tags=["goals"])
def delete_goal(
    goal_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalDeleteResponse:
    """Delete a goal; tasks that pointed at it keep existing without the link."""
    goal = _owned_goal(db, goal_id, user_id)
    try:
        detached = storage.delete_goal(db, goal)
        db.commit()
    except Exception:
        db.rollback()
        raise
    log_metric("goal.delete.detached_tasks", detached, metadata={"goal_id": str(goal_id)})
    return GoalDeleteResponse(id=goal_id, detached_tasks=detached)


def _owned_goal(db: Session, goal_id: UUID, user_id: UUID) -> Goal:
    goal = storage.get_goal(db, goal_id)
    if not goal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    if goal.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Goal does not belong to user")
    return goal
