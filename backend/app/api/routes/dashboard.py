"""Dashboard API routes."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.schemas.dashboard import DashboardResponse
from app.core.auth import get_current_user_id
from app.db.deps import get_db
from app.observability.metrics import log_metric, record_latency
from app.observability.tracing import trace
from app.services.dashboard_service import get_dashboard_data

router = APIRouter(prefix="/api")


@router.get("/dashboard", response_model=DashboardResponse, tags=["dashboard"])
def get_dashboard(
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> DashboardResponse:
    request_id = getattr(http_request.state, "request_id", None)

    with record_latency("dashboard.get", metadata={"user_id": str(user_id)}), trace(
        "dashboard.get",
        metadata={"route": "/api/dashboard"},
        user_id=str(user_id),
        request_id=request_id,
    ):
        data = get_dashboard_data(db, user_id)

    log_metric("dashboard.get.tasks_count", len(data.tasks), metadata={"user_id": str(user_id)})
    return data
