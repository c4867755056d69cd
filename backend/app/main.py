"""Main FastAPI application for the Daily Growth backend."""
from fastapi import FastAPI, Request

from app.api.routes.dashboard import router as dashboard_router
from app.api.routes.generation import router as generation_router
from app.api.routes.goals import router as goals_router
from app.api.routes.jobs import router as jobs_router
from app.api.routes.journals import router as journals_router
from app.api.routes.tasks import router as tasks_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.core.middleware import RequestIDMiddleware
from app.observability.client import get_tracing_client
from app.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(dashboard_router)
app.include_router(journals_router)
app.include_router(goals_router)
app.include_router(generation_router)
app.include_router(tasks_router)
app.include_router(jobs_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    get_tracing_client()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
