from __future__ import annotations

from datetime import date, timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.db.deps import get_db
from app.db.models.action_log import ActionLog
from app.db.models.dashboard_content import DashboardContent
from app.db.models.goal import Goal
from app.db.models.journal import Journal
from app.db.models.task import Task
from app.db.models.user import User
from app.main import app
from app.services import storage
from app.services.generation_client import TaskGenerationClient, get_generation_client


def _build_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    for model in (User, Journal, Goal, Task, DashboardContent, ActionLog):
        model.__table__.create(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def client(monkeypatch):
    TestingSessionLocal = _build_session_factory()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # No API key: every run uses the fallback batch.
    app.dependency_overrides[get_generation_client] = lambda: TaskGenerationClient(None)
    monkeypatch.setattr(settings, "debug", True)
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _seed_user_with_journal(session_factory, days_ago: int = 0):
    session = session_factory()
    try:
        user_id = uuid4()
        session.add(User(id=user_id))
        session.flush()
        session.add(
            Journal(
                user_id=user_id,
                date=date.today() - timedelta(days=days_ago),
                content="Feeling focused",
                word_count=2,
            )
        )
        session.commit()
        return user_id
    finally:
        session.close()


def test_jobs_config_reports_schedule(client, monkeypatch):
    test_client, _ = client
    monkeypatch.setattr(settings, "daily_job_hour", 0)
    monkeypatch.setattr(settings, "daily_job_minute", 0)

    resp = test_client.get("/jobs")

    assert resp.status_code == 200
    data = resp.json()
    assert "scheduler_enabled" in data
    assert data["schedule"]["daily_time"] == "00:00"
    assert data["schedule"]["next_run"]
    assert data["request_id"]


def test_run_now_processes_active_users(client):
    test_client, session_factory = client
    active = _seed_user_with_journal(session_factory, days_ago=1)
    _seed_user_with_journal(session_factory, days_ago=60)

    resp = test_client.post("/jobs/run-now", json={})

    assert resp.status_code == 200
    data = resp.json()
    assert data["job"] == "daily_generation"
    assert data["usersProcessed"] == 1
    assert data["usersFailed"] == 0
    assert data["tasksWritten"] == 4
    assert data["requestId"]

    session = session_factory()
    try:
        assert session.query(Task).filter(Task.user_id == active).count() == 4
    finally:
        session.close()


def test_run_now_for_single_user(client):
    test_client, session_factory = client
    user_id = _seed_user_with_journal(session_factory)

    resp = test_client.post("/jobs/run-now", json={"userId": str(user_id)})

    assert resp.status_code == 200
    data = resp.json()
    assert data["usersProcessed"] == 1
    assert data["targetDate"] == (date.today() + timedelta(days=1)).isoformat()


def test_run_now_persistence_failure_returns_fixed_error(client, monkeypatch):
    test_client, session_factory = client
    user_id = _seed_user_with_journal(session_factory)

    def failing_create_dashboard_content(*args, **kwargs):
        raise RuntimeError("disk full at /var/lib/postgres")

    monkeypatch.setattr(storage, "create_dashboard_content", failing_create_dashboard_content)

    resp = test_client.post("/jobs/run-now", json={"userId": str(user_id)})

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Failed to generate tasks"}
    session = session_factory()
    try:
        assert session.query(Task).filter(Task.user_id == user_id).count() == 0
    finally:
        session.close()


def test_jobs_run_now_forbidden_in_prod(monkeypatch):
    TestingSessionLocal = _build_session_factory()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(settings, "debug", False)
    with TestClient(app) as test_client:
        resp = test_client.post("/jobs/run-now", json={})
        assert resp.status_code == 403
    app.dependency_overrides.clear()
