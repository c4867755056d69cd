from __future__ import annotations

import json
from datetime import date, timedelta
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

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


class _StubCompletions:
    def create(self, **kwargs):
        tasks = [
            {
                "title": f"Task {idx}",
                "description": "Something useful",
                "category": "productivity",
                "timeEstimate": "15 minutes",
                "priority": "medium",
            }
            for idx in range(6)
        ]
        content = json.dumps({"tasks": tasks, "dailyQuote": "Start small.", "focusArea": "Deep Work"})
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover - sqlite setup
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    for model in (User, Journal, Goal, Task, DashboardContent, ActionLog):
        model.__table__.create(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    stub = SimpleNamespace(chat=SimpleNamespace(completions=_StubCompletions()))
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_generation_client] = lambda: TaskGenerationClient(stub)
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _write_journal(test_client: TestClient, user_id) -> None:
    resp = test_client.post(
        "/api/journals",
        json={"date": date.today().isoformat(), "content": "Had a productive day, want to read more"},
        headers={"X-User-Id": str(user_id)},
    )
    assert resp.status_code == 201


def test_generate_defaults_to_tomorrow(client):
    test_client, session_factory = client
    user_id = uuid4()
    _write_journal(test_client, user_id)

    resp = test_client.post("/api/tasks/generate", headers={"X-User-Id": str(user_id)})

    assert resp.status_code == 200
    body = resp.json()
    tomorrow = date.today() + timedelta(days=1)
    assert body["message"] == "Tasks generated successfully"
    assert body["date"] == tomorrow.isoformat()
    assert body["tasksGenerated"] == 6
    assert body["fallbackUsed"] is False

    session = session_factory()
    try:
        assert len(storage.get_tasks_for_date(session, user_id, tomorrow)) == 6
        assert storage.get_dashboard_content_for_date(session, user_id, tomorrow).focus_area == "Deep Work"
    finally:
        session.close()


def test_generate_for_explicit_date_with_replace(client):
    test_client, session_factory = client
    user_id = uuid4()
    _write_journal(test_client, user_id)
    target = (date.today() + timedelta(days=3)).isoformat()
    headers = {"X-User-Id": str(user_id)}

    test_client.post("/api/tasks/generate", json={"date": target}, headers=headers)
    resp = test_client.post("/api/tasks/generate", json={"date": target, "replaceExisting": True}, headers=headers)

    assert resp.status_code == 200
    session = session_factory()
    try:
        assert session.query(Task).filter(Task.user_id == user_id).count() == 6
    finally:
        session.close()


def test_generate_today_endpoint(client):
    test_client, _ = client
    user_id = uuid4()
    _write_journal(test_client, user_id)

    resp = test_client.post("/api/generate-tasks", headers={"X-User-Id": str(user_id)})

    assert resp.status_code == 200
    assert resp.json()["date"] == date.today().isoformat()


def test_generate_without_history_is_skipped(client):
    test_client, _ = client

    resp = test_client.post("/api/tasks/generate", headers={"X-User-Id": str(uuid4())})

    assert resp.status_code == 200
    body = resp.json()
    assert body["skipped"] is True
    assert body["tasksGenerated"] == 0
    assert body["message"] == "No journals or goals to generate from"


def test_generate_returns_500_when_persistence_fails(client, monkeypatch):
    test_client, _ = client
    user_id = uuid4()
    _write_journal(test_client, user_id)

    def broken_create_dashboard_content(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(storage, "create_dashboard_content", broken_create_dashboard_content)

    resp = test_client.post("/api/tasks/generate", headers={"X-User-Id": str(user_id)})

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to generate tasks"


def test_generate_requires_user_header(client):
    test_client, _ = client

    assert test_client.post("/api/tasks/generate").status_code == 401
