from __future__ import annotations

from datetime import date, timedelta
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.deps import get_db
from app.db.models.action_log import ActionLog
from app.db.models.goal import Goal
from app.db.models.task import Task
from app.db.models.user import User
from app.main import app


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    User.__table__.create(bind=engine)
    Goal.__table__.create(bind=engine)
    Task.__table__.create(bind=engine)
    ActionLog.__table__.create(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _seed_tasks(session_factory, user_id: UUID, day: date, titles) -> list[UUID]:
    session = session_factory()
    try:
        if session.get(User, user_id) is None:
            session.add(User(id=user_id))
            session.flush()
        tasks = [
            Task(user_id=user_id, date=day, title=title, category="learning", position=idx)
            for idx, title in enumerate(titles)
        ]
        session.add_all(tasks)
        session.commit()
        return [task.id for task in tasks]
    finally:
        session.close()


def test_list_tasks_for_date(client):
    test_client, session_factory = client
    user_id = uuid4()
    today = date.today()
    _seed_tasks(session_factory, user_id, today, ["Read", "Walk", "Plan"])
    _seed_tasks(session_factory, user_id, today + timedelta(days=1), ["Tomorrow"])

    resp = test_client.get(
        "/api/tasks",
        params={"date": today.isoformat()},
        headers={"X-User-Id": str(user_id)},
    )

    assert resp.status_code == 200
    data = resp.json()
    assert [task["title"] for task in data] == ["Read", "Walk", "Plan"]
    assert all(task["completed"] is False for task in data)
    assert all(task["relatedGoalId"] is None for task in data)

    everything = test_client.get("/api/tasks", headers={"X-User-Id": str(user_id)})
    assert len(everything.json()) == 4


def test_toggle_task_completion_logs_action(client):
    test_client, session_factory = client
    user_id = uuid4()
    (task_id,) = _seed_tasks(session_factory, user_id, date.today(), ["Read"])

    resp = test_client.patch(
        f"/api/tasks/{task_id}",
        json={"completed": True},
        headers={"X-User-Id": str(user_id)},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["completed"] is True
    assert body["completedAt"] is not None
    assert body["requestId"]

    undo = test_client.patch(
        f"/api/tasks/{task_id}",
        json={"completed": False},
        headers={"X-User-Id": str(user_id)},
    )
    assert undo.json()["completed"] is False
    assert undo.json()["completedAt"] is None

    session = session_factory()
    try:
        actions = [log.action_type for log in session.query(ActionLog).order_by(ActionLog.created_at).all()]
        assert sorted(actions) == ["task_completed", "task_uncompleted"]
        assert session.get(Task, task_id).completed is False
    finally:
        session.close()


def test_repeating_same_state_does_not_log(client):
    test_client, session_factory = client
    user_id = uuid4()
    (task_id,) = _seed_tasks(session_factory, user_id, date.today(), ["Read"])

    resp = test_client.patch(
        f"/api/tasks/{task_id}",
        json={"completed": False},
        headers={"X-User-Id": str(user_id)},
    )

    assert resp.status_code == 200
    session = session_factory()
    try:
        assert session.query(ActionLog).count() == 0
    finally:
        session.close()


def test_task_of_another_user_cannot_be_updated(client):
    test_client, session_factory = client
    (task_id,) = _seed_tasks(session_factory, uuid4(), date.today(), ["Read"])

    resp = test_client.patch(
        f"/api/tasks/{task_id}",
        json={"completed": True},
        headers={"X-User-Id": str(uuid4())},
    )
    assert resp.status_code == 403

    missing = test_client.patch(
        f"/api/tasks/{uuid4()}",
        json={"completed": True},
        headers={"X-User-Id": str(uuid4())},
    )
    assert missing.status_code == 404
