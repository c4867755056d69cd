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
from app.db.models.dashboard_content import DashboardContent
from app.db.models.goal import Goal
from app.db.models.journal import Journal
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
    for model in (User, Journal, Goal, Task, DashboardContent, ActionLog):
        model.__table__.create(bind=engine)

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


def _seed_history(session_factory, user_id: UUID) -> None:
    today = date.today()
    session = session_factory()
    try:
        session.add(User(id=user_id))
        session.flush()
        for offset in (0, 1, 2, 5):
            day = today - timedelta(days=offset)
            session.add(Journal(user_id=user_id, date=day, content=f"Entry {offset}", word_count=2))
        session.add(Goal(user_id=user_id, title="Read 12 books", duration="1year", category="learning"))
        session.add(Task(user_id=user_id, date=today, title="Read", category="learning", position=0, completed=True))
        session.add(Task(user_id=user_id, date=today, title="Walk", category="health", position=1, completed=False))
        session.add(
            Task(
                user_id=user_id,
                date=today - timedelta(days=1),
                title="Stretch",
                category="health",
                completed=True,
            )
        )
        session.add(
            DashboardContent(
                user_id=user_id,
                date=today,
                daily_quote="Small steps every day.",
                focus_area="Reading Habit",
            )
        )
        session.commit()
    finally:
        session.close()


def test_dashboard_returns_today_content_and_stats(client):
    test_client, session_factory = client
    user_id = uuid4()
    _seed_history(session_factory, user_id)

    resp = test_client.get("/api/dashboard", headers={"X-User-Id": str(user_id)})

    assert resp.status_code == 200
    data = resp.json()
    assert [task["title"] for task in data["tasks"]] == ["Read", "Walk"]
    assert data["dashboardContent"]["focusArea"] == "Reading Habit"
    assert data["dashboardContent"]["dailyQuote"] == "Small steps every day."
    assert [goal["title"] for goal in data["goals"]] == ["Read 12 books"]
    assert data["hasJournalToday"] is True
    assert data["stats"] == {
        "journalStreak": 3,
        "taskStreak": 0,
        "totalEntries": 4,
        "completedTasks": 2,
    }


def test_dashboard_is_empty_for_new_user(client):
    test_client, _ = client

    resp = test_client.get("/api/dashboard", headers={"X-User-Id": str(uuid4())})

    assert resp.status_code == 200
    data = resp.json()
    assert data["tasks"] == []
    assert data["dashboardContent"] is None
    assert data["hasJournalToday"] is False
    assert data["stats"]["journalStreak"] == 0


def test_dashboard_requires_user_header(client):
    test_client, _ = client

    assert test_client.get("/api/dashboard").status_code == 401
