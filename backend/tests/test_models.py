from app.db.base import Base
from app.db import models  # noqa: F401  ensure models are loaded


def test_metadata_contains_core_tables() -> None:
    table_names = set(Base.metadata.tables.keys())
    expected = {
        "users",
        "journals",
        "goals",
        "tasks",
        "dashboard_content",
        "action_log",
    }

    assert expected.issubset(table_names)


def test_one_journal_per_user_and_date() -> None:
    journals = Base.metadata.tables["journals"]
    unique_columns = [
        {column.name for column in constraint.columns}
        for constraint in journals.constraints
        if constraint.__class__.__name__ == "UniqueConstraint"
    ]

    assert {"user_id", "date"} in unique_columns


def test_task_goal_link_is_nulled_on_goal_delete() -> None:
    tasks = Base.metadata.tables["tasks"]
    (foreign_key,) = tasks.c.related_goal_id.foreign_keys

    assert foreign_key.ondelete == "SET NULL"
