"""Initial Daily Growth schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "202610190000"
down_revision = None
branch_labels = None
depends_on = None

UUID = postgresql.UUID(as_uuid=True)
JSON_PAYLOAD = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "journals",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        sa.Column("user_id", UUID, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("word_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "date", name="uq_journals_user_id_date"),
    )
    op.create_index("ix_journals_date", "journals", ["date"], unique=False)

    op.create_table(
        "goals",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        sa.Column("user_id", UUID, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration", sa.String(length=20), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(length=20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_goals_user_id", "goals", ["user_id"], unique=False)

    op.create_table(
        "tasks",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        sa.Column("user_id", UUID, nullable=False),
        sa.Column("related_goal_id", UUID, nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("time_estimate", sa.String(length=50), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("priority", sa.String(length=10), nullable=False, server_default=sa.text("'medium'")),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["related_goal_id"], ["goals.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_tasks_user_id_date", "tasks", ["user_id", "date"], unique=False)
    op.create_index("ix_tasks_related_goal_id", "tasks", ["related_goal_id"], unique=False)

    op.create_table(
        "dashboard_content",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        sa.Column("user_id", UUID, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("daily_quote", sa.Text(), nullable=True),
        sa.Column("focus_area", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_dashboard_content_user_id_date", "dashboard_content", ["user_id", "date"], unique=False)

    op.create_table(
        "action_log",
        sa.Column("id", UUID, primary_key=True, nullable=False),
        sa.Column("user_id", UUID, nullable=False),
        sa.Column("action_type", sa.Text(), nullable=False),
        sa.Column("action_payload", JSON_PAYLOAD, nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_action_log_user_id", "action_log", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_action_log_user_id", table_name="action_log")
    op.drop_table("action_log")
    op.drop_index("ix_dashboard_content_user_id_date", table_name="dashboard_content")
    op.drop_table("dashboard_content")
    op.drop_index("ix_tasks_related_goal_id", table_name="tasks")
    op.drop_index("ix_tasks_user_id_date", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("ix_goals_user_id", table_name="goals")
    op.drop_table("goals")
    op.drop_index("ix_journals_date", table_name="journals")
    op.drop_table("journals")
    op.drop_table("users")
