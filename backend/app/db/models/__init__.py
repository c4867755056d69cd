"""ORM models exposed for metadata discovery."""
from app.db.models.action_log import ActionLog
from app.db.models.dashboard_content import DashboardContent
from app.db.models.goal import Goal
from app.db.models.journal import Journal
from app.db.models.task import Task
from app.db.models.user import User

__all__ = [
    "ActionLog",
    "DashboardContent",
    "Goal",
    "Journal",
    "Task",
    "User",
]
