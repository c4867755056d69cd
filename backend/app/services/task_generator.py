"""Daily task generation for one user or every active user."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Set
from uuid import UUID

from sqlalchemy.orm import Session

from app.db.models.action_log import ActionLog
from app.db.models.dashboard_content import DashboardContent
from app.db.models.goal import Goal
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import storage
from app.services.generation_client import GenerationOutcome, TaskGenerationClient, get_generation_client
from app.services.prompt_composer import GoalSnippet, JournalSnippet, PromptInputs, compose_task_prompt

logger = logging.getLogger(__name__)

RECENT_WINDOW_DAYS = 7
MEDIUM_WINDOW_DAYS = 30
OLD_JOURNAL_POOL = 50
OLD_JOURNAL_SAMPLE = 5
ACTIVE_USER_WINDOW_DAYS = 30


@dataclass
class UserGenerationResult:
    user_id: UUID
    target_date: date
    skipped: bool = False
    tasks_written: int = 0
    replaced_tasks: int = 0
    fallback_used: bool = False


@dataclass
class JobRunResult:
    target_date: date
    users_processed: int = 0
    users_skipped: int = 0
    users_failed: int = 0
    tasks_written: int = 0


def gather_prompt_inputs(db: Session, user_id: UUID, today: date) -> PromptInputs:
    """Snapshot the user's journals and active goals into recency buckets."""
    recent_start = today - timedelta(days=RECENT_WINDOW_DAYS)
    medium_start = today - timedelta(days=MEDIUM_WINDOW_DAYS)

    recent = storage.get_journals_in_range(db, user_id, recent_start, today)
    medium = storage.get_journals_in_range(db, user_id, medium_start, recent_start - timedelta(days=1))
    old = [
        journal
        for journal in storage.get_recent_journals(db, user_id, OLD_JOURNAL_POOL)
        if journal.date < medium_start
    ][:OLD_JOURNAL_SAMPLE]
    goals = [goal for goal in storage.get_user_goals(db, user_id) if _is_active(goal)]

    return PromptInputs(
        recent=[JournalSnippet(date=j.date, content=j.content) for j in recent],
        medium=[JournalSnippet(date=j.date, content=j.content) for j in medium],
        old=[JournalSnippet(date=j.date, content=j.content) for j in old],
        goals=[
            GoalSnippet(
                id=str(goal.id),
                title=goal.title,
                duration=goal.duration,
                progress=goal.progress or 0,
                description=goal.description,
            )
            for goal in goals
        ],
    )


def generate_tasks_for_user(
    db: Session,
    user_id: UUID,
    target_date: date,
    *,
    today: Optional[date] = None,
    replace_existing: bool = False,
    client: Optional[TaskGenerationClient] = None,
) -> UserGenerationResult:
    """Generate and persist one batch of tasks plus dashboard content.

    Journal buckets are computed relative to ``today`` (defaults to the current
    date), not ``target_date``. A user with no recent journals and no active
    goals is skipped. By default a repeated call for the same date appends a
    second batch; ``replace_existing=True`` swaps the old batch out in the same
    transaction. Persistence errors roll back and propagate.
    """
    today = today or date.today()
    client = client or get_generation_client()
    result = UserGenerationResult(user_id=user_id, target_date=target_date)
    logger.info("Generating tasks for user %s for date %s", user_id, target_date.isoformat())

    inputs = gather_prompt_inputs(db, user_id, today)
    if inputs.is_empty:
        logger.info("No recent journals or goals for user %s, skipping task generation", user_id)
        result.skipped = True
        log_metric("task_generation.skipped", 1, metadata={"user_id": str(user_id)})
        return result

    trace_metadata = {
        "user_id": str(user_id),
        "target_date": target_date.isoformat(),
        "recent_journals": len(inputs.recent),
        "medium_journals": len(inputs.medium),
        "old_journals": len(inputs.old),
        "goals": len(inputs.goals),
    }
    with trace("task_generation.user", metadata=trace_metadata, user_id=str(user_id)):
        outcome = client.generate(compose_task_prompt(inputs), trace_metadata=trace_metadata)
        try:
            result.replaced_tasks = _persist_outcome(
                db,
                user_id=user_id,
                target_date=target_date,
                outcome=outcome,
                goal_ids={goal.id for goal in inputs.goals},
                replace_existing=replace_existing,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

    result.tasks_written = len(outcome.response.tasks)
    result.fallback_used = outcome.fallback_used
    log_metric(
        "task_generation.tasks_written",
        result.tasks_written,
        metadata={"user_id": str(user_id), "fallback_used": outcome.fallback_used},
    )
    logger.info(
        "Generated %s tasks for user %s (fallback=%s)",
        result.tasks_written,
        user_id,
        outcome.fallback_used,
    )
    return result


def generate_tasks_for_all_users(
    db: Session,
    *,
    now: Optional[datetime] = None,
    client: Optional[TaskGenerationClient] = None,
    replace_existing: bool = False,
) -> JobRunResult:
    """Run generation for tomorrow (UTC) for every active user, one at a time."""
    now = now or datetime.now(timezone.utc)
    today = now.astimezone(timezone.utc).date() if now.tzinfo else now.date()
    tomorrow = today + timedelta(days=1)
    client = client or get_generation_client()
    run = JobRunResult(target_date=tomorrow)

    user_ids = storage.get_active_user_ids(db, today - timedelta(days=ACTIVE_USER_WINDOW_DAYS))
    logger.info("Starting daily task generation for %s users (target=%s)", len(user_ids), tomorrow.isoformat())

    for uid in user_ids:
        try:
            outcome = generate_tasks_for_user(
                db,
                uid,
                tomorrow,
                today=today,
                replace_existing=replace_existing,
                client=client,
            )
        except Exception:
            logger.exception("Task generation failed for user %s", uid)
            run.users_failed += 1
            continue
        if outcome.skipped:
            run.users_skipped += 1
            continue
        run.users_processed += 1
        run.tasks_written += outcome.tasks_written

    logger.info(
        "Task generation complete: processed=%s skipped=%s failed=%s tasks=%s",
        run.users_processed,
        run.users_skipped,
        run.users_failed,
        run.tasks_written,
    )
    log_metric("jobs.daily_generation.users_processed", run.users_processed)
    log_metric("jobs.daily_generation.users_failed", run.users_failed)
    return run


def _persist_outcome(
    db: Session,
    *,
    user_id: UUID,
    target_date: date,
    outcome: GenerationOutcome,
    goal_ids: Set[str],
    replace_existing: bool,
) -> int:
    existing = storage.get_tasks_for_date(db, user_id, target_date)
    batch_stamp = _batch_timestamp(
        [task.generated_at for task in existing],
        storage.get_dashboard_content_for_date(db, user_id, target_date),
    )
    replaced = 0
    if existing:
        if replace_existing:
            replaced = storage.delete_tasks_for_date(db, user_id, target_date)
            storage.delete_dashboard_content_for_date(db, user_id, target_date)
            logger.info("Replacing %s existing tasks for user %s on %s", replaced, user_id, target_date)
        else:
            logger.info(
                "User %s already has %s tasks for %s; appending a new batch",
                user_id,
                len(existing),
                target_date,
            )

    response = outcome.response
    for position, task in enumerate(response.tasks):
        storage.create_task(
            db,
            user_id,
            target_date,
            title=task.title,
            description=task.description,
            category=task.category,
            time_estimate=task.time_estimate,
            priority=task.priority,
            position=position,
            completed=False,
            related_goal_id=_resolve_goal_id(task.related_goal_id, goal_ids),
            generated_at=batch_stamp,
        )

    storage.create_dashboard_content(
        db,
        user_id,
        target_date,
        daily_quote=response.daily_quote,
        focus_area=response.focus_area,
        created_at=batch_stamp,
    )
    db.add(
        ActionLog(
            user_id=user_id,
            action_type="tasks_generated",
            action_payload={
                "target_date": target_date.isoformat(),
                "task_count": len(response.tasks),
                "fallback_used": outcome.fallback_used,
                "failure_reason": outcome.failure_reason,
                "replaced_count": replaced,
            },
            reason="Daily task generation",
        )
    )
    db.flush()
    return replaced


def _batch_timestamp(task_stamps: List[Optional[datetime]], latest_content: Optional[DashboardContent]) -> datetime:
    """Stamp for a new batch, strictly later than anything already stored for the date.

    Tasks are ordered by (generated_at, position) and dashboard content by
    created_at, so appended batches must never share a stamp with earlier ones.
    """
    stamps = [stamp for stamp in task_stamps if stamp is not None]
    if latest_content is not None and latest_content.created_at is not None:
        stamps.append(latest_content.created_at)
    now = datetime.now(timezone.utc)
    latest = max((_as_utc(stamp) for stamp in stamps), default=None)
    if latest is not None and now <= latest:
        return latest + timedelta(microseconds=1)
    return now


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values; they were written as UTC.
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _resolve_goal_id(raw: Optional[str], goal_ids: Set[str]) -> Optional[UUID]:
    """Keep the model's goal reference only if it names one of the user's goals."""
    if not raw:
        return None
    try:
        parsed = UUID(raw.strip())
    except ValueError:
        return None
    return parsed if str(parsed) in goal_ids else None


def _is_active(goal: Goal) -> bool:
    return (goal.status or "active") == "active"
