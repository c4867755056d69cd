"""Dedicated APScheduler worker process for nightly task generation."""
from __future__ import annotations

import logging
import signal
import threading
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.config import settings
from app.core.context import bind_request_id
from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.services.task_generator import JobRunResult, generate_tasks_for_all_users

logger = logging.getLogger(__name__)

DAILY_JOB_ID = "daily_task_generation"


def build_daily_trigger() -> CronTrigger:
    """Fire once per day at the configured local wall-clock time (midnight by default)."""
    return CronTrigger(
        hour=settings.daily_job_hour,
        minute=settings.daily_job_minute,
        timezone=settings.scheduler_timezone,
    )


def next_generation_time(now: datetime, trigger: Optional[CronTrigger] = None) -> Optional[datetime]:
    """Next fire time strictly computed from ``now``; no wall-clock waiting involved."""
    trigger = trigger or build_daily_trigger()
    return trigger.get_next_fire_time(None, now)


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running daily generation once on startup")
            run_daily_generation_job()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_daily_generation_job,
        trigger=build_daily_trigger(),
        id=DAILY_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(
        "Registered daily generation job (time=%02d:%02d %s, next run %s)",
        settings.daily_job_hour,
        settings.daily_job_minute,
        settings.scheduler_timezone,
        next_generation_time(datetime.now(timezone.utc)),
    )


def run_daily_generation_job(now: Optional[datetime] = None) -> Optional[JobRunResult]:
    """Run the all-users batch with its own session; never raises."""
    now = now or datetime.now(timezone.utc)
    session = SessionLocal()
    try:
        with bind_request_id(f"daily-generation-{now.date().isoformat()}"):
            result = generate_tasks_for_all_users(session, now=now)
            logger.info(
                "Daily generation job complete: target=%s processed=%s skipped=%s failed=%s",
                result.target_date,
                result.users_processed,
                result.users_skipped,
                result.users_failed,
            )
            return result
    except Exception:  # pragma: no cover - defensive guard
        logger.exception("Daily generation job failed")
        return None
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
