"""PACER — Scheduler Jobs.

APScheduler daily job that reviews every active goal and logs advisories.
It never writes goal status and never stores results.
"""

import datetime as dt

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlmodel import Session

from pacer.config import settings
from pacer.database import engine
from pacer.analyzer.pipeline import compute_client_goals
from pacer.connectors.snapshot_store import SnapshotStore
from pacer.core.logging import get_logger

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


def review_goals(session: Session, today: dt.date | None = None) -> dict[str, int]:
    """Log goal_reached / off_track advisories for all active clients."""
    today = today or dt.date.today()
    store = SnapshotStore(session)
    counts = {"goals": 0, "goal_reached": 0, "off_track": 0}

    for client in store.list_active_clients():
        for progress in compute_client_goals(store, client.id, today):
            counts["goals"] += 1
            extra = {"client_id": client.id, "goal_id": progress.id}
            if progress.is_completed:
                counts["goal_reached"] += 1
                logger.info(
                    f"goal_reached: {progress.label or progress.metric_type.value} "
                    f"at {progress.progress_percentage:.1f}%",
                    extra=extra,
                )
            elif not progress.is_on_track:
                counts["off_track"] += 1
                logger.warning(
                    f"off_track: {progress.label or progress.metric_type.value} "
                    f"{progress.progress_percentage:.1f}% vs expected "
                    f"{progress.expected_progress:.1f}%",
                    extra=extra,
                )
    return counts


async def daily_goal_review_job():
    """Review today's pacing for every active goal."""
    logger.info("Scheduled goal review starting...")
    try:
        with Session(engine) as session:
            counts = review_goals(session)
        logger.info(
            f"Goal review complete: {counts['goals']} goals, "
            f"{counts['goal_reached']} reached, {counts['off_track']} off track"
        )
    except Exception as e:
        logger.error(f"Scheduled goal review failed: {e}")


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        daily_goal_review_job,
        "cron",
        hour=settings.goal_review_hour,
        minute=0,
        id="daily_goal_review",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.start()
    logger.info(f"Scheduler started. Goal review at {settings.goal_review_hour}:00 UTC")


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
