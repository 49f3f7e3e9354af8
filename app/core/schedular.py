import logging
from datetime import timedelta
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.config import settings
from app.core.database import SessionLocal
from app.services.quiz_result import QuizResultService, get_utc_now

logger = logging.getLogger(__name__)


def purge_expired_results(retention_days: Optional[int] = None) -> int:
    """
    Scheduled task deleting quiz results older than the retention window.
    Runs daily at 00:00 UTC.
    """
    days = retention_days if retention_days is not None else settings.quiz_result_retention_days
    if days <= 0:
        return 0

    db = SessionLocal()
    try:
        cutoff = get_utc_now() - timedelta(days=days)
        deleted = QuizResultService(db).purge_results(before=cutoff)
        logger.info(f"Retention purge completed. Deleted {deleted} results older than {cutoff}.")
        return deleted
    except Exception as e:
        logger.error(f"Error during retention purge: {e}")
        return 0
    finally:
        db.close()


def start_scheduler():
    """
    Start the APScheduler when a retention window is configured.
    Returns None when there is nothing to schedule.
    """
    if not settings.scheduler_enabled or settings.quiz_result_retention_days <= 0:
        logger.info("Result retention scheduler disabled.")
        return None

    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        purge_expired_results,
        trigger=CronTrigger(hour=0, minute=0),
        id="quiz_result_retention",
        name="Purge expired quiz results",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(
        f"Result retention scheduler started. Keeping {settings.quiz_result_retention_days} days."
    )

    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler):
    """
    Gracefully shutdown the scheduler.
    """
    if scheduler:
        scheduler.shutdown()
        logger.info("Result retention scheduler shut down.")
