"""APScheduler job definitions and scheduler management.

Initializes a BackgroundScheduler with a daily CronTrigger for the
interview reminder run and provides start/shutdown/status helpers for the
FastAPI lifespan.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from hr_assistant.core.config import settings
from hr_assistant.services.reminders import send_interview_reminders

logger = logging.getLogger(__name__)

# Module-level scheduler instance (singleton)
scheduler = BackgroundScheduler()


def _reminder_job() -> None:
    """Wrapper that APScheduler calls once a day."""
    send_interview_reminders()


def start_scheduler() -> None:
    """Configure and start the background scheduler.

    The reminder job is only registered when ``REMINDERS_ENABLED`` is set.
    """
    if settings.REMINDERS_ENABLED:
        scheduler.add_job(
            _reminder_job,
            CronTrigger(
                hour=settings.REMINDER_HOUR,
                minute=settings.REMINDER_MINUTE,
                timezone=settings.SCHEDULING_TIMEZONE,
            ),
            id="interview_reminders",
            replace_existing=True,
        )
    scheduler.start()
    logger.info(
        "scheduler_started",
        extra={
            "reminders_enabled": settings.REMINDERS_ENABLED,
            "reminder_time": f"{settings.REMINDER_HOUR:02d}:{settings.REMINDER_MINUTE:02d}",
        },
    )


def shutdown_scheduler() -> None:
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")


def is_scheduler_running() -> bool:
    """Check if the scheduler is currently running."""
    return scheduler.running
