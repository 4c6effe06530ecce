"""Daily interview reminder run.

Groups tomorrow's not-yet-reminded interviews by HR user, emails each HR
user one digest, then marks the interviews ``reminder_sent``.  One HR user
failing never stops the others.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from hr_assistant.core.constants import HR_USERS_TABLE
from hr_assistant.core.exceptions import EmailDeliveryError
from hr_assistant.db.supabase import execute_read, get_supabase
from hr_assistant.models.enums import RunStatus
from hr_assistant.models.interview import Interview
from hr_assistant.models.users import HRUser
from hr_assistant.scheduler.lock import acquire_reminder_lock, release_reminder_lock
from hr_assistant.services.email import send_email
from hr_assistant.services.interviews import get_tomorrow_interviews, mark_reminder_sent
from hr_assistant.services.notifications import render_reminder_digest

logger = logging.getLogger(__name__)


def _get_hr_user(hr_user_id: UUID) -> HRUser | None:
    client = get_supabase()
    result = execute_read(
        client.table(HR_USERS_TABLE)
        .select("id, name, email")
        .eq("id", str(hr_user_id))
        .limit(1)
    )
    if not result.data:
        return None
    return HRUser(**result.data[0])


def _notify_hr_user(hr_user_id: UUID, interviews: list[Interview]) -> int:
    """Send one digest and mark its interviews; return how many were marked."""
    hr_user = _get_hr_user(hr_user_id)
    if hr_user is None or not hr_user.email:
        raise EmailDeliveryError(f"HR user {hr_user_id} has no email address")

    subject, html, text = render_reminder_digest(hr_user, interviews)
    send_email(hr_user.email, subject, html, text)

    marked = 0
    for interview in interviews:
        try:
            mark_reminder_sent(interview.id)
            marked += 1
        except Exception as exc:
            logger.error(
                "mark_reminder_failed",
                extra={"interview_id": str(interview.id), "error_message": str(exc)},
            )
    return marked


def send_interview_reminders(now: datetime | None = None) -> dict[str, Any]:
    """Run one reminder pass and return its summary."""
    run_id = uuid4()
    if not acquire_reminder_lock():
        logger.warning("reminder_run_skipped", extra={"run_id": str(run_id)})
        return {"status": RunStatus.skipped.value, "reason": "reminder_run_in_progress"}

    summary: dict[str, Any] = {
        "run_id": str(run_id),
        "status": RunStatus.success.value,
        "interviews_found": 0,
        "hr_users_notified": 0,
        "reminders_marked": 0,
        "failed": 0,
    }

    try:
        interviews = get_tomorrow_interviews(now=now)
        summary["interviews_found"] = len(interviews)
        if not interviews:
            logger.info("reminder_run_complete", extra=summary)
            return summary

        by_hr_user: dict[UUID, list[Interview]] = defaultdict(list)
        for interview in interviews:
            by_hr_user[interview.hr_user_id].append(interview)

        for hr_user_id, hr_interviews in by_hr_user.items():
            try:
                summary["reminders_marked"] += _notify_hr_user(hr_user_id, hr_interviews)
                summary["hr_users_notified"] += 1
            except Exception as exc:
                summary["failed"] += 1
                logger.error(
                    "reminder_failed",
                    extra={
                        "run_id": str(run_id),
                        "hr_user_id": str(hr_user_id),
                        "error_type": type(exc).__name__,
                        "error_message": str(exc),
                    },
                )

        if summary["failed"]:
            summary["status"] = (
                RunStatus.partial.value
                if summary["hr_users_notified"]
                else RunStatus.failed.value
            )

        logger.info("reminder_run_complete", extra=summary)
        return summary

    finally:
        release_reminder_lock()
