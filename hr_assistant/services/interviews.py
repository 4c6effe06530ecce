"""Interview record reads and reminder bookkeeping."""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone
from uuid import UUID

from postgrest.exceptions import APIError

from hr_assistant.core.config import settings
from hr_assistant.core.constants import (
    INTERVIEW_WITH_APPLICANT_SELECT,
    INTERVIEWS_TABLE,
)
from hr_assistant.core.exceptions import InterviewNotFoundError
from hr_assistant.db.supabase import execute_read, get_supabase
from hr_assistant.models.interview import Interview
from hr_assistant.models.scheduling import SchedulingPolicy

logger = logging.getLogger(__name__)


def get_interviews_by_hr(hr_user_id: UUID | str) -> list[Interview]:
    """Return all interviews of *hr_user_id*, earliest first."""
    client = get_supabase()
    result = execute_read(
        client.table(INTERVIEWS_TABLE)
        .select(INTERVIEW_WITH_APPLICANT_SELECT)
        .eq("hr_user_id", str(hr_user_id))
        .order("scheduled_at")
    )
    return [Interview(**row) for row in result.data or []]


def get_interview_by_id(interview_id: str, hr_user_id: UUID | str) -> Interview:
    """Return one interview owned by *hr_user_id*.

    Raises ``InterviewNotFoundError`` when it does not exist, belongs to
    someone else, or *interview_id* is not a valid id.
    """
    client = get_supabase()
    try:
        result = execute_read(
            client.table(INTERVIEWS_TABLE)
            .select(INTERVIEW_WITH_APPLICANT_SELECT)
            .eq("id", interview_id)
            .eq("hr_user_id", str(hr_user_id))
            .limit(1)
        )
    except APIError as exc:
        raise InterviewNotFoundError(
            "Interview not found", details=exc.message
        ) from exc

    if not result.data:
        raise InterviewNotFoundError("Interview not found")
    return Interview(**result.data[0])


def tomorrow_bounds(now: datetime, timezone_name: str) -> tuple[datetime, datetime]:
    """UTC start and end of the calendar day after *now* in *timezone_name*."""
    zone = SchedulingPolicy(timezone=timezone_name).zone
    tomorrow = now.astimezone(zone).date() + timedelta(days=1)
    start = datetime.combine(tomorrow, time.min, tzinfo=zone)
    end = datetime.combine(tomorrow + timedelta(days=1), time.min, tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def get_tomorrow_interviews(
    hr_user_id: UUID | str | None = None,
    now: datetime | None = None,
) -> list[Interview]:
    """Interviews scheduled tomorrow whose reminder has not been sent yet.

    "Tomorrow" is the next calendar day in ``settings.SCHEDULING_TIMEZONE``.
    """
    now = now or datetime.now(timezone.utc)
    start, end = tomorrow_bounds(now, settings.SCHEDULING_TIMEZONE)

    client = get_supabase()
    query = (
        client.table(INTERVIEWS_TABLE)
        .select(INTERVIEW_WITH_APPLICANT_SELECT)
        .gte("scheduled_at", start.isoformat())
        .lt("scheduled_at", end.isoformat())
        .eq("reminder_sent", False)
    )
    if hr_user_id is not None:
        query = query.eq("hr_user_id", str(hr_user_id))

    result = execute_read(query)
    return [Interview(**row) for row in result.data or []]


def mark_reminder_sent(interview_id: UUID | str) -> None:
    """Flag *interview_id* so the reminder job does not pick it up again."""
    client = get_supabase()
    client.table(INTERVIEWS_TABLE).update({"reminder_sent": True}).eq(
        "id", str(interview_id)
    ).execute()
