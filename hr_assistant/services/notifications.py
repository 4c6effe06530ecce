"""Interview invitation and reminder messages.

Renders the subject/HTML/text of applicant invitations and HR reminder
digests, and sends invitation batches.  Dates are shown in the scheduling
timezone.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from html import escape
from typing import Any
from uuid import UUID

from hr_assistant.core.config import settings
from hr_assistant.core.constants import DATE_DISPLAY_FORMAT, TIME_DISPLAY_FORMAT
from hr_assistant.core.exceptions import EmailDeliveryError, InterviewNotFoundError
from hr_assistant.models.interview import Interview
from hr_assistant.models.scheduling import SchedulingPolicy
from hr_assistant.models.users import HRUser
from hr_assistant.services.email import send_email
from hr_assistant.services.interviews import get_interview_by_id, get_interviews_by_hr

logger = logging.getLogger(__name__)


def format_slot(moment: datetime, timezone_name: str | None = None) -> tuple[str, str]:
    """Return ``(date, time)`` display strings for *moment*."""
    zone = SchedulingPolicy(timezone=timezone_name or settings.SCHEDULING_TIMEZONE).zone
    local = moment.astimezone(zone)
    return local.strftime(DATE_DISPLAY_FORMAT), local.strftime(TIME_DISPLAY_FORMAT)


def _applicant_name(interview: Interview) -> str:
    if interview.applicants and interview.applicants.name:
        return interview.applicants.name
    return "Unknown Applicant"


def render_invitation(
    interview: Interview,
    applicant_name: str,
    location: str | None = None,
) -> tuple[str, str, str]:
    """Return ``(subject, html, text)`` for an applicant invitation."""
    date_str, time_str = format_slot(interview.scheduled_at)
    where = location or settings.INTERVIEW_LOCATION
    subject = f"Interview Invitation - {applicant_name}"

    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        "<h2>Interview Invitation</h2>"
        f"<p>Dear {escape(applicant_name)},</p>"
        "<p>Thank you for your interest in our position. "
        "We are pleased to invite you for an interview.</p>"
        "<h3>Interview Details</h3>"
        f"<p><strong>Date:</strong> {date_str}</p>"
        f"<p><strong>Time:</strong> {time_str}</p>"
        f"<p><strong>Location:</strong> {escape(where)}</p>"
        "<p>Please confirm your attendance at your earliest convenience. "
        "If you need to reschedule, please contact us as soon as possible.</p>"
        "<p>Best regards,<br>HR Team</p>"
        "</div>"
    )
    text = "\n".join([
        "Interview Invitation",
        "",
        f"Dear {applicant_name},",
        "",
        "Thank you for your interest in our position. "
        "We are pleased to invite you for an interview.",
        "",
        "Interview Details:",
        f"Date: {date_str}",
        f"Time: {time_str}",
        f"Location: {where}",
        "",
        "Please confirm your attendance at your earliest convenience. "
        "If you need to reschedule, please contact us as soon as possible.",
        "",
        "Best regards,",
        "HR Team",
    ])
    return subject, html, text


def render_reminder_digest(
    hr_user: HRUser,
    interviews: list[Interview],
) -> tuple[str, str, str]:
    """Return ``(subject, html, text)`` listing tomorrow's interviews."""
    count = len(interviews)
    subject = f"Interview Reminder - {count} Interview(s) Tomorrow"
    greeting = hr_user.name or "there"

    rows: list[str] = []
    lines: list[str] = []
    for index, interview in enumerate(interviews, start=1):
        date_str, time_str = format_slot(interview.scheduled_at)
        name = _applicant_name(interview)
        rows.append(
            f"<tr><td>{index}</td><td>{escape(name)}</td>"
            f"<td>{date_str}</td><td>{time_str}</td></tr>"
        )
        lines.append(f"{index}. {name} - {date_str} at {time_str}")

    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        "<h2>Interview Reminder</h2>"
        f"<p>Dear {escape(greeting)},</p>"
        f"<p>This is a reminder that you have <strong>{count}</strong> "
        "interview(s) scheduled for tomorrow.</p>"
        "<table><thead><tr><th>#</th><th>Applicant</th><th>Date</th><th>Time</th>"
        f"</tr></thead><tbody>{''.join(rows)}</tbody></table>"
        "<p>Please ensure you are prepared for these interviews.</p>"
        "<p>Best regards,<br>HR Assistant System</p>"
        "</div>"
    )
    text = "\n".join([
        "Interview Reminder",
        "",
        f"Dear {greeting},",
        "",
        f"This is a reminder that you have {count} interview(s) scheduled for tomorrow.",
        "",
        *lines,
        "",
        "Please ensure you are prepared for these interviews.",
        "",
        "Best regards,",
        "HR Assistant System",
    ])
    return subject, html, text


def send_interview_invitations(
    hr_user_id: UUID | str,
    interview_ids: list[str] | None = None,
) -> dict[str, Any]:
    """Email an invitation for each listed interview (or all of them).

    Failures are recorded per interview and never abort the batch.
    """
    results: dict[str, Any] = {
        "processed": 0,
        "failed": 0,
        "total": 0,
        "sent": [],
        "errors": [],
    }

    interviews: list[Interview] = []
    if interview_ids:
        for interview_id in interview_ids:
            try:
                interviews.append(get_interview_by_id(interview_id, hr_user_id))
            except InterviewNotFoundError as exc:
                results["failed"] += 1
                results["errors"].append({"interview_id": interview_id, "error": exc.message})
    else:
        interviews = get_interviews_by_hr(hr_user_id)

    results["total"] = len(interviews) + results["failed"]

    for index, interview in enumerate(interviews):
        applicant = interview.applicants
        if applicant is None or not applicant.email:
            results["failed"] += 1
            results["errors"].append({
                "interview_id": str(interview.id),
                "applicant_id": str(interview.applicant_id),
                "error": "Applicant data not found",
            })
            continue

        if index and settings.EMAIL_SEND_DELAY_SECONDS > 0:
            time.sleep(settings.EMAIL_SEND_DELAY_SECONDS)

        subject, html, text = render_invitation(interview, applicant.name or "Applicant")
        try:
            delivery = send_email(applicant.email, subject, html, text)
        except EmailDeliveryError as exc:
            results["failed"] += 1
            results["errors"].append({
                "interview_id": str(interview.id),
                "applicant_id": str(interview.applicant_id),
                "error": exc.message,
            })
            continue

        results["processed"] += 1
        results["sent"].append({
            "interview_id": str(interview.id),
            "applicant_id": str(applicant.id),
            "name": applicant.name,
            "email": applicant.email,
            "scheduled_at": interview.scheduled_at.isoformat(),
            "email_status": delivery["status_code"],
        })

    logger.info(
        "invitations_sent",
        extra={
            "hr_user_id": str(hr_user_id),
            "processed": results["processed"],
            "failed": results["failed"],
            "total": results["total"],
        },
    )
    return results
