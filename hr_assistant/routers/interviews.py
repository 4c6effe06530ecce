"""Interview scheduling endpoints.

GET/POST /availability -- read or replace the caller's weekly availability.
POST /generate         -- book one interview slot per applicant.
POST /send-emails      -- email interview invitations to applicants.
GET /                  -- list the caller's interviews, earliest first.
GET /{interview_id}    -- one interview owned by the caller.

Every route requires the caller's API key (see ``core.auth``).
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends

from hr_assistant.core.auth import get_current_hr_user
from hr_assistant.core.exceptions import SchedulingValidationError
from hr_assistant.models.availability import AvailabilityUpdateRequest
from hr_assistant.models.interview import (
    GenerateInterviewsRequest,
    SendInterviewEmailsRequest,
)
from hr_assistant.models.users import HRUser
from hr_assistant.services.availability import (
    get_hr_availability,
    replace_hr_availability,
)
from hr_assistant.services.interviews import get_interview_by_id, get_interviews_by_hr
from hr_assistant.services.notifications import send_interview_invitations
from hr_assistant.services.scheduling import assign_interview_slots

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


@router.get("/availability", status_code=200)
async def get_availability(
    hr_user: HRUser = Depends(get_current_hr_user),
) -> dict[str, Any]:
    """Return the caller's availability rules."""
    rules = get_hr_availability(hr_user.id)
    return {
        "success": True,
        "data": [rule.model_dump(mode="json") for rule in rules],
    }


@router.post("/availability", status_code=200)
async def set_availability(
    body: AvailabilityUpdateRequest,
    hr_user: HRUser = Depends(get_current_hr_user),
) -> dict[str, Any]:
    """Replace all of the caller's availability rules."""
    saved = replace_hr_availability(hr_user.id, body.availability)
    return {
        "success": True,
        "message": "Availability updated successfully",
        "data": [rule.model_dump(mode="json") for rule in saved],
    }


# ---------------------------------------------------------------------------
# Slot generation and invitations
# ---------------------------------------------------------------------------


@router.post("/generate", status_code=200)
async def generate_interview_slots(
    body: GenerateInterviewsRequest,
    hr_user: HRUser = Depends(get_current_hr_user),
) -> dict[str, Any]:
    """Assign the earliest open slots to the given applicants, in order.

    Answers 200 on partial success; callers compare ``created`` with
    ``requested`` and inspect ``skipped``.
    """
    logger.info(
        "generate_interviews_requested",
        extra={"hr_user_id": str(hr_user.id), "requested": len(body.applicant_ids)},
    )
    result = assign_interview_slots(hr_user.id, body.applicant_ids)
    payload = result.model_dump(mode="json")

    if result.created == 0:
        raise SchedulingValidationError(
            "No interviews were created. Check if applicants exist and belong to you.",
            details={"requested": result.requested, "skipped": payload["skipped"]},
        )

    return {
        "success": True,
        "message": f"Successfully generated {result.created} interview slots",
        "data": payload,
    }


@router.post("/send-emails", status_code=200)
def send_interview_emails(
    body: SendInterviewEmailsRequest | None = None,
    hr_user: HRUser = Depends(get_current_hr_user),
) -> dict[str, Any]:
    """Email invitations for the listed interviews, or all of the caller's."""
    interview_ids = body.interview_ids if body else None
    results = send_interview_invitations(hr_user.id, interview_ids)

    if results["total"] == 0:
        message = "No interviews found that need emails sent"
    else:
        message = (
            f"Processed {results['processed']} interview emails, "
            f"{results['failed']} failed out of {results['total']} total"
        )
    return {"success": True, "message": message, "data": results}


# ---------------------------------------------------------------------------
# Interview reads
# ---------------------------------------------------------------------------


@router.get("", status_code=200)
async def list_interviews(
    hr_user: HRUser = Depends(get_current_hr_user),
) -> dict[str, Any]:
    """Return the caller's interviews ordered by ``scheduled_at``."""
    interviews = get_interviews_by_hr(hr_user.id)
    return {
        "success": True,
        "count": len(interviews),
        "data": [interview.model_dump(mode="json") for interview in interviews],
    }


@router.get("/{interview_id}", status_code=200)
async def get_interview(
    interview_id: str,
    hr_user: HRUser = Depends(get_current_hr_user),
) -> dict[str, Any]:
    """Return one of the caller's interviews (404 otherwise)."""
    interview = get_interview_by_id(interview_id, hr_user.id)
    return {"success": True, "data": interview.model_dump(mode="json")}
