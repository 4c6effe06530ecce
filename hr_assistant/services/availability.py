"""HR availability rules: read and wholesale replacement.

Rules are owned by the HR user and replaced with delete-all-then-insert
semantics every time availability is edited.
"""

from __future__ import annotations

import logging
from uuid import UUID

from hr_assistant.core.constants import HR_AVAILABILITY_TABLE
from hr_assistant.db.supabase import execute_read, get_supabase
from hr_assistant.models.availability import AvailabilityRule, AvailabilityRuleIn

logger = logging.getLogger(__name__)


def get_hr_availability(hr_user_id: UUID | str) -> list[AvailabilityRule]:
    """Return all availability rules for *hr_user_id*, by day then start time."""
    client = get_supabase()
    result = execute_read(
        client.table(HR_AVAILABILITY_TABLE)
        .select("*")
        .eq("hr_user_id", str(hr_user_id))
        .order("day_of_week")
        .order("start_time")
    )
    return [AvailabilityRule(**row) for row in result.data or []]


def replace_hr_availability(
    hr_user_id: UUID,
    rules: list[AvailabilityRuleIn],
) -> list[AvailabilityRule]:
    """Replace every availability rule of *hr_user_id* with *rules*.

    An empty *rules* list clears the HR user's availability.
    """
    client = get_supabase()
    client.table(HR_AVAILABILITY_TABLE).delete().eq(
        "hr_user_id", str(hr_user_id)
    ).execute()

    if not rules:
        logger.info(
            "availability_cleared",
            extra={"hr_user_id": str(hr_user_id)},
        )
        return []

    result = (
        client.table(HR_AVAILABILITY_TABLE)
        .insert([rule.to_row(hr_user_id) for rule in rules])
        .execute()
    )
    saved = [AvailabilityRule(**row) for row in result.data or []]

    logger.info(
        "availability_replaced",
        extra={"hr_user_id": str(hr_user_id), "rule_count": len(saved)},
    )
    return saved
