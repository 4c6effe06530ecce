"""Scheduling policy and candidate slot models.

``SchedulingPolicy`` is the explicit configuration handed to the slot
expander on every call; ``CandidateSlot`` is its ephemeral output.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

from hr_assistant.core.config import settings
from hr_assistant.core.constants import DEFAULT_SLOT_DURATION_MINUTES, DEFAULT_WEEKS_AHEAD


class SchedulingPolicy(BaseModel):
    """Slot granularity, horizon and calendar anchoring for one expansion."""
    slot_duration_minutes: int = Field(DEFAULT_SLOT_DURATION_MINUTES, gt=0)
    weeks_ahead: int = Field(DEFAULT_WEEKS_AHEAD, ge=0)
    timezone: str = "UTC"
    deduplicate_overlaps: bool = True

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_settings(cls) -> SchedulingPolicy:
        """Build the deployment's default policy from ``settings``."""
        return cls(
            slot_duration_minutes=settings.SLOT_DURATION_MINUTES,
            weeks_ahead=settings.SCHEDULING_WEEKS_AHEAD,
            timezone=settings.SCHEDULING_TIMEZONE,
            deduplicate_overlaps=settings.DEDUPLICATE_OVERLAPPING_SLOTS,
        )


class CandidateSlot(BaseModel):
    """An open, unbooked slot start (UTC, minute precision)."""
    scheduled_at: datetime
    hr_user_id: UUID
