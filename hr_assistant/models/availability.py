"""Pydantic models for the ``hr_availability`` table.

A rule is a recurring weekly window: ``day_of_week`` uses 0 = Sunday and the
times are wall-clock values in the scheduling timezone.
"""

from datetime import time
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AvailabilityRule(BaseModel):
    """Availability row as stored; read-only input to the slot expander."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID | None = None
    hr_user_id: UUID
    day_of_week: int
    start_time: time
    end_time: time


class AvailabilityRuleIn(BaseModel):
    """One rule in a ``POST /availability`` body."""
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def _start_before_end(self) -> "AvailabilityRuleIn":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be earlier than end_time")
        return self

    def to_row(self, hr_user_id: UUID) -> dict[str, object]:
        """Serialize for insertion into ``hr_availability``."""
        return {
            "hr_user_id": str(hr_user_id),
            "day_of_week": self.day_of_week,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
        }


class AvailabilityUpdateRequest(BaseModel):
    """Body of ``POST /api/interviews/availability``."""
    availability: list[AvailabilityRuleIn]
