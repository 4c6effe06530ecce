"""Pydantic models for the ``interviews`` table and the scheduling API.

Covers the stored interview record, the insert payload, request bodies and
the allocator's explicit partial-success result.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from hr_assistant.models.enums import SkipReason
from hr_assistant.models.users import ApplicantSummary


class InterviewCreate(BaseModel):
    """Payload for inserting a new interview."""
    applicant_id: str
    hr_user_id: UUID
    scheduled_at: datetime
    reminder_sent: bool = False

    def to_row(self) -> dict[str, Any]:
        return {
            "applicant_id": self.applicant_id,
            "hr_user_id": str(self.hr_user_id),
            "scheduled_at": self.scheduled_at.isoformat(),
            "reminder_sent": self.reminder_sent,
        }


class Interview(BaseModel):
    """Full interview record returned from the database."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    applicant_id: UUID
    hr_user_id: UUID
    scheduled_at: datetime
    reminder_sent: bool = False
    created_at: datetime | None = None
    applicants: ApplicantSummary | None = None

    @field_validator("applicants", mode="before")
    @classmethod
    def _unwrap_join(cls, value: Any) -> Any:
        # PostgREST embeds a to-one join either as an object or a 1-item list
        if isinstance(value, list):
            return value[0] if value else None
        return value


class GenerateInterviewsRequest(BaseModel):
    """Body of ``POST /api/interviews/generate``."""
    applicant_ids: list[str]


class SendInterviewEmailsRequest(BaseModel):
    """Body of ``POST /api/interviews/send-emails``."""
    interview_ids: list[str] | None = None


class SkippedApplicant(BaseModel):
    """An applicant the allocator could not book."""
    applicant_id: str
    reason: SkipReason
    detail: str | None = None


class AllocationResult(BaseModel):
    """Best-effort outcome of one slot allocation batch."""
    requested: int
    interviews: list[Interview] = Field(default_factory=list)
    skipped: list[SkippedApplicant] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def created(self) -> int:
        return len(self.interviews)
