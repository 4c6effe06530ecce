"""Pydantic models for the ``hr_users`` and ``applicants`` tables."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class HRUser(BaseModel):
    """Authenticated recruiter; the tenancy boundary for every query."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None = None
    email: str | None = None


class ApplicantSummary(BaseModel):
    """Contact fields of an applicant, as embedded in interview reads."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None = None
    email: str | None = None
    hr_user_id: UUID | None = None
