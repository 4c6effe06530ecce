"""Enum types shared by the scheduling models."""

from enum import Enum


class SkipReason(str, Enum):
    """Why the allocator did not create an interview for an applicant."""
    not_found = "not_found"
    insert_failed = "insert_failed"
    write_timeout = "write_timeout"
    slot_conflict = "slot_conflict"


class RunStatus(str, Enum):
    """Outcome of a background reminder run."""
    success = "success"
    partial = "partial"
    skipped = "skipped"
    failed = "failed"
