"""Domain exceptions for the scheduling service.

Whole-batch failures derive from ``SchedulingError`` and carry the HTTP
status the API layer answers with.  ``OwnershipError`` and
``PersistenceError`` are per-applicant and are handled inside the slot
allocator rather than surfaced to callers.
"""

from __future__ import annotations

from typing import Any


class SchedulingError(Exception):
    """Base class for errors reported to API callers."""

    status_code: int = 400

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class SchedulingValidationError(SchedulingError):
    """Malformed or empty request input."""


class ConfigurationError(SchedulingError):
    """The HR user has no availability rules configured."""


class CapacityError(SchedulingError):
    """Fewer open slots than applicants requested."""

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(
            f"Not enough available slots. Found {available} slots for "
            f"{requested} applicants. Please add more availability or "
            "schedule interviews manually.",
            details={"available": available, "requested": requested},
        )
        self.available = available
        self.requested = requested


class AllocationInProgressError(SchedulingError):
    """Another allocation for the same HR user holds the lock."""

    status_code = 409


class InterviewNotFoundError(SchedulingError):
    """Interview does not exist or belongs to another HR user."""

    status_code = 404


class OwnershipError(SchedulingError):
    """Applicant not found or not owned by the calling HR user."""


class PersistenceError(SchedulingError):
    """A single interview insert failed.

    ``reason`` is a ``SkipReason`` value distinguishing plain insert
    failures, write timeouts and slot conflicts.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        reason: str = "insert_failed",
        details: Any | None = None,
    ) -> None:
        super().__init__(message, details)
        self.reason = reason


class StoreUnavailableError(SchedulingError):
    """The table store did not answer within the configured attempts."""

    status_code = 503


class EmailDeliveryError(SchedulingError):
    """SendGrid rejected the message or could not be reached."""

    status_code = 502
