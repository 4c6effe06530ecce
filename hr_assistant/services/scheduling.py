"""Interview slot scheduling engine.

Three steps compose the allocation pipeline:

1. ``blocked_slots`` reads interviews already booked in the horizon and
   reduces them to UTC minute-keys.
2. ``expand_availability`` turns the weekly availability rules into an
   ascending list of candidate slots, dropping blocked minutes.
3. ``assign_interview_slots`` pairs applicants with slots positionally
   (first applicant, earliest slot) and writes one interview per pairing.

Availability days and times are interpreted in the policy's timezone;
every instant leaving this module is UTC.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta, timezone
from typing import Any
from uuid import UUID

import httpx
from postgrest.exceptions import APIError

from hr_assistant.core.constants import (
    APPLICANTS_TABLE,
    DAYS_PER_WEEK,
    INTERVIEWS_TABLE,
    UNIQUE_VIOLATION_CODE,
)
from hr_assistant.core.exceptions import (
    AllocationInProgressError,
    CapacityError,
    ConfigurationError,
    OwnershipError,
    PersistenceError,
    SchedulingValidationError,
)
from hr_assistant.db.supabase import execute_read, get_supabase
from hr_assistant.models.availability import AvailabilityRule
from hr_assistant.models.enums import SkipReason
from hr_assistant.models.interview import (
    AllocationResult,
    Interview,
    InterviewCreate,
    SkippedApplicant,
)
from hr_assistant.models.scheduling import CandidateSlot, SchedulingPolicy
from hr_assistant.models.users import ApplicantSummary
from hr_assistant.scheduler.lock import acquire_allocation_lock, release_allocation_lock
from hr_assistant.services.availability import get_hr_availability

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------

def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_timestamp(raw: Any) -> datetime:
    """Parse a PostgREST ``timestamptz`` value into an aware datetime."""
    if isinstance(raw, datetime):
        return _as_utc(raw)
    return _as_utc(datetime.fromisoformat(str(raw).replace("Z", "+00:00")))


def minute_key(moment: datetime) -> datetime:
    """Truncate *moment* to its UTC minute: the collision granularity."""
    return _as_utc(moment).replace(second=0, microsecond=0)


def day_of_week(day: date) -> int:
    """Weekday of *day* with 0 = Sunday, as stored in availability rules."""
    return (day.weekday() + 1) % DAYS_PER_WEEK


def horizon_end(now: datetime, policy: SchedulingPolicy) -> datetime:
    """UTC instant at which the last calendar day of the horizon ends."""
    zone = policy.zone
    last_day = (
        now.astimezone(zone) + timedelta(days=policy.weeks_ahead * DAYS_PER_WEEK)
    ).date()
    return datetime.combine(
        last_day + timedelta(days=1), time.min, tzinfo=zone
    ).astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Conflict filter
# ---------------------------------------------------------------------------

def blocked_slots(
    hr_user_id: UUID | str,
    range_start: datetime,
    range_end: datetime,
) -> set[datetime]:
    """Return the minute-keys of interviews booked in ``[range_start, range_end]``."""
    client = get_supabase()
    result = execute_read(
        client.table(INTERVIEWS_TABLE)
        .select("id, scheduled_at")
        .eq("hr_user_id", str(hr_user_id))
        .gte("scheduled_at", _as_utc(range_start).isoformat())
        .lte("scheduled_at", _as_utc(range_end).isoformat())
    )
    return {
        minute_key(parse_timestamp(row["scheduled_at"]))
        for row in result.data or []
        if row.get("scheduled_at")
    }


# ---------------------------------------------------------------------------
# Availability expander
# ---------------------------------------------------------------------------

def expand_availability(
    rules: Iterable[AvailabilityRule],
    *,
    hr_user_id: UUID | str,
    now: datetime,
    policy: SchedulingPolicy,
    blocked: set[datetime] | frozenset[datetime] = frozenset(),
) -> list[CandidateSlot]:
    """Expand weekly *rules* into ascending candidate slots.

    Every local date from ``now`` to ``now + weeks_ahead`` weeks (inclusive)
    is visited.  A rule window that starts before ``now`` is skipped for that
    day entirely; otherwise whole slots of ``slot_duration_minutes`` are cut
    from the window and any trailing partial slot is dropped.  Blocked
    minutes are left out silently.
    """
    zone = policy.zone
    now = _as_utc(now)
    local_now = now.astimezone(zone)
    day = local_now.date()
    last_day = (local_now + timedelta(days=policy.weeks_ahead * DAYS_PER_WEEK)).date()
    step = timedelta(minutes=policy.slot_duration_minutes)

    rules_by_day: dict[int, list[AvailabilityRule]] = defaultdict(list)
    for rule in rules:
        rules_by_day[rule.day_of_week].append(rule)

    slots: list[CandidateSlot] = []
    emitted: set[datetime] = set()

    while day <= last_day:
        for rule in rules_by_day.get(day_of_week(day), []):
            # Windows are cut in UTC so DST days step in absolute time
            window_start = datetime.combine(
                day, rule.start_time, tzinfo=zone
            ).astimezone(timezone.utc)
            window_end = datetime.combine(
                day, rule.end_time, tzinfo=zone
            ).astimezone(timezone.utc)
            if window_start < now:
                continue

            slot_start = window_start
            while slot_start + step <= window_end:
                key = minute_key(slot_start)
                duplicate = policy.deduplicate_overlaps and key in emitted
                if key not in blocked and not duplicate:
                    emitted.add(key)
                    slots.append(CandidateSlot(scheduled_at=key, hr_user_id=hr_user_id))
                slot_start += step
        day += timedelta(days=1)

    slots.sort(key=lambda slot: slot.scheduled_at)
    return slots


def generate_available_slots(
    hr_user_id: UUID | str,
    policy: SchedulingPolicy | None = None,
    now: datetime | None = None,
) -> list[CandidateSlot]:
    """Return every open slot for *hr_user_id* over the policy horizon.

    Raises ``ConfigurationError`` when the HR user has no availability.
    An empty list means rules exist but every slot is taken or past.
    """
    policy = policy or SchedulingPolicy.from_settings()
    now = _as_utc(now or datetime.now(timezone.utc))

    rules = get_hr_availability(hr_user_id)
    if not rules:
        raise ConfigurationError(
            "No HR availability found. Please set up your availability first."
        )

    blocked = blocked_slots(hr_user_id, now, horizon_end(now, policy))
    slots = expand_availability(
        rules,
        hr_user_id=hr_user_id,
        now=now,
        policy=policy,
        blocked=blocked,
    )

    logger.info(
        "slots_generated",
        extra={
            "hr_user_id": str(hr_user_id),
            "rule_count": len(rules),
            "blocked_count": len(blocked),
            "slot_count": len(slots),
        },
    )
    return slots


# ---------------------------------------------------------------------------
# Slot allocator
# ---------------------------------------------------------------------------

def _get_owned_applicant(
    client: Any,
    applicant_id: str,
    hr_user_id: UUID | str,
) -> ApplicantSummary:
    """Return the applicant if it exists and belongs to *hr_user_id*."""
    try:
        result = execute_read(
            client.table(APPLICANTS_TABLE)
            .select("id, name, email, hr_user_id")
            .eq("id", applicant_id)
            .eq("hr_user_id", str(hr_user_id))
            .limit(1)
        )
    except APIError as exc:
        # Postgres rejects malformed ids (22P02) before any row is matched
        raise OwnershipError(
            f"Applicant {applicant_id} could not be looked up",
            details=exc.message,
        ) from exc

    if not result.data:
        raise OwnershipError(
            f"Applicant {applicant_id} not found or does not belong to HR user"
        )
    return ApplicantSummary(**result.data[0])


def _insert_interview(
    client: Any,
    applicant_id: str,
    hr_user_id: UUID | str,
    slot: CandidateSlot,
    spare_slots: Iterator[CandidateSlot],
) -> Interview:
    """Insert one interview, moving to a spare slot if the minute is taken.

    Write timeouts are not retried: the row may have been committed.
    """
    while True:
        payload = InterviewCreate(
            applicant_id=applicant_id,
            hr_user_id=hr_user_id,
            scheduled_at=slot.scheduled_at,
        )
        try:
            result = client.table(INTERVIEWS_TABLE).insert(payload.to_row()).execute()
        except httpx.TimeoutException as exc:
            raise PersistenceError(
                f"Timed out creating interview for applicant {applicant_id}",
                reason=SkipReason.write_timeout.value,
            ) from exc
        except APIError as exc:
            if exc.code != UNIQUE_VIOLATION_CODE:
                raise PersistenceError(
                    f"Failed to create interview for applicant {applicant_id}",
                    details=exc.message,
                ) from exc

            spare = next(spare_slots, None)
            logger.warning(
                "slot_taken_at_insert",
                extra={
                    "applicant_id": applicant_id,
                    "scheduled_at": slot.scheduled_at.isoformat(),
                    "fallback": spare.scheduled_at.isoformat() if spare else None,
                },
            )
            if spare is None:
                raise PersistenceError(
                    f"Slot {slot.scheduled_at.isoformat()} was taken and no spare "
                    f"slot is left for applicant {applicant_id}",
                    reason=SkipReason.slot_conflict.value,
                ) from exc
            slot = spare
            continue

        if not result.data:
            raise PersistenceError(
                f"Interview insert for applicant {applicant_id} returned no row"
            )
        return Interview(**result.data[0])


def assign_interview_slots(
    hr_user_id: UUID | str,
    applicant_ids: list[str],
    policy: SchedulingPolicy | None = None,
    now: datetime | None = None,
) -> AllocationResult:
    """Book one interview per applicant, earliest slot first.

    The capacity precheck is all-or-nothing; after it, applicants that are
    not owned by *hr_user_id* or whose insert fails are skipped and listed
    in ``AllocationResult.skipped``.  Earlier inserts are never rolled back.
    The per-HR-user allocation lock is held for the whole batch.
    """
    if not applicant_ids:
        raise SchedulingValidationError(
            "applicant_ids array is required and must not be empty"
        )

    if not acquire_allocation_lock(hr_user_id):
        raise AllocationInProgressError(
            "Interview slots are already being generated for this HR user"
        )

    try:
        slots = generate_available_slots(hr_user_id, policy=policy, now=now)
        requested = len(applicant_ids)
        if len(slots) < requested:
            raise CapacityError(available=len(slots), requested=requested)

        client = get_supabase()
        spare_slots = iter(slots[requested:])
        result = AllocationResult(requested=requested)

        for applicant_id, slot in zip(applicant_ids, slots):
            try:
                _get_owned_applicant(client, applicant_id, hr_user_id)
            except OwnershipError as exc:
                logger.warning(
                    "applicant_skipped",
                    extra={
                        "hr_user_id": str(hr_user_id),
                        "applicant_id": applicant_id,
                        "reason": SkipReason.not_found.value,
                    },
                )
                result.skipped.append(
                    SkippedApplicant(
                        applicant_id=applicant_id,
                        reason=SkipReason.not_found,
                        detail=exc.message,
                    )
                )
                continue

            try:
                interview = _insert_interview(
                    client, applicant_id, hr_user_id, slot, spare_slots
                )
            except PersistenceError as exc:
                logger.error(
                    "interview_insert_failed",
                    extra={
                        "hr_user_id": str(hr_user_id),
                        "applicant_id": applicant_id,
                        "reason": exc.reason,
                        "error_message": exc.message,
                    },
                )
                result.skipped.append(
                    SkippedApplicant(
                        applicant_id=applicant_id,
                        reason=SkipReason(exc.reason),
                        detail=exc.message,
                    )
                )
                continue

            result.interviews.append(interview)

        logger.info(
            "interviews_allocated",
            extra={
                "hr_user_id": str(hr_user_id),
                "requested": requested,
                "created_count": result.created,
                "skipped": len(result.skipped),
            },
        )
        return result

    finally:
        release_allocation_lock(hr_user_id)
