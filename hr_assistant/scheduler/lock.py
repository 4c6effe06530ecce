"""Process-wide locks using threading.Lock.

``acquire_allocation_lock`` serializes slot allocation per HR user so the
capacity check and the interview inserts of one batch cannot interleave
with another batch for the same calendar.  ``acquire_reminder_lock``
prevents overlapping reminder runs.  All acquires are non-blocking: the
caller gets False and can skip or return 409.
"""

from __future__ import annotations

import threading
from uuid import UUID

# Guards every lookup, acquire and release of a per-HR-user lock, so an
# entry exists in the registry only while its lock is held.
_registry_guard = threading.Lock()
_allocation_locks: dict[str, threading.Lock] = {}

_reminder_lock = threading.Lock()


def acquire_allocation_lock(hr_user_id: UUID | str) -> bool:
    """Try to take the allocation lock for *hr_user_id*.

    Returns True if acquired, False if another allocation holds it.
    """
    key = str(hr_user_id)
    with _registry_guard:
        lock = _allocation_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _allocation_locks[key] = lock
        return lock.acquire(blocking=False)


def release_allocation_lock(hr_user_id: UUID | str) -> None:
    """Release the allocation lock for *hr_user_id* and forget it.

    Safe to call even if the lock is not held.
    """
    with _registry_guard:
        lock = _allocation_locks.pop(str(hr_user_id), None)
        if lock is not None and lock.locked():
            lock.release()


def is_allocation_running(hr_user_id: UUID | str) -> bool:
    """Check if an allocation is in progress for *hr_user_id*."""
    with _registry_guard:
        lock = _allocation_locks.get(str(hr_user_id))
        return lock is not None and lock.locked()


def acquire_reminder_lock() -> bool:
    """Try to acquire the reminder-run lock."""
    return _reminder_lock.acquire(blocking=False)


def release_reminder_lock() -> None:
    """Release the reminder-run lock.  Idempotent."""
    try:
        _reminder_lock.release()
    except RuntimeError:
        pass  # Already released
