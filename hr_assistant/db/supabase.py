"""Supabase client singleton.

Provides ``get_supabase()`` which returns a lazily-initialized, process-wide
Supabase client using credentials from ``settings``, and ``execute_read()``
which retries read queries that time out.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from supabase import Client, ClientOptions, create_client

from hr_assistant.core.config import settings
from hr_assistant.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

_client: Client | None = None


def get_supabase() -> Client:
    """Return the singleton Supabase client, creating it on first call."""
    global _client
    if _client is None:
        _client = create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_KEY,
            options=ClientOptions(
                postgrest_client_timeout=settings.STORE_TIMEOUT_SECONDS,
            ),
        )
    return _client


def execute_read(query: Any, attempts: int | None = None) -> Any:
    """Execute a read-only PostgREST *query*, retrying on timeout.

    Raises ``StoreUnavailableError`` once every attempt has timed out.
    Writes must call ``.execute()`` directly: they are never retried.
    """
    max_attempts = attempts or settings.STORE_READ_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        try:
            return query.execute()
        except httpx.TimeoutException as exc:
            logger.warning(
                "store_read_timeout",
                extra={"attempt": attempt, "max_attempts": max_attempts},
            )
            if attempt == max_attempts:
                raise StoreUnavailableError(
                    "The data store did not respond in time",
                    details={"attempts": max_attempts},
                ) from exc
    raise StoreUnavailableError("The data store did not respond in time")
