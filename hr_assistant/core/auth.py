"""Static per-HR-user API key authentication.

Accepts ``Authorization: Bearer <key>``, ``ApiKey <key>`` or the bare key
and resolves it against ``hr_users.api_key``.
"""

from __future__ import annotations

import logging

from fastapi import Header, HTTPException, status

from hr_assistant.core.constants import API_KEY_PREFIXES, HR_USERS_TABLE
from hr_assistant.db.supabase import execute_read, get_supabase
from hr_assistant.models.users import HRUser

logger = logging.getLogger(__name__)


def extract_api_key(authorization: str) -> str:
    """Strip a known scheme prefix from an Authorization header value."""
    for prefix in API_KEY_PREFIXES:
        if authorization.startswith(prefix):
            return authorization[len(prefix):].strip()
    return authorization.strip()


def get_current_hr_user(
    authorization: str | None = Header(default=None),
) -> HRUser:
    """FastAPI dependency returning the HR user owning the request's API key."""
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is required",
        )

    api_key = extract_api_key(authorization)
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is required",
        )

    client = get_supabase()
    result = execute_read(
        client.table(HR_USERS_TABLE)
        .select("id, name, email")
        .eq("api_key", api_key)
        .limit(1)
    )
    if not result.data:
        logger.warning("invalid_api_key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )
    return HRUser(**result.data[0])
