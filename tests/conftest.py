"""Shared test fixtures.

Provides required environment defaults, a FastAPI ``test_client`` with the
API-key dependency overridden, and chainable Supabase table mocks.
"""

import os
from collections.abc import Generator
from unittest.mock import MagicMock, patch
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ["EMAIL_SEND_DELAY_SECONDS"] = "0"
os.environ["SCHEDULING_TIMEZONE"] = "UTC"

# Build the settings singleton from this environment before any test
# patches os.environ.
import hr_assistant.core.config  # noqa: E402,F401

HR_USER_ID = UUID("6f1c2a9e-3b7d-4c55-9a61-0d2f8e4b7c10")

CHAIN_METHODS = (
    "select", "insert", "update", "delete", "eq", "gte", "lte", "lt",
    "limit", "order",
)


def chainable_table_mock() -> MagicMock:
    """Return a mock that supports fluent PostgREST chaining."""
    m = MagicMock()
    for method in CHAIN_METHODS:
        getattr(m, method).return_value = m
    return m


@pytest.fixture()
def hr_user():
    from hr_assistant.models.users import HRUser

    return HRUser(id=HR_USER_ID, name="Dana Recruiter", email="dana@example.com")


@pytest.fixture()
def mock_supabase_module() -> Generator[MagicMock, None, None]:
    """Patch the Supabase client used by the health router."""
    mock_client = MagicMock()
    mock_client.table.return_value = chainable_table_mock()
    with patch("hr_assistant.routers.health.get_supabase", return_value=mock_client):
        yield mock_client


@pytest.fixture()
def test_client(hr_user) -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient authenticated as ``hr_user``."""
    from hr_assistant.core.auth import get_current_hr_user
    from hr_assistant.main import app

    app.dependency_overrides[get_current_hr_user] = lambda: hr_user
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def mock_supabase_disconnected() -> Generator[MagicMock, None, None]:
    """Patch ``get_supabase`` to simulate a disconnected database."""
    with patch(
        "hr_assistant.routers.health.get_supabase",
        side_effect=Exception("Connection refused"),
    ):
        yield MagicMock()
