import os

# Settings are read once at import time; pin the test environment first.
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTH_SECRET"] = "test-session-secret"
os.environ["UPSTASH_REDIS_REST_URL"] = ""
os.environ["INVOICE_DELETE_ENABLED"] = "false"

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from dashboard.schemas.auth import SessionUser


@pytest.fixture
def db_session() -> AsyncMock:
    """AsyncSession stand-in — no Postgres connection required."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def revalidate():
    with patch("dashboard.actions.invoices.revalidate_path", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def session_user() -> SessionUser:
    return SessionUser(
        user_id="410544b2-4001-4271-9855-fec4b6a6442a",
        email="user@nextmail.com",
        name="User",
    )
