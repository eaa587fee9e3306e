"""Shared fixtures: app with mocked services, tokens and a fake session."""

import os
import tempfile
from collections.abc import Callable
from unittest.mock import AsyncMock, Mock
from uuid import UUID, uuid4

import pytest
from cassandra.cluster import Session
from fastapi import FastAPI
from fastapi.testclient import TestClient


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="planetnine-logs-"))

from planetnine.auth.permissions import UserRole  # noqa: E402
from planetnine.auth.security import create_access_token  # noqa: E402


# ==============================================================================
# Cassandra session
# ==============================================================================


@pytest.fixture
def mock_session():
    """Mock Cassandra session.

    ``prepare`` returns the normalized CQL text so tests can tell statements
    apart; ``aexecute`` is awaitable (cassandra-asyncio-driver).
    """
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: " ".join(cql.split()))
    session.aexecute = AsyncMock(return_value=Mock())
    return session


@pytest.fixture
def make_result() -> Callable[..., Mock]:
    """Factory for query results whose ``one()`` returns ``row``."""

    def _result(row=None, was_applied: bool = True) -> Mock:
        result = Mock()
        result.one = Mock(return_value=row)
        result.was_applied = was_applied
        return result

    return _result


# ==============================================================================
# Principals
# ==============================================================================


def _token(role: UserRole, user_id: UUID) -> str:
    return create_access_token(
        {
            "sub": str(user_id),
            "email": f"{role.value.lower()}_{user_id.hex[:8]}@test.com",
            "role": role.value,
        }
    )


@pytest.fixture
def student_id() -> UUID:
    return uuid4()


@pytest.fixture
def student_headers(student_id: UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {_token(UserRole.STUDENT, student_id)}"}


@pytest.fixture
def tutor_id() -> UUID:
    return uuid4()


@pytest.fixture
def tutor_headers(tutor_id: UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {_token(UserRole.TUTOR, tutor_id)}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {_token(UserRole.ADMIN, uuid4())}"}


# ==============================================================================
# Application
# ==============================================================================


@pytest.fixture
def app() -> FastAPI:
    """Fresh app; the lifespan does not run, so no database is touched."""
    from planetnine.main import create_app

    return create_app()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
