"""
Staff Directory Test Configuration
==================================

Pytest fixtures for the access core unit tests. Everything runs against
the in-memory repositories with a controllable clock.
"""

import os

# Keep bcrypt cheap under test
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from staff_directory.api.access.audit import AccessAuditLog
from staff_directory.api.access.permissions import Role
from staff_directory.api.auth.authenticator import RequestAuthenticator
from staff_directory.api.auth.service import AuthService
from staff_directory.api.auth.sessions import SessionStore
from staff_directory.api.repositories.memory import create_memory_repositories


TEST_PASSWORD = "Correct-Horse-9!"


class FakeClock:
    """Settable clock for expiry tests."""

    def __init__(self, start: datetime = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def password():
    """Password shared by every test identity."""
    return TEST_PASSWORD


@pytest.fixture
def clock():
    """A clock frozen at a fixed instant."""
    return FakeClock()


@pytest.fixture
def repos():
    """Fresh in-memory repositories."""
    return create_memory_repositories()


@pytest.fixture
def session_store(repos, clock):
    """Session store with the standard 24 hour lifetime."""
    return SessionStore(repos.sessions, lifetime=timedelta(hours=24), clock=clock)


@pytest.fixture
def audit_log(repos, clock):
    """Audit log over the in-memory repository."""
    return AccessAuditLog(repos.access_logs, clock=clock)


@pytest.fixture
def authenticator(repos, session_store):
    """Request authenticator over the fixtures above."""
    return RequestAuthenticator(session_store, repos.identities)


@pytest.fixture
def auth_service(repos, session_store, audit_log, clock):
    """Auth service over the fixtures above."""
    return AuthService(repos.identities, session_store, audit_log, clock=clock)


@pytest.fixture
def make_identity(auth_service, password):
    """Factory creating an identity with the shared test password."""

    async def _make(username: str, role: Role = Role.STAFF, is_active: bool = True):
        return await auth_service.create_identity(
            username=username,
            password=password,
            role=role.value,
            first_name=username.title(),
            last_name="Tester",
            is_active=is_active,
            rounds=4,
        )

    return _make


@pytest_asyncio.fixture
async def hr_identity(make_identity):
    """An active hr identity."""
    return await make_identity("hana", Role.HR)


@pytest_asyncio.fixture
async def admin_identity(make_identity):
    """An active admin identity."""
    return await make_identity("adam", Role.ADMIN)
