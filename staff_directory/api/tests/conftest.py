"""
Test Configuration and Fixtures

Shared fixtures for Staff Directory API tests.
Provides isolated in-memory storage, a controllable clock and
authenticated clients per role.
"""

import os

# Keep bcrypt cheap under test
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from staff_directory.api.access.permissions import Role
from staff_directory.api.auth.passwords import hash_password
from staff_directory.api.auth.sessions import SessionStore
from staff_directory.api.dependencies import get_clock, get_repositories
from staff_directory.api.main import create_app
from staff_directory.api.repositories.base import Identity, StaffRecord
from staff_directory.api.repositories.memory import create_memory_repositories


TEST_PASSWORD = "Correct-Horse-9!"
TEST_PIN = "2468"


class FakeClock:
    """Settable clock for expiry tests."""

    def __init__(self):
        self.now = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ==================== Storage Fixtures ====================


@pytest.fixture(scope="function")
def password() -> str:
    """Password shared by every test identity."""
    return TEST_PASSWORD


@pytest.fixture(scope="function")
def pin() -> str:
    """PIN protecting the staff_member record."""
    return TEST_PIN


@pytest.fixture(scope="function")
def clock() -> FakeClock:
    """Clock shared by the app and the fixtures."""
    return FakeClock()


@pytest.fixture(scope="function")
def repos():
    """Fresh in-memory repositories."""
    return create_memory_repositories()


# ==================== Application Fixtures ====================


@pytest.fixture(scope="function")
def app(repos, clock) -> FastAPI:
    """Create FastAPI app over the test repositories."""
    test_app = create_app()

    async def override_get_repositories():
        yield repos

    test_app.dependency_overrides[get_repositories] = override_get_repositories
    test_app.dependency_overrides[get_clock] = lambda: clock
    return test_app


@pytest_asyncio.fixture(scope="function")
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ==================== User Fixtures ====================


async def _add_identity(repos, username: str, role: Role) -> Identity:
    return await repos.identities.add(
        Identity(
            id=None,
            username=username,
            password_hash=hash_password(TEST_PASSWORD, rounds=4),
            role=role.value,
            first_name=username.title(),
            last_name="Tester",
        )
    )


async def _headers(repos, clock, identity: Identity) -> dict:
    session = await SessionStore(repos.sessions, clock=clock).issue(identity.id)
    return {"Authorization": f"Bearer {session.token}"}


@pytest_asyncio.fixture(scope="function")
async def admin_user(repos) -> Identity:
    """Create an admin identity."""
    return await _add_identity(repos, "adam", Role.ADMIN)


@pytest_asyncio.fixture(scope="function")
async def hr_user(repos) -> Identity:
    """Create an hr identity."""
    return await _add_identity(repos, "hana", Role.HR)


@pytest_asyncio.fixture(scope="function")
async def viewer_user(repos) -> Identity:
    """Create a viewer identity."""
    return await _add_identity(repos, "vera", Role.VIEWER)


@pytest_asyncio.fixture(scope="function")
async def admin_headers(repos, clock, admin_user) -> dict:
    """Authorization headers for the admin."""
    return await _headers(repos, clock, admin_user)


@pytest_asyncio.fixture(scope="function")
async def hr_headers(repos, clock, hr_user) -> dict:
    """Authorization headers for hr."""
    return await _headers(repos, clock, hr_user)


@pytest_asyncio.fixture(scope="function")
async def viewer_headers(repos, clock, viewer_user) -> dict:
    """Authorization headers for a viewer."""
    return await _headers(repos, clock, viewer_user)


# ==================== Staff Fixtures ====================


@pytest_asyncio.fixture(scope="function")
async def staff_member(repos) -> StaffRecord:
    """Create a staff record protected by the shared test PIN."""
    return await repos.staff.add(
        StaffRecord(
            id=None,
            registration_number="NA-0042",
            first_name="Kofi",
            last_name="Boateng",
            department="Registry",
            position="Clerk",
            email="kofi@example.org",
            phone="+233 20 000 0042",
            pin_hash=hash_password(TEST_PIN, rounds=4),
        )
    )


@pytest_asyncio.fixture(scope="function")
async def unprotected_member(repos) -> StaffRecord:
    """Create a staff record without a PIN."""
    return await repos.staff.add(
        StaffRecord(
            id=None,
            registration_number="NA-0043",
            first_name="Esi",
            last_name="Owusu",
            department="Finance",
            position="Cashier",
        )
    )
