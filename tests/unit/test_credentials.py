"""
Tests for Credential Verification
=================================

bcrypt hashing, password rules and the login / logout flows.
"""

import pytest

from staff_directory.api.access.audit import AccessAction
from staff_directory.api.access.permissions import Role
from staff_directory.api.auth.passwords import (
    hash_password,
    validate_password_strength,
    verify_password,
)
from staff_directory.api.auth.service import CredentialVerifier, ensure_bootstrap_admin
from staff_directory.api.exceptions import InvalidCredentials


class TestPasswordHashing:
    """Tests for bcrypt helpers."""

    def test_hash_and_verify(self):
        hashed = hash_password("Secret-Pass1", rounds=4)
        assert hashed.startswith("$2")
        assert verify_password("Secret-Pass1", hashed)
        assert not verify_password("secret-pass1", hashed)

    def test_salted(self):
        assert hash_password("Secret-Pass1", rounds=4) != hash_password("Secret-Pass1", rounds=4)

    def test_malformed_hash_fails(self):
        assert verify_password("Secret-Pass1", "not-a-bcrypt-hash") is False

    def test_empty_values_fail(self):
        assert verify_password("", hash_password("x", rounds=4)) is False
        assert verify_password("Secret-Pass1", "") is False


class TestPasswordStrength:
    """Tests for password rules."""

    def test_strong_password(self):
        assert validate_password_strength("Correct-Horse-9!") == []

    def test_shared_test_password_is_strong(self, password):
        assert validate_password_strength(password) == []

    def test_hyphen_is_not_special(self):
        assert validate_password_strength("Correct-Horse-9") == [
            "Password must contain at least one special character"
        ]

    @pytest.mark.parametrize(
        "candidate,fragment",
        [
            ("Sh0rt!", "at least 8"),
            ("nouppercase1!", "uppercase"),
            ("NOLOWERCASE1!", "lowercase"),
            ("NoNumbers!!", "number"),
            ("NoSpecial123", "special"),
        ],
    )
    def test_weak_passwords(self, candidate, fragment):
        problems = validate_password_strength(candidate)
        assert any(fragment in p for p in problems)

    def test_too_long(self):
        problems = validate_password_strength("Aa1!" + "x" * 80)
        assert any("72 bytes" in p for p in problems)


class TestCredentialVerifier:
    """Tests for username/password checks."""

    @pytest.mark.asyncio
    async def test_correct_pair(self, repos, hr_identity, password):
        identity = await CredentialVerifier(repos.identities).authenticate("hana", password)
        assert identity is not None
        assert identity.id == hr_identity.id
        assert identity.role == "hr"

    @pytest.mark.asyncio
    async def test_wrong_password(self, repos, hr_identity):
        assert await CredentialVerifier(repos.identities).authenticate("hana", "Wrong-Horse-9!") is None

    @pytest.mark.asyncio
    async def test_unknown_username(self, repos, hr_identity, password):
        assert await CredentialVerifier(repos.identities).authenticate("nobody", password) is None

    @pytest.mark.asyncio
    async def test_inactive_identity(self, repos, make_identity, password):
        await make_identity("ivan", Role.ADMIN, is_active=False)
        assert await CredentialVerifier(repos.identities).authenticate("ivan", password) is None

    @pytest.mark.asyncio
    async def test_username_is_case_sensitive(self, repos, hr_identity, password):
        assert await CredentialVerifier(repos.identities).authenticate("HANA", password) is None

    @pytest.mark.asyncio
    async def test_password_hash_not_in_repr(self, hr_identity):
        assert hr_identity.password_hash not in repr(hr_identity)


class TestLogin:
    """Tests for the login / logout flows."""

    @pytest.mark.asyncio
    async def test_login_issues_session(
        self, auth_service, session_store, hr_identity, clock, password
    ):
        identity, session = await auth_service.login("hana", password, ip_address="10.0.0.5")

        assert identity.id == hr_identity.id
        assert identity.last_login_at == clock.now
        assert (await session_store.resolve(session.token)).user_id == hr_identity.id

    @pytest.mark.asyncio
    async def test_login_is_audited(self, auth_service, audit_log, hr_identity, password):
        await auth_service.login("hana", password, ip_address="10.0.0.5", user_agent="pytest")

        [entry] = await audit_log.by_actor(hr_identity.id)
        assert entry.action == AccessAction.LOGIN_SUCCESS.value
        assert entry.ip_address == "10.0.0.5"
        assert entry.user_agent == "pytest"

    @pytest.mark.asyncio
    async def test_failed_login(self, auth_service, audit_log, repos, hr_identity):
        with pytest.raises(InvalidCredentials):
            await auth_service.login("hana", "Wrong-Horse-9!")

        assert len(repos.sessions) == 0
        [entry] = await audit_log.recent()
        assert entry.action == AccessAction.LOGIN_FAILED.value
        assert entry.actor_id is None
        assert entry.details == {"username": "hana"}

    @pytest.mark.asyncio
    async def test_unknown_user_same_error(self, auth_service, password):
        with pytest.raises(InvalidCredentials) as exc_info:
            await auth_service.login("nobody", password)
        assert exc_info.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_logout(self, auth_service, authenticator, audit_log, hr_identity, password):
        _, session = await auth_service.login("hana", password)
        context = await authenticator.authenticate(session.token)

        assert await auth_service.logout(context, session.token) is True
        assert await auth_service.logout(context, session.token) is False

        actions = [e.action for e in await audit_log.by_actor(hr_identity.id)]
        assert actions == ["LOGOUT", "LOGOUT", "LOGIN_SUCCESS"]


class TestCreateIdentity:
    """Tests for identity creation."""

    @pytest.mark.asyncio
    async def test_default_role_is_viewer(self, auth_service, password):
        identity = await auth_service.create_identity("vera", password, rounds=4)
        assert identity.role == "viewer"
        assert identity.id is not None
        assert identity.password_hash != password

    @pytest.mark.asyncio
    async def test_unknown_role(self, auth_service, password):
        with pytest.raises(ValueError, match="Unknown role"):
            await auth_service.create_identity("vera", password, role="manager", rounds=4)

    @pytest.mark.asyncio
    async def test_weak_password(self, auth_service):
        with pytest.raises(ValueError):
            await auth_service.create_identity("vera", "password", rounds=4)

    @pytest.mark.asyncio
    async def test_duplicate_username(self, auth_service, hr_identity, password):
        with pytest.raises(ValueError, match="already registered"):
            await auth_service.create_identity("hana", password, rounds=4)

    @pytest.mark.asyncio
    async def test_bootstrap_admin(self, auth_service, password):
        first = await ensure_bootstrap_admin(auth_service, "root", password)
        again = await ensure_bootstrap_admin(auth_service, "root", password)

        assert first.role == "super_admin"
        assert again.id == first.id

    @pytest.mark.asyncio
    async def test_bootstrap_admin_unconfigured(self, auth_service):
        assert await ensure_bootstrap_admin(auth_service, None, None) is None
