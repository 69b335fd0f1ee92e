"""
Tests for the Request Authenticator
===================================

Every rejection path must surface as the same Unauthenticated error.
"""

import pytest
from dataclasses import fields

from staff_directory.api.access.permissions import AuthContext, Role
from staff_directory.api.auth.authenticator import RequestAuthenticator
from staff_directory.api.auth.sessions import SessionStore, generate_token
from staff_directory.api.exceptions import Unauthenticated
from staff_directory.api.repositories.memory import InMemorySessionRepository


class BrokenSessionRepository(InMemorySessionRepository):
    async def get(self, token_hash):
        raise ConnectionError("database unavailable")


class TestAuthenticate:
    """Tests for the token -> identity gate."""

    @pytest.mark.asyncio
    async def test_valid_token(self, authenticator, session_store, hr_identity):
        session = await session_store.issue(hr_identity.id)

        context = await authenticator.authenticate(
            session.token, ip_address="10.0.0.5", user_agent="pytest"
        )

        assert context.user_id == hr_identity.id
        assert context.username == "hana"
        assert context.role == Role.HR.value
        assert context.session_expires_at == session.expires_at
        assert context.ip_address == "10.0.0.5"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "short", "g" * 64])
    async def test_missing_or_malformed(self, authenticator, token):
        with pytest.raises(Unauthenticated):
            await authenticator.authenticate(token)

    @pytest.mark.asyncio
    async def test_unknown_token(self, authenticator):
        with pytest.raises(Unauthenticated):
            await authenticator.authenticate(generate_token())

    @pytest.mark.asyncio
    async def test_expired_token(self, authenticator, session_store, clock, hr_identity):
        session = await session_store.issue(hr_identity.id)
        clock.advance(hours=24, seconds=1)

        with pytest.raises(Unauthenticated):
            await authenticator.authenticate(session.token)

    @pytest.mark.asyncio
    async def test_revoked_token(self, authenticator, session_store, hr_identity):
        session = await session_store.issue(hr_identity.id)
        await session_store.revoke(session.token)

        with pytest.raises(Unauthenticated):
            await authenticator.authenticate(session.token)

    @pytest.mark.asyncio
    async def test_inactive_identity(self, authenticator, session_store, repos, hr_identity):
        session = await session_store.issue(hr_identity.id)
        await repos.identities.set_active(hr_identity.id, False)

        with pytest.raises(Unauthenticated):
            await authenticator.authenticate(session.token)

    @pytest.mark.asyncio
    async def test_orphaned_session(self, authenticator, session_store, repos, hr_identity):
        session = await session_store.issue(hr_identity.id)
        await repos.identities.remove(hr_identity.id)

        with pytest.raises(Unauthenticated):
            await authenticator.authenticate(session.token)

    @pytest.mark.asyncio
    async def test_storage_error_fails_closed(self, repos, clock, hr_identity):
        broken = SessionStore(BrokenSessionRepository(), clock=clock)
        authenticator = RequestAuthenticator(broken, repos.identities)

        with pytest.raises(Unauthenticated):
            await authenticator.authenticate(generate_token())

    @pytest.mark.asyncio
    async def test_rejections_look_alike(self, authenticator, session_store, repos, hr_identity):
        session = await session_store.issue(hr_identity.id)
        await repos.identities.set_active(hr_identity.id, False)

        messages = set()
        for token in (None, "short", generate_token(), session.token):
            with pytest.raises(Unauthenticated) as exc_info:
                await authenticator.authenticate(token)
            messages.add(str(exc_info.value))

        assert messages == {"[UNAUTHENTICATED] Authentication required"}


class TestAuthContext:
    """The resolved context never carries credentials."""

    def test_no_secret_fields(self):
        names = {f.name for f in fields(AuthContext)}
        assert not names & {"token", "password", "password_hash", "token_hash"}

    @pytest.mark.asyncio
    async def test_token_not_in_repr(self, authenticator, session_store, hr_identity):
        session = await session_store.issue(hr_identity.id)
        context = await authenticator.authenticate(session.token)
        assert session.token not in repr(context)
